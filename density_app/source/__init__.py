"""
Event source adapters.

An event source answers one question: give me a page of events for a filter
within a time window, ordered by timestamp.
"""
from .base import BaseEventSource
from .graphql_source import GraphQLEventSource
from .memory_source import InMemoryEventSource

__all__ = ["BaseEventSource", "GraphQLEventSource", "InMemoryEventSource"]
