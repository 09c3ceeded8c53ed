"""
Refresh scheduling module.

Periodic re-fetching of the selected comparison, with monotonic request
tokens so a superseded result is never applied.
"""
from .scheduler import ComparisonRequest, RefreshScheduler
from .tracker import RequestTracker

__all__ = ["ComparisonRequest", "RefreshScheduler", "RequestTracker"]
