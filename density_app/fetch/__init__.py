"""
Paginated fetching module.

Drives an event source page by page until it signals exhaustion.
"""
from .paginator import FetchStats, fetch_all, fetch_all_with_stats

__all__ = ["FetchStats", "fetch_all", "fetch_all_with_stats"]
