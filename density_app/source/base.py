"""Base class for event source adapters."""

import threading
from abc import ABC, abstractmethod
from typing import Any

import structlog

from ..data.models import EventPage, PageRequest, PriceSnapshot, TokenOverview


class BaseEventSource(ABC):
    """
    Base class for indexed event sources.

    Implementations must raise ``SourceUnavailableError`` for transport or
    query failures. Any other exception escaping ``fetch_page`` is treated as
    a source failure by the paginator.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"density.source.{name}").bind(subsystem="fetch")
        self._request_count = 0
        self._error_count = 0
        self._rows_received = 0
        self._lock = threading.Lock()

    @abstractmethod
    def fetch_page(self, request: PageRequest) -> EventPage:
        """
        Fetch one page of events.

        Args:
            request: Filter, window, limit and offset to query

        Returns:
            Parsed page, with the raw row count preserved
        """
        pass

    @abstractmethod
    def fetch_price_snapshots(self, symbol: str, limit: int) -> list[PriceSnapshot]:
        """Fetch the most recent price snapshots, newest first."""
        pass

    @abstractmethod
    def fetch_token_overview(self, holder_limit: int) -> TokenOverview:
        """Fetch the largest holders and global token statistics."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the source is reachable."""
        pass

    def _record_request(self, row_count: int) -> None:
        with self._lock:
            self._request_count += 1
            self._rows_received += row_count

    def _record_error(self) -> None:
        with self._lock:
            self._request_count += 1
            self._error_count += 1

    def get_stats(self) -> dict[str, Any]:
        """Get request statistics."""
        return {
            "name": self.name,
            "request_count": self._request_count,
            "error_count": self._error_count,
            "rows_received": self._rows_received,
        }

    def reset_stats(self):
        """Reset request statistics."""
        self._request_count = 0
        self._error_count = 0
        self._rows_received = 0
