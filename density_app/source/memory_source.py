"""In-memory event source for fixtures, replays and offline dashboards."""

from typing import Optional

from ..data.models import (
    EventFilter,
    EventPage,
    PageRequest,
    PriceSnapshot,
    RawEvent,
    TokenOverview,
)
from .base import BaseEventSource


class InMemoryEventSource(BaseEventSource):
    """Serves events held in memory with the same paging semantics as the indexer."""

    def __init__(self, name: str = "memory"):
        super().__init__(name)
        self._tables: dict[str, list[RawEvent]] = {}
        self._prices: list[PriceSnapshot] = []
        self._overview = TokenOverview()
        self.page_requests: list[PageRequest] = []

    def add_events(self, event_filter: EventFilter, events: list[RawEvent]) -> None:
        """Append events to the table addressed by ``event_filter``."""
        self._tables.setdefault(event_filter.table_name, []).extend(events)

    def set_prices(self, snapshots: list[PriceSnapshot]) -> None:
        self._prices = list(snapshots)

    def set_overview(self, overview: TokenOverview) -> None:
        self._overview = overview

    def fetch_page(self, request: PageRequest) -> EventPage:
        """Filter by window, order by (timestamp, id), then slice by offset/limit."""
        self.page_requests.append(request)

        rows = [
            e for e in self._tables.get(request.event_filter.table_name, [])
            if request.window.contains(e.timestamp_seconds)
        ]
        rows.sort(
            key=lambda e: (e.timestamp_seconds, e.event_id or ""),
            reverse=not request.ascending,
        )
        page = rows[request.offset:request.offset + request.limit]

        self._record_request(len(page))
        return EventPage.from_events(page)

    def fetch_price_snapshots(self, symbol: str, limit: int) -> list[PriceSnapshot]:
        """Return the newest ``limit`` snapshots, newest first."""
        newest_first = sorted(self._prices, key=lambda s: s.timestamp_seconds, reverse=True)
        self._record_request(min(limit, len(newest_first)))
        return newest_first[:limit]

    def fetch_token_overview(self, holder_limit: int) -> TokenOverview:
        holders = tuple(sorted(self._overview.holders, key=lambda h: h.balance, reverse=True))
        self._record_request(min(holder_limit, len(holders)))
        return TokenOverview(holders=holders[:holder_limit], statistics=self._overview.statistics)

    def health_check(self) -> bool:
        return True

    def last_request(self) -> Optional[PageRequest]:
        return self.page_requests[-1] if self.page_requests else None
