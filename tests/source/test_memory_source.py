"""Tests for the in-memory event source"""

from density_app.data.models import (
    EventFilter,
    PageRequest,
    PriceSnapshot,
    TimeWindow,
    TokenHolder,
    TokenOverview,
)
from density_app.source.memory_source import InMemoryEventSource

from conftest import DAY, REFERENCE_TS, make_transfer

WINDOW = TimeWindow(REFERENCE_TS, REFERENCE_TS + DAY)


class TestInMemoryEventSource:
    """Test paging semantics of the in-memory source"""

    def test_window_filtering_and_order(self, memory_source, transfer_filter):
        """Test only in-window events are returned, ascending"""
        memory_source.add_events(transfer_filter, [
            make_transfer(REFERENCE_TS + 500, "b"),
            make_transfer(REFERENCE_TS - 1, "before"),
            make_transfer(REFERENCE_TS + 100, "a"),
            make_transfer(REFERENCE_TS + DAY, "after"),
        ])
        page = memory_source.fetch_page(PageRequest(transfer_filter, WINDOW, limit=10))

        assert [e.event_id for e in page.events] == ["a", "b"]
        assert page.row_count == 2

    def test_offset_and_limit(self, memory_source, transfer_filter):
        """Test offset/limit slicing"""
        memory_source.add_events(
            transfer_filter, [make_transfer(REFERENCE_TS + i, f"e{i:02d}") for i in range(25)]
        )
        page = memory_source.fetch_page(PageRequest(transfer_filter, WINDOW, limit=10, offset=20))

        assert page.row_count == 5
        assert page.events[0].event_id == "e20"
        assert memory_source.last_request().offset == 20

    def test_tables_are_separate(self, memory_source, transfer_filter):
        """Test contracts do not share tables"""
        memory_source.add_events(transfer_filter, [make_transfer(REFERENCE_TS + 1)])
        other = EventFilter("Transfer", "Other")

        assert memory_source.fetch_page(PageRequest(other, WINDOW, limit=10)).row_count == 0

    def test_prices_newest_first(self, memory_source):
        """Test snapshots come back newest first and limited"""
        memory_source.set_prices([
            PriceSnapshot(price_usd_raw=1, timestamp_seconds=REFERENCE_TS),
            PriceSnapshot(price_usd_raw=2, timestamp_seconds=REFERENCE_TS + 60),
            PriceSnapshot(price_usd_raw=3, timestamp_seconds=REFERENCE_TS + 120),
        ])
        snapshots = memory_source.fetch_price_snapshots("ARKM", 2)

        assert [s.price_usd_raw for s in snapshots] == [3, 2]

    def test_overview_sorted_by_balance(self, memory_source):
        """Test holders are sorted by balance and limited"""
        memory_source.set_overview(TokenOverview(holders=(
            TokenHolder(address="0xsmall", balance=1),
            TokenHolder(address="0xbig", balance=100),
            TokenHolder(address="0xmid", balance=10),
        )))
        overview = memory_source.fetch_token_overview(2)

        assert [h.address for h in overview.holders] == ["0xbig", "0xmid"]

    def test_stats(self, memory_source, transfer_filter):
        """Test request statistics"""
        memory_source.add_events(transfer_filter, [make_transfer(REFERENCE_TS + 1)])
        memory_source.fetch_page(PageRequest(transfer_filter, WINDOW, limit=10))

        stats = memory_source.get_stats()
        assert stats["request_count"] == 1
        assert stats["rows_received"] == 1
        memory_source.reset_stats()
        assert memory_source.get_stats()["request_count"] == 0
