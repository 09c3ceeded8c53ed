"""Unit tests for the main comparison engine."""

import pytest
from unittest.mock import patch

from conftest import DAY, HOUR, REFERENCE_TS, make_transfer
from density_app.config.loader import ConfigLoader
from density_app.data.models import (
    EventPage,
    PageRequest,
    PriceSnapshot,
    RawEvent,
    TokenHolder,
    TokenOverview,
    TokenStatistics,
    View,
)
from density_app.engine import EventComparisonEngine
from density_app.errors import SourceUnavailableError
from density_app.source.graphql_source import GraphQLEventSource
from density_app.source.memory_source import InMemoryEventSource


class UnfilteredSource(InMemoryEventSource):
    """Returns every stored row regardless of window, like a misconfigured indexer."""

    def fetch_page(self, request: PageRequest) -> EventPage:
        rows = self._tables.get(request.event_filter.table_name, [])
        page = rows[request.offset:request.offset + request.limit]
        return EventPage.from_events(page)


class FailingSource(InMemoryEventSource):
    """Fails every page request for windows ending at or before ``fail_before``."""

    def __init__(self, fail_before: int):
        super().__init__("failing")
        self.fail_before = fail_before

    def fetch_page(self, request: PageRequest) -> EventPage:
        if request.window.end_exclusive <= self.fail_before:
            raise SourceUnavailableError("indexer down", source=self.name, operation="fetch_page")
        return super().fetch_page(request)


class TestEventComparisonEngine:
    """Test suite for the EventComparisonEngine class."""

    def test_engine_initialization(self, memory_source, tmp_path) -> None:
        """Test that the engine can be initialized with an explicit source."""
        engine = EventComparisonEngine(source=memory_source, config_dir=tmp_path)
        assert engine.source is memory_source
        assert engine.config["time"]["timezone"] == "UTC"
        assert engine.last_fetch_stats == {}

    def test_engine_initialization_with_config_dir(self, memory_source, tmp_path) -> None:
        """Test engine initialization with custom config directory."""
        merged = ConfigLoader.create(tmp_path).merge_config()
        with patch('density_app.engine.ConfigLoader') as mock_config_loader:
            mock_config_loader.create.return_value.merge_config.return_value = merged
            engine = EventComparisonEngine(source=memory_source, config_dir="/custom/path")
            assert engine.config == merged
            mock_config_loader.create.assert_called_once_with("/custom/path")

    def test_default_source_from_config(self, tmp_path) -> None:
        """Test that a GraphQL source is built from the source config."""
        engine = EventComparisonEngine(
            config_dir=tmp_path,
            overrides={"source": {"url": "https://indexer.example/v1/graphql"}},
        )
        assert isinstance(engine.source, GraphQLEventSource)
        assert engine.source.config.url == "https://indexer.example/v1/graphql"

    def test_invalid_config_rejected(self, memory_source, tmp_path) -> None:
        """Test that invalid overrides fail at construction."""
        with pytest.raises(ValueError, match="page_size"):
            EventComparisonEngine(
                source=memory_source,
                config_dir=tmp_path,
                overrides={"pagination": {"page_size": 0}},
            )

    def test_default_view_from_config(self, hourly_scenario, transfer_filter, tmp_path) -> None:
        """Test that the configured view is used when none is given."""
        engine = EventComparisonEngine(
            source=hourly_scenario,
            config_dir=tmp_path,
            overrides={"time": {"default_view": "week"}},
        )
        result = engine.compare(transfer_filter, reference=REFERENCE_TS)
        assert result.current.view is View.WEEK

    def test_request_token_passthrough(self, hourly_scenario, transfer_filter, tmp_path) -> None:
        """Test that the request token tags the result."""
        engine = EventComparisonEngine(source=hourly_scenario, config_dir=tmp_path)
        result = engine.compare(transfer_filter, View.DAY, reference=REFERENCE_TS, request_token=7)
        assert result.request_token == 7

    def test_zone_override_moves_windows(self, hourly_scenario, transfer_filter, tmp_path) -> None:
        """Test that a per-request zone shifts window alignment."""
        engine = EventComparisonEngine(source=hourly_scenario, config_dir=tmp_path)
        result = engine.compare(
            transfer_filter, View.DAY, reference=REFERENCE_TS,
            overrides={"time": {"timezone": "Asia/Tokyo"}},
        )
        # 2024-01-02 00:00 Tokyo is 2024-01-01 15:00 UTC
        assert result.current.window.start_inclusive == REFERENCE_TS - 9 * HOUR
        assert result.current.labels[0] == "2-Jan 00:00"

    def test_distinct_actor_mode(self, memory_source, transfer_filter, tmp_path) -> None:
        """Test counting unique senders per bucket."""
        memory_source.add_events(transfer_filter, [
            make_transfer(REFERENCE_TS + 60, "a", sender="0xaaa"),
            make_transfer(REFERENCE_TS + 120, "b", sender="0xaaa"),
            make_transfer(REFERENCE_TS + 180, "c", sender="0xbbb"),
        ])
        engine = EventComparisonEngine(
            source=memory_source,
            config_dir=tmp_path,
            overrides={"aggregation": {"count_mode": "distinct_actors"}},
        )
        result = engine.compare(transfer_filter, View.DAY, reference=REFERENCE_TS)
        assert result.current.counts[0] == 2

    def test_out_of_window_events_counted_in_stats(self, transfer_filter, tmp_path) -> None:
        """Test that rows outside the window are dropped and counted."""
        source = UnfilteredSource()
        source.add_events(transfer_filter, [
            make_transfer(REFERENCE_TS + HOUR, "inside"),
            make_transfer(REFERENCE_TS + 3 * DAY, "future"),
        ])
        engine = EventComparisonEngine(source=source, config_dir=tmp_path)

        result = engine.compare(transfer_filter, View.DAY, reference=REFERENCE_TS)

        assert result.current_total == 1
        assert result.previous_total == 0
        stats = engine.get_stats()
        assert stats["aggregation"]["current"]["boundary_mismatches"] == 1
        assert stats["aggregation"]["previous"]["boundary_mismatches"] == 2

    def test_unusable_timestamps_counted_not_fatal(self, transfer_filter, tmp_path) -> None:
        """Test that events with no timestamp are counted as malformed."""
        source = UnfilteredSource()
        source.add_events(transfer_filter, [
            make_transfer(REFERENCE_TS + 60, "good"),
            RawEvent(timestamp_seconds=None, event_name="Transfer", event_id="broken"),
        ])
        engine = EventComparisonEngine(source=source, config_dir=tmp_path)

        result = engine.compare(transfer_filter, View.DAY, reference=REFERENCE_TS)

        assert result.current_total == 1
        assert engine.last_fetch_stats["current"].malformed == 1
        assert engine.last_fetch_stats["previous"].malformed == 1

    def test_source_failure_aborts_comparison(self, transfer_filter, tmp_path) -> None:
        """Test that a failed window aborts the whole comparison."""
        source = FailingSource(fail_before=REFERENCE_TS)
        source.add_events(transfer_filter, [make_transfer(REFERENCE_TS + HOUR)])
        engine = EventComparisonEngine(source=source, config_dir=tmp_path)

        with pytest.raises(SourceUnavailableError):
            engine.compare(transfer_filter, View.DAY, reference=REFERENCE_TS)
        assert engine.last_fetch_stats == {}

    def test_get_stats(self, hourly_scenario, transfer_filter, tmp_path) -> None:
        """Test diagnostic statistics after a comparison."""
        engine = EventComparisonEngine(source=hourly_scenario, config_dir=tmp_path)
        engine.compare(transfer_filter, View.DAY, reference=REFERENCE_TS)

        stats = engine.get_stats()
        assert stats["source"]["name"] == "memory"
        assert stats["source"]["request_count"] == 2
        assert stats["fetch"]["current"] == {"pages": 1, "rows": 25, "malformed": 0}
        assert stats["aggregation"]["current"]["assigned"] == 25


class TestPricesAndHolders:
    """Test price chart and holders table support."""

    def test_price_series(self, memory_source, tmp_path) -> None:
        """Test that snapshots become an oldest-first series."""
        memory_source.set_prices([
            PriceSnapshot(price_usd_raw=2 * 10 ** 12, timestamp_seconds=REFERENCE_TS + HOUR),
            PriceSnapshot(price_usd_raw=1 * 10 ** 12, timestamp_seconds=REFERENCE_TS),
        ])
        engine = EventComparisonEngine(source=memory_source, config_dir=tmp_path)

        series = engine.price_series()

        assert [p.price_usd for p in series.points] == [1.0, 2.0]
        assert series.current_price == 2.0

    def test_price_series_limit(self, memory_source, tmp_path) -> None:
        """Test that the limit keeps the newest snapshots."""
        memory_source.set_prices([
            PriceSnapshot(price_usd_raw=i * 10 ** 12, timestamp_seconds=REFERENCE_TS + i)
            for i in range(1, 6)
        ])
        engine = EventComparisonEngine(source=memory_source, config_dir=tmp_path)

        series = engine.price_series(limit=2)

        assert [p.timestamp_seconds for p in series.points] == [REFERENCE_TS + 4, REFERENCE_TS + 5]

    def test_token_overview(self, memory_source, tmp_path) -> None:
        """Test that holders come back largest balance first."""
        memory_source.set_overview(TokenOverview(
            holders=(TokenHolder("0xsmall", 1), TokenHolder("0xbig", 100)),
            statistics=TokenStatistics("current", 2, 101, 5),
        ))
        engine = EventComparisonEngine(source=memory_source, config_dir=tmp_path)

        overview = engine.token_overview()

        assert [h.address for h in overview.holders] == ["0xbig", "0xsmall"]
        assert overview.statistics.total_holders == 2

    def test_holder_table_uses_latest_price(self, memory_source, tmp_path) -> None:
        """Test that holder rows are valued at the newest snapshot price."""
        memory_source.set_prices([
            PriceSnapshot(price_usd_raw=1 * 10 ** 12, timestamp_seconds=REFERENCE_TS),
            PriceSnapshot(price_usd_raw=2 * 10 ** 12, timestamp_seconds=REFERENCE_TS + HOUR),
        ])
        memory_source.set_overview(TokenOverview(holders=(TokenHolder("0xbig", 3_000 * 10 ** 18),)))
        engine = EventComparisonEngine(source=memory_source, config_dir=tmp_path)

        rows = engine.holder_table()

        assert len(rows) == 1
        assert rows[0].balance == "3.00K"
        assert rows[0].balance_usd == "$6.00K"

    def test_holder_table_without_prices(self, memory_source, tmp_path) -> None:
        """Test that holder rows render a dash when no price is known."""
        memory_source.set_overview(TokenOverview(holders=(TokenHolder("0xbig", 10 ** 18),)))
        engine = EventComparisonEngine(source=memory_source, config_dir=tmp_path)

        assert engine.holder_table()[0].balance_usd == "-"
