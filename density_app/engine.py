"""
Main comparison engine coordinator.

Orchestrates the period comparison pipeline: planning the current and previous
windows, fetching both concurrently, aggregating counts and comparing totals.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .config.defaults import SourceParams
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import (
    ComparisonResult,
    EventFilter,
    HolderRow,
    PriceSeries,
    TokenOverview,
    View,
)
from .errors import SourceUnavailableError
from .fetch.paginator import FetchStats, fetch_all_with_stats
from .logging.config import log_comparison
from .series.aggregator import AggregationStats, aggregate
from .series.comparator import compare
from .series.holders import build_holder_rows
from .series.planner import plan_pair
from .series.prices import build_price_series
from .source.base import BaseEventSource
from .source.graphql_source import GraphQLEventSource
from .utils.time import Instant, get_reference_instant

logger = structlog.get_logger(__name__)


class EventComparisonEngine:
    """
    Main coordinator for event density comparisons.

    Manages the comparison pipeline:
    Reference instant → Planner → Fetch (current ‖ previous) → Aggregate → Compare
    """

    def __init__(
        self,
        source: Optional[BaseEventSource] = None,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize the engine; builds a GraphQL source from config when none is given."""
        self.logger = logger
        self.config_loader = ConfigLoader.create(config_dir)
        self.overrides = overrides or {}

        self.config = self._load_config(None)
        self.source = source or GraphQLEventSource(SourceParams(**self.config["source"]))

        self.last_fetch_stats: dict[str, FetchStats] = {}
        self.last_aggregation_stats: dict[str, AggregationStats] = {}

        self.logger.info(
            "Event comparison engine initialized",
            source=self.source.name,
            timezone=self.config["time"]["timezone"],
        )

    def _load_config(self, event_name: Optional[str],
                     request_overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        overrides = self.config_loader._deep_merge(self.overrides, request_overrides or {})
        config = self.config_loader.merge_config(event_name, overrides)

        validation_errors = ConfigValidator.validate_config(config)
        if validation_errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
            self.logger.error(
                "Configuration validation failed",
                event_name=event_name,
                errors=error_msgs
            )
            raise ValueError(f"Invalid configuration: {'; '.join(error_msgs)}")

        return config

    def compare(
        self,
        event_filter: EventFilter,
        view: Optional[View] = None,
        reference: Optional[Instant] = None,
        request_token: Optional[int] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> ComparisonResult:
        """
        Compare the current period against the previous one for an event stream.

        Args:
            event_filter: Event stream to query
            view: DAY, WEEK or MONTH; defaults to the configured view
            reference: Reference date; wall-clock time is captured once if None
            request_token: Token tagging this request for staleness checks
            overrides: Per-request configuration overrides

        Returns:
            ComparisonResult with aligned current/previous series

        Raises:
            SourceUnavailableError: If either window could not be fetched
        """
        config = self._load_config(event_filter.event_name, overrides)
        tz = config["time"]["timezone"]
        if view is None:
            view = View.from_key(config["time"]["default_view"])

        reference_ts = get_reference_instant(reference, tz)
        current_template, previous_template = plan_pair(reference_ts, view, tz)

        page_size = config["pagination"]["page_size"]
        max_pages = config["pagination"]["max_pages"]

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="density-fetch") as pool:
            current_future = pool.submit(
                fetch_all_with_stats, self.source, event_filter,
                current_template.window, page_size, max_pages,
            )
            previous_future = pool.submit(
                fetch_all_with_stats, self.source, event_filter,
                previous_template.window, page_size, max_pages,
            )

            try:
                current_events, current_fetch = current_future.result()
                previous_events, previous_fetch = previous_future.result()
            except SourceUnavailableError as e:
                previous_future.cancel()
                self.logger.error(
                    "Comparison aborted, source unavailable",
                    table=event_filter.table_name,
                    view=view.key,
                    request_token=request_token,
                    error=str(e),
                    operation=e.operation,
                )
                raise

        count_mode = config["aggregation"]["count_mode"]
        current_stats = AggregationStats()
        previous_stats = AggregationStats()
        current = aggregate(current_events, current_template, current_stats, count_mode)
        previous = aggregate(previous_events, previous_template, previous_stats, count_mode)

        result = compare(current, previous, request_token=request_token)

        self.last_fetch_stats = {"current": current_fetch, "previous": previous_fetch}
        self.last_aggregation_stats = {"current": current_stats, "previous": previous_stats}

        log_comparison(
            self.logger,
            table=event_filter.table_name,
            view=view.key,
            current_total=result.current_total,
            previous_total=result.previous_total,
            percent_change=result.percent_change,
            request_token=request_token,
            context={
                "reference": reference_ts,
                "pages": current_fetch.pages + previous_fetch.pages,
                "malformed": current_fetch.malformed + previous_fetch.malformed
                + current_stats.malformed + previous_stats.malformed,
                "boundary_mismatches": current_stats.boundary_mismatches
                + previous_stats.boundary_mismatches,
            },
        )

        return result

    def price_series(self, limit: Optional[int] = None) -> PriceSeries:
        """Fetch recent price snapshots and build the chart series."""
        prices_cfg = self.config["prices"]
        snapshots = self.source.fetch_price_snapshots(
            prices_cfg["token_symbol"], limit or prices_cfg["snapshot_limit"]
        )
        series = build_price_series(snapshots, self.config["time"]["timezone"])

        self.logger.info(
            "Built price series",
            symbol=prices_cfg["token_symbol"],
            points=len(series),
            current_price=series.current_price,
        )
        return series

    def token_overview(self, limit: Optional[int] = None) -> TokenOverview:
        """Fetch the top token holders and global statistics."""
        return self.source.fetch_token_overview(limit or self.config["prices"]["holder_limit"])

    def holder_table(self, limit: Optional[int] = None) -> tuple[HolderRow, ...]:
        """
        Build display rows for the holders table.

        USD values use the newest price snapshot, or render as "-" when the
        source has no price data.
        """
        overview = self.token_overview(limit)
        latest = self.source.fetch_price_snapshots(self.config["prices"]["token_symbol"], 1)
        price_usd = latest[0].price_usd if latest else None
        return build_holder_rows(overview, price_usd, self.config["time"]["timezone"])

    def get_stats(self) -> dict[str, Any]:
        """Get source and last-run diagnostic statistics."""
        return {
            "source": self.source.get_stats(),
            "fetch": {
                name: {"pages": s.pages, "rows": s.rows, "malformed": s.malformed}
                for name, s in self.last_fetch_stats.items()
            },
            "aggregation": {
                name: s.get_stats() for name, s in self.last_aggregation_stats.items()
            },
        }
