"""Default configuration parameters for the event density engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceParams:
    """GraphQL indexer connection parameters."""
    url: str = "http://localhost:8080/v1/graphql"
    timeout_seconds: int = 30
    admin_secret: Optional[str] = None           # Sent as x-hasura-admin-secret
    timestamp_field: str = "db_write_timestamp"  # Column used for windowing
    timestamp_format: str = "iso"                # iso | unix
    retry_attempts: int = 2                      # Retries on network/5xx errors
    retry_delay_seconds: float = 1.0


@dataclass(frozen=True)
class PaginationParams:
    """Paginated fetch parameters."""
    page_size: int = 1000
    max_pages: int = 10_000            # Hard stop for sources that never shrink


@dataclass(frozen=True)
class TimeParams:
    """Bucket alignment parameters."""
    timezone: str = "UTC"              # Zone used for day boundaries and labels
    default_view: str = "day"          # day | week | month


@dataclass(frozen=True)
class AggregationParams:
    """Bucket counting parameters."""
    count_mode: str = "occurrences"    # occurrences | distinct_actors


@dataclass(frozen=True)
class RefreshParams:
    """Periodic re-fetch parameters."""
    interval_seconds: float = 60.0


@dataclass(frozen=True)
class PriceParams:
    """Price snapshot parameters."""
    token_symbol: str = "ARKM"
    snapshot_limit: int = 1000
    holder_limit: int = 10


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    source: SourceParams
    pagination: PaginationParams
    time: TimeParams
    aggregation: AggregationParams
    refresh: RefreshParams
    prices: PriceParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        source=SourceParams(),
        pagination=PaginationParams(),
        time=TimeParams(),
        aggregation=AggregationParams(),
        refresh=RefreshParams(),
        prices=PriceParams(),
    )
