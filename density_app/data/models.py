"""
Canonical data models for indexed events, bucket series and price data.

This module defines immutable data structures that represent clean, validated
records after parsing from the raw indexer response.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional


class Granularity(Enum):
    """Bucket width."""
    HOUR = 3600
    DAY = 86400

    @property
    def seconds(self) -> int:
        return self.value


class View(Enum):
    """Chart view: bucket width plus the number of buckets per window."""
    DAY = ("day", Granularity.HOUR, 24)
    WEEK = ("week", Granularity.DAY, 7)
    MONTH = ("month", Granularity.DAY, 30)

    def __init__(self, key: str, granularity: Granularity, bucket_count: int):
        self.key = key
        self.granularity = granularity
        self.bucket_count = bucket_count

    @property
    def window_seconds(self) -> int:
        """Width of one full window."""
        return self.granularity.seconds * self.bucket_count

    @classmethod
    def from_key(cls, key: str) -> "View":
        """Look up a view by its config key ("day", "week", "month")."""
        for view in cls:
            if view.key == key.lower():
                return view
        raise ValueError(f"Unknown view: {key!r}")


@dataclass(frozen=True)
class EventFilter:
    """Identifies one logical event stream in the indexer."""
    event_name: str
    contract_name: Optional[str] = None

    @property
    def table_name(self) -> str:
        """Indexer table, e.g. ``Silo_Transfer``."""
        if self.contract_name:
            return f"{self.contract_name}_{self.event_name}"
        return self.event_name


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start_inclusive, end_exclusive)`` in epoch seconds."""
    start_inclusive: int
    end_exclusive: int

    def __post_init__(self):
        if self.start_inclusive >= self.end_exclusive:
            raise ValueError(
                f"TimeWindow start must be before end "
                f"({self.start_inclusive} >= {self.end_exclusive})"
            )

    @property
    def width(self) -> int:
        return self.end_exclusive - self.start_inclusive

    def contains(self, timestamp: int) -> bool:
        return self.start_inclusive <= timestamp < self.end_exclusive

    def shifted(self, seconds: int) -> "TimeWindow":
        """Return the same window moved by ``seconds`` (negative moves back)."""
        return TimeWindow(self.start_inclusive + seconds, self.end_exclusive + seconds)


# ---------------------------------------------------------------------------
# Event kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RawEvent:
    """Timestamped on-chain event. Base of the event-kind union."""
    timestamp_seconds: int
    event_name: str = "Unknown"
    event_id: Optional[str] = None

    # GraphQL field -> dataclass attribute, per kind
    FIELD_MAP: ClassVar[dict[str, str]] = {}

    @property
    def actor(self) -> Optional[str]:
        """Address that initiated the event, used for distinct-actor counts."""
        return None


@dataclass(frozen=True)
class TransferEvent(RawEvent):
    event_name: str = "Transfer"
    sender: str = ""
    recipient: str = ""
    value: int = 0

    FIELD_MAP: ClassVar[dict[str, str]] = {"from": "sender", "to": "recipient", "value": "value"}

    @property
    def actor(self) -> Optional[str]:
        return self.sender or None


@dataclass(frozen=True)
class ApprovalEvent(RawEvent):
    event_name: str = "Approval"
    owner: str = ""
    spender: str = ""
    value: int = 0

    FIELD_MAP: ClassVar[dict[str, str]] = {"owner": "owner", "spender": "spender", "value": "value"}

    @property
    def actor(self) -> Optional[str]:
        return self.owner or None


@dataclass(frozen=True)
class DelegateChangedEvent(RawEvent):
    event_name: str = "DelegateChanged"
    delegator: str = ""
    from_delegate: str = ""
    to_delegate: str = ""

    FIELD_MAP: ClassVar[dict[str, str]] = {
        "delegator": "delegator",
        "fromDelegate": "from_delegate",
        "toDelegate": "to_delegate",
    }

    @property
    def actor(self) -> Optional[str]:
        return self.delegator or None


@dataclass(frozen=True)
class DelegateVotesChangedEvent(RawEvent):
    event_name: str = "DelegateVotesChanged"
    delegate: str = ""
    previous_balance: int = 0
    new_balance: int = 0

    FIELD_MAP: ClassVar[dict[str, str]] = {
        "delegate": "delegate",
        "previousBalance": "previous_balance",
        "newBalance": "new_balance",
    }

    @property
    def actor(self) -> Optional[str]:
        return self.delegate or None


@dataclass(frozen=True)
class OwnershipTransferredEvent(RawEvent):
    event_name: str = "OwnershipTransferred"
    previous_owner: str = ""
    new_owner: str = ""

    FIELD_MAP: ClassVar[dict[str, str]] = {
        "previousOwner": "previous_owner",
        "newOwner": "new_owner",
    }

    @property
    def actor(self) -> Optional[str]:
        return self.previous_owner or None


EVENT_KINDS: dict[str, type[RawEvent]] = {
    "Transfer": TransferEvent,
    "Approval": ApprovalEvent,
    "DelegateChanged": DelegateChangedEvent,
    "DelegateVotesChanged": DelegateVotesChangedEvent,
    "OwnershipTransferred": OwnershipTransferredEvent,
}


def event_kind(event_name: str) -> type[RawEvent]:
    """Return the event class for ``event_name``; unknown names map to RawEvent."""
    return EVENT_KINDS.get(event_name, RawEvent)


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageRequest:
    """One page query against an event source."""
    event_filter: EventFilter
    window: TimeWindow
    limit: int
    offset: int = 0
    ascending: bool = True


@dataclass(frozen=True)
class EventPage:
    """
    One page of parsed events.

    ``row_count`` is the number of rows the source returned, including rows
    that failed to parse. Pagination must terminate on it, not on
    ``len(events)``.
    """
    events: tuple[RawEvent, ...] = ()
    row_count: int = 0
    malformed: int = 0

    @classmethod
    def from_events(cls, events: list[RawEvent]) -> "EventPage":
        """Create a page where every returned row parsed cleanly."""
        return cls(events=tuple(events), row_count=len(events))


# ---------------------------------------------------------------------------
# Bucket series
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bucket:
    """Fixed-width time sub-interval with its event count."""
    label: str
    range_start: int
    range_end: int
    count: int = 0


@dataclass(frozen=True)
class BucketSeries:
    """Ordered, contiguous buckets exactly covering ``window``. Index 0 is earliest."""
    view: View
    window: TimeWindow
    buckets: tuple[Bucket, ...]

    def __len__(self) -> int:
        return len(self.buckets)

    def __iter__(self) -> Iterator[Bucket]:
        return iter(self.buckets)

    def __getitem__(self, index: int) -> Bucket:
        return self.buckets[index]

    @property
    def bucket_seconds(self) -> int:
        return self.view.granularity.seconds

    @property
    def total(self) -> int:
        return sum(b.count for b in self.buckets)

    @property
    def counts(self) -> list[int]:
        return [b.count for b in self.buckets]

    @property
    def labels(self) -> list[str]:
        return [b.label for b in self.buckets]

    def with_counts(self, counts: list[int]) -> "BucketSeries":
        """Return a copy of this series with ``counts`` filled in."""
        if len(counts) != len(self.buckets):
            raise ValueError(f"Expected {len(self.buckets)} counts, got {len(counts)}")
        return replace(
            self,
            buckets=tuple(replace(b, count=c) for b, c in zip(self.buckets, counts)),
        )


@dataclass(frozen=True)
class ComparisonPoint:
    """Bucket ``index`` of the current series paired with the same index of the previous."""
    index: int
    label: str
    previous_label: str
    current: int
    previous: int


@dataclass(frozen=True)
class ComparisonResult:
    """Current vs previous period comparison handed to the rendering layer."""
    current: BucketSeries
    previous: BucketSeries
    current_total: int
    previous_total: int
    percent_change: float
    request_token: Optional[int] = None

    def aligned(self) -> list[ComparisonPoint]:
        """Pair buckets by index, earliest first."""
        return [
            ComparisonPoint(
                index=i,
                label=cur.label,
                previous_label=prev.label,
                current=cur.count,
                previous=prev.count,
            )
            for i, (cur, prev) in enumerate(zip(self.current, self.previous))
        ]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready structure for chart rendering."""
        return {
            "view": self.current.view.key,
            "current_window": [self.current.window.start_inclusive, self.current.window.end_exclusive],
            "previous_window": [self.previous.window.start_inclusive, self.previous.window.end_exclusive],
            "points": [
                {
                    "label": p.label,
                    "previous_label": p.previous_label,
                    "current": p.current,
                    "previous": p.previous,
                }
                for p in self.aligned()
            ],
            "current_total": self.current_total,
            "previous_total": self.previous_total,
            "percent_change": self.percent_change,
            "request_token": self.request_token,
        }


# ---------------------------------------------------------------------------
# Prices and holders
# ---------------------------------------------------------------------------

PRICE_DECIMALS = 12
TOKEN_DECIMALS = 18


@dataclass(frozen=True)
class PriceSnapshot:
    """Indexed price snapshot. ``price_usd_raw`` is fixed-point with 12 decimals."""
    price_usd_raw: int
    timestamp_seconds: int

    @property
    def price_usd(self) -> float:
        return self.price_usd_raw / 10 ** PRICE_DECIMALS


@dataclass(frozen=True)
class PricePoint:
    timestamp_seconds: int
    label: str
    price_usd: float


@dataclass(frozen=True)
class PriceSeries:
    """Price points oldest first, with chart axis bounds."""
    points: tuple[PricePoint, ...] = ()
    current_price: Optional[float] = None
    axis_min: Optional[float] = None
    axis_max: Optional[float] = None

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class TokenHolder:
    """Holder row; token amounts are fixed-point with 18 decimals."""
    address: str
    balance: int
    total_sent: int = 0
    total_received: int = 0
    last_transaction_time: int = 0
    transaction_count: int = 0


@dataclass(frozen=True)
class TokenStatistics:
    id: str
    total_holders: int
    total_supply: int
    total_transfers: int


@dataclass(frozen=True)
class TokenOverview:
    """Top holders plus global statistics for the holders table."""
    holders: tuple[TokenHolder, ...] = field(default_factory=tuple)
    statistics: Optional[TokenStatistics] = None


@dataclass(frozen=True)
class HolderRow:
    """Display-ready row of the holders table."""
    address: str
    short_address: str
    explorer_url: str
    balance: str
    balance_usd: str
    total_sent: str
    total_received: str
    transaction_count: str
    last_transaction: str
