"""
Aggregator: assigns events to buckets by direct index arithmetic.

Bucket index is ``(timestamp - window_start) // bucket_width``. Labels play no
part in assignment, so a label format change can never silently drop events.
"""

import math
from typing import Any, Iterable, Optional

import structlog

from ..data.models import BucketSeries, RawEvent
from ..errors import BoundaryMismatchError, DataQualityError, MalformedEventError

logger = structlog.get_logger(__name__)

COUNT_OCCURRENCES = "occurrences"
COUNT_DISTINCT_ACTORS = "distinct_actors"


class AggregationStats:
    """Diagnostic counters for events that could not be bucketed."""

    def __init__(self):
        self.assigned = 0
        self.malformed = 0
        self.boundary_mismatches = 0

    def record(self, error: DataQualityError) -> None:
        if isinstance(error, BoundaryMismatchError):
            self.boundary_mismatches += 1
        else:
            self.malformed += 1

    def get_stats(self) -> dict[str, Any]:
        return {
            "assigned": self.assigned,
            "malformed": self.malformed,
            "boundary_mismatches": self.boundary_mismatches,
        }


def bucket_index(event: RawEvent, template: BucketSeries) -> int:
    """
    Return the index of the bucket ``event`` belongs to.

    Raises:
        MalformedEventError: If the timestamp is missing or not numeric
        BoundaryMismatchError: If the timestamp is outside the template window
    """
    ts = getattr(event, "timestamp_seconds", None)
    if isinstance(ts, bool) or not isinstance(ts, (int, float)) or (
        isinstance(ts, float) and not math.isfinite(ts)
    ):
        raise MalformedEventError(
            "Event timestamp missing or not numeric",
            raw_data=repr(ts)[:100],
            expected_format="epoch seconds",
        )

    ts = int(ts)
    window = template.window
    if not window.contains(ts):
        raise BoundaryMismatchError(
            "Event timestamp outside bucket window",
            timestamp=ts,
            window_start=window.start_inclusive,
            window_end=window.end_exclusive,
        )

    return (ts - window.start_inclusive) // template.bucket_seconds


def aggregate(
    events: Iterable[RawEvent],
    template: BucketSeries,
    stats: Optional[AggregationStats] = None,
    count_mode: str = COUNT_OCCURRENCES,
) -> BucketSeries:
    """
    Fill ``template`` with event counts.

    Args:
        events: Events in any order
        template: Empty series from the planner
        stats: Optional counters for skipped events
        count_mode: ``occurrences`` tallies every event; ``distinct_actors``
            counts unique initiating addresses per bucket

    Returns:
        New BucketSeries with counts filled in
    """
    if count_mode not in (COUNT_OCCURRENCES, COUNT_DISTINCT_ACTORS):
        raise ValueError(f"Unknown count_mode: {count_mode!r}")

    if stats is None:
        stats = AggregationStats()

    counts = [0] * len(template)
    actors: list[set[str]] = [set() for _ in range(len(template))]

    for event in events:
        try:
            index = bucket_index(event, template)
        except BoundaryMismatchError as e:
            stats.record(e)
            logger.warning(
                "Dropping event outside bucket window",
                timestamp=e.timestamp,
                window_start=e.window_start,
                window_end=e.window_end,
                event_id=getattr(event, "event_id", None),
            )
            continue
        except MalformedEventError as e:
            stats.record(e)
            logger.debug(
                "Skipping event with malformed timestamp",
                raw_data=e.raw_data,
                event_id=getattr(event, "event_id", None),
            )
            continue

        stats.assigned += 1
        if count_mode == COUNT_DISTINCT_ACTORS:
            # Events without an actor each count once
            actor = event.actor
            actors[index].add(actor if actor is not None else f"#{event.event_id or id(event)}")
        else:
            counts[index] += 1

    if count_mode == COUNT_DISTINCT_ACTORS:
        counts = [len(a) for a in actors]

    return template.with_counts(counts)
