"""
Bucket planner.

Derives the current and previous windows for a view from one reference
instant. All arithmetic is integer seconds from a single local-midnight
anchor, so the previous window always ends exactly where the current one
starts and has the same width.
"""

from typing import Optional

from ..data.models import Bucket, BucketSeries, TimeWindow, View
from ..utils.time import (
    SECONDS_PER_DAY,
    Instant,
    ZoneLike,
    format_bucket_label,
    get_reference_instant,
    start_of_day,
)


def window_for(reference: Instant, view: View, offset_periods: int = 0,
               tz: ZoneLike = "UTC") -> TimeWindow:
    """
    Compute the time window for ``view`` shifted back ``offset_periods`` periods.

    The DAY view covers the calendar day containing ``reference``. WEEK and
    MONTH views end with that day and reach back 7 or 30 days.
    """
    if offset_periods < 0:
        raise ValueError(f"offset_periods must be non-negative, got {offset_periods}")

    reference_ts = get_reference_instant(reference, tz)
    day_start = start_of_day(reference_ts, tz)

    end = day_start + SECONDS_PER_DAY
    start = end - view.window_seconds
    shift = offset_periods * view.window_seconds

    return TimeWindow(start - shift, end - shift)


def plan(reference: Instant, view: View, offset_periods: int = 0,
         tz: ZoneLike = "UTC") -> BucketSeries:
    """
    Build an empty bucket template for ``view``.

    Args:
        reference: Reference date (aware/naive datetime or epoch seconds)
        view: DAY (24 hourly), WEEK (7 daily) or MONTH (30 daily)
        offset_periods: 0 for the current window, 1 for the previous one
        tz: Zone that defines day boundaries and labels

    Returns:
        BucketSeries with zero counts, earliest bucket first
    """
    window = window_for(reference, view, offset_periods, tz)
    width = view.granularity.seconds

    buckets = tuple(
        Bucket(
            label=format_bucket_label(start, width, tz),
            range_start=start,
            range_end=start + width,
        )
        for start in range(window.start_inclusive, window.end_exclusive, width)
    )

    return BucketSeries(view=view, window=window, buckets=buckets)


def plan_pair(reference: Optional[Instant], view: View,
              tz: ZoneLike = "UTC") -> tuple[BucketSeries, BucketSeries]:
    """
    Plan the current and previous templates from a single reference instant.

    ``reference=None`` captures wall-clock time exactly once.
    """
    reference_ts = get_reference_instant(reference, tz)
    return plan(reference_ts, view, 0, tz), plan(reference_ts, view, 1, tz)
