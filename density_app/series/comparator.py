"""Period comparator: pairs current and previous series and computes percent change."""

from typing import Optional

from ..data.models import BucketSeries, ComparisonResult
from ..errors import SeriesLengthMismatchError


def percent_change(current_total: int, previous_total: int) -> float:
    """
    Percentage change from ``previous_total`` to ``current_total``.

    Both zero gives 0.0; previous zero with current non-zero gives 100.0.
    """
    if current_total == 0 and previous_total == 0:
        return 0.0
    if previous_total == 0:
        return 100.0
    return (current_total - previous_total) / previous_total * 100.0


def compare(current: BucketSeries, previous: BucketSeries,
            request_token: Optional[int] = None) -> ComparisonResult:
    """
    Compare a current series against the immediately preceding one.

    Raises:
        SeriesLengthMismatchError: If the series differ in length, which
            indicates a planner bug.
    """
    if len(current) != len(previous):
        raise SeriesLengthMismatchError(
            f"Cannot compare series of length {len(current)} and {len(previous)}",
            current_length=len(current),
            previous_length=len(previous),
        )

    current_total = current.total
    previous_total = previous.total

    return ComparisonResult(
        current=current,
        previous=previous,
        current_total=current_total,
        previous_total=previous_total,
        percent_change=percent_change(current_total, previous_total),
        request_token=request_token,
    )
