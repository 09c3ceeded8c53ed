"""
Time utilities for reference instants, day alignment and bucket labels.

Labels are built from a fixed month table instead of ``strftime("%b")`` so the
output never depends on the process locale.
"""

from datetime import datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

ZoneLike = Union[str, tzinfo]
Instant = Union[datetime, int, float]


def resolve_zone(tz: ZoneLike = "UTC") -> tzinfo:
    """
    Resolve a zone name or tzinfo into a tzinfo instance.

    Args:
        tz: IANA zone name ("UTC", "Europe/Berlin") or tzinfo object

    Returns:
        tzinfo instance
    """
    if isinstance(tz, tzinfo):
        return tz
    if tz.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(tz)


def to_epoch_seconds(value: Instant, tz: ZoneLike = "UTC") -> int:
    """
    Convert a datetime or numeric timestamp to integer epoch seconds.

    Naive datetimes are interpreted in ``tz``.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=resolve_zone(tz))
        return int(value.timestamp())
    return int(value)


def get_reference_instant(reference: Optional[Instant] = None, tz: ZoneLike = "UTC") -> int:
    """
    Capture the reference instant for a comparison request.

    Args:
        reference: Explicit reference date; wall-clock time is used when None

    Returns:
        Reference instant as integer epoch seconds
    """
    if reference is not None:
        return to_epoch_seconds(reference, tz)

    return int(datetime.now(timezone.utc).timestamp())


def start_of_day(epoch_seconds: int, tz: ZoneLike = "UTC") -> int:
    """Return the epoch seconds of local midnight of the day containing ``epoch_seconds``."""
    zone = resolve_zone(tz)
    local = datetime.fromtimestamp(epoch_seconds, zone)
    midnight = datetime(local.year, local.month, local.day, tzinfo=zone)
    return int(midnight.timestamp())


def format_bucket_label(range_start: int, bucket_seconds: int, tz: ZoneLike = "UTC") -> str:
    """
    Build the canonical label for a bucket.

    Hourly buckets render as ``"2-Jan 05:00"``, daily buckets as ``"2-Jan"``.

    Args:
        range_start: Bucket start in epoch seconds
        bucket_seconds: Bucket width in seconds
        tz: Zone the label is rendered in

    Returns:
        Deterministic label string
    """
    local = datetime.fromtimestamp(range_start, resolve_zone(tz))
    day_label = f"{local.day}-{MONTH_ABBR[local.month - 1]}"
    if bucket_seconds < SECONDS_PER_DAY:
        return f"{day_label} {local.hour:02d}:00"
    return day_label


def format_iso(epoch_seconds: int) -> str:
    """Format epoch seconds as a UTC ISO8601 string without offset suffix."""
    return datetime.fromtimestamp(epoch_seconds, timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
