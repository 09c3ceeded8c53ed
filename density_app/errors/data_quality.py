"""
Data quality error classifications for indexed event records.

These exceptions describe individual records that cannot be placed into a
bucket series. They never abort a comparison: callers count and skip them.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedEventError(DataQualityError):
    """Event record is missing fields or has a non-numeric timestamp."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class BoundaryMismatchError(DataQualityError):
    """Event timestamp falls outside the planned bucket window."""

    def __init__(self, message: str, timestamp: Optional[int] = None,
                 window_start: Optional[int] = None,
                 window_end: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timestamp = timestamp
        self.window_start = window_start
        self.window_end = window_end
