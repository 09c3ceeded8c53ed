"""
System failure error classifications for unrecoverable errors.

A system failure means the comparison request cannot produce a trustworthy
result and must be reported as failed.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class SourceUnavailableError(SystemFailureError):
    """The event source failed, timed out, or returned an unusable response."""

    def __init__(self, message: str, source: Optional[str] = None,
                 operation: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source
        self.operation = operation


class SeriesLengthMismatchError(SystemFailureError):
    """Current and previous series differ in length. Indicates a planner bug."""

    def __init__(self, message: str, current_length: Optional[int] = None,
                 previous_length: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_length = current_length
        self.previous_length = previous_length
