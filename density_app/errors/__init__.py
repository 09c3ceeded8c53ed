"""
Error classification for event fetching and aggregation.

Two families: data quality issues that are counted and skipped, and system
failures that abort the whole comparison request.
"""

from .data_quality import (
    DataQualityError,
    MalformedEventError,
    BoundaryMismatchError,
)
from .system_failures import (
    SystemFailureError,
    SourceUnavailableError,
    SeriesLengthMismatchError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedEventError",
    "BoundaryMismatchError",
    # System Failures
    "SystemFailureError",
    "SourceUnavailableError",
    "SeriesLengthMismatchError",
]
