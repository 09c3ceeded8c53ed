"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

VALID_TIMESTAMP_FORMATS = ("iso", "unix")
VALID_COUNT_MODES = ("occurrences", "distinct_actors")
VALID_VIEWS = ("day", "week", "month")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_source_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate GraphQL source parameters."""
        errors = []

        if "url" in params:
            value = params["url"]
            if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                errors.append(ValidationError(
                    field="url",
                    message="Must be an http(s) URL",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "timestamp_format" in params:
            value = params["timestamp_format"]
            if value not in VALID_TIMESTAMP_FORMATS:
                errors.append(ValidationError(
                    field="timestamp_format",
                    message=f"Must be one of {', '.join(VALID_TIMESTAMP_FORMATS)}",
                    value=value
                ))

        if "timestamp_field" in params:
            value = params["timestamp_field"]
            if not isinstance(value, str) or not value.isidentifier():
                errors.append(ValidationError(
                    field="timestamp_field",
                    message="Must be a GraphQL field name",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_pagination_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate pagination parameters."""
        errors = []

        for field_name in ("page_size", "max_pages"):
            if field_name in params and not _is_positive_int(params[field_name]):
                errors.append(ValidationError(
                    field=field_name,
                    message="Must be a positive integer",
                    value=params[field_name]
                ))

        return errors

    @staticmethod
    def validate_time_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate time zone and view parameters."""
        errors = []

        if "timezone" in params:
            value = params["timezone"]
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError, TypeError):
                errors.append(ValidationError(
                    field="timezone",
                    message="Must be an IANA time zone name",
                    value=value
                ))

        if "default_view" in params:
            value = params["default_view"]
            if value not in VALID_VIEWS:
                errors.append(ValidationError(
                    field="default_view",
                    message=f"Must be one of {', '.join(VALID_VIEWS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_aggregation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate aggregation parameters."""
        errors = []

        if "count_mode" in params:
            value = params["count_mode"]
            if value not in VALID_COUNT_MODES:
                errors.append(ValidationError(
                    field="count_mode",
                    message=f"Must be one of {', '.join(VALID_COUNT_MODES)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_refresh_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate refresh parameters."""
        errors = []

        if "interval_seconds" in params:
            value = params["interval_seconds"]
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="interval_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "source" in config:
            errors.extend(ConfigValidator.validate_source_params(config["source"]))

        if "pagination" in config:
            errors.extend(ConfigValidator.validate_pagination_params(config["pagination"]))

        if "time" in config:
            errors.extend(ConfigValidator.validate_time_params(config["time"]))

        if "aggregation" in config:
            errors.extend(ConfigValidator.validate_aggregation_params(config["aggregation"]))

        if "refresh" in config:
            errors.extend(ConfigValidator.validate_refresh_params(config["refresh"]))

        return errors
