"""
Centralized logging configuration for the density engine.

All components log through structlog so that fetch, aggregation and
comparison events share one structured format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_fetch_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the fetch subsystem.

    Pagination and source adapter logs carry ``subsystem="fetch"`` so they can
    be filtered apart from aggregation output.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for fetch operations
    """
    return get_logger(name).bind(subsystem="fetch")


def log_comparison(
    logger: FilteringBoundLogger,
    table: str,
    view: str,
    current_total: int,
    previous_total: int,
    percent_change: float,
    request_token: Optional[int] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a finished period comparison with standardized format.

    Args:
        logger: Structlog logger instance
        table: Indexed event table that was queried
        view: Name of the bucket view (day, week, month)
        current_total: Event total in the current window
        previous_total: Event total in the previous window
        percent_change: Computed percentage change
        request_token: Token of the request that produced the result
        context: Additional context data
    """
    bound_logger = logger.bind(
        table=table,
        view=view,
        current_total=current_total,
        previous_total=previous_total,
        percent_change=round(percent_change, 4),
        request_token=request_token,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Period comparison computed")
