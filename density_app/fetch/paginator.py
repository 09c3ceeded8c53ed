"""
Paginated fetcher.

Pages through an event source with a fixed page size and increasing offset
until a page comes back shorter than the page size. No total count is
assumed. A failure on any page abandons the whole fetch: partial results are
never returned.
"""

import math
from dataclasses import dataclass

from ..data.models import EventFilter, PageRequest, RawEvent, TimeWindow
from ..errors import DataQualityError, SourceUnavailableError
from ..logging.config import get_fetch_logger
from ..source.base import BaseEventSource

logger = get_fetch_logger(__name__)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_MAX_PAGES = 10_000


@dataclass(frozen=True)
class FetchStats:
    """Summary of one paginated fetch."""
    pages: int
    rows: int
    malformed: int


def _sort_key(event: RawEvent) -> tuple[int, str]:
    return (event.timestamp_seconds, event.event_id or "")


def _has_usable_timestamp(event: RawEvent) -> bool:
    ts = getattr(event, "timestamp_seconds", None)
    if isinstance(ts, bool) or not isinstance(ts, (int, float)):
        return False
    return not isinstance(ts, float) or math.isfinite(ts)


def fetch_all_with_stats(
    source: BaseEventSource,
    event_filter: EventFilter,
    window: TimeWindow,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> tuple[tuple[RawEvent, ...], FetchStats]:
    """
    Fetch every event for ``event_filter`` within ``window``.

    Args:
        source: Event source adapter
        event_filter: Event stream to query
        window: Half-open time window
        page_size: Rows requested per page
        max_pages: Upper bound on page requests

    Returns:
        Tuple of (events sorted ascending by timestamp, fetch stats)

    Raises:
        SourceUnavailableError: If any page request fails or ``max_pages`` is
            exceeded. Transport (OSError) and data-quality errors from the
            source are wrapped; other exceptions propagate unchanged.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    events: list[RawEvent] = []
    offset = 0
    pages = 0
    rows = 0
    malformed = 0

    while True:
        if pages >= max_pages:
            raise SourceUnavailableError(
                f"Exceeded {max_pages} pages fetching {event_filter.table_name}",
                source=source.name,
                operation="fetch_all",
                context={"offset": offset, "rows": rows},
            )

        request = PageRequest(
            event_filter=event_filter,
            window=window,
            limit=page_size,
            offset=offset,
            ascending=True,
        )

        try:
            page = source.fetch_page(request)
        except SourceUnavailableError:
            logger.error(
                "Page request failed, abandoning fetch",
                table=event_filter.table_name,
                offset=offset,
                pages_completed=pages,
            )
            raise
        except (OSError, DataQualityError) as e:
            logger.error(
                "Source transport or data error, abandoning fetch",
                table=event_filter.table_name,
                offset=offset,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise SourceUnavailableError(
                f"Source {source.name} failed: {e}",
                source=source.name,
                operation="fetch_page",
            ) from e

        pages += 1
        rows += page.row_count
        malformed += page.malformed
        for event in page.events:
            if _has_usable_timestamp(event):
                events.append(event)
            else:
                malformed += 1
                logger.debug(
                    "Skipping event without a usable timestamp",
                    table=event_filter.table_name,
                    event_id=getattr(event, "event_id", None),
                )

        if page.row_count < page_size:
            break

        offset += page_size

    events.sort(key=_sort_key)

    stats = FetchStats(pages=pages, rows=rows, malformed=malformed)
    logger.info(
        "Fetched event window",
        table=event_filter.table_name,
        window_start=window.start_inclusive,
        window_end=window.end_exclusive,
        pages=stats.pages,
        events=len(events),
        malformed=stats.malformed,
    )
    return tuple(events), stats


def fetch_all(
    source: BaseEventSource,
    event_filter: EventFilter,
    window: TimeWindow,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> tuple[RawEvent, ...]:
    """Fetch every event for ``event_filter`` within ``window``, ascending by timestamp."""
    events, _ = fetch_all_with_stats(source, event_filter, window, page_size, max_pages)
    return events
