"""
Periodic comparison refresh.

The scheduler keeps one selected request (event filter, view, reference).
Selecting a new request issues a new token; any comparison still in flight
for an older token is discarded when it finishes.
"""

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from ..data.models import ComparisonResult, EventFilter, View
from ..errors import SourceUnavailableError
from ..utils.time import Instant
from .tracker import RequestTracker

if TYPE_CHECKING:
    from ..engine import EventComparisonEngine

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ComparisonRequest:
    """Selected comparison. ``reference=None`` means "now" at each refresh."""
    event_filter: EventFilter
    view: View = View.DAY
    reference: Optional[Instant] = None


class RefreshScheduler:
    """Runs the selected comparison now and then every ``interval_seconds``."""

    def __init__(
        self,
        engine: "EventComparisonEngine",
        on_result: Callable[[ComparisonResult], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        self.engine = engine
        self.on_result = on_result
        self.on_error = on_error
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else engine.config["refresh"]["interval_seconds"]
        )
        if self.interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {self.interval_seconds}")

        self.tracker = RequestTracker()
        self._request: Optional[ComparisonRequest] = None
        self._token = 0
        # Reentrant so callbacks may call select()
        self._state_lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.delivered = 0
        self.discarded = 0
        self.failed = 0

    def select(self, event_filter: EventFilter, view: View = View.DAY,
               reference: Optional[Instant] = None) -> int:
        """Select a new comparison, superseding the current one. Returns its token."""
        with self._state_lock:
            self._request = ComparisonRequest(event_filter, view, reference)
            self._token = self.tracker.issue()
            token = self._token

        logger.info(
            "Selected comparison",
            table=event_filter.table_name,
            view=view.key,
            request_token=token,
        )
        return token

    def refresh_once(self) -> Optional[ComparisonResult]:
        """
        Run the selected comparison once.

        Returns:
            The result if it was delivered, None if nothing is selected, the
            result was stale, or the comparison failed
        """
        with self._state_lock:
            request = self._request
            token = self._token

        if request is None:
            return None

        try:
            result = self.engine.compare(
                request.event_filter,
                request.view,
                reference=request.reference,
                request_token=token,
            )
        except SourceUnavailableError as e:
            with self._state_lock:
                if not self.tracker.is_current(token):
                    self.discarded += 1
                    logger.info("Discarding failure of superseded request", request_token=token)
                    return None
                self.failed += 1
                logger.error(
                    "Refresh failed",
                    request_token=token,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if self.on_error is not None:
                    self.on_error(e)
            return None

        # select() cannot supersede the token between this check and delivery
        with self._state_lock:
            if not self.tracker.is_current(token):
                self.discarded += 1
                logger.info(
                    "Discarding stale comparison result",
                    request_token=token,
                    latest_token=self.tracker.latest,
                )
                return None

            self.delivered += 1
            self.on_result(result)
        return result

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.refresh_once()
            self._stop_event.wait(self.interval_seconds)

    def start(self) -> None:
        """Start the background refresh thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="density-refresh", daemon=True)
        self._thread.start()
        logger.info("Refresh scheduler started", interval_seconds=self.interval_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the background thread and wait for the in-flight refresh to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Refresh scheduler stopped", delivered=self.delivered, discarded=self.discarded)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
