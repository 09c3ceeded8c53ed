"""Monotonic request tokens for discarding superseded comparison results."""

import itertools
import threading


class RequestTracker:
    """Issues increasing request tokens; only the latest token is current."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def issue(self) -> int:
        """Issue a new token, superseding every earlier one."""
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest

    @property
    def latest(self) -> int:
        """Most recently issued token, 0 if none."""
        with self._lock:
            return self._latest
