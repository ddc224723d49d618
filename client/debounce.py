"""Quiet-period debouncing for search text."""

import time
from typing import Callable, Optional

from common.constants import SEARCH_DEBOUNCE_SECONDS


class Debouncer:
    """
    Holds the raw input and the value that has been stable for ``delay`` seconds.

    The settled value is evaluated lazily against the clock, so callers poll
    ``value()`` when they build a query key instead of scheduling timers.
    """

    def __init__(
        self,
        initial: str = "",
        delay: float = SEARCH_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.delay = delay
        self.clock = clock
        self._settled = initial
        self._pending: Optional[str] = None
        self._changed_at = 0.0

    @property
    def raw(self) -> str:
        """Latest input, settled or not."""
        return self._pending if self._pending is not None else self._settled

    def push(self, value: str) -> None:
        """Record new input and restart the quiet period."""
        self._pending = value
        self._changed_at = self.clock()

    def is_pending(self) -> bool:
        self._settle()
        return self._pending is not None

    def value(self) -> str:
        """Return the last value that outlived the quiet period."""
        self._settle()
        return self._settled

    def flush(self) -> str:
        """Settle pending input immediately."""
        if self._pending is not None:
            self._settled = self._pending
            self._pending = None
        return self._settled

    def _settle(self) -> None:
        if self._pending is not None and self.clock() - self._changed_at >= self.delay:
            self._settled = self._pending
            self._pending = None
