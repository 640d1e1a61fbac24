"""Cooperative cancellation for long-running solves."""

import threading
import time
from typing import Optional

from nlsolver.errors import SolveCancelled


class CancellationToken:
    """A cancel flag shared between a caller and one running solve.

    The solver polls :meth:`raise_if_cancelled` at the top of every
    iteration. An optional *timeout* (seconds) turns the token into a
    deadline: once it passes, the token reports itself cancelled.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise SolveCancelled("Solve was cancelled before it finished.")
