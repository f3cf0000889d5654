"""Periodic refresh for live views.

A RefreshTask reloads data on a fixed interval until it is cancelled. A load
that finishes after cancellation is discarded rather than applied, so a view
that has been closed never receives a stale update.
"""

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RefreshTask(Generic[T]):
    """Cancellable load/apply loop.

    Args:
        load: Fetches a fresh snapshot.
        apply: Receives each snapshot loaded before cancellation.
        interval: Seconds between loads.
    """

    def __init__(self, load: Callable[[], T], apply: Callable[[T], None], interval: float) -> None:
        self._load = load
        self._apply = apply
        self.interval = interval
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def tick(self) -> bool:
        """Load once and apply the result unless cancelled meanwhile.

        Load failures are logged; the next tick tries again.

        Returns:
            True if a result was applied.
        """
        try:
            result = self._load()
        except Exception:
            logger.exception("Refresh failed")
            return False

        if self.cancelled:
            logger.debug("Discarding refresh loaded after cancellation")
            return False

        self._apply(result)
        return True

    def run(self, max_ticks: int | None = None) -> None:
        """Tick until cancelled, waiting `interval` seconds between ticks.

        Args:
            max_ticks: Stop after this many ticks. If None, runs until cancelled.
        """
        ticks = 0
        while not self.cancelled:
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            self._cancelled.wait(self.interval)

    def __enter__(self) -> "RefreshTask[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()
