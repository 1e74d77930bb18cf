"""Periodic sync runs that never overlap."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs `job` every `interval_minutes`.

    The next run is armed only after the current one returns, and start()
    cancels any pending timer first, so two runs are never in flight.
    """

    def __init__(
        self,
        interval_minutes: int,
        job: Callable[[], object],
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.interval_minutes = interval_minutes
        self.job = job
        self._timer_factory = timer_factory
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        """(Re)arm the timer. Interval 0 means manual runs only."""
        with self._lock:
            self._cancel_locked()
            if self.interval_minutes <= 0 or self._stopped.is_set():
                return
            self._timer = self._timer_factory(self.interval_minutes * 60, self._fire)
            self._timer.daemon = True
            self._timer.start()
        logger.debug("Next sync in %d minutes", self.interval_minutes)

    def stop(self) -> None:
        self._stopped.set()
        with self._lock:
            self._cancel_locked()

    def wait(self) -> None:
        """Block until stop() is called."""
        self._stopped.wait()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
        try:
            self.job()
        except Exception:
            logger.exception("Scheduled sync failed")
        finally:
            self.start()
