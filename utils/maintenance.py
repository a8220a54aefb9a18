"""Background job that purges expired refresh tokens.

The job runs on a daemon thread for the lifetime of the process, waking up
every `interval` seconds (once a day by default) and calling `cleanup()` on
each registered RefreshTokenStore. It never raises into the caller: any
failure is logged and the next tick proceeds as usual.
"""
from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from models import storage

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL_SECONDS = 24 * 60 * 60


class SessionCleanupJob:
    def __init__(self, stores: Iterable, *, interval: float = DEFAULT_CLEANUP_INTERVAL_SECONDS):
        self.stores = list(stores)
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="session-cleanup", daemon=True)
        self._thread.start()
        logger.info("Session cleanup job started (every %ss)", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> int:
        """Run one sweep over all stores; returns the total of removed records."""
        removed = 0
        for store in self.stores:
            try:
                removed += store.cleanup()
            except Exception:
                logger.exception("Session cleanup failed for %r", store)
        return removed

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                removed = self.run_once()
                logger.info("Session cleanup removed %d expired token(s)", removed)
            except Exception:
                logger.exception("Session cleanup tick failed")
            finally:
                # the scoped session belongs to this thread
                storage.close()
