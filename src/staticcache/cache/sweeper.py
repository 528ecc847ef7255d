"""Background scheduler for expiry sweeps.

:class:`~staticcache.cache.StaticCache` has no clock of its own; something
outside it has to call :meth:`~staticcache.cache.StaticCache.sweep` now and
then. :class:`PeriodicSweeper` is that something for processes that do not
already run a scheduler.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from staticcache.cache.store import StaticCache

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """Call ``cache.sweep()`` every *interval* seconds from a daemon thread.

    Args:
        cache: The cache to sweep.
        interval: Seconds between sweeps. Must be positive.

    Example::

        with PeriodicSweeper(cache, interval=300):
            serve_forever()
    """

    def __init__(self, cache: StaticCache, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"Sweep interval must be positive, got {interval}")
        self._cache = cache
        self._interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        """Whether the sweeper thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sweeper thread. Calling it on a running sweeper is a no-op."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="staticcache-sweeper", daemon=True
        )
        self._thread.start()
        logger.debug("Started cache sweeper every %ss", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread to exit and wait up to *timeout* seconds for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> int:
        """Run a single sweep and return the number of entries removed.

        Errors are logged rather than raised so that one bad sweep does not
        end the schedule.
        """
        try:
            return self._cache.sweep()
        except Exception as exc:
            logger.warning("Cache sweep failed: %s", exc)
            return 0

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.run_once()

    def __enter__(self) -> PeriodicSweeper:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()
