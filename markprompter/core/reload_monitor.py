"""Background polling of the open document's modification time."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

if os.getenv("MARKPROMPTER_DEBUG_RELOAD", "0") not in ("0", "false", "False", ""):
    logger.setLevel(logging.DEBUG)

POLL_INTERVAL_SECONDS = 1.0
FAILURE_WARNING_THRESHOLD = 5


class ReloadMonitor:
    """Watch one file and raise a single coalesced "changed" flag.

    The worker thread only touches its own bookkeeping and the pending flag;
    the consumer drains the flag with :meth:`try_take_pending_change` once per
    frame, so any number of writes between two drains means one reload.

    Usage:
        monitor = ReloadMonitor(path)
        monitor.start()
        ...
        if monitor.try_take_pending_change():
            reload()
        ...
        monitor.stop()
    """

    def __init__(self, path: Path | str, interval: float = POLL_INTERVAL_SECONDS) -> None:
        self.path = Path(path)
        self.interval = interval
        self.consecutive_failures = 0
        self._last_mtime_ns: Optional[int] = self._stat_mtime_ns()
        self._pending = False
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._warned = False

    # ------------------------------------------------------------ lifecycle
    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"reload-monitor:{self.path.name}",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Started reload monitor for %s", self.path)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self.interval * 2)
        self._thread = None
        logger.debug("Stopped reload monitor for %s", self.path)

    @property
    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.poll_once()

    # --------------------------------------------------------------- polling
    def _stat_mtime_ns(self) -> Optional[int]:
        try:
            return self.path.stat().st_mtime_ns
        except OSError:
            return None

    def poll_once(self) -> bool:
        """Run one polling step; return True when a change was flagged."""
        try:
            mtime_ns = self.path.stat().st_mtime_ns
        except OSError as exc:
            self._record_failure(exc)
            return False

        if self.consecutive_failures:
            logger.debug("%s available again after %d failed checks", self.path, self.consecutive_failures)
        self.consecutive_failures = 0
        self._warned = False

        if self._last_mtime_ns is None:
            self._last_mtime_ns = mtime_ns
            return False
        if mtime_ns <= self._last_mtime_ns:
            return False
        self._last_mtime_ns = mtime_ns
        with self._lock:
            self._pending = True
        logger.debug("Change detected in %s", self.path)
        return True

    def _record_failure(self, exc: OSError) -> None:
        self.consecutive_failures += 1
        logger.debug("Unable to stat %s (%s); will retry", self.path, exc)
        if self.consecutive_failures >= FAILURE_WARNING_THRESHOLD and not self._warned:
            self._warned = True
            logger.warning(
                "%s has been unavailable for %d consecutive checks; keeping the last loaded content",
                self.path,
                self.consecutive_failures,
            )

    def try_take_pending_change(self) -> bool:
        with self._lock:
            pending = self._pending
            self._pending = False
        return pending
