"""
Background TTL sweep for the session store.

A cancellable daemon thread owned by the orchestrator lifecycle: started on
initialization, stopped on shutdown.
"""
import logging
import threading
from typing import Optional

from .session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 5 * 60


class SessionSweeper:
    """Periodically removes expired sessions from a SessionStore."""

    def __init__(self, store: SessionStore, interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._store = store
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="session-sweeper", daemon=True)
        self._thread.start()
        logger.info(f"Session sweeper started (every {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the thread to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Session sweeper did not stop within timeout")
            else:
                logger.info("Session sweeper stopped")
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self._store.sweep()
            except Exception:
                # Keep sweeping on the next tick; the store stays consistent per entry
                logger.exception("Session sweep failed")
