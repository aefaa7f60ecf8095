import logging
import threading
from datetime import timedelta
from typing import Optional

from .session import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL = timedelta(minutes=10)


class SessionSweeper:
    """
    Background task that evicts expired sessions on a fixed interval.

    Runs on a daemon thread so it keeps working regardless of which event
    loop (if any) the request handlers use. The loop ends only on stop().
    """

    def __init__(self, registry: SessionRegistry, interval: timedelta = DEFAULT_SWEEP_INTERVAL):
        """
        Initialize sweeper.

        Args:
            registry: Registry to sweep
            interval: Time between two sweep passes
        """
        if interval <= timedelta(0):
            raise ValueError(f"interval must be positive, got {interval}")

        self.registry = registry
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Launch the sweep thread. Calling it on a running sweeper is a no-op."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="session-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(f"Session sweeper started (interval={self.interval.total_seconds()}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the sweep thread to exit and wait for it."""
        thread = self._thread
        if thread is None:
            return

        self._stop_event.set()
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("Session sweeper did not stop within timeout")
            return

        self._thread = None
        logger.info("Session sweeper stopped")

    def run_once(self) -> int:
        """Run a single sweep pass on the calling thread."""
        return self.registry.cleanup_expired()

    def _run(self) -> None:
        seconds = self.interval.total_seconds()
        while not self._stop_event.wait(seconds):
            try:
                self.run_once()
            except Exception:
                logger.exception("Session sweep failed, retrying next interval")
