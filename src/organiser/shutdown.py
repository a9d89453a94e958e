"""Cooperative cancellation and signal-driven shutdown."""

import logging
import signal
import threading
from typing import Callable, Dict, List, Optional


logger = logging.getLogger(__name__)


class CancellationToken:
    """
    One-way broadcast flag shared by the relay and every worker.

    Once cancelled it stays cancelled. Listeners are called exactly once,
    on the thread that cancels the token, or immediately if they are
    added after cancellation.
    """

    def __init__(self):
        self._event = threading.Event()
        self._listeners: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._event.is_set()

    def cancel(self) -> bool:
        """
        Request cancellation.

        Returns:
            True if this call cancelled the token, False if it already was
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            listeners = list(self._listeners)
            self._listeners.clear()

        for listener in listeners:
            listener()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until cancelled or until the timeout expires.

        Returns:
            True if the token is cancelled
        """
        return self._event.wait(timeout)

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback to run when the token is cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._listeners.append(listener)
                return
        listener()


class ShutdownCoordinator:
    """
    Handle graceful shutdown on SIGINT/SIGTERM.

    The signal handler only counts signals. A monitor thread started by
    install() turns them into a token cancellation, so no lock is ever
    taken from signal context.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, token: Optional[CancellationToken] = None, poll_interval: float = 0.1):
        self.token = token or CancellationToken()
        self.poll_interval = poll_interval
        self.signals_received = 0
        self._previous: Dict[int, object] = {}
        self._closed = threading.Event()
        self._monitor: Optional[threading.Thread] = None

    def install(self) -> None:
        """Install signal handlers. Must be called from the main thread."""
        self._closed.clear()
        self._monitor = threading.Thread(
            target=self._monitor_loop,
            name="ShutdownMonitor",
            daemon=True,
        )
        self._monitor.start()

        for signum in self.SIGNALS:
            self._previous[signum] = signal.signal(signum, self._handler)

    def restore(self) -> None:
        """Reinstate the handlers that were active before install()."""
        for signum, previous in self._previous.items():
            if previous is not None:
                signal.signal(signum, previous)
        self._previous.clear()

        self._closed.set()
        if self._monitor is not None:
            self._monitor.join(timeout=5.0)
            self._monitor = None

    def trigger(self) -> bool:
        """Cancel the token as if an interrupt had been received."""
        return self.token.cancel()

    def _handler(self, signum, frame):
        self.signals_received += 1

    def _monitor_loop(self) -> None:
        seen = 0
        while True:
            closed = self._closed.wait(self.poll_interval)
            while seen < self.signals_received:
                seen += 1
                if self.trigger():
                    logger.info("Received interrupt, shutting down...")
                else:
                    logger.info("Already shutting down, waiting for workers to finish")
            if closed:
                return

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled
