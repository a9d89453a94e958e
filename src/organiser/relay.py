"""Debounce raw filesystem notifications before they reach the workers."""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .models import DebouncedEvent, EventKind, RawFSEvent
from .shutdown import CancellationToken


logger = logging.getLogger(__name__)


@dataclass
class PendingEvent:
    """An event waiting for its debounce window to pass."""
    kind: EventKind
    path: Path
    timestamp: float


class DebounceRelay:
    """
    Coalesces bursts of raw events and forwards them on a tick.

    Raw events are pushed from the watcher thread. A tick loop publishes
    every pending event that has been quiet for ``delay_ms`` onto the
    output queue read by the worker pool. The relay does not filter by
    event kind.
    """

    def __init__(
        self,
        delay_ms: int,
        output: "queue.Queue[DebouncedEvent]",
        token: CancellationToken,
        tick_ms: int = 50,
    ):
        """
        Initialize the relay.

        Args:
            delay_ms: Debounce window in milliseconds
            output: Queue that debounced events are published on
            token: Cancellation token that stops the tick loop
            tick_ms: Interval between flushes in milliseconds
        """
        self.delay_ms = delay_ms
        self.tick_ms = tick_ms
        self.output = output
        self.token = token
        self._pending: Dict[Path, PendingEvent] = {}
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def push(self, raw_event: RawFSEvent) -> None:
        """
        Buffer a raw event.

        Coalescing rules per path:
        - Multiple WRITEs -> single WRITE (latest timestamp)
        - CREATE then WRITE -> single CREATE (window restarts)
        - CREATE then REMOVE -> cancel out (no event)
        - REMOVE then CREATE -> CREATE (file re-created)
        - RENAME drops the source path and overwrites the destination
        """
        with self._lock:
            path = raw_event.path
            kind = raw_event.kind
            timestamp = raw_event.timestamp

            if kind == EventKind.RENAME:
                if raw_event.old_path is not None:
                    self._pending.pop(raw_event.old_path, None)
                self._pending[path] = PendingEvent(kind, path, timestamp)
                return

            existing = self._pending.get(path)
            if existing is None:
                self._pending[path] = PendingEvent(kind, path, timestamp)
                return

            if kind == EventKind.WRITE:
                if existing.kind in (EventKind.CREATE, EventKind.WRITE):
                    existing.timestamp = timestamp
                else:
                    self._pending[path] = PendingEvent(kind, path, timestamp)

            elif kind == EventKind.REMOVE:
                if existing.kind == EventKind.CREATE:
                    del self._pending[path]
                else:
                    self._pending[path] = PendingEvent(kind, path, timestamp)

            elif kind == EventKind.CREATE:
                existing.kind = EventKind.CREATE
                existing.timestamp = timestamp

    def tick(self, current_time: Optional[float] = None) -> List[DebouncedEvent]:
        """
        Publish every event older than the debounce window.

        Args:
            current_time: Current timestamp, defaults to now

        Returns:
            The events published on this tick
        """
        if current_time is None:
            current_time = time.time()
        window_sec = self.delay_ms / 1000.0

        with self._lock:
            ready = [
                pending for pending in self._pending.values()
                if (current_time - pending.timestamp) >= window_sec
            ]
            for pending in ready:
                del self._pending[pending.path]

        events = [DebouncedEvent(kind=p.kind, path=p.path) for p in ready]
        for event in events:
            logger.debug(f"Relaying {event.kind.value}: {event.path}")
            self.output.put(event)
        return events

    def pending_count(self) -> int:
        """Get number of events still inside their debounce window."""
        with self._lock:
            return len(self._pending)

    def run(self) -> None:
        """Tick until the token is cancelled."""
        interval = self.tick_ms / 1000.0
        logger.debug(f"Relay loop started, delay={self.delay_ms}ms, tick={self.tick_ms}ms")

        while not self.token.wait(timeout=interval):
            self.tick()

        logger.debug("Relay loop stopped")

    def start(self) -> None:
        """Start the tick loop on a background thread."""
        self._thread = threading.Thread(target=self.run, name="DebounceRelay", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the tick loop to exit."""
        if self._thread is not None:
            self._thread.join(timeout=timeout)
