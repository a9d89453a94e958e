"""Pool of worker threads consuming debounced events."""

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Callable, List, Optional

from .config import Config
from .models import DebouncedEvent, EventKind
from .pipeline import handle
from .shutdown import CancellationToken


logger = logging.getLogger(__name__)

# wakes one idle worker after cancellation
_STOP = object()


class WorkerPool:
    """
    Fixed number of long-lived workers running the intake handler.

    Each worker waits for either the next debounced event or
    cancellation. Only CREATE events reach the handler. A failure while
    handling one file is logged and the worker moves on.
    """

    def __init__(
        self,
        config: Config,
        temp_dir: Path,
        events: "queue.Queue[DebouncedEvent]",
        token: CancellationToken,
        size: Optional[int] = None,
        handler: Callable[..., None] = handle,
        poll_interval: float = 0.5,
    ):
        """
        Initialize the pool.

        Args:
            config: Shared config
            temp_dir: Scratch directory passed to the handler
            events: Queue the relay publishes on
            token: Cancellation token observed by every worker
            size: Number of workers, defaults to the CPU count
            handler: Intake handler called as handler(config, temp_dir, path, worker=i)
            poll_interval: Seconds between cancellation checks while idle

        Raises:
            ValueError: If size is less than 1
        """
        self.config = config
        self.temp_dir = temp_dir
        self.events = events
        self.token = token
        if size is None:
            size = os.cpu_count() or 1
        if size < 1:
            raise ValueError(f"worker pool size must be at least 1, got {size}")
        self.size = size
        self.handler = handler
        self.poll_interval = poll_interval
        self._threads: List[threading.Thread] = []

    def start(self) -> None:
        """Spawn the workers."""
        self.token.add_listener(self._wake_all)

        for i in range(self.size):
            thread = threading.Thread(
                target=self._worker_loop,
                args=(i,),
                name=f"Worker-{i}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

        logger.info(f"Waiting for new files on {self.size} worker(s)")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for every worker to exit."""
        for thread in self._threads:
            thread.join(timeout=timeout)

    def alive_count(self) -> int:
        """Get number of workers still running."""
        return sum(1 for thread in self._threads if thread.is_alive())

    def _wake_all(self) -> None:
        for _ in range(self.size):
            self.events.put(_STOP)

    def _worker_loop(self, index: int) -> None:
        """Worker loop that handles events until cancellation."""
        while not self.token.cancelled:
            try:
                event = self.events.get(timeout=self.poll_interval)
            except queue.Empty:
                continue

            if event is _STOP or self.token.cancelled:
                break

            if event.kind != EventKind.CREATE:
                continue

            try:
                self.handler(self.config, self.temp_dir, event.path, worker=index)
            except Exception as e:
                logger.error(f"Error handling {event.path}: {e}")

        logger.info(f"Worker {index} shutting down")
