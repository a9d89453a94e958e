"""Main organiser process orchestrator."""

import logging
import queue
import shutil
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from .config import Config
from .exceptions import OrganiserAlreadyRunningError, WatchSetupError
from .fs_watcher import DirectoryWatcher
from .models import DebouncedEvent
from .pipeline import handle
from .relay import DebounceRelay
from .shutdown import CancellationToken
from .workers import WorkerPool


logger = logging.getLogger(__name__)


class OrganiserProcess:
    """
    Coordinates the startup scan, the watcher, the relay and the workers.

    Files already in the screenshots directory are handled once before
    live events are dispatched. Events that arrive during the scan are
    buffered by the relay and handled afterwards.
    """

    def __init__(
        self,
        config: Config,
        token: Optional[CancellationToken] = None,
        workers: Optional[int] = None,
        tick_ms: int = 50,
    ):
        """
        Initialize the organiser process.

        Args:
            config: Parsed config
            token: Cancellation token, created if not given
            workers: Number of workers, defaults to the CPU count
            tick_ms: Relay tick interval in milliseconds

        Raises:
            WatchSetupError: If the screenshots directory does not exist
        """
        self.config = config
        self.token = token or CancellationToken()

        try:
            self.screenshots_dir = config.options.screenshots_dir.resolve(strict=True)
        except OSError as e:
            raise WatchSetupError(
                f"cannot resolve {config.options.screenshots_dir}: {e}"
            ) from e
        if not self.screenshots_dir.is_dir():
            raise WatchSetupError(f"not a directory: {self.screenshots_dir}")

        self._events: "queue.Queue[DebouncedEvent]" = queue.Queue()
        self._relay = DebounceRelay(
            config.options.event_delay,
            self._events,
            self.token,
            tick_ms=tick_ms,
        )
        self._watcher = DirectoryWatcher(self.screenshots_dir, self._relay.push)
        self._workers = workers

        self.temp_dir: Optional[Path] = None
        self._pool: Optional[WorkerPool] = None
        self._running = False
        self._lock = threading.Lock()

    def start_async(self) -> None:
        """
        Scan existing files, then start the relay and workers in the background.

        Raises:
            OrganiserAlreadyRunningError: If already running
            WatchSetupError: If the directory cannot be watched or scanned,
                or the scratch directory cannot be created
        """
        with self._lock:
            if self._running:
                raise OrganiserAlreadyRunningError("Organiser is already running")
            self._running = True

        try:
            try:
                self.temp_dir = Path(tempfile.mkdtemp(prefix="fso-"))
            except OSError as e:
                raise WatchSetupError(f"Cannot create scratch directory: {e}") from e
            logger.info(f"Storing temporary files in `{self.temp_dir}`")

            # attach before scanning so files created during the scan are not missed
            self._watcher.start()
            logger.info(f"Screenshots are located at `{self.screenshots_dir}`")

            self.bootstrap()

            self._relay.start()
            self._pool = WorkerPool(
                self.config,
                self.temp_dir,
                self._events,
                self.token,
                size=self._workers,
            )
            self._pool.start()
        except Exception:
            self._shutdown()
            raise

    def bootstrap(self) -> int:
        """
        Handle every file already in the screenshots directory.

        Files are handled in parallel and the call returns once all of
        them are done. Failures are logged per file.

        Returns:
            Number of existing files found

        Raises:
            WatchSetupError: If the directory cannot be listed
        """
        logger.info("Collecting existing files")
        try:
            existing: List[Path] = [p for p in self.screenshots_dir.iterdir() if p.is_file()]
        except OSError as e:
            raise WatchSetupError(f"Cannot list {self.screenshots_dir}: {e}") from e
        logger.info(f"Processing {len(existing)} existing file(s)")

        if not existing:
            return 0

        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            futures = {
                executor.submit(handle, self.config, self.temp_dir, path): path
                for path in existing
            }
            for future, path in futures.items():
                try:
                    future.result()
                except Exception as e:
                    logger.error(f"Error handling {path}: {e}")

        logger.info("Done processing existing files")
        return len(existing)

    def run(self) -> None:
        """
        Start the organiser and block until the token is cancelled.

        Shuts down cleanly before returning.
        """
        self.start_async()
        try:
            while not self.token.wait(timeout=0.5):
                pass
        finally:
            self.stop()

    def stop(self) -> None:
        """
        Stop the organiser gracefully.

        Cancels the token and waits for the relay and every worker to
        exit. In-flight files are finished, not interrupted.
        """
        self.token.cancel()
        self._shutdown()

    def _shutdown(self) -> None:
        """Internal shutdown procedure."""
        with self._lock:
            if not self._running:
                return
            self._running = False

        self.token.cancel()
        self._watcher.stop()
        self._relay.join()

        if self._pool is not None:
            self._pool.join()
            self._pool = None

        if self.temp_dir is not None:
            shutil.rmtree(self.temp_dir, ignore_errors=True)
            self.temp_dir = None

        logger.info("Exiting")

    @property
    def is_running(self) -> bool:
        """Check if the organiser is running."""
        return self._running

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
