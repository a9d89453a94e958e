"""File system watcher using watchdog library."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .exceptions import WatchSetupError
from .models import EventKind, RawFSEvent


logger = logging.getLogger(__name__)


class FSEventHandler(FileSystemEventHandler):
    """Handler that converts watchdog file events to RawFSEvent."""

    def __init__(self, callback: Callable[[RawFSEvent], None]):
        super().__init__()
        self.callback = callback

    def _emit(self, kind: EventKind, path: str, old_path: Optional[str] = None):
        """Emit a RawFSEvent to the callback."""
        raw_event = RawFSEvent(
            kind=kind,
            path=Path(path),
            old_path=Path(old_path) if old_path else None,
            timestamp=time.time(),
        )
        self.callback(raw_event)

    def on_created(self, event):
        if not event.is_directory:
            self._emit(EventKind.CREATE, event.src_path)

    def on_deleted(self, event):
        if not event.is_directory:
            self._emit(EventKind.REMOVE, event.src_path)

    def on_modified(self, event):
        if not event.is_directory:
            self._emit(EventKind.WRITE, event.src_path)

    def on_moved(self, event):
        if not event.is_directory:
            self._emit(EventKind.RENAME, event.dest_path, event.src_path)


class DirectoryWatcher:
    """
    Watches a single directory, non-recursively.

    Raw events are handed to ``event_callback`` on watchdog's observer
    thread.
    """

    def __init__(self, root: Path, event_callback: Callable[[RawFSEvent], None]):
        """
        Initialize the watcher.

        Args:
            root: Directory to watch
            event_callback: Callback function for raw filesystem events
        """
        self.root = root
        self.event_callback = event_callback
        self._observer: Optional[Observer] = None
        self._lock = threading.Lock()

    def start(self) -> bool:
        """
        Start watching the directory.

        Returns:
            True if watching started, False if already watching

        Raises:
            WatchSetupError: If the directory cannot be watched
        """
        with self._lock:
            if self._observer is not None:
                return False

            observer = Observer()
            try:
                observer.schedule(
                    FSEventHandler(self.event_callback),
                    str(self.root),
                    recursive=False,
                )
                observer.start()
            except OSError as e:
                raise WatchSetupError(f"cannot watch {self.root}: {e}") from e

            self._observer = observer
            logger.debug(f"Watching {self.root}")
            return True

    def stop(self) -> bool:
        """
        Stop watching.

        Returns:
            True if watching stopped, False if not watching
        """
        with self._lock:
            if self._observer is None:
                return False

            observer = self._observer
            self._observer = None

            observer.stop()
            observer.join(timeout=5.0)
            return True

    @property
    def is_watching(self) -> bool:
        with self._lock:
            return self._observer is not None
