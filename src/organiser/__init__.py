"""
Screenshot Organiser Package

Watches a screenshots directory for new files whose names carry a
timestamp and runs each one through a configured pipeline of jobs.

Features:
- Filename timestamp extraction via ordered regex patterns
- Convert jobs (png, jpg, gif, bmp, ico, webp) through Pillow
- Move jobs rendering destination paths from the screenshot time
- Debounced, non-recursive directory watching
- Worker pool with cooperative, signal-driven shutdown
- One-off handling of files already present at startup
"""

from .models import (
    EventKind,
    RawFSEvent,
    DebouncedEvent,
    ProcessingState,
)

from .config import Config, Options, load_config

from .exceptions import (
    OrganiserError,
    ConfigError,
    WatchSetupError,
    OrganiserAlreadyRunningError,
    JobError,
    DecodeError,
    EncodeError,
    MissingExtensionError,
    FilesystemError,
)

from .jobs import (
    Png,
    Jpg,
    Gif,
    Bmp,
    Ico,
    WebP,
    ConvertJob,
    MoveJob,
)
from .patterns import match_timestamp
from .pipeline import run_pipeline, handle
from .relay import DebounceRelay
from .fs_watcher import DirectoryWatcher, FSEventHandler
from .shutdown import CancellationToken, ShutdownCoordinator
from .workers import WorkerPool
from .process import OrganiserProcess


__all__ = [
    # Models
    "EventKind",
    "RawFSEvent",
    "DebouncedEvent",
    "ProcessingState",
    # Config
    "Config",
    "Options",
    "load_config",
    # Exceptions
    "OrganiserError",
    "ConfigError",
    "WatchSetupError",
    "OrganiserAlreadyRunningError",
    "JobError",
    "DecodeError",
    "EncodeError",
    "MissingExtensionError",
    "FilesystemError",
    # Jobs
    "Png",
    "Jpg",
    "Gif",
    "Bmp",
    "Ico",
    "WebP",
    "ConvertJob",
    "MoveJob",
    # Components
    "match_timestamp",
    "run_pipeline",
    "handle",
    "DebounceRelay",
    "DirectoryWatcher",
    "FSEventHandler",
    "CancellationToken",
    "ShutdownCoordinator",
    "WorkerPool",
    # Main Process
    "OrganiserProcess",
]

__version__ = "0.1.0"
