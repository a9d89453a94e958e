"""Data models for the screenshot organiser package."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional
import time


class EventKind(Enum):
    """Kinds of debounced file system events."""
    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"


@dataclass
class RawFSEvent:
    """
    Raw notification from the filesystem watcher before debouncing.

    Attributes:
        kind: Event kind as reported by the watcher
        path: Path the event refers to (destination path for renames)
        old_path: Source path for rename events
        timestamp: Unix timestamp when the event was observed
    """
    kind: EventKind
    path: Path
    old_path: Optional[Path] = None
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class DebouncedEvent:
    """
    A coalesced event forwarded from the relay to the worker pool.

    Attributes:
        kind: The kind of change
        path: Absolute path of the affected file
    """
    kind: EventKind
    path: Path


@dataclass
class ProcessingState:
    """
    Mutable state threaded through the jobs of one pipeline run.

    Owned by the worker handling the file and discarded once the
    pipeline finishes or fails.

    Attributes:
        file_paths: Current on-disk locations of the file being processed
        datetime: Timestamp extracted from the original filename, in UTC
        temp_dir: Scratch directory for intermediate conversion outputs
    """
    file_paths: List[Path]
    datetime: datetime
    temp_dir: Path

    @classmethod
    def new(cls, file_path: Path, timestamp: datetime, temp_dir: Path) -> "ProcessingState":
        """Create the state for a freshly matched file."""
        return cls(file_paths=[file_path], datetime=timestamp, temp_dir=temp_dir)
