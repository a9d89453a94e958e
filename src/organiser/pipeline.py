"""Pipeline execution and the per-file intake handler."""

import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import Config
from .exceptions import FilesystemError
from .jobs import Job, execute_job
from .models import ProcessingState
from .patterns import match_timestamp


logger = logging.getLogger(__name__)


def run_pipeline(pipeline: Sequence[Job], config: Config, state: ProcessingState) -> None:
    """
    Run every job in order against the processing state.

    Stops at the first failing job and re-raises its error. Jobs that
    already ran are not rolled back, so a failed file may be left
    partially processed.

    Args:
        pipeline: Ordered jobs to run
        config: Shared config
        state: Mutable per-file state
    """
    for job in pipeline:
        execute_job(job, config, state)


def handle(config: Config, temp_dir: Path, path: Path, worker: Optional[int] = None) -> None:
    """
    Decide whether a path is a new screenshot and, if so, process it.

    Safe to call more than once for the same path: a path that has already
    been moved away or deleted is skipped without error.

    Args:
        config: Shared config
        temp_dir: Scratch directory for conversion output
        path: Path reported by the watcher or the startup scan
        worker: Index of the calling worker, None for the startup scan

    Raises:
        FilesystemError: If the screenshots directory cannot be resolved
        JobError: If a pipeline job fails
    """
    try:
        screenshots_dir = config.options.screenshots_dir.resolve(strict=True)
    except OSError as e:
        raise FilesystemError(
            f"cannot resolve {config.options.screenshots_dir}: {e}"
        ) from e

    # usually a duplicate event for a file that was already handled
    if not path.exists():
        return

    # resolve the parent only, the file itself may be a symlink
    path = path.parent.resolve() / path.name
    try:
        relative = path.relative_to(screenshots_dir)
    except ValueError:
        return

    # only direct children of the watched directory
    if len(relative.parts) != 1:
        return

    file_name = path.name
    if not file_name:
        return

    timestamp = match_timestamp(file_name, config.options.patterns)
    if timestamp is None:
        return

    if worker is None:
        logger.info(f"Handling `{file_name}`")
    else:
        logger.info(f"Handling `{file_name}` on worker {worker}")

    state = ProcessingState.new(path, timestamp, temp_dir)
    run_pipeline(config.pipeline, config, state)
    logger.debug(f"Finished `{file_name}`: {[str(p) for p in state.file_paths]}")
