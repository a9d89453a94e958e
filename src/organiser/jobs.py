"""Pipeline jobs: format conversion and timestamp-based relocation."""

import logging
import shutil
from dataclasses import dataclass
from datetime import timezone
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

from PIL import Image, UnidentifiedImageError

from .exceptions import (
    DecodeError,
    EncodeError,
    FilesystemError,
    MissingExtensionError,
)
from .models import ProcessingState

if TYPE_CHECKING:
    from .config import Config


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Png:
    extension = "png"
    pil_format = "PNG"


@dataclass(frozen=True)
class Jpg:
    quality: int
    extension = "jpg"
    pil_format = "JPEG"


@dataclass(frozen=True)
class Gif:
    extension = "gif"
    pil_format = "GIF"


@dataclass(frozen=True)
class Bmp:
    extension = "bmp"
    pil_format = "BMP"


@dataclass(frozen=True)
class Ico:
    extension = "ico"
    pil_format = "ICO"


@dataclass(frozen=True)
class WebP:
    """WebP output. A negative quality selects lossless encoding."""
    quality: int
    extension = "webp"
    pil_format = "WEBP"


FileType = Union[Png, Jpg, Gif, Bmp, Ico, WebP]


@dataclass(frozen=True)
class ConvertJob:
    """
    Re-encode every current file into the scratch directory.

    Attributes:
        to: Target file type
        keep_original: Keep the source file and track it alongside the output
    """
    to: FileType
    keep_original: bool = False


@dataclass(frozen=True)
class MoveJob:
    """
    Move every current file to a path rendered from the screenshot time.

    Attributes:
        to: strftime-style template, relative to the screenshots directory
        local: Render in local time (the default) or UTC when False
    """
    to: str
    local: Optional[bool] = None


Job = Union[ConvertJob, MoveJob]


def _open_image(path: Path) -> Image.Image:
    try:
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"cannot decode {path}: {e}") from e


def _storable(img: Image.Image, to: FileType) -> Image.Image:
    """Convert modes the target format cannot store."""
    if isinstance(to, Jpg) and img.mode not in ("RGB", "L", "CMYK"):
        return img.convert("RGB")
    if isinstance(to, Bmp) and img.mode not in ("1", "L", "P", "RGB", "RGBA"):
        return img.convert("RGBA")
    return img


def _encode(img: Image.Image, dest: Path, to: FileType) -> None:
    """Write an image in the target format."""
    try:
        if isinstance(to, WebP):
            rgba = img.convert("RGBA")
            if to.quality < 0:
                rgba.save(dest, to.pil_format, lossless=True)
            else:
                rgba.save(dest, to.pil_format, quality=min(100, to.quality))
        elif isinstance(to, Jpg):
            _storable(img, to).save(dest, to.pil_format, quality=to.quality)
        elif isinstance(to, (Png, Gif, Bmp, Ico)):
            _storable(img, to).save(dest, to.pil_format)
        else:
            raise TypeError(f"unknown file type: {to!r}")
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"cannot encode {dest} as {to.extension}: {e}") from e


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except OSError as e:
        raise FilesystemError(f"cannot remove {path}: {e}") from e


def convert(job: ConvertJob, state: ProcessingState) -> None:
    """
    Run a convert job over every path in the state.

    Each output replaces its source entry in ``state.file_paths``. Kept
    originals are appended after the loop so later jobs see both files.
    """
    kept: List[Path] = []

    for i, source in enumerate(state.file_paths):
        img = _open_image(source)

        dest = (state.temp_dir / source.name).with_suffix(f".{job.to.extension}")
        _encode(img, dest, job.to)
        logger.debug(f"Converted {source} -> {dest}")

        state.file_paths[i] = dest

        if job.keep_original:
            kept.append(source)
        elif dest != source:
            _remove(source)

    state.file_paths.extend(kept)


def render_destination(job: MoveJob, config: "Config", state: ProcessingState, source: Path) -> Path:
    """
    Compute where a move job puts a file.

    Raises:
        MissingExtensionError: If the source has no extension
    """
    extension = source.suffix
    if not extension:
        raise MissingExtensionError(f"missing extension on {source}")

    if job.local is False:
        when = state.datetime.astimezone(timezone.utc)
    else:
        when = state.datetime.astimezone()

    name = f"{when.strftime(job.to)}{extension}"
    return config.options.screenshots_dir / name


def move(job: MoveJob, config: "Config", state: ProcessingState) -> None:
    """Run a move job over every path in the state, removing each source."""
    for i, source in enumerate(state.file_paths):
        dest = render_destination(job, config, state, source)

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(dest))
        except OSError as e:
            raise FilesystemError(f"cannot move {source} to {dest}: {e}") from e

        logger.debug(f"Moved {source} -> {dest}")
        state.file_paths[i] = dest


def execute_job(job: Job, config: "Config", state: ProcessingState) -> None:
    """Dispatch one job against the processing state."""
    if isinstance(job, ConvertJob):
        convert(job, state)
    elif isinstance(job, MoveJob):
        move(job, config, state)
    else:
        raise TypeError(f"unknown job: {job!r}")
