"""Configuration for the screenshot organiser."""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Pattern, Tuple, Union

from .exceptions import ConfigError
from .jobs import Bmp, ConvertJob, FileType, Gif, Ico, Job, Jpg, MoveJob, Png, WebP


DEFAULT_CONFIG_PATH = Path("config.json")


@dataclass(frozen=True)
class Options:
    """
    Global options shared by every worker.

    Attributes:
        screenshots_dir: Directory being watched, also the root for move jobs
        patterns: Filename patterns with named timestamp groups, first match wins
        event_delay: Debounce window in milliseconds
    """
    screenshots_dir: Path
    patterns: Tuple[Pattern, ...] = ()
    event_delay: int = 2000


@dataclass(frozen=True)
class Config:
    """Parsed config file. Built once at startup and never mutated."""
    options: Options
    pipeline: Tuple[Job, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """
        Build a config from the decoded JSON document.

        Raises:
            ConfigError: If any part of the document is invalid
        """
        if not isinstance(data, dict):
            raise ConfigError("config must be a JSON object")

        options = _parse_options(_require(data, "options", dict, "config"))
        pipeline = _require(data, "pipeline", list, "config")
        jobs = tuple(_parse_job(entry, i) for i, entry in enumerate(pipeline))
        return cls(options=options, pipeline=jobs)


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> Config:
    """
    Read and validate a JSON config file.

    Args:
        path: Path to the config file

    Returns:
        The parsed config

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in {path}: {e}") from e

    return Config.from_dict(data)


def _require(data: Dict[str, Any], key: str, kind, where: str):
    if key not in data:
        raise ConfigError(f"{where}: missing `{key}`")
    value = data[key]
    # bool is an int subclass and never a valid number here
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"{where}: `{key}` has the wrong type")
    return value


def _parse_options(data: Dict[str, Any]) -> Options:
    screenshots_dir = Path(_require(data, "screenshots_dir", str, "options"))

    patterns = []
    for raw in _require(data, "match", list, "options"):
        if not isinstance(raw, str):
            raise ConfigError("options: `match` entries must be strings")
        try:
            patterns.append(re.compile(raw))
        except re.error as e:
            raise ConfigError(f"options: invalid pattern {raw!r}: {e}") from e

    event_delay = _require(data, "event_delay", int, "options")
    if event_delay < 0:
        raise ConfigError("options: `event_delay` must not be negative")

    return Options(
        screenshots_dir=screenshots_dir,
        patterns=tuple(patterns),
        event_delay=event_delay,
    )


def _parse_file_type(data: Dict[str, Any], where: str) -> FileType:
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: `to` must be an object")

    fmt = _require(data, "format", str, where)
    if fmt == "png":
        return Png()
    if fmt == "gif":
        return Gif()
    if fmt == "bmp":
        return Bmp()
    if fmt == "ico":
        return Ico()
    if fmt == "jpg":
        quality = _require(data, "quality", int, where)
        if not 0 <= quality <= 100:
            raise ConfigError(f"{where}: jpg quality must be between 0 and 100")
        return Jpg(quality=quality)
    if fmt == "webp":
        quality = _require(data, "quality", int, where)
        if not -128 <= quality <= 127:
            raise ConfigError(f"{where}: webp quality must be between -128 and 127")
        return WebP(quality=quality)

    raise ConfigError(f"{where}: unknown format `{fmt}`")


def _parse_job(data: Dict[str, Any], index: int) -> Job:
    where = f"pipeline[{index}]"
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: job must be an object")

    kind = _require(data, "job", str, where)
    options = _require(data, "options", dict, where)

    if kind == "convert":
        keep_original = options.get("keep_original", False)
        if not isinstance(keep_original, bool):
            raise ConfigError(f"{where}: `keep_original` must be a boolean")
        return ConvertJob(
            to=_parse_file_type(options.get("to"), where),
            keep_original=keep_original,
        )

    if kind == "move":
        local = options.get("local")
        if local is not None and not isinstance(local, bool):
            raise ConfigError(f"{where}: `local` must be a boolean")
        return MoveJob(to=_require(options, "to", str, where), local=local)

    raise ConfigError(f"{where}: unknown job `{kind}`")
