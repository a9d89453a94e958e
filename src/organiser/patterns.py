"""Extract screenshot timestamps from filenames."""

from datetime import datetime, timezone
from typing import Optional, Pattern, Sequence


TIMESTAMP_GROUPS = ("year", "month", "day", "hour", "minute", "second")


def _parse_groups(match) -> Optional[datetime]:
    """Build a local datetime from the named groups of a match, or None."""
    values = []
    for name in TIMESTAMP_GROUPS:
        try:
            raw = match.group(name)
        except IndexError:
            return None
        if raw is None:
            return None
        try:
            values.append(int(raw))
        except ValueError:
            return None

    try:
        return datetime(*values)
    except ValueError:
        return None


def match_timestamp(filename: str, patterns: Sequence[Pattern]) -> Optional[datetime]:
    """
    Match a bare filename against an ordered list of patterns.

    The first pattern that matches and whose year, month, day, hour, minute
    and second groups all parse wins. The captured values are local wall
    clock time and are returned converted to UTC.

    Args:
        filename: File name without any directory component
        patterns: Compiled regular expressions with named groups

    Returns:
        Timezone-aware UTC datetime, or None if no pattern matched
    """
    for pattern in patterns:
        match = pattern.search(filename)
        if match is None:
            continue

        local = _parse_groups(match)
        if local is None:
            continue

        # naive datetimes are treated as local time by astimezone
        return local.astimezone(timezone.utc)

    return None
