"""Tests for filename pattern matching."""

import re
from datetime import datetime, timezone

import pytest

from src.organiser.patterns import match_timestamp


FFXIV = re.compile(
    r"ffxiv_(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})_"
    r"(?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})_\d+\.png"
)
DASHED = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2}) "
    r"(?P<hour>\d{2})-(?P<minute>\d{2})-(?P<second>\d{2})"
)


def local_to_utc(*parts):
    return datetime(*parts).astimezone(timezone.utc)


class TestMatchTimestamp:
    """Tests for match_timestamp."""

    def test_matches_ffxiv_name(self):
        result = match_timestamp("ffxiv_20230615_143000_0001.png", [FFXIV])
        assert result == local_to_utc(2023, 6, 15, 14, 30, 0)

    def test_result_is_utc(self):
        result = match_timestamp("ffxiv_20230615_143000_0001.png", [FFXIV])
        assert result.tzinfo == timezone.utc

    def test_no_match_returns_none(self):
        assert match_timestamp("holiday.png", [FFXIV, DASHED]) is None

    def test_empty_pattern_list(self):
        assert match_timestamp("ffxiv_20230615_143000_0001.png", []) is None

    def test_first_matching_pattern_wins(self):
        # both patterns match, but read the digits differently
        swapped = re.compile(
            r"ffxiv_(?P<year>\d{4})(?P<day>\d{2})(?P<month>\d{2})_"
            r"(?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})"
        )
        name = "ffxiv_20230506_143000_0001.png"

        assert match_timestamp(name, [FFXIV, swapped]) == local_to_utc(2023, 5, 6, 14, 30, 0)
        assert match_timestamp(name, [swapped, FFXIV]) == local_to_utc(2023, 6, 5, 14, 30, 0)

    def test_later_pattern_used_when_earlier_does_not_match(self):
        result = match_timestamp("2021-01-02 03-04-05.png", [FFXIV, DASHED])
        assert result == local_to_utc(2021, 1, 2, 3, 4, 5)

    def test_missing_group_falls_through(self):
        no_seconds = re.compile(
            r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2}) "
            r"(?P<hour>\d{2})-(?P<minute>\d{2})"
        )
        result = match_timestamp("2021-01-02 03-04-05.png", [no_seconds, DASHED])
        assert result == local_to_utc(2021, 1, 2, 3, 4, 5)

    def test_unparsable_group_falls_through(self):
        loose = re.compile(
            r"(?P<year>\w{4})-(?P<month>\d{2})-(?P<day>\d{2}) "
            r"(?P<hour>\d{2})-(?P<minute>\d{2})-(?P<second>\d{2})"
        )
        strict = re.compile(
            r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2}) "
            r"(?P<hour>\d{2})-(?P<minute>\d{2})-(?P<second>\d{2})$"
        )
        name = "abcd-01-02 03-04-05 then 2021-01-02 03-04-05"

        assert match_timestamp(name, [loose]) is None
        assert match_timestamp(name, [loose, strict]) == local_to_utc(2021, 1, 2, 3, 4, 5)

    def test_optional_group_not_participating(self):
        optional = re.compile(
            r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
            r"(?: (?P<hour>\d{2})-(?P<minute>\d{2})-(?P<second>\d{2}))?"
        )
        assert match_timestamp("2021-01-02.png", [optional]) is None

    def test_impossible_date_is_not_a_match(self):
        assert match_timestamp("ffxiv_20231345_143000_0001.png", [FFXIV]) is None

    @pytest.mark.parametrize("name", [
        "ffxiv_20230615_143000_0001.jpg",
        "ffxiv_2023615_143000_0001.png",
    ])
    def test_near_misses(self, name):
        assert match_timestamp(name, [FFXIV]) is None
