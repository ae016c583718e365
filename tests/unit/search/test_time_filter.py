"""
Unit tests for memo/search/time_filter.py
"""

from datetime import datetime, timezone

import pytest

from memo.errors import ConfigError
from memo.memory.base import TimeRange
from memo.search.time_filter import build_time_range, parse_datetime

JAN_15_MIDNIGHT = 1736899200000  # 2025-01-15 00:00 UTC


class TestParseDatetime:
    """Tests for parse_datetime."""

    def test_date_only_is_midnight_utc(self):
        assert parse_datetime("2025-01-15") == JAN_15_MIDNIGHT

    def test_date_and_time(self):
        assert parse_datetime("2025-01-15 13:30") == JAN_15_MIDNIGHT + (13 * 60 + 30) * 60 * 1000

    def test_surrounding_whitespace(self):
        assert parse_datetime(" 2025-01-15 ") == JAN_15_MIDNIGHT

    @pytest.mark.parametrize("value", ["15/01/2025", "2025-13-01", "yesterday", "", "2025-01-15T13:30"])
    def test_malformed(self, value):
        with pytest.raises(ConfigError):
            parse_datetime(value)


class TestBuildTimeRange:
    """Tests for build_time_range."""

    def test_absent_when_no_bounds(self):
        assert build_time_range() is None
        assert build_time_range(None, None) is None

    def test_after_only(self):
        assert build_time_range(after="2025-01-15") == TimeRange(after=JAN_15_MIDNIGHT, before=None)

    def test_before_only(self):
        assert build_time_range(before="2025-01-15") == TimeRange(after=None, before=JAN_15_MIDNIGHT)

    def test_accepts_millis_and_datetimes(self):
        dt = datetime(2025, 1, 15, tzinfo=timezone.utc)
        time_range = build_time_range(after=JAN_15_MIDNIGHT, before=dt)
        assert time_range == TimeRange(after=JAN_15_MIDNIGHT, before=JAN_15_MIDNIGHT)

    def test_after_later_than_before(self):
        with pytest.raises(ConfigError):
            build_time_range(after="2025-02-01", before="2025-01-01")

    def test_malformed_bound(self):
        with pytest.raises(ConfigError):
            build_time_range(after="not a date")

    def test_rejects_other_types(self):
        with pytest.raises(ConfigError):
            build_time_range(after=1.5)


class TestTimeRangeContains:
    """Tests for inclusive bounds."""

    def test_bounds_are_inclusive(self):
        time_range = TimeRange(after=100, before=200)
        assert time_range.contains(100)
        assert time_range.contains(200)
        assert not time_range.contains(99)
        assert not time_range.contains(201)

    def test_open_ended(self):
        assert TimeRange(after=100).contains(10**15)
        assert TimeRange(before=100).contains(0)
