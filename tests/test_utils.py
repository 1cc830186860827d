"""Tests for unitdeck/utils.py - pure utility functions."""

from __future__ import annotations

import datetime as dt

import pytest
from unitdeck.utils import (
    format_bytes,
    format_cpu_time,
    format_log_timestamp,
    format_relative_time,
    parse_kv_lines,
    priority_label,
)

NOW_US = 1_700_000_000_000_000


class TestParseKvLines:
    """Tests for parse_kv_lines function."""

    def test_simple(self):
        assert parse_kv_lines("A=1\nB=two") == {"A": "1", "B": "two"}

    def test_value_keeps_equals(self):
        """Only the first '=' splits the line."""
        result = parse_kv_lines("ExecStart={ path=/usr/bin/nginx ; argv[]=nginx -g }")
        assert result["ExecStart"] == "{ path=/usr/bin/nginx ; argv[]=nginx -g }"

    def test_lines_without_equals_ignored(self):
        assert parse_kv_lines("garbage\nKey=v\n\n") == {"Key": "v"}

    def test_empty_value(self):
        assert parse_kv_lines("Wants=") == {"Wants": ""}


class TestFormatRelativeTime:
    """Tests for format_relative_time function."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (2 * 86400 + 3 * 3600 + 59, "2d 3h"),
            (4 * 3600 + 10 * 60 + 5, "4h 10m"),
            (5 * 60 + 2, "5m 2s"),
            (9, "9s"),
        ],
    )
    def test_two_most_significant_units(self, seconds: int, expected: str):
        target = NOW_US + seconds * 1_000_000
        assert format_relative_time(target, now_us=NOW_US) == expected

    def test_past_is_elapsed(self):
        assert format_relative_time(NOW_US - 1, now_us=NOW_US) == "elapsed"
        assert format_relative_time(NOW_US, now_us=NOW_US) == "elapsed"


class TestFormatBytes:
    """Tests for format_bytes function."""

    @pytest.mark.parametrize(
        ("num", "expected"),
        [
            (0, "0 B"),
            (500, "500 B"),
            (1536, "1.5 KB"),
            (3 * 1024 * 1024, "3.0 MB"),
            (2 * 1024**3, "2.0 GB"),
        ],
    )
    def test_units(self, num: int, expected: str):
        assert format_bytes(num) == expected


class TestFormatCpuTime:
    """Tests for format_cpu_time function."""

    def test_seconds(self):
        assert format_cpu_time(1_500_000_000) == "1.500s"

    def test_minutes(self):
        assert format_cpu_time(90_000_000_000) == "1.5min"


class TestFormatLogTimestamp:
    """Tests for format_log_timestamp function."""

    def test_local_syslog_style(self):
        expected = dt.datetime.fromtimestamp(1_700_000_000).strftime("%b %d %H:%M:%S")
        assert format_log_timestamp(1_700_000_000_123_456) == expected

    def test_out_of_range_is_empty(self):
        assert format_log_timestamp(10**30) == ""


class TestPriorityLabel:
    """Tests for priority_label function."""

    def test_known(self):
        assert priority_label(0) == "emerg"
        assert priority_label(3) == "err"
        assert priority_label(7) == "debug"

    def test_unknown(self):
        assert priority_label(8) == "unknown"
        assert priority_label(-1) == "unknown"
