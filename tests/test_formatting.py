"""Tests for unitdeck/commands/panel/formatting.py - text rendering helpers."""

from __future__ import annotations

import pytest
from unitdeck.commands.panel.formatting import (
    build_details_lines,
    clip_cell,
    format_log_line,
    format_match_info,
    format_unit_row,
    marker_text,
    record_height,
    search_spans,
    severity_option_label,
    split_highlights,
    wrap_text,
    wrap_with_offsets,
)
from unitdeck.commands.panel.logview import MarkerKind
from unitdeck.models import LogRecord, Unit, UnitProperties
from unitdeck.utils import format_log_timestamp


class TestClipCell:
    """Tests for clip_cell function."""

    def test_pads_short_values(self):
        assert clip_cell("abc", 5) == "abc  "

    def test_ellipsis(self):
        assert clip_cell("abcdefgh", 6) == "abc..."

    def test_tiny_width_truncates(self):
        assert clip_cell("abcdefgh", 3) == "abc"

    def test_zero_width(self):
        assert clip_cell("abc", 0) == ""


class TestWrapText:
    """Tests for wrap_text function."""

    def test_hard_wrap(self):
        assert wrap_text("abcdef", 4) == ["abcd", "ef"]

    def test_embedded_newlines(self):
        assert wrap_text("a\n\nb", 10) == ["a", "", "b"]

    def test_empty_is_one_line(self):
        assert wrap_text("", 10) == [""]

    def test_nonpositive_width(self):
        assert wrap_text("abc", 0) == ["abc"]

    def test_offsets_track_newlines(self):
        assert wrap_with_offsets("abcde\nfg", 3) == [(0, "abc"), (3, "de"), (6, "fg")]


class TestSearchHighlights:
    """Tests for search_spans and split_highlights."""

    def test_spans_skip_the_prefix(self):
        ts = 1_700_000_000_000_000
        record = LogRecord(message="nginx: Nginx up", timestamp=ts, identifier="nginx")
        base = len(format_log_line(record)) - len(record.message)
        assert search_spans(record, "NGINX") == [(base, base + 5), (base + 7, base + 12)]

    def test_no_query_no_spans(self):
        assert search_spans(LogRecord(message="x"), "") == []

    def test_split_single_line(self):
        assert split_highlights(0, "a needle b", [(2, 8)]) == [
            ("a ", False),
            ("needle", True),
            (" b", False),
        ]

    def test_span_across_wrapped_lines(self):
        """A match cut by wrapping is highlighted on both lines."""
        spans = [(4, 10)]
        assert split_highlights(0, "abcdneed", spans) == [("abcd", False), ("need", True)]
        assert split_highlights(8, "le-x", spans) == [("le", True), ("-x", False)]

    def test_empty_line(self):
        assert split_highlights(5, "", [(0, 9)]) == []


class TestLogLines:
    """Tests for log record rendering."""

    def test_raw_record_is_bare_message(self):
        assert format_log_line(LogRecord(message="plain")) == "plain"

    def test_structured_record(self):
        ts = 1_700_000_000_000_000
        record = LogRecord(message="started", timestamp=ts, identifier="nginx", pid="12")
        assert format_log_line(record) == f"{format_log_timestamp(ts)} nginx[12]: started"

    def test_identifier_without_pid(self):
        record = LogRecord(message="oops", identifier="kernel")
        assert format_log_line(record) == "kernel: oops"

    def test_record_height_counts_wrapped_lines(self):
        assert record_height(LogRecord(message="0123456789"), 4) == 3
        assert record_height(LogRecord(message="line1\nline2"), 80) == 2

    def test_marker_text(self):
        boot = LogRecord(message="m", boot_id="0123456789abcdef")
        assert marker_text(MarkerKind.BOOT, boot) == "-- Reboot (boot 0123456789ab) --"
        assert marker_text(MarkerKind.INVOCATION, LogRecord(message="m")) == "-- Restarted --"

    def test_severity_labels(self):
        assert severity_option_label(None) == "All"
        assert severity_option_label(3) == "3 err"


class TestUnitRow:
    """Tests for format_unit_row function."""

    def test_plain_row(self):
        row = format_unit_row(Unit(name="nginx.service", sub="running"), 30)
        assert row == "running  nginx.service".ljust(30)

    def test_detail_suffix(self):
        unit = Unit(name="logrotate.timer", sub="waiting", detail="next: 3h 12m")
        assert format_unit_row(unit, 60).rstrip() == "waiting  logrotate.timer  (next: 3h 12m)"

    def test_clipped(self):
        row = format_unit_row(Unit(name="a-very-long-unit-name.service", sub="running"), 16)
        assert row == "running  a-ve..."


class TestDetailsLines:
    """Tests for build_details_lines function."""

    def test_sections_omit_empty_facts(self):
        unit = Unit(name="nginx.service", sub="running")
        props = UnitProperties(
            description="web",
            main_pid=42,
            memory_current=1536,
            requires=["a.service", "b.socket"],
        )
        assert build_details_lines(unit, props) == [
            "nginx.service",
            "  Description  web",
            "",
            "Process",
            "  Main PID  42",
            "  Memory    1.5 KB",
            "",
            "Dependencies",
            "  Requires  a.service b.socket",
        ]

    def test_zero_value_falls_back_to_unit_description(self):
        unit = Unit(name="x.service", sub="dead", description="From listing")
        assert build_details_lines(unit, UnitProperties()) == [
            "x.service",
            "  Description  From listing",
        ]

    def test_nothing_known(self):
        assert build_details_lines(Unit(name="x.service", sub="dead"), UnitProperties()) == []


class TestMatchInfo:
    """Tests for format_match_info function."""

    @pytest.mark.parametrize(
        ("query", "pos", "count", "expected"),
        [
            ("", None, 0, ""),
            ("x", None, 0, " (no matches)"),
            ("x", 1, 5, " (2/5)"),
            ("x", None, 3, " (0/3)"),
        ],
    )
    def test_info(self, query: str, pos: int | None, count: int, expected: str):
        assert format_match_info(query, pos, count) == expected
