"""Tests for unitdeck/commands/list_units.py - the one-shot listing."""

from __future__ import annotations

import json

import pytest
from conftest import FakeUnitSource
from unitdeck.cli_types import ListArgs
from unitdeck.commands.list_units import cmd_list, render_unit_table
from unitdeck.exceptions import SourceError, UserError
from unitdeck.models import Scope, Unit, UnitType


def make_args(**overrides) -> ListArgs:
    """Helper to create ListArgs with defaults for testing."""
    values = {
        "unit_type": "service",
        "user": False,
        "search": None,
        "status": None,
        "file_state": None,
        "json": False,
    }
    values.update(overrides)
    return ListArgs(**values)


def printed_units(out: str) -> list[str]:
    return [line.split()[2] for line in out.splitlines()[1:]]


class TestRenderUnitTable:
    """Tests for render_unit_table function."""

    def test_aligned_columns(self, sample_units: list[Unit]):
        lines = render_unit_table(sample_units)
        assert lines[0] == "SUB      FILE      UNIT            DESCRIPTION"
        assert lines[1] == "running  enabled   nginx.service   A high performance web server"
        assert lines[2] == "dead     static    backup.service  Nightly backup"

    def test_detail_and_missing_file_state(self):
        unit = Unit(name="logrotate.timer", sub="waiting", detail="next: 3h 12m")
        lines = render_unit_table([unit])
        assert lines[1] == "waiting  -     logrotate.timer (next: 3h 12m)"

    def test_empty_has_header_only(self):
        assert render_unit_table([]) == ["SUB  FILE  UNIT  DESCRIPTION"]


class TestCmdList:
    """Tests for cmd_list function."""

    def test_lists_everything(self, unit_source: FakeUnitSource, capsys):
        cmd_list(make_args(), source=unit_source)
        out = capsys.readouterr().out
        assert printed_units(out) == ["nginx.service", "backup.service", "sshd.service"]
        assert unit_source.list_calls == [(UnitType.SERVICE, Scope.SYSTEM)]

    def test_status_filter(self, unit_source: FakeUnitSource, capsys):
        cmd_list(make_args(status="running"), source=unit_source)
        assert printed_units(capsys.readouterr().out) == ["nginx.service", "sshd.service"]

    def test_all_means_no_filter(self, unit_source: FakeUnitSource, capsys):
        cmd_list(make_args(status="All", file_state="All"), source=unit_source)
        assert len(printed_units(capsys.readouterr().out)) == 3

    def test_search_and_file_state(self, unit_source: FakeUnitSource, capsys):
        cmd_list(make_args(search="SERVER", file_state="disabled"), source=unit_source)
        assert printed_units(capsys.readouterr().out) == ["sshd.service"]

    def test_json_output(self, unit_source: FakeUnitSource, capsys):
        cmd_list(make_args(json=True, status="dead"), source=unit_source)
        data = json.loads(capsys.readouterr().out)
        assert data == [
            {
                "active": "inactive",
                "description": "Nightly backup",
                "detail": None,
                "file_state": "static",
                "load": "loaded",
                "name": "backup.service",
                "sub": "dead",
            }
        ]

    def test_user_scope_and_type(self, unit_source: FakeUnitSource, capsys):
        cmd_list(make_args(unit_type="timer"), source=unit_source)
        cmd_list(make_args(user=True), source=unit_source)
        assert unit_source.list_calls == [
            (UnitType.TIMER, Scope.SYSTEM),
            (UnitType.SERVICE, Scope.USER),
        ]
        assert "logrotate.timer (next: 3h 12m)" in capsys.readouterr().out

    def test_unknown_status(self, unit_source: FakeUnitSource):
        with pytest.raises(UserError, match="Unknown status 'listening' for service"):
            cmd_list(make_args(status="listening"), source=unit_source)
        assert unit_source.list_calls == []

    def test_unknown_file_state(self, unit_source: FakeUnitSource):
        with pytest.raises(UserError, match="Unknown file state 'on'"):
            cmd_list(make_args(file_state="on"), source=unit_source)

    def test_source_error_propagates(self, unit_source: FakeUnitSource):
        unit_source.list_error = "systemctl failed: Access denied"
        with pytest.raises(SourceError, match="Access denied"):
            cmd_list(make_args(), source=unit_source)
