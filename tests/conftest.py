"""Shared pytest fixtures for unitdeck tests."""

from __future__ import annotations

import json
import threading

import pytest
from unitdeck.exceptions import SourceError
from unitdeck.models import (
    ActionResult,
    LogRecord,
    Scope,
    TimeRange,
    Unit,
    UnitAction,
    UnitProperties,
    UnitType,
)


class FakeUnitSource:
    """In-memory UnitSource.

    `units` maps (unit_type, scope) to the inventory. Setting `list_error`
    makes list_units raise. Setting `gate` (a threading.Event) makes
    run_action block until the event is set.
    """

    def __init__(self, units: dict[tuple[UnitType, Scope], list[Unit]] | None = None) -> None:
        self.units = units or {}
        self.list_error: str | None = None
        self.list_calls: list[tuple[UnitType, Scope]] = []
        self.property_calls: list[str] = []
        self.action_calls: list[tuple[UnitAction, str, Scope]] = []
        self.action_ok = True
        self.action_raises: Exception | None = None
        self.gate: threading.Event | None = None
        self.file_lines: list[str] = ["[Unit]", "Description=Demo"]
        self.file_error: str | None = None

    def list_units(self, unit_type: UnitType, scope: Scope) -> list[Unit]:
        self.list_calls.append((unit_type, scope))
        if self.list_error is not None:
            raise SourceError(self.list_error)
        return list(self.units.get((unit_type, scope), []))

    def get_properties(self, name: str, scope: Scope) -> UnitProperties:
        self.property_calls.append(name)
        return UnitProperties(description=f"props for {name}", main_pid=len(self.property_calls))

    def run_action(self, action: UnitAction, name: str, scope: Scope) -> ActionResult:
        self.action_calls.append((action, name, scope))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.action_raises is not None:
            raise self.action_raises
        if self.action_ok:
            return ActionResult(ok=True, message=f"{action.label} succeeded for {name}")
        return ActionResult(ok=False, message=f"{action.label} failed: access denied")

    def get_file_content(self, name: str, scope: Scope) -> list[str]:
        if self.file_error is not None:
            raise SourceError(self.file_error)
        return list(self.file_lines)


class FakeLogSource:
    """In-memory LogSource.

    `recent` maps unit name to the records returned by fetch_recent; `pending`
    maps unit name to a list of batches handed out one per fetch_since call.
    """

    def __init__(self) -> None:
        self.recent: dict[str, list[LogRecord]] = {}
        self.pending: dict[str, list[list[LogRecord]]] = {}
        self.recent_calls: list[tuple[str, Scope, int, int | None, TimeRange]] = []
        self.since_calls: list[tuple[str, str]] = []
        self.recent_error: str | None = None
        self.since_error: str | None = None

    def fetch_recent(
        self,
        name: str,
        scope: Scope,
        limit: int,
        severity: int | None = None,
        time_range: TimeRange = TimeRange.ALL,
    ) -> list[LogRecord]:
        self.recent_calls.append((name, scope, limit, severity, time_range))
        if self.recent_error is not None:
            raise SourceError(self.recent_error)
        return list(self.recent.get(name, []))[-limit:]

    def fetch_since(
        self,
        name: str,
        cursor: str,
        scope: Scope,
        severity: int | None = None,
        time_range: TimeRange = TimeRange.ALL,
    ) -> list[LogRecord]:
        self.since_calls.append((name, cursor))
        if self.since_error is not None:
            raise SourceError(self.since_error)
        batches = self.pending.get(name, [])
        if not batches:
            return []
        return batches.pop(0)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_records(
    count: int, *, prefix: str = "line", start: int = 0, boot: str = "b1", inv: str = "i1"
) -> list[LogRecord]:
    """Build `count` records with sequential cursors c<start>..."""
    return [
        LogRecord(
            message=f"{prefix} {idx}",
            timestamp=1_700_000_000_000_000 + idx,
            priority=6,
            pid="42",
            identifier="demo",
            boot_id=boot,
            invocation_id=inv,
            cursor=f"c{idx}",
        )
        for idx in range(start, start + count)
    ]


SAMPLE_UNITS = [
    Unit(
        name="nginx.service",
        sub="running",
        load="loaded",
        active="active",
        description="A high performance web server",
        file_state="enabled",
    ),
    Unit(
        name="backup.service",
        sub="dead",
        load="loaded",
        active="inactive",
        description="Nightly backup",
        file_state="static",
    ),
    Unit(
        name="sshd.service",
        sub="running",
        load="loaded",
        active="active",
        description="OpenSSH server daemon",
        file_state="disabled",
    ),
]


@pytest.fixture
def sample_units() -> list[Unit]:
    """Three services: running, dead, running."""
    return list(SAMPLE_UNITS)


@pytest.fixture
def unit_source(sample_units: list[Unit]) -> FakeUnitSource:
    """Fake unit source with services in system scope and one user service."""
    return FakeUnitSource(
        {
            (UnitType.SERVICE, Scope.SYSTEM): sample_units,
            (UnitType.SERVICE, Scope.USER): [
                Unit(name="pipewire.service", sub="running", description="PipeWire")
            ],
            (UnitType.TIMER, Scope.SYSTEM): [
                Unit(name="logrotate.timer", sub="waiting", detail="next: 3h 12m")
            ],
        }
    )


@pytest.fixture
def log_source() -> FakeLogSource:
    """Fake log source with a short history per sample unit."""
    source = FakeLogSource()
    source.recent["nginx.service"] = make_records(5, prefix="nginx")
    source.recent["backup.service"] = make_records(3, prefix="backup")
    source.recent["sshd.service"] = make_records(4, prefix="sshd")
    return source


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def journal_line() -> str:
    """One line of `journalctl --output=json`."""
    return json.dumps(
        {
            "__CURSOR": "s=abc;i=1",
            "__REALTIME_TIMESTAMP": "1700000000123456",
            "PRIORITY": "3",
            "_PID": "1234",
            "SYSLOG_IDENTIFIER": "nginx",
            "MESSAGE": "worker process exited",
            "_BOOT_ID": "boot-1",
            "_SYSTEMD_INVOCATION_ID": "inv-1",
        }
    )
