"""Shared types and constants for the panel module."""

from __future__ import annotations

from typing import Protocol

from ...models import (
    ActionResult,
    LogRecord,
    Scope,
    TimeRange,
    Unit,
    UnitAction,
    UnitProperties,
    UnitType,
)


class UnitSource(Protocol):
    """What the session needs from the unit inventory backend."""

    def list_units(self, unit_type: UnitType, scope: Scope) -> list[Unit]: ...

    def get_properties(self, name: str, scope: Scope) -> UnitProperties: ...

    def run_action(self, action: UnitAction, name: str, scope: Scope) -> ActionResult: ...

    def get_file_content(self, name: str, scope: Scope) -> list[str]: ...


class LogSource(Protocol):
    """What the log viewport needs from the journal backend."""

    def fetch_recent(
        self,
        name: str,
        scope: Scope,
        limit: int,
        severity: int | None = None,
        time_range: TimeRange = TimeRange.ALL,
    ) -> list[LogRecord]: ...

    def fetch_since(
        self,
        name: str,
        cursor: str,
        scope: Scope,
        severity: int | None = None,
        time_range: TimeRange = TimeRange.ALL,
    ) -> list[LogRecord]: ...


UNITDECK_MASCOT = [
    " ┌─┬─┬─┐ ",
    " ├─┼─┼─┤ ",
    " └─┴─┴─┘ ",
]


HELP_TEXT = """\
Keybindings (press any key to close)

Units:
  j/k or ↓/↑    Move selection (wraps)
  g/G           First / last unit
  PgUp/PgDn     Page through units
  /             Search name and description
  s             Filter by sub-state
  f             Filter by unit file state
  t             Pick unit type (service, timer, socket, target, path)
  u             Toggle system / user scope
  r             Reload unit list
  p/T/F         Log priority, time range, live tail
  i or Enter    Unit details
  c             View unit file
  a             Actions for the selected unit
  Esc           Clear search
  l             Focus logs
  q             Quit

Logs:
  j/k or ↓/↑    Scroll one record
  Ctrl-d/Ctrl-u Scroll half a page
  PgUp/PgDn     Scroll a page
  g/G           Top / bottom
  F             Toggle live tail
  /             Search log messages
  n/N           Next / previous match
  p             Minimum priority
  T             Time range
  Esc           Clear search, then leave logs
  l             Back to units

Actions:
  s t r l e d   Start Stop Restart reLoad Enable Disable
  D             Daemon reload (host-wide)
  y or Enter    Confirm     n or Esc   Cancel / dismiss

Mouse:
  Click         Select a unit
  Wheel         Move selection, or scroll logs when focused or pointed at
"""
