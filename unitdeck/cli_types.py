"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PanelArgs:
    """Arguments for panel command."""

    unit_type: str
    user: bool
    tail_interval: float
    log_lines: int
    log_file: str | None


@dataclass
class ListArgs:
    """Arguments for list command."""

    unit_type: str
    user: bool
    search: str | None
    status: str | None
    file_state: str | None
    json: bool
