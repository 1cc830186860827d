"""
unitdeck - Terminal control panel for systemd units and their journal.

Design goals:
- No daemon, no state on disk (session-scoped, in-memory).
- Uses the host's own systemctl/journalctl, so polkit and --user work as usual.
- Never blocks the screen on a slow unit job.
"""

from __future__ import annotations

from .cli import main
from .exceptions import SourceError, UnitDeckError, UserError

__all__ = [
    "SourceError",
    "UnitDeckError",
    "UserError",
    "main",
]
