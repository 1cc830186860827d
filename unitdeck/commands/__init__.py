"""unitdeck command implementations."""

from __future__ import annotations

from .list_units import cmd_list
from .panel import cmd_panel

__all__ = [
    "cmd_list",
    "cmd_panel",
]
