"""unitdeck interactive panel implementation.

This package provides the panel command with clear separation of concerns:

- types.py: Source protocols, help text and mascot
- filters.py: Unit inventory, filter predicates and selection cursor
- logview.py: Log buffer, tailing, discontinuity markers and scroll anchor
- pickers.py: Exclusive modal state and option pickers
- actions.py: Off-thread lifecycle actions and post-action refresh
- session.py: Session state owning all of the above, with key routing
- formatting.py: Text rendering and layout (no curses dependencies)
- display.py: Curses-based interactive UI
- entry.py: Command entry point and main loop
"""

from __future__ import annotations

from .actions import ActionOrchestrator, ActionPhase, OneShot, RefreshOutcome
from .display import PanelDisplay, compute_layout, decode_key
from .entry import cmd_panel, run_panel_loop
from .filters import UnitFilter, filter_indices
from .formatting import (
    build_details_lines,
    clip_cell,
    format_log_line,
    format_unit_row,
    marker_text,
    record_height,
    wrap_text,
)
from .logview import (
    TRACK_LATEST,
    ContinuityTracker,
    Fixed,
    LogViewport,
    MarkerKind,
    TrackLatest,
    detect_discontinuities,
    resolve_bottom_index,
)
from .pickers import Mode, ModalState, Picker, TextScroll
from .session import Focus, Session

__all__ = [
    "TRACK_LATEST",
    "ActionOrchestrator",
    "ActionPhase",
    "ContinuityTracker",
    "Fixed",
    "Focus",
    "LogViewport",
    "MarkerKind",
    "ModalState",
    "Mode",
    "OneShot",
    "PanelDisplay",
    "Picker",
    "RefreshOutcome",
    "Session",
    "TextScroll",
    "TrackLatest",
    "UnitFilter",
    "build_details_lines",
    "clip_cell",
    "cmd_panel",
    "compute_layout",
    "decode_key",
    "detect_discontinuities",
    "filter_indices",
    "format_log_line",
    "format_unit_row",
    "marker_text",
    "record_height",
    "resolve_bottom_index",
    "run_panel_loop",
    "wrap_text",
]
