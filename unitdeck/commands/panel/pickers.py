"""Picker / modal state machine: the one exclusive overlay and its cursor."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Mode(Enum):
    """Exclusive interaction mode of the panel."""

    NORMAL = "normal"
    SEARCH = "search"
    LOG_SEARCH = "log-search"
    STATUS_PICKER = "status-picker"
    CATEGORY_PICKER = "category-picker"
    SEVERITY_PICKER = "severity-picker"
    TIME_PICKER = "time-picker"
    FILE_STATE_PICKER = "file-state-picker"
    ACTION_PICKER = "action-picker"
    CONFIRM = "confirm"
    DETAILS = "details"
    UNIT_FILE = "unit-file"
    HELP = "help"

    @property
    def is_picker(self) -> bool:
        return self in PICKER_MODES

    @property
    def is_typing(self) -> bool:
        return self in (Mode.SEARCH, Mode.LOG_SEARCH)


PICKER_MODES = frozenset(
    {
        Mode.STATUS_PICKER,
        Mode.CATEGORY_PICKER,
        Mode.SEVERITY_PICKER,
        Mode.TIME_PICKER,
        Mode.FILE_STATE_PICKER,
        Mode.ACTION_PICKER,
    }
)


@dataclass
class Picker:
    """A titled list of (label, value) options with a wrapping cursor."""

    title: str
    options: list[tuple[str, Any]]
    on_confirm: Callable[[Any], None]
    cursor: int = 0

    @classmethod
    def preselected(
        cls,
        title: str,
        options: Sequence[tuple[str, Any]],
        current: Any,
        on_confirm: Callable[[Any], None],
    ) -> Picker:
        """Build a picker whose cursor starts on the option matching `current`."""
        cursor = 0
        for idx, (_, value) in enumerate(options):
            if value == current:
                cursor = idx
                break
        return cls(title=title, options=list(options), on_confirm=on_confirm, cursor=cursor)

    def next(self) -> None:
        if self.options:
            self.cursor = (self.cursor + 1) % len(self.options)

    def previous(self) -> None:
        if self.options:
            self.cursor = (self.cursor - 1) % len(self.options)

    @property
    def selected_value(self) -> Any:
        return self.options[self.cursor][1]

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.options]

    @property
    def values(self) -> list[Any]:
        return [value for _, value in self.options]


@dataclass
class ModalState:
    """Tracks the active mode and, for picker modes, the open picker.

    Help is only reachable from NORMAL, and closing it always returns there.
    """

    mode: Mode = Mode.NORMAL
    picker: Picker | None = None

    def open_picker(self, mode: Mode, picker: Picker) -> None:
        if not mode.is_picker:
            raise ValueError(f"{mode.value} is not a picker mode")
        self.mode = mode
        self.picker = picker

    def confirm_picker(self) -> None:
        """Close the picker, then apply its selection.

        The callback runs after the mode is back to NORMAL so that it may open
        a follow-up mode (the action picker opens the confirm dialog).
        """
        picker = self.picker
        self.close()
        if picker is not None and picker.options:
            picker.on_confirm(picker.selected_value)

    def enter(self, mode: Mode) -> None:
        """Switch to a non-picker mode (typing, dialogs, viewers)."""
        if mode.is_picker:
            raise ValueError(f"use open_picker() for {mode.value}")
        self.mode = mode
        self.picker = None

    def close(self) -> None:
        self.mode = Mode.NORMAL
        self.picker = None

    cancel = close

    def open_help(self) -> bool:
        if self.mode is not Mode.NORMAL:
            return False
        self.mode = Mode.HELP
        return True


@dataclass
class TextScroll:
    """Vertical scroll offset over a fixed list of lines."""

    lines: list[str] = field(default_factory=list)
    offset: int = 0
    visible: int = 1

    def set_lines(self, lines: list[str]) -> None:
        self.lines = lines
        self.offset = 0

    def set_visible(self, visible: int) -> None:
        self.visible = max(visible, 1)
        self.offset = min(self.offset, self.max_offset)

    @property
    def max_offset(self) -> int:
        return max(len(self.lines) - self.visible, 0)

    def scroll(self, delta: int) -> None:
        self.offset = min(max(self.offset + delta, 0), self.max_offset)

    def top(self) -> None:
        self.offset = 0

    def bottom(self) -> None:
        self.offset = self.max_offset

    def page_up(self) -> None:
        self.scroll(-self.visible)

    def page_down(self) -> None:
        self.scroll(self.visible)

    def window(self) -> list[str]:
        return self.lines[self.offset : self.offset + self.visible]
