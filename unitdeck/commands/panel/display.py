"""Curses-based UI display for the panel command."""

from __future__ import annotations

from curses import error as curses_error
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .actions import ActionPhase
from .curses_colors import CursesColors
from .formatting import (
    clip_cell,
    format_log_line,
    format_match_info,
    format_unit_row,
    marker_text,
    search_spans,
    severity_option_label,
    split_highlights,
    wrap_text,
    wrap_with_offsets,
)
from .help_popup import draw_help_popup, draw_message_popup, draw_picker_popup
from .pickers import Mode
from .session import Focus

if TYPE_CHECKING:
    from .session import Session

UNITS_WIDTH_PERCENT = 40

# Raw key codes that curses does not name
KEY_TAB = 9
KEY_LF = 10
KEY_CR = 13
KEY_ESC = 27
KEY_DEL = 127
KEY_BS = 8
KEY_CTRL_D = 4
KEY_CTRL_U = 21


def decode_key(key: int, curses_mod) -> str | None:
    """Translate a getch() code into the key name the session understands.

    Returns None for "no key" and for codes the panel does not use.
    """
    if key == -1:
        return None
    named = {
        curses_mod.KEY_UP: "up",
        curses_mod.KEY_DOWN: "down",
        curses_mod.KEY_PPAGE: "pgup",
        curses_mod.KEY_NPAGE: "pgdn",
        curses_mod.KEY_HOME: "home",
        curses_mod.KEY_END: "end",
        curses_mod.KEY_ENTER: "enter",
        curses_mod.KEY_BACKSPACE: "backspace",
        curses_mod.KEY_RESIZE: "resize",
        KEY_LF: "enter",
        KEY_CR: "enter",
        KEY_ESC: "esc",
        KEY_DEL: "backspace",
        KEY_BS: "backspace",
        KEY_TAB: "tab",
        KEY_CTRL_D: "ctrl-d",
        KEY_CTRL_U: "ctrl-u",
    }
    if key in named:
        return named[key]
    if 32 <= key < 127:
        return chr(key)
    return None


@dataclass(frozen=True)
class PanelLayout:
    """Screen regions: header row, panel title row, body rows, footer row."""

    height: int
    width: int
    body_top: int
    body_rows: int
    units_width: int
    logs_x: int
    logs_width: int

    @property
    def footer_row(self) -> int:
        return self.height - 1

    @property
    def log_text_width(self) -> int:
        """Columns a log line may fill; the last column is never written."""
        return max(self.logs_width - 1, 1)


def compute_layout(height: int, width: int) -> PanelLayout:
    """Split the screen 40/60 between the unit list and the log panel."""
    body_top = 2
    body_rows = max(height - 3, 1)
    units_width = max(width * UNITS_WIDTH_PERCENT // 100, 1)
    logs_x = units_width + 1
    logs_width = max(width - logs_x, 1)
    return PanelLayout(
        height=height,
        width=width,
        body_top=body_top,
        body_rows=body_rows,
        units_width=units_width,
        logs_x=logs_x,
        logs_width=logs_width,
    )


def keep_visible(offset: int, selected: int | None, rows: int) -> int:
    """Adjust a list offset so the selected row stays on screen."""
    if selected is None:
        return 0
    if selected < offset:
        return selected
    if selected >= offset + rows:
        return selected - rows + 1
    return offset


class PanelDisplay:
    """Curses-based panel display drawing a Session."""

    def __init__(self, stdscr, session: Session) -> None:
        self.stdscr = stdscr
        self.session = session
        self.unit_offset = 0
        self.colors = CursesColors(stdscr)
        self.curses_mod = self.colors.curses_mod

    def safe_addstr(self, row: int, col: int, text: str, attr: int = 0) -> None:
        try:
            if attr:
                self.stdscr.addstr(row, col, text, attr)
            else:
                self.stdscr.addstr(row, col, text)
        except curses_error:
            return

    def handle_key(self, key: int) -> bool:
        """Handle a keypress. Returns True if we should exit."""
        if not self.curses_mod:
            return False
        if key == self.curses_mod.KEY_MOUSE:
            self.handle_mouse()
            return False
        name = decode_key(key, self.curses_mod)
        if name is None or name == "resize":
            return False
        return self.session.handle_key(name)

    def handle_mouse(self) -> None:
        """Route a KEY_MOUSE event: clicks select unit rows, the wheel scrolls."""
        curses_mod = self.curses_mod
        try:
            _, x, y, _, bstate = curses_mod.getmouse()
        except curses_error:
            return
        height, width = self.stdscr.getmaxyx()
        layout = compute_layout(height, width)
        over_logs = x >= layout.logs_x
        if bstate & curses_mod.BUTTON1_CLICKED:
            row = y - layout.body_top
            if not over_logs and 0 <= row < layout.body_rows:
                self.session.click_unit(self.unit_offset + row)
        elif bstate & curses_mod.BUTTON4_PRESSED:
            self.session.wheel(down=False, over_logs=over_logs)
        elif bstate & curses_mod.BUTTON5_PRESSED:
            self.session.wheel(down=True, over_logs=over_logs)

    # -- drawing ------------------------------------------------------------

    def draw_screen(self) -> None:
        height, width = self.stdscr.getmaxyx()
        layout = compute_layout(height, width)
        self.session.set_geometry(
            units_height=layout.body_rows,
            log_height=layout.body_rows,
            log_width=layout.log_text_width,
            details_height=max(height - 6, 1),
        )

        self.stdscr.erase()
        self._draw_header(layout)
        self._draw_units(layout)
        self._draw_separator(layout)
        self._draw_logs(layout)
        self._draw_footer(layout)

        # Refresh main screen first, then draw popups on top
        self.stdscr.noutrefresh()
        self._draw_overlay()
        if self.curses_mod:
            self.curses_mod.doupdate()

    def _draw_header(self, layout: PanelLayout) -> None:
        session = self.session
        flt = session.filter
        scope = "User" if flt.scope.is_user else "System"
        text = f"unitdeck  {flt.unit_type.label} [{scope}]"
        parts = []
        if session.mode is Mode.SEARCH:
            parts.append(f"Search: {flt.search}_")
        elif flt.search:
            parts.append(f"Search: {flt.search}")
        if flt.sub_state is not None:
            parts.append(f"Status: {flt.sub_state}")
        if flt.file_state is not None:
            parts.append(f"File: {flt.file_state}")
        if parts:
            text += "  " + " | ".join(parts) + f" ({len(flt.filtered)} matches)"
        self.safe_addstr(0, 0, clip_cell(text, layout.width - 1), self.colors.attrs.title_attr)

    def _draw_units(self, layout: PanelLayout) -> None:
        session = self.session
        flt = session.filter
        attrs = self.colors.attrs
        if flt.has_active_filter:
            title = f"{flt.unit_type.label} ({len(flt.filtered)}/{len(flt.units)})"
        else:
            title = f"{flt.unit_type.label} ({len(flt.units)})"
        title_attr = attrs.title_attr if session.focus is Focus.UNITS else 0
        self.safe_addstr(1, 0, clip_cell(title, layout.units_width), title_attr)

        if session.inventory_error:
            lines = wrap_text(f"Error: {session.inventory_error}", layout.units_width)
            for idx, line in enumerate(lines[: layout.body_rows]):
                self.safe_addstr(layout.body_top + idx, 0, line, attrs.error_attr)
            return

        units = session.filtered_units()
        selected = session.selected_position
        self.unit_offset = keep_visible(self.unit_offset, selected, layout.body_rows)
        visible = units[self.unit_offset : self.unit_offset + layout.body_rows]
        for idx, unit in enumerate(visible):
            row = layout.body_top + idx
            pos = self.unit_offset + idx
            text = format_unit_row(unit, layout.units_width)
            if pos == selected:
                self.safe_addstr(row, 0, text, attrs.selected_attr)
            else:
                self.safe_addstr(row, 0, text)
                status = f"{unit.sub:<9}"[: layout.units_width]
                self.safe_addstr(row, 0, status, self.colors.status_attr(unit.sub))

    def _draw_separator(self, layout: PanelLayout) -> None:
        col = layout.units_width
        for row in range(1, layout.footer_row):
            self.safe_addstr(row, col, "|", self.colors.attrs.footer_attr)

    def _logs_title(self) -> str:
        session = self.session
        logs = session.logs
        name = logs.unit_name or ""
        title = f"Logs: {name}" if name else "Logs"
        if session.focus is Focus.LOGS:
            title += " [FOCUSED]"
        title += " [TAIL]" if logs.live_tail else " [PAUSED]"
        if logs.severity is not None:
            title += f" [{severity_option_label(logs.severity)}]"
        if logs.time_range.journalctl_since is not None:
            title += f" [{logs.time_range.label}]"
        if logs.records:
            top = logs.top_index()
            last = logs.last_visible_index(top)
            title += f" [{top + 1}-{last + 1}/{len(logs.records)}]"
        if logs.search_query:
            title += f" /{logs.search_query}"
            title += format_match_info(logs.search_query, logs.match_pos, len(logs.matches))
        return title

    def _draw_logs(self, layout: PanelLayout) -> None:
        attrs = self.colors.attrs
        title_attr = attrs.title_attr if self.session.focus is Focus.LOGS else 0
        title = clip_cell(self._logs_title(), layout.logs_width - 1)
        self.safe_addstr(1, layout.logs_x, title, title_attr)

        width = layout.log_text_width
        query = self.session.logs.search_query
        row = layout.body_top
        last_row = layout.body_top + layout.body_rows
        for visible in self.session.log_window():
            if row >= last_row:
                break
            record = visible.record
            if visible.marker is not None:
                text = marker_text(visible.marker, record)[:width]
                self.safe_addstr(row, layout.logs_x, text, attrs.marker_attr)
                row += 1
            attr = self.colors.priority_attr(record.priority)
            match_attr = attrs.current_match_attr if visible.is_current_match else attrs.match_attr
            spans = search_spans(record, query) if visible.is_match else []
            for start, line in wrap_with_offsets(format_log_line(record), width):
                if row >= last_row:
                    break
                col = layout.logs_x
                for piece, highlighted in split_highlights(start, line, spans):
                    self.safe_addstr(row, col, piece, match_attr if highlighted else attr)
                    col += len(piece)
                row += 1

    def _footer_text(self) -> str:
        session = self.session
        mode = session.mode
        if mode is Mode.SEARCH:
            return "Type to search | Enter: keep | Esc: clear"
        if mode is Mode.LOG_SEARCH:
            logs = session.logs
            info = format_match_info(logs.search_query, logs.match_pos, len(logs.matches))
            return f"Log search: {logs.search_query}_{info} | Enter: keep | Esc: clear"
        if mode.is_picker:
            return "j/k: Move | Enter: Select | Esc: Cancel"
        if mode in (Mode.DETAILS, Mode.UNIT_FILE):
            return "j/k: Scroll | g/G: Top/Bottom | PgUp/PgDn: Page | Esc: Close"
        if session.focus is Focus.LOGS:
            return (
                "l: Units | j/k: Scroll | g/G: Top/Bottom | F: Tail | /: Search | "
                "n/N: Match | p: Priority | T: Time | ?: Help"
            )
        return (
            "q: Quit | /: Search | s: Status | f: File | t: Type | u: User/System | "
            "a: Actions | i: Info | c: Cat | l: Logs | ?: Help"
        )

    def _draw_footer(self, layout: PanelLayout) -> None:
        self.safe_addstr(
            layout.footer_row,
            0,
            clip_cell(self._footer_text(), layout.width - 1),
            self.colors.attrs.footer_attr,
        )

    def _draw_overlay(self) -> None:
        session = self.session
        mode = session.mode
        attrs = self.colors.attrs
        if mode is Mode.HELP:
            draw_help_popup(
                self.stdscr,
                self.curses_mod,
                popup_attr=attrs.popup_attr,
                mascot_attr=attrs.mascot_attr,
            )
        elif mode.is_picker and session.picker is not None:
            picker = session.picker
            draw_picker_popup(
                self.stdscr,
                self.curses_mod,
                title=picker.title,
                labels=picker.labels,
                cursor=picker.cursor,
                popup_attr=attrs.popup_attr,
            )
        elif mode is Mode.CONFIRM:
            self._draw_action_dialog()
        elif mode is Mode.DETAILS:
            draw_message_popup(
                self.stdscr,
                self.curses_mod,
                title="Details",
                lines=session.details.window() or [""],
                popup_attr=attrs.popup_attr,
            )
        elif mode is Mode.UNIT_FILE:
            draw_message_popup(
                self.stdscr,
                self.curses_mod,
                title=f"Unit file: {session.unit_file_name}",
                lines=session.unit_file.window() or [""],
                popup_attr=attrs.popup_attr,
            )

    def _draw_action_dialog(self) -> None:
        session = self.session
        attrs = self.colors.attrs
        phase = session.action_phase
        status = session.action_status()
        text_attr = 0
        if phase is ActionPhase.CONFIRMING:
            hint = "y/Enter: Confirm | n/Esc: Cancel"
        elif phase is ActionPhase.EXECUTING:
            hint = "Esc: Dismiss"
        else:
            result = session.actions.result
            if result is not None:
                text_attr = self.colors.result_attr(result.ok)
            hint = "Enter/Esc: Dismiss"
        draw_message_popup(
            self.stdscr,
            self.curses_mod,
            title="Action",
            lines=[status, "", hint],
            popup_attr=attrs.popup_attr,
            text_attr=text_attr,
        )
