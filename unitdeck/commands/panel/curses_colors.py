"""Curses color initialization and attribute management for the panel."""

from __future__ import annotations

from curses import error as curses_error
from dataclasses import dataclass

ACTIVE_SUB_STATES = ("running", "active", "listening", "waiting")
WARNING_SUB_STATES = ("exited", "elapsed")
FAILED_SUB_STATES = ("failed",)

# Color pair numbers
PAIR_TITLE = 1
PAIR_GREEN = 2
PAIR_YELLOW = 3
PAIR_RED = 4
PAIR_DIM = 5
PAIR_MARKER = 6
PAIR_MATCH = 7
PAIR_POPUP = 8
PAIR_MASCOT = 9


@dataclass
class CursesAttrs:
    """Named curses attributes for consistent styling.

    Attributes:
        title_attr: Header line and panel titles
        selected_attr: Highlighted unit row and picker cursor
        error_attr: Inventory error banner and failed action results
        marker_attr: Reboot / restart separators in the log panel
        match_attr: Log records matching the search
        current_match_attr: The current search match
        footer_attr: Key hints on the bottom line
        popup_attr: Popup background (pickers, dialogs, help)
        mascot_attr: Mascot lines in the help popup
    """

    title_attr: int
    selected_attr: int
    error_attr: int
    marker_attr: int
    match_attr: int
    current_match_attr: int
    footer_attr: int
    popup_attr: int
    mascot_attr: int


class CursesColors:
    """Curses color initialization and attribute resolution for unit and log rows."""

    def __init__(self, stdscr) -> None:
        self.stdscr = stdscr
        self.curses_mod = None
        self.color_enabled = False
        self.attrs = CursesAttrs(
            title_attr=0,
            selected_attr=0,
            error_attr=0,
            marker_attr=0,
            match_attr=0,
            current_match_attr=0,
            footer_attr=0,
            popup_attr=0,
            mascot_attr=0,
        )
        self._init_curses()

    def _init_curses(self) -> None:
        """Initialize curses with color support."""
        try:
            import curses

            self.curses_mod = curses
            curses.curs_set(0)
            if curses.has_colors():
                curses.start_color()
                curses.use_default_colors()
                curses.init_pair(PAIR_TITLE, curses.COLOR_CYAN, -1)
                curses.init_pair(PAIR_GREEN, curses.COLOR_GREEN, -1)
                curses.init_pair(PAIR_YELLOW, curses.COLOR_YELLOW, -1)
                curses.init_pair(PAIR_RED, curses.COLOR_RED, -1)
                curses.init_pair(PAIR_DIM, curses.COLOR_WHITE, -1)
                curses.init_pair(PAIR_MARKER, curses.COLOR_MAGENTA, -1)
                curses.init_pair(PAIR_MATCH, curses.COLOR_BLACK, curses.COLOR_YELLOW)
                curses.init_pair(PAIR_POPUP, curses.COLOR_WHITE, curses.COLOR_BLACK)
                curses.init_pair(PAIR_MASCOT, curses.COLOR_YELLOW, curses.COLOR_BLACK)
                self.color_enabled = True
            pair = self._pair
            self.attrs = CursesAttrs(
                title_attr=curses.A_BOLD | pair(PAIR_TITLE),
                selected_attr=curses.A_REVERSE | curses.A_BOLD,
                error_attr=curses.A_BOLD | pair(PAIR_RED),
                marker_attr=curses.A_BOLD | pair(PAIR_MARKER),
                match_attr=pair(PAIR_YELLOW) if self.color_enabled else curses.A_UNDERLINE,
                current_match_attr=pair(PAIR_MATCH) if self.color_enabled else curses.A_REVERSE,
                footer_attr=curses.A_DIM,
                popup_attr=pair(PAIR_POPUP) if self.color_enabled else curses.A_REVERSE,
                mascot_attr=pair(PAIR_MASCOT) if self.color_enabled else curses.A_REVERSE,
            )
        except curses_error:
            return

    def _pair(self, number: int) -> int:
        if not self.color_enabled or self.curses_mod is None:
            return 0
        return self.curses_mod.color_pair(number)

    def status_attr(self, sub_state: str) -> int:
        """Color a sub-state: green when active, yellow when finished, red when failed."""
        if not self.color_enabled:
            return 0
        if sub_state in ACTIVE_SUB_STATES:
            return self._pair(PAIR_GREEN)
        if sub_state in WARNING_SUB_STATES:
            return self._pair(PAIR_YELLOW)
        if sub_state in FAILED_SUB_STATES:
            return self._pair(PAIR_RED)
        return self._pair(PAIR_DIM)

    def priority_attr(self, priority: int | None) -> int:
        """Color a log record by syslog priority: red for err and worse, yellow for warning."""
        if not self.color_enabled or priority is None:
            return 0
        if priority <= 3:
            return self._pair(PAIR_RED)
        if priority == 4:
            return self._pair(PAIR_YELLOW)
        return 0

    def result_attr(self, ok: bool) -> int:
        if not self.color_enabled:
            return 0
        return self._pair(PAIR_GREEN) if ok else self._pair(PAIR_RED)
