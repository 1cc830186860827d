"""Popup windows for the panel: help, pickers and the confirm dialog."""

from __future__ import annotations

from curses import error as curses_error
from importlib.metadata import version as get_version

from .types import HELP_TEXT, UNITDECK_MASCOT


def _draw_popup(
    stdscr,
    curses_mod,
    lines: list[str],
    *,
    attr: int,
    title: str = "",
    line_attrs: dict[int, int] | None = None,
    centered: int = 0,
) -> None:
    """Draw a bordered, centered popup holding `lines`.

    Args:
        stdscr: The curses screen object
        curses_mod: The curses module (for creating new windows)
        lines: Content lines
        attr: Background attribute for the popup
        title: Optional title drawn into the top border
        line_attrs: Per-line attribute overrides, keyed by line index
        centered: Number of leading lines to center horizontally
    """
    height, width = stdscr.getmaxyx()
    line_attrs = line_attrs or {}

    # Add padding: 2 chars horizontal, 1 line vertical
    h_pad = 2
    v_pad = 1

    content_width = max([len(line) for line in lines] + [len(title) + 2, 10])
    popup_width = content_width + (h_pad * 2)
    popup_height = len(lines) + (v_pad * 2)

    start_y = max((height - popup_height - 2) // 2, 0)
    start_x = max((width - popup_width - 2) // 2, 0)

    # Clip to screen (leave room for border)
    if start_y + popup_height + 2 > height:
        popup_height = max(height - start_y - 2, 1)
    if start_x + popup_width + 2 > width:
        popup_width = max(width - start_x - 2, 10)

    try:
        popup_win = curses_mod.newwin(popup_height + 2, popup_width + 2, start_y, start_x)
    except curses_error:
        return

    popup_win.bkgd(" ", attr)
    popup_win.border()
    if title:
        try:
            popup_win.addstr(0, 2, f" {title} "[:popup_width], attr | curses_mod.A_BOLD)
        except curses_error:
            pass

    current_row = v_pad + 1
    max_content_rows = popup_height - (v_pad * 2)
    for i, line in enumerate(lines[:max_content_rows]):
        if i < centered:
            padding_needed = content_width - len(line)
            left_pad = padding_needed // 2
            right_pad = padding_needed - left_pad
            padded = " " * h_pad + " " * left_pad + line + " " * right_pad + " " * h_pad
        else:
            padded = " " * h_pad + line.ljust(content_width) + " " * h_pad
        try:
            popup_win.addstr(current_row, 1, padded[:popup_width], line_attrs.get(i, attr))
        except curses_error:
            pass
        current_row += 1

    popup_win.noutrefresh()


def draw_help_popup(stdscr, curses_mod, *, popup_attr: int, mascot_attr: int) -> None:
    """Draw a centered help popup with the mascot, version and keybindings."""
    if not curses_mod:
        return
    try:
        ver = get_version("unitdeck")
    except Exception:
        ver = "?"
    header = UNITDECK_MASCOT + [f"unitdeck v{ver}"]
    lines = header + [""] + HELP_TEXT.strip().split("\n")
    _draw_popup(
        stdscr,
        curses_mod,
        lines,
        attr=popup_attr,
        title="Help",
        line_attrs={i: mascot_attr for i in range(len(header))},
        centered=len(header),
    )


def draw_picker_popup(
    stdscr, curses_mod, *, title: str, labels: list[str], cursor: int, popup_attr: int
) -> None:
    """Draw an option list with the cursor row highlighted."""
    if not curses_mod:
        return
    lines = [f"{'>' if idx == cursor else ' '} {label}" for idx, label in enumerate(labels)]
    _draw_popup(
        stdscr,
        curses_mod,
        lines,
        attr=popup_attr,
        title=title,
        line_attrs={cursor: popup_attr | curses_mod.A_REVERSE},
    )


def draw_message_popup(
    stdscr, curses_mod, *, title: str, lines: list[str], popup_attr: int, text_attr: int = 0
) -> None:
    """Draw a dialog (action confirmation, progress or result)."""
    if not curses_mod:
        return
    _draw_popup(
        stdscr,
        curses_mod,
        lines,
        attr=popup_attr,
        title=title,
        line_attrs={0: text_attr or popup_attr},
    )
