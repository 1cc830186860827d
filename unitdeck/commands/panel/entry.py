"""Panel command entry point."""

from __future__ import annotations

import curses
import logging
import sys
from curses import wrapper as curses_wrapper
from typing import TYPE_CHECKING

from ...exceptions import UserError
from ...journal import JournalSource
from ...models import Scope, UnitType
from ...systemctl import SystemctlSource
from .display import PanelDisplay
from .session import Session

if TYPE_CHECKING:
    from ...cli_types import PanelArgs

logger = logging.getLogger("unitdeck")

ESC_DELAY_MS = 25


def wait_to_timeout_ms(seconds: float) -> int:
    """Convert the session's next wait into a curses timeout (never 0, never negative)."""
    return max(int(seconds * 1000), 1)


def run_panel_loop(stdscr, session: Session) -> None:
    """Drive a session until the user quits.

    Blocks in getch() for at most the session's next wait, then lets the
    session do any due background work and redraws when something changed.
    """
    display = PanelDisplay(stdscr, session)
    display.draw_screen()
    while True:
        stdscr.timeout(wait_to_timeout_ms(session.next_wait()))
        key = stdscr.getch()

        if display.handle_key(key):
            return

        changed = session.advance()
        if key != -1 or changed:
            display.draw_screen()


def cmd_panel(args: PanelArgs) -> None:
    """Run the interactive unit panel."""
    if not sys.stdout.isatty():
        raise UserError("panel needs an interactive terminal; use 'unitdeck list' instead")

    unit_type = UnitType(args.unit_type)
    scope = Scope.USER if args.user else Scope.SYSTEM
    session = Session(
        SystemctlSource(),
        JournalSource(),
        unit_type=unit_type,
        scope=scope,
        log_lines=args.log_lines,
        tail_interval=args.tail_interval,
    )

    def curses_main(stdscr) -> None:
        curses.set_escdelay(ESC_DELAY_MS)
        stdscr.keypad(True)
        curses.mousemask(curses.BUTTON1_CLICKED | curses.BUTTON4_PRESSED | curses.BUTTON5_PRESSED)
        session.start()
        run_panel_loop(stdscr, session)

    logger.debug("Starting panel: %s %s", unit_type.value, scope.value)
    curses_wrapper(curses_main)
