"""Panel session: the state value driven by the main loop.

The session owns every engine (unit filter, log viewport, modal state, action
orchestrator) plus the per-session properties cache. The presentation layer
feeds it decoded key names and frame geometry, calls advance() once per loop
iteration, and reads the view accessors to draw.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from ...constants import (
    ACTION_POLL_INTERVAL_S,
    BLINK_INTERVAL_S,
    DEFAULT_LOG_LINES,
    DEFAULT_TAIL_INTERVAL_S,
    FILE_STATE_OPTIONS,
    IDLE_WAIT_S,
    PRIORITY_LABELS,
    WHEEL_SCROLL_LINES,
)
from ...exceptions import SourceError
from ...models import (
    TIME_RANGES,
    UNIT_TYPES,
    Scope,
    TimeRange,
    Unit,
    UnitAction,
    UnitProperties,
    UnitType,
    available_actions,
)
from .actions import ActionOrchestrator, ActionPhase
from .filters import UnitFilter
from .formatting import build_details_lines, record_height, severity_option_label
from .logview import LogViewport, VisibleRecord
from .pickers import Mode, ModalState, Picker, TextScroll

if TYPE_CHECKING:
    from .types import LogSource, UnitSource

logger = logging.getLogger("unitdeck")


class Focus(Enum):
    UNITS = "units"
    LOGS = "logs"


def _options_with_all(values: tuple[str, ...]) -> list[tuple[str, str | None]]:
    """Turn ("All", "a", "b") into [("All", None), ("a", "a"), ("b", "b")]."""
    return [(value, None if value == "All" else value) for value in values]


class Session:
    """Explicit session state for one interactive panel run."""

    def __init__(
        self,
        unit_source: UnitSource,
        log_source: LogSource,
        *,
        unit_type: UnitType = UnitType.SERVICE,
        scope: Scope = Scope.SYSTEM,
        log_lines: int = DEFAULT_LOG_LINES,
        tail_interval: float = DEFAULT_TAIL_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.unit_source = unit_source
        self.clock = clock
        self.filter = UnitFilter(unit_source, unit_type=unit_type, scope=scope)
        self.logs = LogViewport(
            log_source,
            scope=scope,
            limit=log_lines,
            tail_interval=tail_interval,
            measure=record_height,
            clock=clock,
        )
        self.modals = ModalState()
        self.actions = ActionOrchestrator(unit_source, clock=clock)
        self.properties: dict[str, UnitProperties] = {}
        self.details = TextScroll()
        self.unit_file = TextScroll()
        self.unit_file_name = ""
        self.focus = Focus.UNITS
        self.units_height = 1
        self.should_quit = False

    def start(self) -> None:
        """Initial inventory fetch and log load."""
        self.filter.reload()
        self._sync_logs()

    # -- geometry -----------------------------------------------------------

    def set_geometry(
        self, *, units_height: int, log_height: int, log_width: int, details_height: int
    ) -> None:
        """Visible sizes for this frame; scroll resolution depends on them."""
        self.units_height = max(units_height, 1)
        self.logs.set_geometry(log_height, log_width)
        self.details.set_visible(details_height)
        self.unit_file.set_visible(details_height)

    # -- main loop hooks ----------------------------------------------------

    def advance(self, now: float | None = None) -> bool:
        """Do any due background work. Returns True if a redraw is needed."""
        if now is None:
            now = self.clock()
        changed = self._sync_logs()
        if self.logs.maybe_tail(now):
            changed = True
        result = self.actions.poll()
        if result is not None:
            self._invalidate_acted_unit()
            changed = True
        outcome = self.actions.poll_refresh()
        if outcome is not None:
            if (outcome.unit_type, outcome.scope) == (self.filter.unit_type, self.filter.scope):
                if outcome.units is not None:
                    self.filter.replace_units(outcome.units)
                else:
                    logger.warning("Post-action refresh failed: %s", outcome.error)
            else:
                logger.debug("Discarding refresh for %s/%s", outcome.unit_type, outcome.scope)
            self._sync_logs()
            changed = True
        if self.actions.is_executing:
            changed = True
        return changed

    def next_wait(self, now: float | None = None) -> float:
        """Seconds the main loop may block waiting for input."""
        if now is None:
            now = self.clock()
        waits = [IDLE_WAIT_S]
        tail = self.logs.seconds_until_tail(now)
        if tail is not None:
            waits.append(tail)
        if self.actions.is_executing:
            waits.append(BLINK_INTERVAL_S)
            waits.append(ACTION_POLL_INTERVAL_S)
        elif self.actions.refresh_pending:
            waits.append(ACTION_POLL_INTERVAL_S)
        return max(min(waits), 0.0)

    def _sync_logs(self) -> bool:
        unit = self.filter.selected_unit
        self.logs.set_unit(unit.name if unit else None)
        return self.logs.ensure_loaded()

    def _invalidate_acted_unit(self) -> None:
        if self.actions.unit_name:
            self.properties.pop(self.actions.unit_name, None)

    # -- key routing --------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Route a decoded key to the active mode. Returns True to quit."""
        mode = self.modals.mode
        if mode is Mode.HELP:
            self.modals.close()
        elif mode.is_typing:
            self._handle_typing_key(key)
        elif mode.is_picker:
            self._handle_picker_key(key)
        elif mode is Mode.CONFIRM:
            self._handle_confirm_key(key)
        elif mode in (Mode.DETAILS, Mode.UNIT_FILE):
            self._handle_viewer_key(key)
        elif self.focus is Focus.LOGS:
            self._handle_logs_key(key)
        else:
            self._handle_units_key(key)
        self._sync_logs()
        return self.should_quit

    def _handle_common_key(self, key: str) -> bool:
        """Keys shared by both focuses in NORMAL mode."""
        if key == "q":
            self.quit()
        elif key == "?":
            self.open_help()
        elif key == "t":
            self.open_category_picker()
        elif key == "u":
            self.toggle_scope()
        elif key == "p":
            self.open_severity_picker()
        elif key == "T":
            self.open_time_picker()
        elif key == "F":
            self.logs.toggle_live_tail()
        elif key in ("l", "tab"):
            self.toggle_focus()
        else:
            return False
        return True

    def _handle_units_key(self, key: str) -> None:
        if self._handle_common_key(key):
            return
        if key in ("j", "down"):
            self.filter.select_next()
        elif key in ("k", "up"):
            self.filter.select_previous()
        elif key in ("g", "home"):
            self.filter.select_first()
        elif key in ("G", "end"):
            self.filter.select_last()
        elif key == "pgup":
            self.filter.page_up(self.units_height)
        elif key == "pgdn":
            self.filter.page_down(self.units_height)
        elif key == "/":
            self.modals.enter(Mode.SEARCH)
        elif key == "s":
            self.open_status_picker()
        elif key == "f":
            self.open_file_state_picker()
        elif key == "r":
            self.reload_units()
        elif key in ("i", "enter"):
            self.open_details()
        elif key == "c":
            self.open_unit_file()
        elif key == "a":
            self.open_action_picker()
        elif key == "esc":
            self.filter.clear_search()

    def _handle_logs_key(self, key: str) -> None:
        if self._handle_common_key(key):
            return
        half_page = max(self.logs.height // 2, 1)
        if key in ("j", "down"):
            self.logs.scroll_down(1)
        elif key in ("k", "up"):
            self.logs.scroll_up(1)
        elif key == "ctrl-d":
            self.logs.scroll_down(half_page)
        elif key == "ctrl-u":
            self.logs.scroll_up(half_page)
        elif key == "pgdn":
            self.logs.scroll_down(self.logs.height)
        elif key == "pgup":
            self.logs.scroll_up(self.logs.height)
        elif key in ("g", "home"):
            self.logs.go_top()
        elif key in ("G", "end"):
            self.logs.go_bottom()
        elif key == "/":
            self.modals.enter(Mode.LOG_SEARCH)
        elif key == "n":
            self.logs.next_match()
        elif key == "N":
            self.logs.previous_match()
        elif key == "esc":
            if self.logs.search_query:
                self.logs.clear_search()
            else:
                self.focus = Focus.UNITS

    def _handle_typing_key(self, key: str) -> None:
        unit_search = self.modals.mode is Mode.SEARCH
        query = self.filter.search if unit_search else self.logs.search_query
        if key == "enter":
            self.modals.close()
            return
        if key == "esc":
            query = ""
            self.modals.close()
        elif key == "backspace":
            query = query[:-1]
        elif len(key) == 1 and key.isprintable():
            query += key
        else:
            return
        if unit_search:
            self.filter.set_filter("search", query)
        else:
            self.logs.set_search(query)

    def _handle_picker_key(self, key: str) -> None:
        picker = self.modals.picker
        if picker is None:
            self.modals.close()
            return
        if key in ("j", "down"):
            picker.next()
        elif key in ("k", "up"):
            picker.previous()
        elif key == "enter":
            self.modals.confirm_picker()
        elif key in ("esc", "q"):
            self.modals.cancel()
        elif self.modals.mode is Mode.ACTION_PICKER:
            action = UnitAction.from_shortcut(key)
            if action is not None and action in picker.values:
                self.modals.close()
                self.request_action(action)

    def _handle_confirm_key(self, key: str) -> None:
        phase = self.actions.phase
        if phase is ActionPhase.CONFIRMING:
            if key in ("y", "enter"):
                self.confirm_action()
            elif key in ("n", "esc", "q"):
                self.dismiss_action()
        elif phase is ActionPhase.EXECUTING:
            if key in ("esc", "q"):
                self.dismiss_action()
        elif key in ("enter", "esc", "q", "y", "n"):
            self.dismiss_action()

    def _handle_viewer_key(self, key: str) -> None:
        scroll = self.details if self.modals.mode is Mode.DETAILS else self.unit_file
        if key in ("j", "down"):
            scroll.scroll(1)
        elif key in ("k", "up"):
            scroll.scroll(-1)
        elif key in ("g", "home"):
            scroll.top()
        elif key in ("G", "end"):
            scroll.bottom()
        elif key in ("pgdn", "ctrl-d"):
            scroll.page_down()
        elif key in ("pgup", "ctrl-u"):
            scroll.page_up()
        elif key in ("esc", "q", "enter", "i", "c"):
            self.modals.close()

    # -- mouse --------------------------------------------------------------

    def click_unit(self, position: int) -> None:
        """Select the unit at a filtered position. Ignored while a modal is open."""
        if self.modals.mode is not Mode.NORMAL:
            return
        self.focus = Focus.UNITS
        self.filter.select(position)
        self._sync_logs()

    def wheel(self, down: bool, over_logs: bool = False) -> None:
        """Scroll the logs when focused or pointed at, else move the selection."""
        if self.modals.mode is not Mode.NORMAL:
            return
        if self.focus is Focus.LOGS or over_logs:
            if down:
                self.logs.scroll_down(WHEEL_SCROLL_LINES)
            else:
                self.logs.scroll_up(WHEEL_SCROLL_LINES)
        elif down:
            self.filter.select_next()
        else:
            self.filter.select_previous()
        self._sync_logs()

    # -- logical entry points -----------------------------------------------

    def quit(self) -> None:
        self.should_quit = True

    def open_help(self) -> None:
        self.modals.open_help()

    def toggle_focus(self) -> None:
        self.focus = Focus.LOGS if self.focus is Focus.UNITS else Focus.UNITS

    def reload_units(self) -> None:
        self.filter.reload()

    def set_category(self, unit_type: UnitType) -> None:
        if self.filter.set_category(unit_type):
            self._reset_derived_state()

    def set_scope(self, scope: Scope) -> None:
        if self.filter.set_scope(scope):
            self.logs.scope = scope
            self._reset_derived_state()

    def toggle_scope(self) -> None:
        self.set_scope(self.filter.scope.toggled())

    def _reset_derived_state(self) -> None:
        self.properties.clear()
        self.logs.invalidate()

    def open_status_picker(self) -> None:
        options = _options_with_all(self.filter.unit_type.status_options)
        self.modals.open_picker(
            Mode.STATUS_PICKER,
            Picker.preselected(
                "Status Filter",
                options,
                self.filter.sub_state,
                lambda value: self.filter.set_filter("sub_state", value),
            ),
        )

    def open_file_state_picker(self) -> None:
        self.modals.open_picker(
            Mode.FILE_STATE_PICKER,
            Picker.preselected(
                "File State",
                _options_with_all(FILE_STATE_OPTIONS),
                self.filter.file_state,
                lambda value: self.filter.set_filter("file_state", value),
            ),
        )

    def open_category_picker(self) -> None:
        self.modals.open_picker(
            Mode.CATEGORY_PICKER,
            Picker.preselected(
                "Unit Type",
                [(unit_type.label, unit_type) for unit_type in UNIT_TYPES],
                self.filter.unit_type,
                self.set_category,
            ),
        )

    def open_severity_picker(self) -> None:
        options: list[tuple[str, int | None]] = [(severity_option_label(None), None)]
        options.extend(
            (severity_option_label(priority), priority) for priority in range(len(PRIORITY_LABELS))
        )
        self.modals.open_picker(
            Mode.SEVERITY_PICKER,
            Picker.preselected("Priority", options, self.logs.severity, self.logs.set_severity),
        )

    def open_time_picker(self) -> None:
        self.modals.open_picker(
            Mode.TIME_PICKER,
            Picker.preselected(
                "Time Range",
                [(time_range.label, time_range) for time_range in TIME_RANGES],
                self.logs.time_range,
                self.logs.set_time_range,
            ),
        )

    def open_action_picker(self) -> None:
        unit = self.filter.selected_unit
        if unit is None:
            return
        actions = available_actions(unit.sub, unit.file_state)
        options = [(f"[{action.shortcut}] {action.label}", action) for action in actions]
        self.modals.open_picker(
            Mode.ACTION_PICKER,
            Picker(title=f"Actions: {unit.name}", options=options, on_confirm=self.request_action),
        )

    def request_action(self, action: UnitAction) -> None:
        unit = self.filter.selected_unit
        if unit is None and not action.is_host_wide:
            return
        if self.actions.request(action, unit.name if unit else ""):
            self.modals.enter(Mode.CONFIRM)

    def confirm_action(self) -> None:
        self.actions.confirm(self.filter.scope, self.filter.unit_type)

    def dismiss_action(self) -> None:
        self.actions.dismiss()
        self.modals.close()

    def unit_properties(self, unit: Unit) -> UnitProperties:
        """Cached fact sheet for a unit; fetched on first use."""
        props = self.properties.get(unit.name)
        if props is None:
            props = self.unit_source.get_properties(unit.name, self.filter.scope)
            self.properties[unit.name] = props
        return props

    def open_details(self) -> None:
        unit = self.filter.selected_unit
        if unit is None:
            return
        self.details.set_lines(build_details_lines(unit, self.unit_properties(unit)))
        self.modals.enter(Mode.DETAILS)

    def open_unit_file(self) -> None:
        unit = self.filter.selected_unit
        if unit is None:
            return
        try:
            lines = self.unit_source.get_file_content(unit.name, self.filter.scope)
        except SourceError as e:
            logger.warning("Reading unit file for %s failed: %s", unit.name, e)
            lines = [f"Error: {e}"]
        self.unit_file_name = unit.name
        self.unit_file.set_lines(lines)
        self.modals.enter(Mode.UNIT_FILE)

    # -- view accessors -----------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.modals.mode

    @property
    def picker(self) -> Picker | None:
        return self.modals.picker

    @property
    def inventory_error(self) -> str | None:
        return self.filter.error

    def filtered_units(self) -> list[Unit]:
        return self.filter.filtered_units()

    @property
    def selected_position(self) -> int | None:
        return self.filter.selected

    def log_window(self) -> list[VisibleRecord]:
        return self.logs.window()

    @property
    def action_phase(self) -> ActionPhase:
        return self.actions.phase

    def action_status(self, now: float | None = None) -> str:
        if now is None:
            now = self.clock()
        return self.actions.status_text(now)

    @property
    def time_range(self) -> TimeRange:
        return self.logs.time_range
