"""Domain types shared by the systemd adapters and the panel session.

Units, properties and log records are plain immutable snapshots. Enumerations
carry the fixed option lists the panel offers (categories, sub-state filters,
time ranges, lifecycle actions) together with the systemctl/journalctl
arguments they map to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .constants import DAEMON_RELOAD_PROMPT


class UnitType(Enum):
    """Unit category the inventory is listed for."""

    SERVICE = "service"
    TIMER = "timer"
    SOCKET = "socket"
    TARGET = "target"
    PATH = "path"

    @property
    def label(self) -> str:
        return _UNIT_TYPE_LABELS[self]

    @property
    def systemctl_type(self) -> str:
        return self.value

    @property
    def status_options(self) -> tuple[str, ...]:
        """Sub-state picker options; the leading "All" means no filter."""
        return _STATUS_OPTIONS[self]


_UNIT_TYPE_LABELS = {
    UnitType.SERVICE: "Services",
    UnitType.TIMER: "Timers",
    UnitType.SOCKET: "Sockets",
    UnitType.TARGET: "Targets",
    UnitType.PATH: "Paths",
}

_STATUS_OPTIONS = {
    UnitType.SERVICE: ("All", "running", "exited", "failed", "dead"),
    UnitType.TIMER: ("All", "waiting", "running", "elapsed"),
    UnitType.SOCKET: ("All", "listening", "running", "failed"),
    UnitType.TARGET: ("All", "active", "inactive"),
    UnitType.PATH: ("All", "waiting", "running", "failed"),
}

UNIT_TYPES: tuple[UnitType, ...] = tuple(UnitType)


class Scope(Enum):
    """systemd instance the panel talks to."""

    SYSTEM = "system"
    USER = "user"

    @property
    def is_user(self) -> bool:
        return self is Scope.USER

    def toggled(self) -> Scope:
        return Scope.SYSTEM if self is Scope.USER else Scope.USER


class TimeRange(Enum):
    """Journal time window, in picker order."""

    ALL = "All"
    FIFTEEN_MINUTES = "Last 15 minutes"
    ONE_HOUR = "Last 1 hour"
    ONE_DAY = "Last 24 hours"
    SEVEN_DAYS = "Last 7 days"
    TODAY = "Today"

    @property
    def label(self) -> str:
        return self.value

    @property
    def journalctl_since(self) -> str | None:
        return _SINCE_VALUES.get(self)


_SINCE_VALUES = {
    TimeRange.FIFTEEN_MINUTES: "15 min ago",
    TimeRange.ONE_HOUR: "1 hour ago",
    TimeRange.ONE_DAY: "1 day ago",
    TimeRange.SEVEN_DAYS: "7 days ago",
    TimeRange.TODAY: "today",
}

TIME_RANGES: tuple[TimeRange, ...] = tuple(TimeRange)


class UnitAction(Enum):
    """Lifecycle action; the value is the systemctl verb."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    RELOAD = "reload"
    ENABLE = "enable"
    DISABLE = "disable"
    DAEMON_RELOAD = "daemon-reload"

    @property
    def verb(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return _ACTION_TEXT[self][0]

    @property
    def shortcut(self) -> str:
        return _ACTION_TEXT[self][1]

    @property
    def progress_label(self) -> str:
        return _ACTION_TEXT[self][2]

    @property
    def is_host_wide(self) -> bool:
        """Host-wide actions take no unit argument."""
        return self is UnitAction.DAEMON_RELOAD

    def confirmation_message(self, unit_name: str) -> str:
        if self.is_host_wide:
            return DAEMON_RELOAD_PROMPT
        return f"{self.label} {unit_name}?"

    @classmethod
    def from_shortcut(cls, key: str) -> UnitAction | None:
        for action in cls:
            if action.shortcut == key:
                return action
        return None


_ACTION_TEXT = {
    UnitAction.START: ("Start", "s", "Starting..."),
    UnitAction.STOP: ("Stop", "t", "Stopping..."),
    UnitAction.RESTART: ("Restart", "r", "Restarting..."),
    UnitAction.RELOAD: ("Reload", "l", "Reloading..."),
    UnitAction.ENABLE: ("Enable", "e", "Enabling..."),
    UnitAction.DISABLE: ("Disable", "d", "Disabling..."),
    UnitAction.DAEMON_RELOAD: ("Daemon Reload", "D", "Reloading daemon..."),
}

_ACTIVE_SUB_STATES = ("running", "active", "listening", "waiting")
_STOPPED_SUB_STATES = ("dead", "failed", "inactive", "exited")


def available_actions(sub_state: str, file_state: str | None) -> list[UnitAction]:
    """Return the actions that make sense for a unit in the given state.

    Daemon reload is host-wide and always offered last.
    """
    if sub_state in _ACTIVE_SUB_STATES:
        actions = [UnitAction.STOP, UnitAction.RESTART, UnitAction.RELOAD]
    elif sub_state in _STOPPED_SUB_STATES:
        actions = [UnitAction.START]
    else:
        actions = [UnitAction.START, UnitAction.STOP]

    if file_state == "enabled":
        actions.append(UnitAction.DISABLE)
    elif file_state == "disabled":
        actions.append(UnitAction.ENABLE)

    actions.append(UnitAction.DAEMON_RELOAD)
    return actions


@dataclass(frozen=True)
class Unit:
    """One row of `systemctl list-units`, merged with detail and file state."""

    name: str
    sub: str
    load: str = ""
    active: str = ""
    description: str = ""
    detail: str | None = None
    file_state: str | None = None

    def matches_text(self, query_lower: str) -> bool:
        return query_lower in self.name.lower() or query_lower in self.description.lower()


@dataclass(frozen=True)
class LogRecord:
    """One journal entry.

    timestamp is microseconds since the epoch. Every field except message is
    optional: a line that fails structured parsing keeps only its raw text.
    """

    message: str
    timestamp: int | None = None
    priority: int | None = None
    pid: str | None = None
    identifier: str | None = None
    boot_id: str | None = None
    invocation_id: str | None = None
    cursor: str | None = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a lifecycle action; message is user-facing either way."""

    ok: bool
    message: str


@dataclass
class UnitProperties:
    """Fact sheet from `systemctl show`.

    The default instance is the zero value returned when the query fails.
    """

    fragment_path: str = ""
    unit_file_state: str = ""
    active_state: str = ""
    active_enter_timestamp: str = ""
    sub_state: str = ""
    load_state: str = ""
    description: str = ""
    main_pid: int = 0
    exec_main_start_timestamp: str = ""
    memory_current: int | None = None
    cpu_usage_nsec: int | None = None
    requires: list[str] = field(default_factory=list)
    wants: list[str] = field(default_factory=list)
    after: list[str] = field(default_factory=list)
    before: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    triggered_by: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    # Timer
    timers_calendar: list[str] = field(default_factory=list)
    timers_monotonic: list[str] = field(default_factory=list)
    last_trigger_usec: str = ""
    result: str = ""
    next_elapse_realtime: str = ""
    persistent: str = ""
    accuracy_usec: str = ""
    randomized_delay_usec: str = ""
    # Path
    paths: str = ""
    # Socket
    listen: str = ""
    accept: str = ""
    n_connections: str = ""
    n_accepted: str = ""
