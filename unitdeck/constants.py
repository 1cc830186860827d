"""unitdeck constants."""

from __future__ import annotations

SYSTEMCTL_BIN = "systemctl"
JOURNALCTL_BIN = "journalctl"

# Subprocess timeouts (seconds). Actions may prompt polkit or wait on a slow
# stop job, so they get far more room than read-only queries.
QUERY_TIMEOUT_S = 30
ACTION_TIMEOUT_S = 120

# Log viewport
DEFAULT_LOG_LINES = 1000
DEFAULT_TAIL_INTERVAL_S = 2.0

# Main loop pacing
BLINK_INTERVAL_S = 0.25
ACTION_POLL_INTERVAL_S = 0.1
IDLE_WAIT_S = 1.0

# Log lines moved per mouse wheel notch
WHEEL_SCROLL_LINES = 3

LOG_ERROR_PREFIX = "Error fetching logs: "
DAEMON_RELOAD_PROMPT = "Reload systemd daemon configuration?"

# Counter values `systemctl show` uses for "no value"
UNSET_PROPERTY_VALUES = ("", "[not set]", "infinity")

FILE_STATE_OPTIONS = ("All", "enabled", "disabled", "static", "masked", "indirect")

PRIORITY_LABELS = (
    "emerg",
    "alert",
    "crit",
    "err",
    "warning",
    "notice",
    "info",
    "debug",
)

SPINNER_FRAMES = ("|", "/", "-", "\\")
COMMAND_TIMEOUT_EXIT_CODE = 124
