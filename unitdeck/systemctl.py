"""Unit Record Source: systemctl invocation and output parsing.

Parsing is split into pure functions over command output so it can be tested
without a running systemd; SystemctlSource wires them to run_command.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import PurePosixPath
from typing import Any

from .constants import ACTION_TIMEOUT_S, SYSTEMCTL_BIN, UNSET_PROPERTY_VALUES
from .exceptions import SourceError
from .models import ActionResult, Scope, Unit, UnitAction, UnitProperties, UnitType
from .process import run_command
from .utils import format_relative_time, parse_kv_lines

logger = logging.getLogger("unitdeck")


def systemctl_argv(scope: Scope, *args: str) -> list[str]:
    """Build a systemctl command line for the given scope."""
    argv = [SYSTEMCTL_BIN]
    if scope.is_user:
        argv.append("--user")
    argv.extend(args)
    return argv


def _load_json_list(output: str) -> list[dict[str, Any]]:
    data = json.loads(output) if output.strip() else []
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    return [item for item in data if isinstance(item, dict)]


def parse_units_json(output: str) -> list[Unit]:
    """Parse `systemctl list-units --output=json` into Unit snapshots.

    Raises:
        ValueError: If the output is not a JSON array
    """
    units = []
    for item in _load_json_list(output):
        name = item.get("unit")
        if not name:
            continue
        units.append(
            Unit(
                name=name,
                sub=item.get("sub", ""),
                load=item.get("load", ""),
                active=item.get("active", ""),
                description=item.get("description", ""),
            )
        )
    return units


def parse_timer_details(output: str) -> dict[str, str]:
    """Map timer unit name to a "next: ..." detail string."""
    details: dict[str, str] = {}
    for item in _load_json_list(output):
        unit = item.get("unit")
        if not unit:
            continue
        next_us = item.get("next") or 0
        if not isinstance(next_us, int) or next_us == 0:
            details[unit] = "next: n/a"
        else:
            details[unit] = f"next: {format_relative_time(next_us)}"
    return details


def parse_socket_details(output: str) -> dict[str, str]:
    """Map socket unit name to its listen address."""
    return {
        item["unit"]: str(item.get("listen", ""))
        for item in _load_json_list(output)
        if item.get("unit")
    }


def parse_unit_file_states(output: str) -> dict[str, str]:
    """Map unit file basename to its enablement state."""
    states: dict[str, str] = {}
    for item in _load_json_list(output):
        unit_file = item.get("unit_file")
        if not unit_file:
            continue
        # unit_file may be a full path like /usr/lib/systemd/system/foo.service
        states[PurePosixPath(unit_file).name] = item.get("state", "")
    return states


def merge_unit_details(
    units: list[Unit],
    *,
    details: dict[str, str],
    file_states: dict[str, str],
) -> list[Unit]:
    """Return new Unit snapshots carrying detail and file state where known."""
    merged = []
    for unit in units:
        merged.append(
            Unit(
                name=unit.name,
                sub=unit.sub,
                load=unit.load,
                active=unit.active,
                description=unit.description,
                detail=details.get(unit.name, unit.detail),
                file_state=file_states.get(unit.name, unit.file_state),
            )
        )
    return merged


def parse_timer_specs(raw: str) -> list[str]:
    """Extract the spec part of TimersCalendar/TimersMonotonic values.

    Example: "{ OnCalendar=*-*-* 06:00:00 ; next_elapse=... }" -> ["OnCalendar=*-*-* 06:00:00"]
    """
    specs = []
    for chunk in raw.split("}"):
        chunk = chunk.strip().lstrip("{").strip()
        if not chunk:
            continue
        spec = chunk.split(";", 1)[0].strip()
        if spec:
            specs.append(spec)
    return specs


def _optional_int(value: str) -> int | None:
    if value in UNSET_PROPERTY_VALUES:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_properties(output: str) -> UnitProperties:
    """Parse `systemctl show` key=value output into UnitProperties."""
    props = parse_kv_lines(output)

    def get(key: str) -> str:
        return props.get(key, "")

    def deps(key: str) -> list[str]:
        return get(key).split()

    try:
        main_pid = int(get("MainPID") or 0)
    except ValueError:
        main_pid = 0

    return UnitProperties(
        fragment_path=get("FragmentPath"),
        unit_file_state=get("UnitFileState"),
        active_state=get("ActiveState"),
        active_enter_timestamp=get("ActiveEnterTimestamp"),
        sub_state=get("SubState"),
        load_state=get("LoadState"),
        description=get("Description"),
        main_pid=main_pid,
        exec_main_start_timestamp=get("ExecMainStartTimestamp"),
        memory_current=_optional_int(get("MemoryCurrent")),
        cpu_usage_nsec=_optional_int(get("CPUUsageNSec")),
        requires=deps("Requires"),
        wants=deps("Wants"),
        after=deps("After"),
        before=deps("Before"),
        conflicts=deps("Conflicts"),
        triggered_by=deps("TriggeredBy"),
        triggers=deps("Triggers"),
        timers_calendar=parse_timer_specs(get("TimersCalendar")),
        timers_monotonic=parse_timer_specs(get("TimersMonotonic")),
        last_trigger_usec=get("LastTriggerUSec"),
        result=get("Result"),
        next_elapse_realtime=get("NextElapseUSecRealtime"),
        persistent=get("Persistent"),
        accuracy_usec=get("AccuracyUSec"),
        randomized_delay_usec=get("RandomizedDelayUSec"),
        paths=get("Paths"),
        listen=get("Listen"),
        accept=get("Accept"),
        n_connections=get("NConnections"),
        n_accepted=get("NAccepted"),
    )


class SystemctlSource:
    """Unit Record Source backed by the systemctl binary."""

    def list_units(self, unit_type: UnitType, scope: Scope) -> list[Unit]:
        """List all units of a category, merged with detail and file state.

        Raises:
            SourceError: If systemctl fails or prints something other than JSON
        """
        rc, out, err = run_command(
            systemctl_argv(
                scope,
                "list-units",
                f"--type={unit_type.systemctl_type}",
                "--all",
                "--no-pager",
                "--output=json",
            )
        )
        if rc != 0:
            raise SourceError(f"systemctl failed: {err.strip()}")
        try:
            units = parse_units_json(out)
        except ValueError as e:
            raise SourceError(f"Failed to parse JSON: {e}") from e

        details: dict[str, str] = {}
        if unit_type is UnitType.TIMER:
            details = self._best_effort(scope, parse_timer_details, "list-timers", "--all")
        elif unit_type is UnitType.SOCKET:
            details = self._best_effort(scope, parse_socket_details, "list-sockets", "--all")
        file_states = self._best_effort(
            scope,
            parse_unit_file_states,
            "list-unit-files",
            f"--type={unit_type.systemctl_type}",
        )
        return merge_unit_details(units, details=details, file_states=file_states)

    def _best_effort(
        self,
        scope: Scope,
        parser: Callable[[str], dict[str, str]],
        *args: str,
    ) -> dict[str, str]:
        """Run an enrichment query; any failure yields an empty mapping."""
        verb = args[0]
        args = (*args, "--no-pager", "--output=json")
        try:
            rc, out, err = run_command(systemctl_argv(scope, *args))
        except SourceError as e:
            logger.debug("systemctl %s skipped: %s", verb, e)
            return {}
        if rc != 0:
            logger.debug("systemctl %s failed (rc=%d): %s", verb, rc, err.strip())
            return {}
        try:
            return parser(out)
        except ValueError as e:
            logger.debug("systemctl %s output unparseable: %s", verb, e)
            return {}

    def get_properties(self, name: str, scope: Scope) -> UnitProperties:
        """Fetch the property fact sheet; degrades to the zero value on failure."""
        try:
            rc, out, err = run_command(systemctl_argv(scope, "show", name, "--no-pager"))
        except SourceError as e:
            logger.warning("systemctl show %s: %s", name, e)
            return UnitProperties()
        if rc != 0:
            logger.warning("systemctl show %s failed: %s", name, err.strip())
            return UnitProperties()
        return parse_properties(out)

    def run_action(self, action: UnitAction, name: str, scope: Scope) -> ActionResult:
        """Run a lifecycle action. Never raises; failures come back as ok=False."""
        args = [action.verb]
        if not action.is_host_wide:
            args.append(name)
        try:
            rc, _out, err = run_command(systemctl_argv(scope, *args), timeout_s=ACTION_TIMEOUT_S)
        except SourceError as e:
            return ActionResult(ok=False, message=f"{action.label} failed: {e}")
        if rc == 0:
            return ActionResult(ok=True, message=f"{action.label} succeeded for {name}")
        return ActionResult(ok=False, message=f"{action.label} failed: {err.strip()}")

    def get_file_content(self, name: str, scope: Scope) -> list[str]:
        """Return the unit file (with drop-ins) as printed by `systemctl cat`.

        Raises:
            SourceError: If systemctl cannot show the unit file
        """
        rc, out, err = run_command(systemctl_argv(scope, "cat", name, "--no-pager"))
        if rc != 0:
            raise SourceError(err.strip() or f"systemctl cat {name} failed (rc={rc})")
        return out.splitlines()
