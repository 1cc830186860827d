"""One-shot unit listing (non-interactive counterpart of the panel)."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING

from ..constants import FILE_STATE_OPTIONS
from ..exceptions import UserError
from ..models import Scope, Unit, UnitType
from ..systemctl import SystemctlSource
from .panel.filters import filter_indices

if TYPE_CHECKING:
    from ..cli_types import ListArgs
    from .panel.types import UnitSource

LIST_COL_SEP = "  "


def render_unit_table(units: list[Unit]) -> list[str]:
    """Render units as aligned SUB / FILE / UNIT / DESCRIPTION columns."""
    rows = [("SUB", "FILE", "UNIT", "DESCRIPTION")]
    for unit in units:
        name = unit.name
        if unit.detail:
            name += f" ({unit.detail})"
        rows.append((unit.sub, unit.file_state or "-", name, unit.description))
    widths = [max(len(row[col]) for row in rows) for col in range(3)]
    lines = []
    for row in rows:
        cells = [row[col].ljust(widths[col]) for col in range(3)] + [row[3]]
        lines.append(LIST_COL_SEP.join(cells).rstrip())
    return lines


def cmd_list(args: ListArgs, *, source: UnitSource | None = None) -> None:
    """Print the (optionally filtered) unit inventory and exit."""
    unit_type = UnitType(args.unit_type)
    status = None if args.status in (None, "All") else args.status
    file_state = None if args.file_state in (None, "All") else args.file_state
    if status is not None and status not in unit_type.status_options:
        choices = ", ".join(unit_type.status_options[1:])
        raise UserError(f"Unknown status '{status}' for {unit_type.value} (choose: {choices})")
    if file_state is not None and file_state not in FILE_STATE_OPTIONS:
        choices = ", ".join(FILE_STATE_OPTIONS[1:])
        raise UserError(f"Unknown file state '{file_state}' (choose: {choices})")

    if source is None:
        source = SystemctlSource()
    scope = Scope.USER if args.user else Scope.SYSTEM
    units = source.list_units(unit_type, scope)
    indices = filter_indices(
        units,
        search=args.search or "",
        sub_state=status,
        file_state=file_state,
    )
    selected = [units[idx] for idx in indices]

    if args.json:
        print(json.dumps([asdict(unit) for unit in selected], indent=2, sort_keys=True))
        return
    for line in render_unit_table(selected):
        print(line)
