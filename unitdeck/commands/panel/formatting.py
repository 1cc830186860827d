"""Text rendering and layout for the panel (no curses dependencies)."""

from __future__ import annotations

from ...models import LogRecord, Unit, UnitProperties
from ...utils import format_bytes, format_cpu_time, format_log_timestamp, priority_label
from .logview import MarkerKind


def clip_cell(value: str, width: int) -> str:
    """Clip and pad a cell to width using ASCII ellipsis."""
    if width <= 0:
        return ""
    if len(value) <= width:
        return value.ljust(width)
    if width <= 3:
        return value[:width]
    return f"{value[: width - 3]}..."


def wrap_with_offsets(text: str, width: int) -> list[tuple[int, str]]:
    """Hard-wrap text to width, honouring embedded newlines.

    Each line comes with the offset of its first character in text. Always
    returns at least one (possibly empty) line.
    """
    if width <= 0:
        return [(0, text)]
    lines: list[tuple[int, str]] = []
    offset = 0
    for segment in text.split("\n"):
        if not segment:
            lines.append((offset, ""))
        for start in range(0, len(segment), width):
            lines.append((offset + start, segment[start : start + width]))
        offset += len(segment) + 1
    return lines or [(0, "")]


def wrap_text(text: str, width: int) -> list[str]:
    return [line for _, line in wrap_with_offsets(text, width)]


def format_log_line(record: LogRecord) -> str:
    """Render one record as "Mon DD HH:MM:SS ident[pid]: message".

    Records without structured fields (raw lines, synthetic errors) render as
    the bare message.
    """
    parts = []
    if record.timestamp is not None:
        stamp = format_log_timestamp(record.timestamp)
        if stamp:
            parts.append(stamp)
    if record.identifier:
        source = record.identifier
        if record.pid:
            source += f"[{record.pid}]"
        parts.append(source + ":")
    parts.append(record.message)
    return " ".join(parts)


def search_spans(record: LogRecord, query: str) -> list[tuple[int, int]]:
    """Case-insensitive matches of query in the message, as [start, end) of
    the rendered log line."""
    if not query:
        return []
    message = record.message.lower()
    needle = query.lower()
    base = len(format_log_line(record)) - len(record.message)
    spans = []
    pos = message.find(needle)
    while pos != -1:
        spans.append((base + pos, base + pos + len(needle)))
        pos = message.find(needle, pos + len(needle))
    return spans


def split_highlights(
    line_start: int, line: str, spans: list[tuple[int, int]]
) -> list[tuple[str, bool]]:
    """Cut one wrapped line into (text, highlighted) pieces."""
    line_end = line_start + len(line)
    pieces: list[tuple[str, bool]] = []
    cursor = line_start
    for start, end in spans:
        start = max(start, cursor)
        end = min(end, line_end)
        if start >= end:
            continue
        if start > cursor:
            pieces.append((line[cursor - line_start : start - line_start], False))
        pieces.append((line[start - line_start : end - line_start], True))
        cursor = end
    if cursor < line_end:
        pieces.append((line[cursor - line_start :], False))
    return pieces


def record_height(record: LogRecord, width: int) -> int:
    """Number of visual lines a record occupies at the given width."""
    return len(wrap_text(format_log_line(record), width))


def marker_text(kind: MarkerKind, record: LogRecord) -> str:
    """Separator line drawn above a record that starts a new boot or run."""
    if kind is MarkerKind.BOOT:
        boot = (record.boot_id or "")[:12]
        return f"-- Reboot (boot {boot}) --" if boot else "-- Reboot --"
    invocation = (record.invocation_id or "")[:12]
    return f"-- Restarted (invocation {invocation}) --" if invocation else "-- Restarted --"


def severity_option_label(priority: int | None) -> str:
    if priority is None:
        return "All"
    return f"{priority} {priority_label(priority)}"


def format_unit_row(unit: Unit, width: int) -> str:
    """Render a unit list row: padded sub-state, name, optional detail."""
    text = f"{unit.sub:<9}{unit.name}"
    if unit.detail:
        text += f"  ({unit.detail})"
    return clip_cell(text, width)


def _section(lines: list[str], title: str, rows: list[tuple[str, str]]) -> None:
    rows = [(k, v) for k, v in rows if v]
    if not rows:
        return
    if lines:
        lines.append("")
    lines.append(title)
    key_width = max(len(k) for k, _ in rows)
    for key, value in rows:
        lines.append(f"  {key.ljust(key_width)}  {value}")


def build_details_lines(unit: Unit, props: UnitProperties) -> list[str]:
    """Lay out the details modal for a unit's property fact sheet.

    Empty facts are omitted; a section with no facts is omitted entirely.
    """
    lines: list[str] = []
    _section(
        lines,
        unit.name,
        [
            ("Description", props.description or unit.description),
            ("Loaded", props.load_state),
            ("Active", f"{props.active_state} ({props.sub_state})" if props.active_state else ""),
            ("Since", props.active_enter_timestamp),
            ("Unit file", props.fragment_path),
            ("File state", props.unit_file_state),
        ],
    )
    _section(
        lines,
        "Process",
        [
            ("Main PID", str(props.main_pid) if props.main_pid else ""),
            ("Started", props.exec_main_start_timestamp),
            (
                "Memory",
                format_bytes(props.memory_current) if props.memory_current is not None else "",
            ),
            (
                "CPU",
                format_cpu_time(props.cpu_usage_nsec) if props.cpu_usage_nsec is not None else "",
            ),
        ],
    )
    _section(
        lines,
        "Schedule",
        [
            ("Calendar", ", ".join(props.timers_calendar)),
            ("Monotonic", ", ".join(props.timers_monotonic)),
            ("Next", props.next_elapse_realtime),
            ("Last", props.last_trigger_usec),
            ("Result", props.result if props.timers_calendar or props.timers_monotonic else ""),
            ("Persistent", props.persistent if props.timers_calendar else ""),
            ("Accuracy", props.accuracy_usec if props.timers_calendar else ""),
            ("Random delay", props.randomized_delay_usec if props.timers_calendar else ""),
        ],
    )
    _section(lines, "Path", [("Watches", props.paths)])
    _section(
        lines,
        "Socket",
        [
            ("Listen", props.listen),
            ("Accept", props.accept if props.listen else ""),
            ("Connections", props.n_connections if props.listen else ""),
            ("Accepted", props.n_accepted if props.listen else ""),
        ],
    )
    _section(
        lines,
        "Dependencies",
        [
            ("Requires", " ".join(props.requires)),
            ("Wants", " ".join(props.wants)),
            ("After", " ".join(props.after)),
            ("Before", " ".join(props.before)),
            ("Conflicts", " ".join(props.conflicts)),
            ("TriggeredBy", " ".join(props.triggered_by)),
            ("Triggers", " ".join(props.triggers)),
        ],
    )
    return lines


def format_match_info(query: str, match_pos: int | None, match_count: int) -> str:
    """Status suffix for log search, e.g. " (2/5)" or " (no matches)"."""
    if not query:
        return ""
    if match_count == 0:
        return " (no matches)"
    current = 0 if match_pos is None else match_pos + 1
    return f" ({current}/{match_count})"
