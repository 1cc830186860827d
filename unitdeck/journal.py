"""Log Record Source: journalctl invocation and JSON record parsing."""

from __future__ import annotations

import json
from typing import Any

from .constants import JOURNALCTL_BIN
from .exceptions import SourceError
from .models import LogRecord, Scope, TimeRange
from .process import run_command


def _optional_int(value: Any) -> int | None:
    if not isinstance(value, str):
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def parse_journal_line(line: str) -> LogRecord:
    """Parse one line of `journalctl --output=json`.

    Never drops a line: anything that is not a JSON object comes back as a
    record holding only the raw text.
    """
    try:
        entry = json.loads(line)
    except json.JSONDecodeError:
        return LogRecord(message=line)
    if not isinstance(entry, dict):
        return LogRecord(message=line)

    raw_message = entry.get("MESSAGE")
    if isinstance(raw_message, str):
        message = raw_message
    elif isinstance(raw_message, list):
        # journald emits non-UTF-8 or binary messages as a byte array
        data = bytes(b for b in raw_message if isinstance(b, int) and 0 <= b <= 255)
        message = data.decode("utf-8", "replace")
    else:
        message = line

    return LogRecord(
        message=message,
        timestamp=_optional_int(entry.get("__REALTIME_TIMESTAMP")),
        priority=_optional_int(entry.get("PRIORITY")),
        pid=_optional_str(entry.get("_PID")),
        identifier=_optional_str(entry.get("SYSLOG_IDENTIFIER")),
        boot_id=_optional_str(entry.get("_BOOT_ID")),
        invocation_id=_optional_str(entry.get("_SYSTEMD_INVOCATION_ID")),
        cursor=_optional_str(entry.get("__CURSOR")),
    )


def parse_journal_output(output: str) -> list[LogRecord]:
    """Parse newline-delimited journal JSON, skipping blank lines."""
    return [parse_journal_line(line) for line in output.splitlines() if line.strip()]


def journalctl_argv(
    name: str,
    scope: Scope,
    *,
    limit: int | None = None,
    after_cursor: str | None = None,
    severity: int | None = None,
    time_range: TimeRange = TimeRange.ALL,
) -> list[str]:
    """Build a journalctl command line for one unit."""
    unit_flag = "--user-unit" if scope.is_user else "-u"
    argv = [JOURNALCTL_BIN, unit_flag, name]
    if after_cursor is not None:
        argv.append(f"--after-cursor={after_cursor}")
    if limit is not None:
        argv.extend(["-n", str(limit)])
    argv.extend(["--no-pager", "--output=json"])
    if severity is not None:
        argv.extend(["-p", str(severity)])
    since = time_range.journalctl_since
    if since is not None:
        argv.extend(["--since", since])
    return argv


class JournalSource:
    """Log Record Source backed by the journalctl binary."""

    def fetch_recent(
        self,
        name: str,
        scope: Scope,
        limit: int,
        severity: int | None = None,
        time_range: TimeRange = TimeRange.ALL,
    ) -> list[LogRecord]:
        """Fetch up to `limit` most recent records, oldest first.

        Raises:
            SourceError: If journalctl cannot be run or exits non-zero
        """
        return self._fetch(
            journalctl_argv(name, scope, limit=limit, severity=severity, time_range=time_range)
        )

    def fetch_since(
        self,
        name: str,
        cursor: str,
        scope: Scope,
        severity: int | None = None,
        time_range: TimeRange = TimeRange.ALL,
    ) -> list[LogRecord]:
        """Fetch only the records written after `cursor`.

        Raises:
            SourceError: If journalctl cannot be run or exits non-zero
        """
        return self._fetch(
            journalctl_argv(
                name, scope, after_cursor=cursor, severity=severity, time_range=time_range
            )
        )

    def _fetch(self, argv: list[str]) -> list[LogRecord]:
        rc, out, err = run_command(argv)
        # journalctl exits 1 with "-- No entries --" style output in some
        # versions; records on stdout are still authoritative.
        if rc != 0 and not out.strip():
            raise SourceError(err.strip() or f"journalctl failed (rc={rc})")
        return parse_journal_output(out)
