"""unitdeck utility functions."""

from __future__ import annotations

import datetime as dt
import time

from .constants import PRIORITY_LABELS


def parse_kv_lines(output: str) -> dict[str, str]:
    """Parse key=value lines from string output.

    Only the first '=' splits, so values such as ExecStart command lines keep
    their own '=' characters.
    """
    d: dict[str, str] = {}
    for line in output.splitlines():
        if "=" in line:
            k, v = line.split("=", 1)
            d[k.strip()] = v.strip()
    return d


def format_relative_time(target_us: int, *, now_us: int | None = None) -> str:
    """Format a future wall-clock time (microseconds) relative to now.

    Returns "elapsed" for times in the past, otherwise the two most significant
    units, e.g. "2d 3h", "4h 10m", "5m 2s" or "9s".
    """
    if now_us is None:
        now_us = int(time.time() * 1_000_000)
    if target_us <= now_us:
        return "elapsed"

    diff_secs = (target_us - now_us) // 1_000_000
    days, rem = divmod(diff_secs, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)

    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_bytes(num: int) -> str:
    """Format a byte count with binary units ("1.5 KB", "500 B")."""
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024
    if num >= gb:
        return f"{num / gb:.1f} GB"
    if num >= mb:
        return f"{num / mb:.1f} MB"
    if num >= kb:
        return f"{num / kb:.1f} KB"
    return f"{num} B"


def format_cpu_time(nsec: int) -> str:
    """Format CPU nanoseconds as seconds, or minutes once past a minute."""
    secs = nsec / 1_000_000_000
    if secs >= 60:
        return f"{secs / 60:.1f}min"
    return f"{secs:.3f}s"


def format_log_timestamp(timestamp_us: int) -> str:
    """Format a journal realtime timestamp as local "Mon DD HH:MM:SS"."""
    try:
        stamp = dt.datetime.fromtimestamp(timestamp_us / 1_000_000)
    except (OverflowError, OSError, ValueError):
        return ""
    return stamp.strftime("%b %d %H:%M:%S")


def priority_label(priority: int) -> str:
    """Return the syslog name of a journal priority, or "unknown"."""
    if 0 <= priority < len(PRIORITY_LABELS):
        return PRIORITY_LABELS[priority]
    return "unknown"
