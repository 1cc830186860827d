"""Log Viewport Engine: journal buffer, tailing, continuity and scroll anchor.

The buffer holds the records of one unit. It is filled by a bounded fetch of
the most recent records and then grows by tailing from the last record's
journal cursor; history is never re-fetched while tailing.

Scrolling is expressed as an anchor: either a fixed top record index or
"track latest", which is resolved on demand against the per-record visual
heights supplied by the renderer. Resolution scans backward from the end and
stops as soon as the viewport is full, so it never measures the whole buffer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ...constants import DEFAULT_LOG_LINES, DEFAULT_TAIL_INTERVAL_S, LOG_ERROR_PREFIX
from ...exceptions import SourceError
from ...models import LogRecord, Scope, TimeRange

if TYPE_CHECKING:
    from .types import LogSource

logger = logging.getLogger("unitdeck")


class MarkerKind(Enum):
    """Why the stream is discontinuous before a record."""

    BOOT = "boot"
    INVOCATION = "invocation"


@dataclass(frozen=True)
class Fixed:
    """Scroll anchor pinned to a record index at the top of the viewport."""

    index: int


@dataclass(frozen=True)
class TrackLatest:
    """Scroll anchor that follows the newest records."""


TRACK_LATEST = TrackLatest()

ScrollAnchor = Fixed | TrackLatest


class ContinuityTracker:
    """Detects reboots and service restarts between consecutive records.

    Comparisons are made against the last *known* boot and invocation ids, so
    records that lack an id (kernel messages, synthetic lines) do not cause
    spurious markers. A boot change takes precedence over an invocation change
    at the same boundary.
    """

    def __init__(self) -> None:
        self.last_boot: str | None = None
        self.last_invocation: str | None = None

    def observe(self, record: LogRecord) -> MarkerKind | None:
        marker = None
        if record.boot_id and self.last_boot and record.boot_id != self.last_boot:
            marker = MarkerKind.BOOT
        elif (
            record.invocation_id
            and self.last_invocation
            and record.invocation_id != self.last_invocation
        ):
            marker = MarkerKind.INVOCATION
        if record.boot_id:
            self.last_boot = record.boot_id
        if record.invocation_id:
            self.last_invocation = record.invocation_id
        return marker


def detect_discontinuities(records: Sequence[LogRecord]) -> dict[int, MarkerKind]:
    """Map record index to the marker drawn immediately above it."""
    tracker = ContinuityTracker()
    markers = {}
    for idx, record in enumerate(records):
        marker = tracker.observe(record)
        if marker is not None:
            markers[idx] = marker
    return markers


def resolve_bottom_index(count: int, height_of: Callable[[int], int], viewport: int) -> int:
    """Return the top index that shows the newest records.

    This is the smallest index i such that the summed heights of records
    i..count-1 fit in the viewport. If the last record alone is taller than
    the viewport, it is returned. Heights are only requested for the records
    scanned.
    """
    if count <= 0:
        return 0
    total = 0
    idx = count - 1
    while idx >= 0:
        total += height_of(idx)
        if total > viewport:
            break
        idx -= 1
    return min(idx + 1, count - 1)


@dataclass(frozen=True)
class VisibleRecord:
    """One record in the current log window, as handed to the renderer."""

    index: int
    record: LogRecord
    marker: MarkerKind | None
    is_match: bool
    is_current_match: bool


def _one_line(record: LogRecord, width: int) -> int:
    return 1


class LogViewport:
    """Owns the log buffer of the selected unit and everything scrolled over it."""

    def __init__(
        self,
        source: LogSource,
        *,
        scope: Scope = Scope.SYSTEM,
        limit: int = DEFAULT_LOG_LINES,
        tail_interval: float = DEFAULT_TAIL_INTERVAL_S,
        measure: Callable[[LogRecord, int], int] = _one_line,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.scope = scope
        self.limit = limit
        self.tail_interval = tail_interval
        self.measure = measure
        self.clock = clock

        self.unit_name: str | None = None
        self.records: list[LogRecord] = []
        self.markers: dict[int, MarkerKind] = {}
        self._tracker = ContinuityTracker()
        self.anchor: ScrollAnchor = TRACK_LATEST
        self.live_tail = True
        self.dirty = True

        self.severity: int | None = None
        self.time_range = TimeRange.ALL

        self.search_query = ""
        self.matches: list[int] = []
        self.match_pos: int | None = None

        self.height = 1
        self.width = 80
        self._next_tail_at = 0.0

    # -- geometry -----------------------------------------------------------

    def set_geometry(self, height: int, width: int) -> None:
        """Record the log panel's inner size; called once per frame."""
        self.height = max(height, 1)
        self.width = max(width, 1)

    def record_height(self, idx: int) -> int:
        """Visual lines used by a record, including its marker line."""
        height = max(self.measure(self.records[idx], self.width), 1)
        if idx in self.markers:
            height += 1
        return height

    def bottom_index(self) -> int:
        return resolve_bottom_index(len(self.records), self.record_height, self.height)

    def top_index(self) -> int:
        """Resolve the anchor to a concrete top record index."""
        bottom = self.bottom_index()
        if isinstance(self.anchor, TrackLatest):
            return bottom
        return min(self.anchor.index, bottom)

    def last_visible_index(self, top: int | None = None) -> int:
        """Index of the last record that is at least partly visible."""
        if top is None:
            top = self.top_index()
        used = 0
        idx = top
        while idx < len(self.records):
            used += self.record_height(idx)
            if used >= self.height:
                return idx
            idx += 1
        return max(len(self.records) - 1, top)

    # -- invalidation -------------------------------------------------------

    def set_unit(self, name: str | None) -> None:
        """Follow the selected unit; a different unit forces a reload."""
        if name != self.unit_name:
            self.unit_name = name
            self.dirty = True

    def invalidate(self) -> None:
        """Drop the buffer; the next ensure_loaded() refetches."""
        self.dirty = True
        self._clear_buffer()

    def set_severity(self, severity: int | None) -> None:
        if severity != self.severity:
            self.severity = severity
            self.dirty = True

    def set_time_range(self, time_range: TimeRange) -> None:
        if time_range != self.time_range:
            self.time_range = time_range
            self.dirty = True

    def _clear_buffer(self) -> None:
        self.records = []
        self.markers = {}
        self._tracker = ContinuityTracker()
        self.clear_search()
        self.anchor = TRACK_LATEST

    # -- loading and tailing ------------------------------------------------

    def ensure_loaded(self) -> bool:
        """Reload if dirty. Returns True if the buffer changed."""
        if not self.dirty:
            return False
        self.load()
        return True

    def load(self) -> None:
        """Discard buffer and search state and fetch the newest records."""
        self.dirty = False
        self._clear_buffer()
        self.live_tail = True
        self._next_tail_at = self.clock() + self.tail_interval
        if self.unit_name is None:
            return
        try:
            records = self.source.fetch_recent(
                self.unit_name,
                self.scope,
                self.limit,
                severity=self.severity,
                time_range=self.time_range,
            )
        except SourceError as e:
            logger.warning("Log fetch for %s failed: %s", self.unit_name, e)
            records = [LogRecord(message=f"{LOG_ERROR_PREFIX}{e}")]
        self.append(records)

    def seconds_until_tail(self, now: float) -> float | None:
        """Time left before the next tail poll, or None if tailing is idle."""
        if not self.live_tail or self.unit_name is None:
            return None
        return max(self._next_tail_at - now, 0.0)

    def maybe_tail(self, now: float) -> bool:
        """Poll for records after the last cursor if the tail interval elapsed.

        Returns True if records were appended.
        """
        if now < self._next_tail_at:
            return False
        self._next_tail_at = now + self.tail_interval
        if not self.live_tail or self.dirty or self.unit_name is None:
            return False
        if not self.records:
            return self._fetch_first_records()
        cursor = self.records[-1].cursor
        if cursor is None:
            return False
        try:
            new_records = self.source.fetch_since(
                self.unit_name,
                cursor,
                self.scope,
                severity=self.severity,
                time_range=self.time_range,
            )
        except SourceError as e:
            logger.warning("Log tail for %s failed: %s", self.unit_name, e)
            return False
        if not new_records:
            return False
        self.append(new_records)
        return True

    def _fetch_first_records(self) -> bool:
        # No cursor to resume from yet, so poll the recent window instead
        try:
            records = self.source.fetch_recent(
                self.unit_name,
                self.scope,
                self.limit,
                severity=self.severity,
                time_range=self.time_range,
            )
        except SourceError as e:
            logger.warning("Log tail for %s failed: %s", self.unit_name, e)
            return False
        if not records:
            return False
        self.append(records)
        return True

    def append(self, records: Sequence[LogRecord]) -> None:
        """Append records, extending markers and search matches incrementally."""
        query = self.search_query.lower()
        for record in records:
            idx = len(self.records)
            marker = self._tracker.observe(record)
            if marker is not None:
                self.markers[idx] = marker
            self.records.append(record)
            if query and query in record.message.lower():
                self.matches.append(idx)

    # -- scrolling ----------------------------------------------------------

    def scroll_up(self, amount: int) -> None:
        self.anchor = Fixed(max(self.top_index() - amount, 0))
        self.live_tail = False

    def scroll_down(self, amount: int) -> None:
        self.anchor = Fixed(min(self.top_index() + amount, self.bottom_index()))
        self.live_tail = False

    def go_top(self) -> None:
        self.anchor = Fixed(0)
        self.live_tail = False

    def go_bottom(self) -> None:
        self.anchor = Fixed(self.bottom_index())
        self.live_tail = False

    def set_live_tail(self, enabled: bool) -> None:
        self.live_tail = enabled
        if enabled:
            self.anchor = TRACK_LATEST
            self._next_tail_at = self.clock()

    def toggle_live_tail(self) -> None:
        self.set_live_tail(not self.live_tail)

    def _jump_to(self, idx: int) -> None:
        top = self.top_index()
        if top <= idx <= self.last_visible_index(top):
            return
        self.anchor = Fixed(min(idx, self.bottom_index()))
        self.live_tail = False

    # -- search -------------------------------------------------------------

    def set_search(self, query: str) -> None:
        """Recompute matches for query and jump to the first one."""
        self.search_query = query
        self.matches = []
        self.match_pos = None
        if not query:
            return
        needle = query.lower()
        self.matches = [
            idx for idx, record in enumerate(self.records) if needle in record.message.lower()
        ]
        if self.matches:
            self.match_pos = 0
            self.anchor = Fixed(min(self.matches[0], self.bottom_index()))
            self.live_tail = False

    def clear_search(self) -> None:
        self.search_query = ""
        self.matches = []
        self.match_pos = None

    @property
    def current_match(self) -> int | None:
        if self.match_pos is None or not self.matches:
            return None
        return self.matches[self.match_pos]

    def next_match(self) -> None:
        if not self.matches:
            return
        if self.match_pos is None:
            self.match_pos = 0
        else:
            self.match_pos = (self.match_pos + 1) % len(self.matches)
        self._jump_to(self.matches[self.match_pos])

    def previous_match(self) -> None:
        if not self.matches:
            return
        if self.match_pos is None or self.match_pos == 0:
            self.match_pos = len(self.matches) - 1
        else:
            self.match_pos -= 1
        self._jump_to(self.matches[self.match_pos])

    # -- view ---------------------------------------------------------------

    def window(self) -> list[VisibleRecord]:
        """Records that fit in the viewport starting at the resolved top."""
        if not self.records:
            return []
        top = self.top_index()
        last = self.last_visible_index(top)
        match_set = set(self.matches)
        current = self.current_match
        return [
            VisibleRecord(
                index=idx,
                record=self.records[idx],
                marker=self.markers.get(idx),
                is_match=idx in match_set,
                is_current_match=idx == current,
            )
            for idx in range(top, last + 1)
        ]
