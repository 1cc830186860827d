"""Action Orchestrator: confirm, execute off-thread, settle, refresh.

A lifecycle action (systemctl start/stop/...) can take arbitrarily long, so it
runs on a daemon thread. The thread hands back exactly one result through a
single-slot queue which the main loop polls without blocking. Once the result
is consumed a second thread re-lists the inventory and delivers it the same
way.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from ...constants import BLINK_INTERVAL_S, SPINNER_FRAMES
from ...exceptions import SourceError
from ...models import ActionResult, Scope, Unit, UnitAction, UnitType

if TYPE_CHECKING:
    from .types import UnitSource

logger = logging.getLogger("unitdeck")

T = TypeVar("T")


class ActionPhase(Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    EXECUTING = "executing"
    SETTLED = "settled"


class OneShot(Generic[T]):
    """Single-value channel from a worker thread to the main loop.

    The producer sends at most once; poll() returns the value the first time
    it is available and None before and ever after.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[T] = queue.Queue(maxsize=1)
        self._consumed = False

    def send(self, value: T) -> None:
        self._queue.put_nowait(value)

    def poll(self) -> T | None:
        if self._consumed:
            return None
        try:
            value = self._queue.get_nowait()
        except queue.Empty:
            return None
        self._consumed = True
        return value

    @property
    def consumed(self) -> bool:
        return self._consumed


@dataclass(frozen=True)
class RefreshOutcome:
    """Inventory re-listed after an action, tagged with what it was listed for."""

    unit_type: UnitType
    scope: Scope
    units: list[Unit] | None = None
    error: str | None = None


def _spawn(name: str, target: Callable[[], None]) -> threading.Thread:
    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()
    return thread


class ActionOrchestrator:
    """Owns the single pending action and its lifecycle.

    idle -> confirming(action, unit) -> executing -> settled(result) -> idle
    """

    def __init__(self, source: UnitSource, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.source = source
        self.clock = clock
        self.phase = ActionPhase.IDLE
        self.action: UnitAction | None = None
        self.unit_name = ""
        self.result: ActionResult | None = None
        self.started_at: float | None = None
        self._channel: OneShot[ActionResult] | None = None
        self._refresh_channel: OneShot[RefreshOutcome] | None = None
        self._refresh_target: tuple[UnitType, Scope] | None = None

    @property
    def is_executing(self) -> bool:
        return self.phase is ActionPhase.EXECUTING

    @property
    def prompt(self) -> str:
        if self.action is None:
            return ""
        return self.action.confirmation_message(self.unit_name)

    def request(self, action: UnitAction, unit_name: str) -> bool:
        """Stage an action for confirmation. Ignored unless idle."""
        if self.phase is not ActionPhase.IDLE:
            return False
        self.phase = ActionPhase.CONFIRMING
        self.action = action
        # host-wide actions carry an empty placeholder, not a missing unit
        self.unit_name = "" if action.is_host_wide else unit_name
        self.result = None
        return True

    def confirm(self, scope: Scope, unit_type: UnitType) -> bool:
        """Start the staged action on a worker thread and return immediately.

        unit_type and scope also select the inventory re-listed after the
        action settles.
        """
        if self.phase is not ActionPhase.CONFIRMING or self.action is None:
            return False
        action = self.action
        name = self.unit_name
        channel: OneShot[ActionResult] = OneShot()

        def work() -> None:
            try:
                result = self.source.run_action(action, name, scope)
            except Exception as e:
                logger.exception("%s %s raised", action.verb, name or "(host)")
                result = ActionResult(ok=False, message=f"{action.label} failed: {e}")
            channel.send(result)

        self._channel = channel
        self._refresh_target = (unit_type, scope)
        self.phase = ActionPhase.EXECUTING
        self.started_at = self.clock()
        logger.debug("Running %s %s", action.verb, name or "(host)")
        _spawn(f"unitdeck-{action.verb}", work)
        return True

    def poll(self) -> ActionResult | None:
        """Consume the action result if it arrived; settles and starts a refresh."""
        if self.phase is not ActionPhase.EXECUTING or self._channel is None:
            return None
        result = self._channel.poll()
        if result is None:
            return None
        self.phase = ActionPhase.SETTLED
        self.result = result
        if not result.ok:
            logger.warning("%s", result.message)
        self._start_refresh()
        return result

    def _start_refresh(self) -> None:
        if self._refresh_target is None:
            return
        unit_type, scope = self._refresh_target
        channel: OneShot[RefreshOutcome] = OneShot()

        def work() -> None:
            try:
                units = self.source.list_units(unit_type, scope)
            except SourceError as e:
                channel.send(RefreshOutcome(unit_type, scope, error=str(e)))
                return
            except Exception as e:
                logger.exception("Post-action refresh raised")
                channel.send(RefreshOutcome(unit_type, scope, error=str(e)))
                return
            channel.send(RefreshOutcome(unit_type, scope, units=units))

        self._refresh_channel = channel
        _spawn("unitdeck-refresh", work)

    def poll_refresh(self) -> RefreshOutcome | None:
        """Consume the post-action inventory if it arrived."""
        if self._refresh_channel is None:
            return None
        outcome = self._refresh_channel.poll()
        if outcome is not None:
            self._refresh_channel = None
        return outcome

    @property
    def refresh_pending(self) -> bool:
        return self._refresh_channel is not None

    def dismiss(self) -> None:
        """Drop the pending action whatever its phase.

        Dismissing while executing abandons the result; the external command
        keeps running.
        """
        self.phase = ActionPhase.IDLE
        self.action = None
        self.unit_name = ""
        self.result = None
        self.started_at = None
        self._channel = None

    def spinner(self, now: float) -> str:
        if self.phase is not ActionPhase.EXECUTING or self.started_at is None:
            return ""
        frame = int((now - self.started_at) / BLINK_INTERVAL_S)
        return SPINNER_FRAMES[frame % len(SPINNER_FRAMES)]

    def status_text(self, now: float) -> str:
        """One-line description of the pending action for the confirm dialog."""
        if self.phase is ActionPhase.CONFIRMING:
            return self.prompt
        if self.phase is ActionPhase.EXECUTING and self.action is not None:
            return f"{self.spinner(now)} {self.action.progress_label}"
        if self.phase is ActionPhase.SETTLED and self.result is not None:
            return self.result.message
        return ""
