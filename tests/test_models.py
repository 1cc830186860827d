"""Tests for unitdeck/models.py - unit types, actions and snapshots."""

from __future__ import annotations

import pytest
from unitdeck.models import (
    TIME_RANGES,
    UNIT_TYPES,
    Scope,
    TimeRange,
    Unit,
    UnitAction,
    UnitType,
    available_actions,
)


class TestAvailableActions:
    """Tests for available_actions function."""

    def test_running_enabled(self):
        assert available_actions("running", "enabled") == [
            UnitAction.STOP,
            UnitAction.RESTART,
            UnitAction.RELOAD,
            UnitAction.DISABLE,
            UnitAction.DAEMON_RELOAD,
        ]

    def test_dead_disabled(self):
        assert available_actions("dead", "disabled") == [
            UnitAction.START,
            UnitAction.ENABLE,
            UnitAction.DAEMON_RELOAD,
        ]

    def test_static_offers_no_enablement(self):
        assert available_actions("failed", "static") == [
            UnitAction.START,
            UnitAction.DAEMON_RELOAD,
        ]

    def test_transitional_state(self):
        """Unknown sub-states (activating, auto-restart) offer start and stop."""
        assert available_actions("activating", None) == [
            UnitAction.START,
            UnitAction.STOP,
            UnitAction.DAEMON_RELOAD,
        ]

    @pytest.mark.parametrize("sub", ["running", "dead", "listening", "auto-restart"])
    def test_daemon_reload_always_last(self, sub: str):
        assert available_actions(sub, None)[-1] is UnitAction.DAEMON_RELOAD


class TestUnitAction:
    """Tests for UnitAction labels and shortcuts."""

    def test_shortcuts_are_unique(self):
        shortcuts = [action.shortcut for action in UnitAction]
        assert len(shortcuts) == len(set(shortcuts))

    def test_from_shortcut(self):
        assert UnitAction.from_shortcut("D") is UnitAction.DAEMON_RELOAD
        assert UnitAction.from_shortcut("d") is UnitAction.DISABLE
        assert UnitAction.from_shortcut("x") is None

    def test_confirmation_message(self):
        assert UnitAction.STOP.confirmation_message("nginx.service") == "Stop nginx.service?"
        assert (
            UnitAction.DAEMON_RELOAD.confirmation_message("")
            == "Reload systemd daemon configuration?"
        )

    def test_verbs(self):
        assert UnitAction.DAEMON_RELOAD.verb == "daemon-reload"
        assert UnitAction.DAEMON_RELOAD.is_host_wide
        assert not UnitAction.RESTART.is_host_wide


class TestEnumerations:
    """Tests for categories, scopes and time ranges."""

    def test_category_order(self):
        assert [t.label for t in UNIT_TYPES] == [
            "Services",
            "Timers",
            "Sockets",
            "Targets",
            "Paths",
        ]

    @pytest.mark.parametrize("unit_type", list(UnitType))
    def test_status_options_start_with_all(self, unit_type: UnitType):
        assert unit_type.status_options[0] == "All"

    def test_scope_toggle(self):
        assert Scope.SYSTEM.toggled() is Scope.USER
        assert Scope.USER.toggled() is Scope.SYSTEM
        assert Scope.USER.is_user

    def test_time_range_since(self):
        assert TIME_RANGES[0] is TimeRange.ALL
        assert TimeRange.ALL.journalctl_since is None
        assert TimeRange.FIFTEEN_MINUTES.journalctl_since == "15 min ago"
        assert TimeRange.TODAY.journalctl_since == "today"


class TestUnit:
    """Tests for Unit snapshots."""

    def test_matches_text_over_name_and_description(self):
        unit = Unit(name="sshd.service", sub="running", description="OpenSSH server daemon")
        assert unit.matches_text("sshd")
        assert unit.matches_text("openssh")
        assert not unit.matches_text("nginx")
