"""Tests for unitdeck/process.py - local command execution."""

from __future__ import annotations

import subprocess

import pytest
from unitdeck.exceptions import SourceError
from unitdeck.process import run_command


class TestRunCommand:
    """Tests for run_command function."""

    def test_decodes_output(self, mocker):
        mock_run = mocker.patch(
            "unitdeck.process.subprocess.run",
            return_value=subprocess.CompletedProcess(["systemctl"], 3, b"out\n", b"err\n"),
        )
        assert run_command(["systemctl", "is-active", "x"]) == (3, "out\n", "err\n")
        kwargs = mock_run.call_args.kwargs
        assert kwargs["check"] is False
        assert kwargs["timeout"] == 30
        assert kwargs["stdin"] is subprocess.DEVNULL

    def test_invalid_utf8_replaced(self, mocker):
        mocker.patch(
            "unitdeck.process.subprocess.run",
            return_value=subprocess.CompletedProcess(["journalctl"], 0, b"caf\xe9", b""),
        )
        assert run_command(["journalctl"])[1] == "caf\ufffd"

    def test_timeout_reports_124(self, mocker):
        mocker.patch(
            "unitdeck.process.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["systemctl"], 5, output=b"partial"),
        )
        assert run_command(["systemctl", "stop", "x"], timeout_s=5) == (
            124,
            "partial",
            "systemctl timeout",
        )

    def test_missing_binary(self, mocker):
        mocker.patch("unitdeck.process.subprocess.run", side_effect=FileNotFoundError())
        with pytest.raises(SourceError, match="journalctl binary not found on PATH"):
            run_command(["journalctl", "-u", "x"])
