"""Local subprocess execution for the systemctl/journalctl adapters."""

from __future__ import annotations

import logging
import subprocess
import time

from .constants import COMMAND_TIMEOUT_EXIT_CODE, QUERY_TIMEOUT_S
from .exceptions import SourceError

logger = logging.getLogger("unitdeck")


def run_command(
    cmd: list[str],
    *,
    timeout_s: int = QUERY_TIMEOUT_S,
) -> tuple[int, str, str]:
    """
    Executes cmd without a shell.

    Returns (returncode, stdout, stderr). Does NOT raise on non-zero rc.
    A timeout is reported as COMMAND_TIMEOUT_EXIT_CODE with whatever output
    was captured so far.
    """
    logger.debug("Running: %s", " ".join(cmd))

    start_time = time.monotonic()
    try:
        p = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout_s,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        elapsed = time.monotonic() - start_time
        logger.debug("%s timeout after %.2fs", cmd[0], elapsed)
        return (
            COMMAND_TIMEOUT_EXIT_CODE,
            e.stdout.decode("utf-8", "replace") if e.stdout else "",
            e.stderr.decode("utf-8", "replace") if e.stderr else f"{cmd[0]} timeout",
        )
    except FileNotFoundError:
        raise SourceError(f"{cmd[0]} binary not found on PATH.")

    elapsed = time.monotonic() - start_time
    logger.debug("%s completed in %.2fs (rc=%d)", cmd[0], elapsed, p.returncode)
    return (
        p.returncode,
        p.stdout.decode("utf-8", "replace"),
        p.stderr.decode("utf-8", "replace"),
    )
