"""unitdeck exception classes."""

from __future__ import annotations


class UnitDeckError(RuntimeError):
    """Base exception for unitdeck errors."""


class UserError(UnitDeckError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class CommandFailureError(UnitDeckError):
    """Command failed - error message already printed, just need to exit.

    This exception is for cases where a command has already printed
    its error message and just needs to signal failure without
    additional output from main().
    """

    def __init__(self, rc: int = 1):
        super().__init__("")
        self.rc = rc


class SourceError(UnitDeckError):
    """An external systemctl/journalctl call failed or returned unusable output.

    The panel never lets this escape the main loop: it becomes an inventory
    banner, a synthetic log record, or a settled action failure.
    """
