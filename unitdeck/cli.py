"""unitdeck CLI using Click."""

from __future__ import annotations

import logging
import os
import sys
from importlib.metadata import version

import click

from .cli_types import ListArgs, PanelArgs
from .commands import cmd_list, cmd_panel
from .constants import DEFAULT_LOG_LINES, DEFAULT_TAIL_INTERVAL_S
from .exceptions import CommandFailureError, UnitDeckError, UserError
from .models import UNIT_TYPES

# Module logger
logger = logging.getLogger("unitdeck")

UNIT_TYPE_CHOICES = [unit_type.value for unit_type in UNIT_TYPES]


def setup_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Configure logging for the CLI.

    With log_file, records go to that file instead of stderr (curses owns
    the terminal while the panel runs).
    """
    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)
    if log_file is not None:
        if any(
            isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
            for h in logger.handlers
        ):
            return
        handler: logging.Handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
        logger.addHandler(handler)
        return
    if any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)


def silence_stderr_logging() -> None:
    """Detach stderr handlers so log lines do not scribble over the curses screen."""
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.FileHandler
        ):
            logger.removeHandler(handler)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())


# Options shared by the panel and list commands
def common_options(func):
    """Decorator to add unit selection options to all commands."""
    func = click.option(
        "--user",
        is_flag=True,
        help="Talk to the per-user systemd instance instead of the system one.",
    )(func)
    func = click.option(
        "--type",
        "unit_type",
        type=click.Choice(UNIT_TYPE_CHOICES, case_sensitive=False),
        default="service",
        show_default=True,
        help="Unit type to list.",
    )(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("unitdeck"), prog_name="unitdeck")
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Write log records to this file instead of stderr.",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, log_file: str | None):
    """unitdeck: a terminal control panel for systemd units and their journal."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["log_file"] = log_file
    setup_logging(debug=debug, log_file=log_file)


@cli.command("panel")
@common_options
@click.option(
    "--tail-interval",
    type=click.FloatRange(min=0.1),
    default=DEFAULT_TAIL_INTERVAL_S,
    show_default=True,
    help="Seconds between live-tail journal polls.",
)
@click.option(
    "--log-lines",
    type=click.IntRange(min=1),
    default=DEFAULT_LOG_LINES,
    show_default=True,
    help="Number of most recent journal records loaded per unit.",
)
@click.pass_context
def panel(
    ctx: click.Context,
    unit_type: str,
    user: bool,
    tail_interval: float,
    log_lines: int,
):
    """Open the interactive panel (units, logs, details, actions)."""
    args = PanelArgs(
        unit_type=unit_type.lower(),
        user=user,
        tail_interval=tail_interval,
        log_lines=log_lines,
        log_file=ctx.obj.get("log_file"),
    )
    if args.log_file is None:
        silence_stderr_logging()
    cmd_panel(args)


@cli.command("list")
@common_options
@click.option(
    "--search",
    "-s",
    help="Case-insensitive substring over unit name and description.",
)
@click.option(
    "--status",
    help="Only units in this sub-state (e.g. running, failed, waiting).",
)
@click.option(
    "--file-state",
    help="Only units with this unit file state (e.g. enabled, disabled, static).",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Emit machine-readable JSON to stdout.",
)
def list_units(
    unit_type: str,
    user: bool,
    search: str | None,
    status: str | None,
    file_state: str | None,
    json_output: bool,
):
    """Print the unit inventory once and exit."""
    args = ListArgs(
        unit_type=unit_type.lower(),
        user=user,
        search=search,
        status=status,
        file_state=file_state,
        json=json_output,
    )
    cmd_list(args)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except CommandFailureError as e:
        # Command already printed its error message, just exit
        sys.exit(e.rc)
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except UnitDeckError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
