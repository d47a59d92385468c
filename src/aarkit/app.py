"""Typer application and CLI entry point for aarkit.

The root :data:`app` carries the global output flags; sub-command groups
(``build``, ``manifest``, ``config``) are registered from
:mod:`aarkit.commands`. :func:`main` is the console-script entry point
declared in ``pyproject.toml``. It installs a SIGINT handler and maps
:class:`~aarkit.exceptions.AarkitError` to its exit code. Anything
else is written to a crash log under the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from aarkit import __version__
from aarkit.commands.build import build_app
from aarkit.commands.config import config_app
from aarkit.commands.manifest import manifest_app
from aarkit.exceptions import AarkitError
from aarkit.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE
from aarkit.output import error

app = typer.Typer(
    name="aarkit",
    help="Build Android plugin sources into .aar archives.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(build_app, name="build", help="Build and migrate plugin Android sources.")
app.add_typer(manifest_app, name="manifest", help="Merge manifests and inspect Gradle scopes.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"aarkit {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Initialise the global :class:`~aarkit.output.OutputManager` from flags."""
    from aarkit.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    """Send records from the aarkit loggers to stderr through Rich."""
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("aarkit")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
        )


def _cancel(*_: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_CANCELLED)


def _setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _cancel)


def _write_crash_log() -> Path:
    """Save the active traceback under the data directory and return its path."""
    from aarkit.config import get_data_dir

    log_path = get_data_dir() / "logs" / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_path.write_text(traceback.format_exc(), encoding="utf-8")
    return log_path


def main() -> None:
    """Console-script entry point; always ends in ``SystemExit``."""
    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        _cancel()
    except AarkitError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
