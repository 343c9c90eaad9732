"""Typer application and CLI entry point for distmatrix.

Registers the built-in sub-commands (``matrix``, ``cache``, ``config``) and
sets up output and logging from the global flags before every command.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~distmatrix.exceptions.DistanceMatrixError`
instances that escape a command exit with their ``exit_code``.
"""

from __future__ import annotations

import signal
import sys
from typing import Any

import typer

from distmatrix import __version__
from distmatrix.commands.cache import cache_app
from distmatrix.commands.config import config_app
from distmatrix.commands.matrix import matrix_command
from distmatrix.exit_codes import EXIT_GENERIC_FAILURE, EXIT_SUCCESS


app = typer.Typer(
    name="distmatrix",
    help="Query travel distances and times from the Google Distance Matrix API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("matrix")(matrix_command)
app.add_typer(cache_app, name="cache", help="Response cache management.")
app.add_typer(config_app, name="config", help="Settings management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"distmatrix {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)


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
    """Root callback: install the output manager and route log records to stderr."""
    from distmatrix.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``distmatrix`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        from distmatrix.exceptions import DistanceMatrixError
        from distmatrix.output import error

        if isinstance(exc, DistanceMatrixError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc!r}")
        sys.exit(EXIT_GENERIC_FAILURE)
