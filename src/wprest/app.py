"""Typer application and CLI entry point for wprest.

The ``wprest`` command inspects what a routes dictionary compiles to
(``wprest inspect ...``) and locates a live site's API root
(``wprest discover URL``).

:func:`main` is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and runs the Typer app.
A :class:`~wprest.exceptions.WPRestError` ends the process with the error's
exit code; any other exception is written to a crash log under the data
directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from wprest import __version__
from wprest.commands.inspect import inspect_app
from wprest.exit_codes import EXIT_GENERIC_FAILURE
from wprest.output import OutputFormat, OutputManager, get_output, set_output


app = typer.Typer(
    name="wprest",
    help="Compile and inspect WordPress REST API route dictionaries.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(inspect_app, name="inspect", help="Inspect compiled routes.")


class _DiagnosticsHandler(logging.Handler):
    """Send library log records to stderr through the active OutputManager."""

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        if record.levelno >= logging.WARNING:
            get_output().warning(message)
        else:
            get_output().debug(message)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("wprest")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, _DiagnosticsHandler) for h in package_logger.handlers):
        handler = _DiagnosticsHandler()
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        package_logger.addHandler(handler)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"wprest {__version__}")
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
    """Root callback: install the OutputManager and logging from global flags."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)


@app.command("discover")
def discover_command(
    url: str = typer.Argument(..., help="Any URL on a REST API enabled WordPress site."),
) -> None:
    """Find a site's API root and list the namespaces it serves.

    Example::

        wprest discover https://example.com/
    """
    from wprest.client import HttpTransport
    from wprest.exceptions import WPRestError
    from wprest.wpapi import WPAPI

    output = get_output()
    with HttpTransport() as transport:
        try:
            wp = WPAPI.discover(url, transport=transport)
        except WPRestError as exc:
            output.error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None

    output.info(f"API root: {wp.options.endpoint}")
    rows = [
        [namespace, str(len(wp.namespace(namespace).resources))]
        for namespace in sorted(wp.namespaces)
    ]
    output.print_table(["Namespace", "Resources"], rows, title=wp.options.endpoint)


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback to the data directory and return its path."""
    from wprest.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now().strftime('%Y%m%d-%H%M%S')}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``wprest`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from wprest.exceptions import WPRestError
        from wprest.output import error

        if isinstance(exc, WPRestError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
