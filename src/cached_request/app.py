"""Typer application and CLI entry point for cached_request.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``get``, ``post``, ``config``).  The root
callback turns global flags into the output manager, the logging setup
and the client options stored on ``ctx.obj``.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  It installs signal handlers and invokes the Typer
app.  :class:`~cached_request.exceptions.CachedRequestError` exits with
its own code; anything else is written to a crash log under the data
directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from cached_request import __version__
from cached_request.commands.config import config_app
from cached_request.commands.request import get_command, post_command
from cached_request.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="cached-request",
    help="Issue HTTP requests through a time-bounded response cache.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("get")(get_command)
app.command("post")(post_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"cached-request {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", min=0, help="Cache freshness window in minutes."
    ),
    auth_source: Optional[str] = typer.Option(
        None,
        "--auth-source",
        help="Basic auth credential source resolving to 'username:password' "
        "(env:VAR, file:/path, prompt).",
    ),
    insecure: bool = typer.Option(
        False, "--insecure", "-k", help="Disable TLS certificate validation."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Client log level: OFF, DEBUG, INFO, WARN, ERROR."
    ),
    coalesce: bool = typer.Option(
        False, "--coalesce", help="Share one network call between concurrent identical misses."
    ),
    raise_for_status: bool = typer.Option(
        False, "--raise-for-status", help="Treat HTTP 4xx/5xx responses as errors."
    ),
    instance_id: Optional[str] = typer.Option(
        None, "--instance-id", help="Identifier used to name the client's logger."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~cached_request.output.OutputManager`
    and the package log handler from CLI flags, and stores the client
    options in ``ctx.obj`` for the request commands.
    """
    from cached_request.log import configure_logging
    from cached_request.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat(_configured_format())

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    configure_logging(verbose=verbose, no_color=output.no_color)

    ctx.ensure_object(dict)
    ctx.obj["threshold"] = threshold
    ctx.obj["auth_source"] = auth_source
    ctx.obj["insecure"] = insecure
    ctx.obj["log_level"] = log_level
    ctx.obj["coalesce"] = coalesce
    ctx.obj["raise_for_status"] = raise_for_status
    ctx.obj["instance_id"] = instance_id
    ctx.obj["verbose"] = verbose


def _configured_format() -> str:
    """Return the persisted default output format.

    A config file that fails to load yields ``auto``; commands that read
    the config report the error themselves.
    """
    from cached_request.config import load_global_config
    from cached_request.exceptions import ConfigError

    try:
        return load_global_config().output.format
    except ConfigError:
        return "auto"


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from cached_request.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``cached-request`` console script.

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
        from cached_request.exceptions import CachedRequestError
        from cached_request.output import error

        if isinstance(exc, CachedRequestError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
