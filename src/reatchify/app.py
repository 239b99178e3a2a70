"""Typer application and CLI entry point for reatchify.

Registers the built-in commands (``generate``, ``validate``, ``init``,
``inspect``) and the global output flags. :func:`main` is the console-script
entry point declared in ``pyproject.toml``; unhandled exceptions are written
to a crash log under the data directory.

See Also:
    :mod:`reatchify.output`: Output formatting initialised in :func:`main_callback`.
    :mod:`reatchify.generator.pipeline`: What ``generate`` runs.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from reatchify import __version__
from reatchify.commands.generate import generate_command, validate_command
from reatchify.commands.init import init_command
from reatchify.commands.inspect import inspect_app
from reatchify.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="reatchify",
    help="Generate a typed TypeScript API client from an endpoint schema.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reatchify {__version__}")
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
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~reatchify.output.OutputManager` and routes
    library logging to stderr at a level matching ``--quiet``/``--verbose``.
    """
    from reatchify.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


app.command("generate")(generate_command)
app.command("validate")(validate_command)
app.command("init")(init_command)
app.add_typer(inspect_app, name="inspect", help="Inspect the resolved config and project.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from reatchify.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``reatchify`` console script.

    A :class:`~reatchify.exceptions.ReatchifyError` that escapes a command
    exits with its ``exit_code``; anything else produces a crash log and
    exit code 1.

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
        from reatchify.commands import suggestions_for
        from reatchify.exceptions import ReatchifyError
        from reatchify.output import error, suggest

        if isinstance(exc, ReatchifyError):
            error(str(exc))
            for hint in suggestions_for(exc):
                suggest(hint)
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
