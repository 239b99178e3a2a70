"""Built-in CLI sub-commands for reatchify.

* :mod:`~reatchify.commands.generate` -- ``generate`` and ``validate``.
* :mod:`~reatchify.commands.init` -- write the starter config.
* :mod:`~reatchify.commands.inspect` -- show the resolved config and the
  detected project type.

Commands report a :class:`~reatchify.exceptions.ReatchifyError` through
:func:`fail`, which prints the message plus remediation hints and exits
with the error's code.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from reatchify.exceptions import (
    ConfigError,
    ExtensionError,
    GenerationError,
    OutputDirectoryError,
    ReatchifyError,
    SchemaError,
    SchemaValidationError,
)
from reatchify.output import error, suggest

_SUGGESTIONS: list[tuple[type[ReatchifyError], list[str]]] = [
    (
        SchemaValidationError,
        ["Fix the listed schema problems", "Check again: reatchify validate --schema <file>"],
    ),
    (SchemaError, ["Use a local schema: reatchify generate --schema <file>"]),
    (
        OutputDirectoryError,
        ["Overwrite existing files: reatchify generate --force", "Or choose another: --output <dir>"],
    ),
    (ConfigError, ["Create a config: reatchify init", "Inspect the result: reatchify inspect config"]),
    (ExtensionError, ["Disable it via advanced.disabledExtensions in reatchify.config.json"]),
    (GenerationError, ["Re-run with --verbose for details"]),
]


def suggestions_for(exc: ReatchifyError) -> list[str]:
    """Remediation hints for *exc*, most specific class first."""
    for exc_type, hints in _SUGGESTIONS:
        if isinstance(exc, exc_type):
            return hints
    return []


def fail(exc: ReatchifyError) -> NoReturn:
    error(str(exc))
    for hint in suggestions_for(exc):
        suggest(hint)
    raise typer.Exit(code=exc.exit_code)
