"""Exception hierarchy for reatchify.

All exceptions inherit from :class:`ReatchifyError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`reatchify.exit_codes`.
The top-level error handler in :func:`reatchify.app.main` catches
``ReatchifyError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ReatchifyError (exit 1)
    +-- ConfigError            (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- SchemaError            (exit 7)
    |   +-- SchemaValidationError (exit 7)
    +-- OutputDirectoryError   (exit 8)
    +-- GenerationError        (exit 9)
    +-- ExtensionError         (exit 10)
"""

from __future__ import annotations

from reatchify.exit_codes import (
    EXIT_EXTENSION_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_OUTPUT_ERROR,
    EXIT_SCHEMA_ERROR,
)


class ReatchifyError(Exception):
    """Base exception for all reatchify errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`reatchify.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(ReatchifyError):
    """Raised for configuration problems (missing credential, invalid JSON, unwritable output path)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(ReatchifyError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SchemaError(ReatchifyError):
    """Raised when a schema cannot be obtained or does not have the expected shape."""

    exit_code = EXIT_SCHEMA_ERROR


class SchemaValidationError(SchemaError):
    """Raised when a schema has structural problems.

    Every violation found by :func:`~reatchify.schema.validator.validate_schema`
    is kept on :attr:`errors`, and all of them are listed in the message so
    the input can be fixed in one pass.

    Args:
        errors: Human-readable violation messages.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        lines = "\n".join(f"  - {err}" for err in self.errors)
        super().__init__(
            f"Schema validation failed with {len(self.errors)} error(s):\n{lines}"
        )


class OutputDirectoryError(ReatchifyError):
    """Raised when the output directory already holds files and overwriting is off."""

    exit_code = EXIT_OUTPUT_ERROR


class GenerationError(ReatchifyError):
    """Raised when a generator or extension fails mid-run.

    The partially written output has already been removed when this is
    raised. The original exception is available as ``__cause__``.
    """

    exit_code = EXIT_GENERATION_ERROR


class ExtensionError(ReatchifyError):
    """Raised when an extension fails to load or is registered twice."""

    exit_code = EXIT_EXTENSION_ERROR
