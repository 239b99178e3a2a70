"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~reatchify.exceptions.ReatchifyError` subclass.
CI scripts and shell wrappers can inspect the exit code to tell a bad config
from a broken schema without parsing stderr.

Example::

    $ reatchify generate
    $ echo $?
    7   # EXIT_SCHEMA_ERROR -- the schema failed validation
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or the configuration is unusable."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SCHEMA_ERROR = 7
"""The schema could not be obtained, parsed, or validated."""

EXIT_OUTPUT_ERROR = 8
"""The output directory is not empty and overwriting was not allowed."""

EXIT_GENERATION_ERROR = 9
"""A generator or extension failed while producing files; output was rolled back."""

EXIT_EXTENSION_ERROR = 10
"""An extension failed to load or initialise."""
