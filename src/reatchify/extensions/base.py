"""Abstract base class for reatchify extensions.

Every extension subclasses :class:`Extension` and implements :attr:`name`.
The lifecycle hooks (``on_init``, ``before_generate``, ``transform``,
``after_generate``, ``on_error``) default to no-ops so an extension only
overrides what it needs.

Extensions are registered as entry points in the ``reatchify.extensions``
group and discovered by :class:`~reatchify.extensions.manager.ExtensionManager`.

Example:
    Stamp every generated file with a banner::

        class Banner(Extension):
            @property
            def name(self) -> str:
                return "banner"

            def transform(self, path, content):
                return "// Do not edit\\n" + content
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from reatchify.models import GenerationResult, ResolvedConfig


class Extension(ABC):
    """Base class for all reatchify extensions.

    The lifecycle of one run is:

    1. :meth:`on_init` -- once, when the manager loads the extension.
    2. :meth:`before_generate` -- before any generator runs.
    3. :meth:`transform` -- once per generated file.
    4. :meth:`after_generate` on success, or :meth:`on_error` on failure.

    An exception from :meth:`before_generate` or :meth:`transform` fails the
    run and rolls back anything written.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique extension name used for discovery, filtering and logging."""
        ...

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return ""

    def on_init(self, config: ResolvedConfig) -> None:
        """Called once when the extension is loaded."""

    def before_generate(self, config: ResolvedConfig) -> None:
        """Called after the schema is validated, before any file is rendered."""

    def transform(self, path: str, content: str) -> str:
        """Rewrite one generated file.

        Args:
            path: Output-root-relative POSIX path (e.g. ``api/users.ts``).
            content: File content as produced by the previous extension.

        Returns:
            The content handed to the next extension, or written to disk.
        """
        return content

    def after_generate(self, result: GenerationResult) -> None:
        """Called once the run succeeded (also for dry runs)."""

    def on_error(self, error: Exception) -> None:
        """Called when the run fails.

        Exceptions raised here are logged and swallowed by the
        :class:`~reatchify.extensions.hooks.HookRunner` so they cannot mask
        the original failure.
        """
