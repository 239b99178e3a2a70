"""Runner that applies extension hooks in registration order.

``transform`` is a pipeline: each extension receives the previous one's
output for the same file. The other hooks are notifications.
"""

from __future__ import annotations

import logging

from reatchify.extensions.base import Extension
from reatchify.models import GenerationResult, ResolvedConfig

logger = logging.getLogger(__name__)


class HookRunner:
    """Executes extension hooks across a fixed list of extensions.

    The runner holds a snapshot of the list it was created with; obtain a
    new one from :meth:`~reatchify.extensions.manager.ExtensionManager.get_hook_runner`
    after loading more extensions.
    """

    def __init__(self, extensions: list[Extension]) -> None:
        self._extensions = list(extensions)

    def __len__(self) -> int:
        return len(self._extensions)

    def run_before_generate(self, config: ResolvedConfig) -> None:
        for extension in self._extensions:
            extension.before_generate(config)

    def run_transform(self, files: dict[str, str]) -> dict[str, str]:
        """Pass every file through each extension's ``transform`` in turn.

        Args:
            files: Output-root-relative path to content.

        Returns:
            A new mapping with the same keys in the same order.
        """
        if not self._extensions:
            return files
        transformed: dict[str, str] = {}
        for path, content in files.items():
            for extension in self._extensions:
                content = extension.transform(path, content)
            transformed[path] = content
        return transformed

    def run_after_generate(self, result: GenerationResult) -> None:
        for extension in self._extensions:
            extension.after_generate(result)

    def run_error(self, error: Exception) -> None:
        """Notify every extension of *error*.

        A failing handler is logged and skipped so the remaining
        extensions still run and the original error propagates.
        """
        for extension in self._extensions:
            try:
                extension.on_error(error)
            except Exception as exc:
                logger.warning("Extension '%s' failed in on_error: %s", extension.name, exc)
