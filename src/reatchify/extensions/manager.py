"""Extension manager -- discovery, loading and hook runner.

Third-party packages register extensions under the ``reatchify.extensions``
entry-point group::

    [project.entry-points."reatchify.extensions"]
    banner = "my_package.banner:BannerExtension"

``advanced.extensions`` is an allowlist (empty means every discovered
extension) and ``advanced.disabledExtensions`` a blocklist.
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from reatchify.exceptions import ExtensionError
from reatchify.extensions.base import Extension
from reatchify.extensions.hooks import HookRunner
from reatchify.models import ResolvedConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "reatchify.extensions"


class ExtensionManager:
    """Discovers, loads and orders reatchify extensions.

    Example:
        Typical usage::

            manager = ExtensionManager()
            manager.discover(config)
            runner = manager.get_hook_runner()
    """

    def __init__(self) -> None:
        self._extensions: dict[str, Extension] = {}
        self._hook_runner: Optional[HookRunner] = None

    def discover(self, config: ResolvedConfig) -> list[str]:
        """Load the extensions registered under :data:`ENTRY_POINT_GROUP`.

        Entry points that fail to import or instantiate are logged and
        skipped.

        Returns:
            Names of the extensions that were loaded.
        """
        loaded: list[str] = []
        enabled = set(config.advanced.extensions)
        disabled = set(config.advanced.disabled_extensions)

        for ep in importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP):
            name = ep.name
            if enabled and name not in enabled:
                logger.debug("Extension '%s' not in enabled list, skipping", name)
                continue
            if name in disabled:
                logger.debug("Extension '%s' is disabled, skipping", name)
                continue

            try:
                extension_cls = ep.load()
                extension: Extension = extension_cls()
            except Exception as exc:
                logger.warning("Failed to load extension '%s': %s", name, exc)
                continue
            self.load_extension(name, extension, config)
            loaded.append(name)

        return loaded

    def load_extension(self, name: str, extension: Extension, config: ResolvedConfig) -> None:
        """Initialise *extension* and register it under *name*.

        Raises:
            ExtensionError: If *name* is already registered.
        """
        if name in self._extensions:
            raise ExtensionError(f"Extension '{name}' is already loaded")

        extension.on_init(config)
        self._extensions[name] = extension
        self._hook_runner = None
        logger.info("Loaded extension '%s' v%s", name, extension.version)

    def get_extension(self, name: str) -> Extension:
        try:
            return self._extensions[name]
        except KeyError:
            raise ExtensionError(f"Extension '{name}' is not loaded") from None

    def list_extensions(self) -> list[dict[str, str]]:
        return [
            {
                "name": name,
                "version": extension.version,
                "description": extension.description,
            }
            for name, extension in self._extensions.items()
        ]

    def get_hook_runner(self) -> HookRunner:
        """Return a (cached) runner over the loaded extensions in load order."""
        if self._hook_runner is None:
            self._hook_runner = HookRunner(list(self._extensions.values()))
        return self._hook_runner
