"""Example extension that stamps a banner on every generated file.

Register it from your own package::

    [project.entry-points."reatchify.extensions"]
    banner = "banner:BannerExtension"
"""

from __future__ import annotations

import logging

from reatchify.extensions import Extension
from reatchify.models import GenerationResult, ResolvedConfig

logger = logging.getLogger(__name__)

BANNER = "// This file is generated by reatchify. Do not edit it by hand."


class BannerExtension(Extension):
    """Prepends :data:`BANNER` to every TypeScript file."""

    def __init__(self) -> None:
        self._environment = ""

    @property
    def name(self) -> str:
        return "banner"

    @property
    def description(self) -> str:
        return "Prepend a do-not-edit banner to generated files"

    def on_init(self, config: ResolvedConfig) -> None:
        self._environment = config.environment

    def transform(self, path: str, content: str) -> str:
        if not path.endswith(".ts") or content.startswith(BANNER):
            return content
        return f"{BANNER}\n// Environment: {self._environment}\n\n{content}"

    def after_generate(self, result: GenerationResult) -> None:
        logger.info("Stamped %d file(s)", len(result.files))
