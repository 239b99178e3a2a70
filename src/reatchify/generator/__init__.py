"""TypeScript client generation.

Each group generator is a pure function ``(schema, config) -> {path: content}``
with paths relative to the output directory. :mod:`~reatchify.generator.pipeline`
sequences them and owns every disk write.

Public API:
    - :func:`generate` -- end-to-end run (config, schema, write).
    - :func:`build_artifacts` -- render every group in memory.
    - :func:`validate_for_config` -- schema checks for one configuration.
    - :func:`generate_types`, :func:`generate_api`, :func:`generate_client`,
      :func:`generate_stores`, :func:`generate_index` -- the group generators.
"""

from reatchify.generator.api import generate_api, select_services
from reatchify.generator.client import generate_client
from reatchify.generator.index import generate_index
from reatchify.generator.pipeline import build_artifacts, check_config, generate, validate_for_config
from reatchify.generator.stores import generate_stores
from reatchify.generator.types import generate_types

__all__ = [
    "build_artifacts",
    "check_config",
    "generate",
    "generate_api",
    "generate_client",
    "generate_index",
    "generate_stores",
    "generate_types",
    "select_services",
    "validate_for_config",
]
