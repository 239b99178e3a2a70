"""Root index generator."""

from __future__ import annotations

from reatchify.generator.render import export_all, header_comment, join_blocks, module_path
from reatchify.models import ApiSchema, ResolvedConfig

ROOT_INDEX = "index.ts"


def generate_index(schema: ApiSchema, config: ResolvedConfig) -> dict[str, str]:
    """Re-export the types, api and client groups, plus stores when enabled."""
    folders = config.folder_structure
    groups = [folders.types, folders.api, folders.client]
    if config.stores_enabled:
        groups.append(folders.stores)
    return {
        ROOT_INDEX: join_blocks(
            [
                header_comment(
                    config,
                    "Reatchify generated SDK",
                    "Entry point re-exporting every generated module group",
                ),
                export_all(f"./{module_path(group, 'index')}" for group in groups),
            ]
        )
    }
