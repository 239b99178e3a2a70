"""Types generator: one interface file per schema type plus an index."""

from __future__ import annotations

from reatchify.generator.render import (
    export_all,
    file_path,
    header_comment,
    import_line,
    interface,
    join_blocks,
    module_path,
    relative_import,
)
from reatchify.models import ApiSchema, ResolvedConfig
from reatchify.naming import sanitize_filename
from reatchify.schema.validator import referenced_type_names


def type_module(config: ResolvedConfig, type_name: str) -> str:
    """Module path (no extension) of the file declaring *type_name*."""
    return module_path(config.folder_structure.types, sanitize_filename(type_name))


def schema_types_in(expression: str, schema: ApiSchema) -> list[str]:
    """Schema-declared type names used by a type expression."""
    return [name for name in referenced_type_names(expression) if name in schema.types]


def generate_types(schema: ApiSchema, config: ResolvedConfig) -> dict[str, str]:
    """Render the ``types`` group.

    Each type gets ``<sanitized name>.ts`` holding one exported interface
    with fields in declaration order. Other schema types a field refers to
    are pulled in with ``import type``. ``index.ts`` re-exports every file.

    Returns:
        Output-root-relative path to file content.
    """
    files: dict[str, str] = {}
    modules: list[str] = []

    for type_name, fields in schema.types.items():
        module = type_module(config, type_name)
        path = module + ".ts"
        modules.append(module)

        imports = []
        referenced: list[str] = []
        for expression in fields.values():
            for name in schema_types_in(expression, schema):
                if name != type_name and name not in referenced:
                    referenced.append(name)
        for name in referenced:
            imports.append(
                import_line([name], relative_import(path, type_module(config, name)), type_only=True)
            )

        files[path] = join_blocks(
            [
                header_comment(
                    config,
                    f"Generated type for {type_name}",
                    "This file contains TypeScript interfaces for API data models",
                ),
                "\n".join(imports),
                interface(
                    config,
                    type_name,
                    [(field, expression, f"{field} field") for field, expression in fields.items()],
                    doc=f"{type_name} interface - Generated from API schema",
                ),
            ]
        )

    index_path = file_path(config.folder_structure.types, "index")
    files[index_path] = join_blocks(
        [
            header_comment(
                config,
                "Type exports",
                "This file exports all generated TypeScript interfaces",
            ),
            export_all(relative_import(index_path, module) for module in modules),
        ]
    )
    return files
