"""API generator: one exported async function per endpoint.

Endpoints are bucketed by resource (first path segment). In grouped mode
each resource becomes ``api/<resource>.ts`` and ``api/index.ts`` re-exports
them; in flat mode every function lives in ``api/index.ts``.

A service selection (``services.include``) restricts which resources are
generated. Names that match no resource are reported as a warning and
ignored; the run continues with whatever is left, possibly nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from reatchify.generator.render import (
    doc_comment,
    export_all,
    file_path,
    header_comment,
    import_block,
    import_line,
    join_blocks,
    module_path,
    relative_import,
    ts_string,
)
from reatchify.generator.types import schema_types_in
from reatchify.models import ApiSchema, Endpoint, ResolvedConfig
from reatchify.naming import (
    derive_method_name,
    render_argument_bag,
    render_parameter_signature,
    resource_of,
    sanitize_filename,
)

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "HTTP client not configured"


@dataclass
class ServiceSelection:
    """Which resources a run generates.

    Attributes:
        resources: Selected resources, in schema order.
        invalid: Requested names that match no resource, in request order.
        available: Every resource in the schema, in schema order.
    """

    resources: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)
    available: list[str] = field(default_factory=list)

    @property
    def warning(self) -> Optional[str]:
        if not self.invalid:
            return None
        return (
            "The following services are not available in the schema: "
            f"{', '.join(self.invalid)}. "
            f"Available services: {', '.join(self.available) or '(none)'}"
        )


def available_resources(schema: ApiSchema) -> list[str]:
    resources: list[str] = []
    for endpoint in schema.endpoints:
        resource = resource_of(endpoint)
        if resource not in resources:
            resources.append(resource)
    return resources


def select_services(schema: ApiSchema, config: ResolvedConfig) -> ServiceSelection:
    """Intersect ``services.include`` with the schema's resources.

    ``include=None`` selects every resource. An empty list selects none.
    """
    available = available_resources(schema)
    requested = config.services.include
    if requested is None:
        return ServiceSelection(resources=list(available), available=available)

    invalid = [name for name in requested if name not in available]
    resources = [name for name in available if name in requested]
    return ServiceSelection(resources=resources, invalid=invalid, available=available)


def selected_endpoints(
    schema: ApiSchema,
    config: ResolvedConfig,
    selection: Optional[ServiceSelection] = None,
) -> list[Endpoint]:
    """Endpoints that get a generated function, in schema order.

    Empty when ``api.enabled`` is off, since nothing could call them.
    """
    if not config.api.enabled:
        return []
    selection = selection or select_services(schema, config)
    chosen = set(selection.resources)
    return [e for e in schema.endpoints if resource_of(e) in chosen]


def api_module(config: ResolvedConfig, endpoint: Endpoint) -> str:
    """Module path (no extension) of the file that declares *endpoint*'s function."""
    if config.api.group_by_resource:
        return module_path(config.folder_structure.api, sanitize_filename(resource_of(endpoint)))
    return module_path(config.folder_structure.api, "index")


def response_type(endpoint: Endpoint) -> str:
    return endpoint.response.type if endpoint.response is not None else "void"


def return_type(config: ResolvedConfig, endpoint: Endpoint) -> str:
    """Declared return type of the generated function."""
    payload = response_type(endpoint)
    if config.uses_result_pattern:
        return f"Promise<ApiResponse<{payload}>>"
    return f"Promise<{payload}>"


def response_module(config: ResolvedConfig) -> str:
    return module_path(config.folder_structure.client, "response")


def http_module(config: ResolvedConfig) -> str:
    return module_path(config.folder_structure.client, "http")


def render_function(config: ResolvedConfig, endpoint: Endpoint) -> str:
    """Render one ``export const <name> = async (...) => {...}`` declaration."""
    name = derive_method_name(endpoint)
    summary = endpoint.description or f"{endpoint.method} {endpoint.path}"

    doc_lines = [summary]
    for param in endpoint.parameters:
        doc_lines.append(f"@param {param.name} - {param.description or 'Parameter'}")
    doc_lines.append(f"@returns {response_type(endpoint)}")
    doc = doc_comment(config, doc_lines)
    if not doc and endpoint.description:
        doc = header_comment(config, endpoint.description)

    signature = render_parameter_signature(endpoint.parameters)
    head = f"export const {name} = async ({signature}): {return_type(config, endpoint)} => {{"
    if config.api.include_http_client:
        call_args = [ts_string(endpoint.method), ts_string(endpoint.path)]
        if endpoint.parameters:
            call_args.append(f"{{ params: {render_argument_bag(endpoint.parameters)} }}")
        body = f"  return makeRequest<{response_type(endpoint)}>({', '.join(call_args)});"
    else:
        body = f"  throw new Error({ts_string(NOT_CONFIGURED_MESSAGE)});"

    declaration = f"{head}\n{body}\n}};"
    return f"{doc}\n{declaration}" if doc else declaration


def _render_module(
    config: ResolvedConfig,
    schema: ApiSchema,
    path: str,
    endpoints: list[Endpoint],
    header: tuple[str, ...],
) -> str:
    imports = []
    if config.api.include_http_client and endpoints:
        imports.append(import_line(["makeRequest"], relative_import(path, http_module(config))))
    if config.uses_result_pattern and endpoints:
        imports.append(
            import_line(["ApiResponse"], relative_import(path, response_module(config)), type_only=True)
        )
    referenced: list[str] = []
    for endpoint in endpoints:
        expressions = [p.type for p in endpoint.parameters] + [response_type(endpoint)]
        for expression in expressions:
            for name in schema_types_in(expression, schema):
                if name not in referenced:
                    referenced.append(name)
    if referenced:
        types_index = module_path(config.folder_structure.types, "index")
        imports.append(import_line(referenced, relative_import(path, types_index), type_only=True))

    blocks = [header_comment(config, *header), import_block(imports)]
    blocks.extend(render_function(config, endpoint) for endpoint in endpoints)
    if not endpoints:
        blocks.append("export {};")
    return join_blocks(blocks)


def generate_api(
    schema: ApiSchema,
    config: ResolvedConfig,
    selection: Optional[ServiceSelection] = None,
) -> dict[str, str]:
    """Render the ``api`` group.

    Args:
        schema: Validated schema.
        config: Resolved configuration.
        selection: Precomputed service selection. Computed (and its warning
            logged) when omitted.

    Returns:
        Output-root-relative path to file content. Always contains
        ``api/index.ts``.
    """
    if selection is None:
        selection = select_services(schema, config)
        if selection.warning:
            logger.warning(selection.warning)

    endpoints = selected_endpoints(schema, config, selection)
    index_path = file_path(config.folder_structure.api, "index")
    files: dict[str, str] = {}

    if not config.api.group_by_resource:
        files[index_path] = _render_module(
            config,
            schema,
            index_path,
            endpoints,
            ("Generated API operations", "This file contains all HTTP request functions"),
        )
        return files

    modules: list[str] = []
    for resource in selection.resources if config.api.enabled else []:
        resource_endpoints = [e for e in endpoints if resource_of(e) == resource]
        module = module_path(config.folder_structure.api, sanitize_filename(resource))
        path = module + ".ts"
        modules.append(module)
        files[path] = _render_module(
            config,
            schema,
            path,
            resource_endpoints,
            (
                f"Generated API operations for {resource}",
                f"This file contains HTTP request functions for {resource} endpoints",
            ),
        )

    files[index_path] = join_blocks(
        [
            header_comment(
                config,
                "API operation exports",
                "This file exports all generated API functions",
            ),
            export_all(relative_import(index_path, module) for module in modules),
        ]
    )
    return files
