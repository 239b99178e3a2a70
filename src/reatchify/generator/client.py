"""Client group generator: transport, errors, plugins and the client class.

Which files exist depends on the configuration, and every file only imports
siblings that this same call emits:

=============  ==========================================================
``response``   result pattern only (``ApiResponse<T>``)
``errors``     ``errorHandling.enabled`` and ``response.includeErrorClasses``
``http``       ``api.includeHttpClient``
``plugins``    ``plugins.enabled``
``utils``      ``client.includeUtils``
``client``     ``client.enabled``
``index``      always; re-exports exactly the files above
=============  ==========================================================
"""

from __future__ import annotations

from typing import Any

from reatchify.generator.render import (
    class_declaration,
    export_all,
    file_path,
    header_comment,
    interface,
    join_blocks,
    module_path,
    relative_import,
    render_template,
    ts_literal,
    ts_string,
)
from reatchify.models import ApiSchema, CustomErrorClass, ResolvedConfig

BUILTIN_ERROR_BASES = ("Error", "TypeError", "RangeError")
"""JavaScript error classes a custom error may extend directly."""

_MODULE_ORDER = ("response", "errors", "http", "plugins", "utils", "client")


def client_class_name(config: ResolvedConfig) -> str:
    return config.naming.client_prefix + config.client.class_name


def emitted_error_classes(config: ResolvedConfig) -> list[str]:
    """Names of the built-in error classes ``errors.ts`` declares, in order."""
    if not has_error_classes(config):
        return []
    names = ["ApiError"]
    if config.error_handling.include_validation_errors:
        names.append("ValidationError")
    if config.error_handling.include_network_errors:
        names.append("NetworkError")
    return names


def has_error_classes(config: ResolvedConfig) -> bool:
    return config.error_handling.enabled and config.response.include_error_classes


def client_modules(config: ResolvedConfig) -> list[str]:
    """Stems of the files the client group contains, excluding ``index``."""
    present = {
        "response": config.uses_result_pattern,
        "errors": has_error_classes(config),
        "http": config.api.include_http_client,
        "plugins": config.plugins.enabled,
        "utils": config.client.include_utils,
        "client": config.client.enabled,
    }
    return [name for name in _MODULE_ORDER if present[name]]


# --- response.ts / errors.ts / utils.ts ---


def render_response(config: ResolvedConfig) -> str:
    return join_blocks(
        [
            header_comment(config, "Response types", "Shape returned by every generated API function"),
            interface(
                config,
                "ApiResponse<T>",
                [
                    ("data", "T | null", "Response payload, null when the call failed"),
                    ("error", "Error | null", "Failure, null when the call succeeded"),
                ],
                doc="Result of an API call: exactly one of data and error is set",
            ),
        ]
    )


def _error_class(
    config: ResolvedConfig,
    name: str,
    base: str,
    fields: list[tuple[str, str, str]],
    doc: str,
) -> str:
    params = ["message: string"] + [f"{field}?: {kind}" for field, kind, _ in fields]
    body = [
        "super(message);",
        f"this.name = {ts_string(name)};",
        "Object.setPrototypeOf(this, new.target.prototype);",
    ]
    body.extend(f"this.{field} = {field};" for field, _, _ in fields)
    return class_declaration(
        config,
        name,
        extends=base,
        fields=[(f"{field}?", kind, field_doc) for field, kind, field_doc in fields],
        constructor_params=params,
        constructor_body=body,
        doc=doc,
    )


def _custom_error(config: ResolvedConfig, custom: CustomErrorClass) -> str:
    return _error_class(
        config,
        custom.name,
        custom.base_class,
        [(prop, "unknown", f"{prop} property") for prop in custom.properties],
        f"{custom.name} - Custom error class",
    )


def render_errors(config: ResolvedConfig) -> str:
    builtin = emitted_error_classes(config)
    blocks = [
        header_comment(
            config,
            "Custom error classes",
            "This file defines custom error types for API error handling",
        ),
        _error_class(
            config,
            "ApiError",
            "Error",
            [
                ("statusCode", "number", "HTTP status code"),
                ("response", "unknown", "Response data"),
            ],
            "API Error - Base class for API-related errors",
        ),
    ]
    if "ValidationError" in builtin:
        blocks.append(
            _error_class(
                config,
                "ValidationError",
                "Error",
                [
                    ("field", "string", "Field that failed validation"),
                    ("value", "unknown", "Invalid value"),
                ],
                "Validation Error - For input validation failures",
            )
        )
    if "NetworkError" in builtin:
        blocks.append(
            _error_class(config, "NetworkError", "Error", [], "Network Error - For network connectivity issues")
        )
    blocks.extend(_custom_error(config, custom) for custom in config.error_handling.custom_error_classes)
    return join_blocks(blocks)


_UTILS_BODY = """\
export function buildHeaders(headers: Record<string, string> = {}): Record<string, string> {
  return {
    ...DEFAULT_HEADERS,
    ...headers,
  };
}

export function serializeParams(params: Record<string, unknown>): Record<string, unknown> {
  const result: Record<string, unknown> = {};
  for (const [key, value] of Object.entries(params)) {
    result[key] = typeof value === 'object' && value !== null ? JSON.stringify(value) : value;
  }
  return result;
}"""


def render_utils(config: ResolvedConfig) -> str:
    # buildQueryString lives in http.ts; declaring it here too would make
    # the two ``export *`` lines in client/index.ts ambiguous.
    return join_blocks(
        [
            header_comment(config, "Utility functions"),
            f"const DEFAULT_HEADERS: Record<string, string> = {ts_literal(config.http.headers)};",
            _UTILS_BODY,
        ]
    )


# --- Templated modules ---


def _common_context(config: ResolvedConfig) -> dict[str, Any]:
    return {
        "comments": config.generation.include_comments,
        "jsdoc": config.generation.include_jsdoc,
        "has_errors": has_error_classes(config),
        "result_pattern": config.uses_result_pattern,
        "base_url": ts_string(config.base_url),
        "version": ts_string(config.api_version),
        "headers": ts_literal(config.http.headers),
        "auth": config.auth.enabled,
        "versioning": config.versioning.enabled,
        "version_header": ts_string(config.versioning.header_name),
    }


def render_http(config: ResolvedConfig) -> str:
    retry = config.http.retry
    context = _common_context(config)
    context.update(
        use_axios=config.http_client == "axios",
        network_errors="NetworkError" in emitted_error_classes(config),
        timeout=config.http.timeout,
        retry=retry.enabled,
        max_attempts=retry.max_attempts,
        delay=retry.delay,
        sender="sendWithRetry" if retry.enabled else "send",
    )
    return render_template("http.ts.j2", **context).lstrip("\n")


def render_plugins(config: ResolvedConfig) -> str:
    return render_template(
        "plugins.ts.j2",
        comments=config.generation.include_comments,
        jsdoc=config.generation.include_jsdoc,
        registry_class=config.plugins.registry_class_name,
        default_plugins=config.plugins.include_default_plugins,
    ).lstrip("\n")


def render_client_class(config: ResolvedConfig) -> str:
    class_name = client_class_name(config)
    client_file = file_path(config.folder_structure.client, "client")
    api_index = module_path(config.folder_structure.api, "index")

    context = _common_context(config)
    context.update(
        class_name=class_name,
        config_name=f"{class_name}Config",
        api_import=relative_import(client_file, api_index),
        http=config.api.include_http_client,
        plugins=config.plugins.enabled,
        registry_class=config.plugins.registry_class_name,
        environment=ts_string(config.environment),
        namespace=config.api.namespace_name,
        export_default=config.client.export_as_default,
    )
    return render_template("client.ts.j2", **context).lstrip("\n")


def generate_client(schema: ApiSchema, config: ResolvedConfig) -> dict[str, str]:
    """Render the ``client`` group.

    The schema is not consulted; the argument keeps the generator signature
    uniform with the others.
    """
    renderers = {
        "response": render_response,
        "errors": render_errors,
        "http": render_http,
        "plugins": render_plugins,
        "utils": render_utils,
        "client": render_client_class,
    }
    folder = config.folder_structure.client
    modules = client_modules(config)
    files = {file_path(folder, name): renderers[name](config) for name in modules}

    index_path = file_path(folder, "index")
    exports = export_all(relative_import(index_path, module_path(folder, name)) for name in modules)
    if config.client.enabled and config.client.export_as_default:
        exports += f"\nexport {{ default }} from '{relative_import(index_path, module_path(folder, 'client'))}';"
    files[index_path] = join_blocks(
        [
            header_comment(config, "Client exports", "This file exports the HTTP client and its helpers"),
            exports,
        ]
    )
    return files
