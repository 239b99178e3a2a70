"""Structural validation of an :class:`~reatchify.models.ApiSchema`.

Generators assume a well-formed schema. :func:`validate_schema` runs first
and reports *every* problem it finds as a human-readable message, so the
schema can be fixed in one pass. An empty list means the schema is safe to
generate from.
"""

from __future__ import annotations

import re
from collections import defaultdict

from reatchify.models import HTTP_METHODS, ApiSchema, Endpoint, ResolvedConfig
from reatchify.naming import (
    derive_method_name,
    is_identifier,
    path_placeholders,
    resource_of,
    sanitize_filename,
)

BUILTIN_TYPES = frozenset(
    {
        "string",
        "number",
        "boolean",
        "any",
        "unknown",
        "void",
        "null",
        "undefined",
        "object",
        "Array",
        "Record",
        "Partial",
        "Required",
        "Pick",
        "Omit",
        "Date",
    }
)

RESERVED_TYPE_NAMES = frozenset(
    {
        "ApiResponse",
        "ApiError",
        "ValidationError",
        "NetworkError",
        "HttpConfig",
        "RequestOptions",
        "Plugin",
        "RequestContext",
        "ResponseContext",
    }
)
"""Names exported by the generated client group; schema types may not reuse them."""

_STRING_LITERAL_RE = re.compile(r"'[^']*'|\"[^\"]*\"|`[^`]*`")
_TYPE_NAME_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def referenced_type_names(expression: str) -> list[str]:
    """Return the type names used in a type expression, in order of appearance.

    Array suffixes, generics, unions and string-literal types are understood
    well enough to pick out the names::

        >>> referenced_type_names("Record<string, User[]> | null")
        ['Record', 'string', 'User', 'null']
    """
    stripped = _STRING_LITERAL_RE.sub(" ", expression)
    seen: list[str] = []
    for name in _TYPE_NAME_RE.findall(stripped):
        if name not in seen:
            seen.append(name)
    return seen


def _where(index: int, endpoint: Endpoint) -> str:
    return f"endpoint #{index + 1} ({endpoint.method} {endpoint.path or '<empty path>'})"


def _check_type_expression(
    expression: str, known: set[str], context: str, errors: list[str]
) -> None:
    for name in referenced_type_names(expression):
        if name not in BUILTIN_TYPES and name not in known:
            errors.append(f"{context}: undefined type '{name}' in '{expression}'")


def validate_schema(schema: ApiSchema) -> list[str]:
    """Collect every structural problem in *schema*.

    Checks, per endpoint: the path is non-empty and starts with ``/``; the
    method is a supported HTTP verb; parameter names are identifiers and
    unique; every ``{placeholder}`` has a required parameter; every type
    referenced by a parameter or the response is declared or built in.
    Across the schema: type names are identifiers and map to distinct file
    names, field types resolve, resources map to distinct file names, and no
    two endpoints derive the same method name.

    Args:
        schema: The schema to check.

    Returns:
        Error messages in a stable order. Empty when the schema is valid.
    """
    errors: list[str] = []
    known = set(schema.types)

    # Types
    type_files: dict[str, list[str]] = defaultdict(list)
    for type_name, fields in schema.types.items():
        if not is_identifier(type_name):
            errors.append(f"type '{type_name}': name is not a valid identifier")
        elif type_name in RESERVED_TYPE_NAMES:
            errors.append(f"type '{type_name}': name clashes with a generated client export")
        type_files[sanitize_filename(type_name)].append(type_name)
        for field_name, expression in fields.items():
            _check_type_expression(
                expression, known, f"type '{type_name}' field '{field_name}'", errors
            )
    if "index" in type_files:
        errors.append(
            f"type '{type_files['index'][0]}' would overwrite the types index file"
        )
    for filename, names in type_files.items():
        if len(names) > 1:
            errors.append(
                f"types {', '.join(repr(n) for n in names)} would all be written to "
                f"'{filename}.ts'"
            )

    # Endpoints
    method_names: dict[str, list[str]] = defaultdict(list)
    resource_files: dict[str, set[str]] = defaultdict(set)
    for index, endpoint in enumerate(schema.endpoints):
        where = _where(index, endpoint)

        if not endpoint.path:
            errors.append(f"{where}: path is empty")
        elif not endpoint.path.startswith("/"):
            errors.append(f"{where}: path '{endpoint.path}' must start with '/'")

        if endpoint.method not in HTTP_METHODS:
            errors.append(
                f"{where}: unsupported HTTP method '{endpoint.method}' "
                f"(expected one of {', '.join(HTTP_METHODS)})"
            )

        seen_params: set[str] = set()
        for param in endpoint.parameters:
            if param.name in seen_params:
                errors.append(f"{where}: duplicate parameter '{param.name}'")
            seen_params.add(param.name)
            if not is_identifier(param.name):
                errors.append(f"{where}: parameter name '{param.name}' is not a valid identifier")
            _check_type_expression(param.type, known, f"{where} parameter '{param.name}'", errors)

        by_name = {p.name: p for p in endpoint.parameters}
        for placeholder in path_placeholders(endpoint.path):
            param = by_name.get(placeholder)
            if param is None:
                errors.append(f"{where}: path placeholder '{{{placeholder}}}' has no parameter")
            elif not param.required:
                errors.append(
                    f"{where}: path parameter '{placeholder}' must be required"
                )

        if endpoint.response is not None:
            _check_type_expression(endpoint.response.type, known, f"{where} response", errors)

        method_name = derive_method_name(endpoint)
        if not is_identifier(method_name):
            errors.append(f"{where}: derived function name '{method_name}' is not a valid identifier")
        method_names[method_name].append(where)

        resource = resource_of(endpoint)
        resource_files[sanitize_filename(resource)].add(resource)

    for method_name, places in method_names.items():
        if len(places) > 1:
            errors.append(
                f"function name '{method_name}' is derived by more than one endpoint: "
                + "; ".join(places)
            )

    if "index" in resource_files:
        errors.append("resource 'index' would overwrite the api index file")
    for filename, resources in resource_files.items():
        if len(resources) > 1:
            names = ", ".join(repr(r) for r in sorted(resources))
            errors.append(f"resources {names} would all be written to '{filename}.ts'")

    return errors


def validate_store_config(config: ResolvedConfig) -> list[str]:
    """Return non-fatal advisories about the state-management settings."""
    advisories: list[str] = []
    if config.state_management == "redux" and config.uses_result_pattern:
        advisories.append(
            "Redux state management works best with the 'promise' response pattern; "
            "thunks will reject with the error from the {data, error} result"
        )
    return advisories
