"""Deterministic naming rules shared by every generator.

All functions here are pure string transforms with no configuration or I/O,
so the same endpoint always produces the same identifier and file name no
matter which generator asks. Method names follow the ``verb + Resource``
scheme::

    GET    /users        -> getUsers
    GET    /users/{id}   -> getUsersById
    POST   /users        -> createUsers
    PATCH  /users/{id}   -> updateUsersById
    DELETE /users/{id}   -> deleteUsersById
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from reatchify.models import Endpoint, Parameter

METHOD_PREFIXES: dict[str, str] = {
    "GET": "get",
    "POST": "create",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}
"""HTTP verb to method-name prefix. Other verbs use :data:`FALLBACK_PREFIX`."""

FALLBACK_PREFIX = "operation"
FALLBACK_RESOURCE = "general"
FALLBACK_FILENAME = "unnamed"

_SEPARATOR_RE = re.compile(r"[-_\s]+(.)?")
_UNSAFE_FILENAME_RE = re.compile(r"[^a-z0-9\-_]")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


def capitalize(text: str) -> str:
    """Upper-case the first character, leaving the rest untouched."""
    return text[:1].upper() + text[1:]


def to_camel_case(text: str) -> str:
    """``user-profiles`` -> ``userProfiles``; ``UserName`` -> ``userName``."""
    joined = _SEPARATOR_RE.sub(lambda m: (m.group(1) or "").upper(), text)
    return joined[:1].lower() + joined[1:]


def to_pascal_case(text: str) -> str:
    return capitalize(to_camel_case(text))


def is_identifier(name: str) -> bool:
    """Return True if *name* is usable as a TypeScript identifier."""
    return bool(_IDENTIFIER_RE.match(name))


def sanitize_filename(name: str) -> str:
    """Turn an arbitrary name into a safe file stem.

    Lower-cases, replaces anything outside ``[a-z0-9-_]`` with ``-``,
    collapses runs of ``-`` and trims them from both ends. An empty result
    becomes ``unnamed``.

    Example::

        >>> sanitize_filename("User Profile!")
        'user-profile'
    """
    safe = _UNSAFE_FILENAME_RE.sub("-", name.lower())
    safe = re.sub(r"-+", "-", safe).strip("-")
    return safe or FALLBACK_FILENAME


def resource_of(endpoint: Endpoint) -> str:
    """Return the first path segment, used to group endpoints into files."""
    parts = endpoint.path.split("/")
    return (parts[1] if len(parts) > 1 else "") or FALLBACK_RESOURCE


def path_placeholders(path: str) -> list[str]:
    """Names of the ``{param}`` placeholders in *path*, in order."""
    return _PLACEHOLDER_RE.findall(path)


def derive_method_name(endpoint: Endpoint) -> str:
    """Derive the generated function name for *endpoint*.

    The verb maps through :data:`METHOD_PREFIXES`. The noun is the first path
    segment that is not a ``{placeholder}``, camel-cased and capitalised.
    ``ById`` is appended when any parameter name contains ``id``
    (case-insensitive).

    Two endpoints can still derive the same name (e.g. ``PUT`` and ``PATCH``
    on one path); :func:`~reatchify.schema.validator.validate_schema`
    reports that as an input error.
    """
    prefix = METHOD_PREFIXES.get(endpoint.method.upper(), FALLBACK_PREFIX)
    segments = [p for p in endpoint.path.split("/") if p and not p.startswith("{")]
    noun = to_camel_case(segments[0]) if segments else FALLBACK_PREFIX
    name = prefix + capitalize(noun)
    if any("id" in param.name.lower() for param in endpoint.parameters):
        name += "ById"
    return name


def store_name(endpoint: Endpoint) -> str:
    """``getUsersById`` -> ``GetUsersById``."""
    return capitalize(derive_method_name(endpoint))


def render_parameter_signature(parameters: Iterable[Parameter]) -> str:
    """Render a destructured parameter declaration.

    ``[a: T (required), b: U (optional)]`` becomes
    ``{ a, b }: { a: T; b?: U }``. No parameters render as ``""``.
    """
    params = list(parameters)
    if not params:
        return ""
    return f"{render_argument_bag(params)}: {render_parameter_type(params)}"


def render_parameter_type(parameters: Iterable[Parameter]) -> str:
    """``[a: T (required), b: U (optional)]`` -> ``{ a: T; b?: U }``."""
    fields = "; ".join(f"{p.name}{'' if p.required else '?'}: {p.type}" for p in parameters)
    return f"{{ {fields} }}" if fields else "{}"


def render_argument_bag(parameters: Iterable[Parameter]) -> str:
    """``[a, b]`` -> ``{ a, b }``; no parameters render as ``""``."""
    names = [p.name for p in parameters]
    if not names:
        return ""
    return "{ " + ", ".join(names) + " }"
