"""Obtain an :class:`~reatchify.models.ApiSchema` from the schema service or a file.

Two sources are supported:

* :func:`fetch_schema` -- ``GET {baseUrl}/{apiVersion}/schema``. Any failure
  (transport error, non-2xx status, undecodable or malformed body) is logged
  as a warning and the embedded :func:`fallback_schema` is used instead.
  Fetched and fallback data are never mixed.
* :func:`load_schema_file` -- a local JSON or YAML document. There is no
  fallback here; problems raise :class:`~reatchify.exceptions.SchemaError`.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from reatchify.config import SCHEMA_TIMEOUT
from reatchify.exceptions import SchemaError
from reatchify.models import DEFAULT_HEADERS, ApiSchema, ResolvedConfig

logger = logging.getLogger(__name__)

_FALLBACK_SCHEMA: dict[str, Any] = {
    "endpoints": [
        {
            "path": "/users",
            "method": "GET",
            "description": "Get all users",
            "response": {"type": "User[]"},
        },
        {
            "path": "/users/{id}",
            "method": "GET",
            "description": "Get user by ID",
            "parameters": [
                {"name": "id", "type": "string", "required": True, "description": "User ID"},
            ],
            "response": {"type": "User"},
        },
        {
            "path": "/users",
            "method": "POST",
            "description": "Create a new user",
            "parameters": [
                {"name": "name", "type": "string", "required": True, "description": "User name"},
                {"name": "email", "type": "string", "required": True, "description": "User email"},
            ],
            "response": {"type": "User"},
        },
        {
            "path": "/users/{id}",
            "method": "PUT",
            "description": "Update user by ID",
            "parameters": [
                {"name": "id", "type": "string", "required": True, "description": "User ID"},
                {
                    "name": "name",
                    "type": "string",
                    "required": False,
                    "description": "Updated user name",
                },
                {
                    "name": "email",
                    "type": "string",
                    "required": False,
                    "description": "Updated user email",
                },
            ],
            "response": {"type": "User"},
        },
        {
            "path": "/users/{id}",
            "method": "DELETE",
            "description": "Delete user by ID",
            "parameters": [
                {"name": "id", "type": "string", "required": True, "description": "User ID"},
            ],
        },
    ],
    "types": {
        "User": {
            "id": "string",
            "name": "string",
            "email": "string",
            "createdAt": "string",
            "updatedAt": "string",
        },
    },
}


def fallback_schema() -> ApiSchema:
    """Return a fresh copy of the embedded ``users`` schema."""
    return ApiSchema.model_validate(copy.deepcopy(_FALLBACK_SCHEMA))


def parse_schema(data: Any, source: str = "<schema>") -> ApiSchema:  # noqa: ANN401
    """Validate decoded schema data into an :class:`ApiSchema`.

    Raises:
        SchemaError: If *data* does not have the endpoints/types shape.
    """
    if not isinstance(data, dict):
        raise SchemaError(
            f"Schema from {source} must be an object (got {type(data).__name__})"
        )
    try:
        return ApiSchema.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first["loc"])
        raise SchemaError(
            f"Schema from {source} is malformed at {loc}: {first['msg']}"
            f" ({exc.error_count()} problem(s))"
        ) from exc


def schema_url(config: ResolvedConfig) -> str:
    return f"{config.base_url.rstrip('/')}/{config.api_version}/schema"


def fetch_schema(config: ResolvedConfig) -> ApiSchema:
    """Fetch the schema for *config*'s base URL and API version.

    Sends the default headers, ``X-API-Version`` and, when an api key is
    configured, ``Authorization: Bearer <apiKey>``.

    Args:
        config: Resolved configuration supplying the URL, version and key.

    Returns:
        The fetched schema, or :func:`fallback_schema` on any failure.
    """
    url = schema_url(config)
    headers = dict(DEFAULT_HEADERS)
    headers["X-API-Version"] = config.api_version
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"

    try:
        response = httpx.get(url, headers=headers, timeout=SCHEMA_TIMEOUT)
        response.raise_for_status()
        schema = parse_schema(response.json(), source=url)
    except httpx.HTTPStatusError as exc:
        logger.warning(
            "Schema fetch returned HTTP %s from %s, using fallback schema",
            exc.response.status_code,
            url,
        )
        return fallback_schema()
    except httpx.RequestError as exc:
        logger.warning("Failed to fetch schema from %s (%s), using fallback schema", url, exc)
        return fallback_schema()
    except (ValueError, SchemaError) as exc:
        logger.warning("Schema from %s is unusable (%s), using fallback schema", url, exc)
        return fallback_schema()

    logger.debug("Fetched schema from %s: %d endpoint(s)", url, len(schema.endpoints))
    return schema


def load_schema_file(path: Path) -> ApiSchema:
    """Load a schema from a local ``.json``, ``.yaml`` or ``.yml`` file.

    Args:
        path: File to read. Other extensions are parsed as JSON, then YAML.

    Raises:
        SchemaError: If the file is missing, unreadable, unparsable, or has
            the wrong shape.
    """
    path = Path(path)
    if not path.is_file():
        raise SchemaError(f"Schema file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaError(f"Failed to read schema file {path}: {exc}") from exc

    if not content.strip():
        raise SchemaError(f"Schema file is empty: {path}")

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _parse_yaml(content, path)
    elif suffix == ".json":
        data = _parse_json(content, path)
    else:
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            data = _parse_yaml(content, path)

    return parse_schema(data, source=str(path))


def _parse_json(content: str, path: Path) -> Any:  # noqa: ANN401
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise SchemaError(f"Invalid JSON in {path}: {exc}") from exc


def _parse_yaml(content: str, path: Path) -> Any:  # noqa: ANN401
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SchemaError(f"Invalid YAML in {path}: {exc}") from exc
