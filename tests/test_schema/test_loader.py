"""Tests for schema fetching, the fallback schema, and local schema files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from reatchify.exceptions import SchemaError
from reatchify.schema.loader import (
    fallback_schema,
    fetch_schema,
    load_schema_file,
    parse_schema,
    schema_url,
)


def _response(payload: Any, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    if status >= 400:
        request = httpx.Request("GET", "https://example.test/v2/schema")
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "boom", request=request, response=httpx.Response(status, request=request)
        )
    return response


class TestFallbackSchema:
    def test_shape(self) -> None:
        schema = fallback_schema()
        assert [(e.method, e.path) for e in schema.endpoints] == [
            ("GET", "/users"),
            ("GET", "/users/{id}"),
            ("POST", "/users"),
            ("PUT", "/users/{id}"),
            ("DELETE", "/users/{id}"),
        ]
        assert list(schema.types["User"]) == ["id", "name", "email", "createdAt", "updatedAt"]

    def test_returns_fresh_copies(self) -> None:
        first = fallback_schema()
        first.types["User"]["extra"] = "string"
        assert "extra" not in fallback_schema().types["User"]


class TestFetchSchema:
    def test_url(self, make_config) -> None:
        config = make_config(baseUrl="https://api.example.test/", apiVersion="v3")
        assert schema_url(config) == "https://api.example.test/v3/schema"

    def test_sends_headers(self, config, schema_raw: dict[str, Any]) -> None:
        with patch("reatchify.schema.loader.httpx.get", return_value=_response(schema_raw)) as get:
            schema = fetch_schema(config)
        headers = get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer test-key"
        assert headers["X-API-Version"] == "v2"
        assert headers["Content-Type"] == "application/json"
        assert headers["X-Client"] == "reatchify-sdk"
        assert len(schema.endpoints) == 6

    def test_no_authorization_without_key(self, make_config, schema_raw: dict[str, Any]) -> None:
        config = make_config(apiKey=None)
        with patch("reatchify.schema.loader.httpx.get", return_value=_response(schema_raw)) as get:
            fetch_schema(config)
        assert "Authorization" not in get.call_args.kwargs["headers"]

    def test_http_error_falls_back(self, config) -> None:
        with patch("reatchify.schema.loader.httpx.get", return_value=_response({}, status=503)):
            schema = fetch_schema(config)
        assert schema == fallback_schema()

    def test_transport_error_falls_back(self, config) -> None:
        with patch(
            "reatchify.schema.loader.httpx.get", side_effect=httpx.ConnectError("refused")
        ):
            schema = fetch_schema(config)
        assert schema == fallback_schema()

    def test_malformed_body_falls_back(self, config) -> None:
        with patch(
            "reatchify.schema.loader.httpx.get", return_value=_response({"endpoints": "nope"})
        ):
            schema = fetch_schema(config)
        assert schema == fallback_schema()

    def test_undecodable_body_falls_back(self, config) -> None:
        response = _response(None)
        response.json.side_effect = ValueError("not json")
        with patch("reatchify.schema.loader.httpx.get", return_value=response):
            schema = fetch_schema(config)
        assert schema == fallback_schema()


class TestParseSchema:
    def test_rejects_non_object(self) -> None:
        with pytest.raises(SchemaError, match="must be an object"):
            parse_schema([1, 2])

    def test_reports_location(self) -> None:
        with pytest.raises(SchemaError, match="endpoints.0"):
            parse_schema({"endpoints": [{"method": "GET"}]})

    def test_defaults(self) -> None:
        schema = parse_schema({"endpoints": [{"path": "/x", "method": "get"}]})
        endpoint = schema.endpoints[0]
        assert endpoint.method == "GET"
        assert endpoint.parameters == []
        assert endpoint.response is None
        assert schema.types == {}


class TestLoadSchemaFile:
    def test_json(self, schema_file: Path) -> None:
        schema = load_schema_file(schema_file)
        assert set(schema.types) == {"User", "Post"}

    def test_yaml(self, tmp_path: Path, schema_raw: dict[str, Any]) -> None:
        import yaml

        path = tmp_path / "schema.yaml"
        path.write_text(yaml.safe_dump(schema_raw))
        assert len(load_schema_file(path).endpoints) == 6

    def test_unknown_extension_tries_json_then_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.txt"
        path.write_text("endpoints:\n  - path: /ping\n    method: GET\n")
        assert load_schema_file(path).endpoints[0].path == "/ping"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SchemaError, match="not found"):
            load_schema_file(tmp_path / "missing.json")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text("  \n")
        with pytest.raises(SchemaError, match="empty"):
            load_schema_file(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text("{oops")
        with pytest.raises(SchemaError, match="Invalid JSON"):
            load_schema_file(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.yml"
        path.write_text("endpoints: [unclosed")
        with pytest.raises(SchemaError, match="Invalid YAML"):
            load_schema_file(path)

    def test_wrong_top_level_type(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(["a"]))
        with pytest.raises(SchemaError, match="must be an object"):
            load_schema_file(path)
