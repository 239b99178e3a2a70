"""Tests for the client group: transport, errors, plugins, utils and the client class."""

from __future__ import annotations

from reatchify.generator.client import (
    client_modules,
    emitted_error_classes,
    generate_client,
    render_errors,
    render_http,
    render_plugins,
    render_utils,
)
from reatchify.models import ApiSchema

SCHEMA = ApiSchema()


class TestClientModules:
    def test_defaults(self, config) -> None:
        files = generate_client(SCHEMA, config)
        assert list(files) == [
            "client/response.ts",
            "client/errors.ts",
            "client/http.ts",
            "client/plugins.ts",
            "client/utils.ts",
            "client/client.ts",
            "client/index.ts",
        ]

    def test_index_matches_emitted_files(self, config) -> None:
        files = generate_client(SCHEMA, config)
        index = files["client/index.ts"]
        for name in client_modules(config):
            assert f"export * from './{name}';" in index

    def test_promise_pattern_drops_response(self, make_config) -> None:
        config = make_config(response={"pattern": "promise"})
        files = generate_client(SCHEMA, config)
        assert "client/response.ts" not in files
        assert "./response" not in files["client/index.ts"]

    def test_everything_disabled(self, make_config) -> None:
        config = make_config(
            response={"pattern": "promise", "includeErrorClasses": False},
            api={"includeHttpClient": False},
            plugins={"enabled": False},
            client={"enabled": False, "includeUtils": False},
        )
        files = generate_client(SCHEMA, config)
        assert list(files) == ["client/index.ts"]
        assert "export {};" in files["client/index.ts"]

    def test_export_as_default(self, make_config) -> None:
        config = make_config(client={"exportAsDefault": True})
        files = generate_client(SCHEMA, config)
        assert "export { default } from './client';" in files["client/index.ts"]
        assert "export default ReatchifyClient;" in files["client/client.ts"]


class TestErrors:
    def test_builtin_classes(self, config) -> None:
        content = render_errors(config)
        assert "export class ApiError extends Error {" in content
        assert "export class ValidationError extends Error {" in content
        assert "export class NetworkError extends Error {" in content
        assert "statusCode?: number;" in content
        assert "constructor(message: string, statusCode?: number, response?: unknown) {" in content
        assert "Object.setPrototypeOf(this, new.target.prototype);" in content
        assert "this.name = 'ApiError';" in content

    def test_toggles(self, make_config) -> None:
        config = make_config(
            errorHandling={"includeNetworkErrors": False, "includeValidationErrors": False}
        )
        assert emitted_error_classes(config) == ["ApiError"]
        content = render_errors(config)
        assert "NetworkError" not in content
        assert "ValidationError" not in content

    def test_disabled(self, make_config) -> None:
        config = make_config(errorHandling={"enabled": False})
        assert emitted_error_classes(config) == []
        assert "client/errors.ts" not in generate_client(SCHEMA, config)

    def test_custom_classes(self, make_config) -> None:
        config = make_config(
            errorHandling={
                "customErrorClasses": [
                    {"name": "RateLimitError", "baseClass": "ApiError", "properties": ["retryAfter"]},
                    {"name": "QuotaError", "baseClass": "RateLimitError"},
                ]
            }
        )
        content = render_errors(config)
        assert "export class RateLimitError extends ApiError {" in content
        assert "retryAfter?: unknown;" in content
        assert "this.retryAfter = retryAfter;" in content
        assert "export class QuotaError extends RateLimitError {" in content
        assert content.index("class RateLimitError") < content.index("class QuotaError")


class TestHttp:
    def test_axios(self, config) -> None:
        content = render_http(config)
        assert "import axios from 'axios';" in content
        assert "const httpClient = axios.create();" in content
        assert "await fetch(" not in content

    def test_fetch(self, make_config) -> None:
        content = render_http(make_config(httpClient="fetch"))
        assert "axios" not in content
        assert "await fetch(" in content

    def test_unknown_client_uses_fetch(self, make_config) -> None:
        content = render_http(make_config(httpClient="ky"))
        assert "await fetch(" in content

    def test_result_pattern_never_rejects(self, config) -> None:
        content = render_http(config)
        assert "import type { ApiResponse } from './response';" in content
        assert "): Promise<ApiResponse<T>> {" in content
        assert "return { data: null, error:" in content

    def test_promise_pattern_returns_data(self, make_config) -> None:
        content = render_http(make_config(response={"pattern": "promise"}))
        assert "ApiResponse" not in content
        assert "): Promise<T> {" in content
        assert "return data as T;" in content

    def test_config_values_baked_in(self, make_config) -> None:
        config = make_config(
            baseUrl="https://api.example.test",
            apiVersion="v3",
            http={"timeout": 5000, "headers": {"X-Tenant": "acme"}},
        )
        content = render_http(config)
        assert "baseUrl: 'https://api.example.test'," in content
        assert "version: 'v3'," in content
        assert "timeout: 5000," in content
        assert '"X-Tenant": "acme"' in content
        assert '"Content-Type": "application/json"' in content

    def test_auth_and_versioning_headers(self, config) -> None:
        content = render_http(config)
        assert "headers['Authorization'] = `Bearer ${config.apiKey}`;" in content
        assert "headers['X-API-Version'] = config.version;" in content

    def test_auth_and_versioning_disabled(self, make_config) -> None:
        content = render_http(make_config(auth={"enabled": False}, versioning={"enabled": False}))
        assert "Authorization" not in content
        assert "X-API-Version" not in content

    def test_custom_version_header(self, make_config) -> None:
        content = render_http(make_config(versioning={"headerName": "Api-Version"}))
        assert "headers['Api-Version'] = config.version;" in content

    def test_retry(self, make_config) -> None:
        content = render_http(make_config(http={"retry": {"enabled": True, "maxAttempts": 5}}))
        assert "const RETRY_ATTEMPTS = 5;" in content
        assert "await sendWithRetry(" in content

    def test_errors_wired_in(self, config) -> None:
        content = render_http(config)
        assert "import { ApiError, NetworkError } from './errors';" in content
        assert "return new ApiError(message, status, data);" in content

    def test_without_error_classes(self, make_config) -> None:
        content = render_http(make_config(errorHandling={"enabled": False}))
        assert "./errors" not in content
        assert "return new Error(message);" in content


class TestPluginsAndUtils:
    def test_registry(self, make_config) -> None:
        content = render_plugins(make_config(plugins={"registryClassName": "Hooks"}))
        assert "export class Hooks {" in content
        assert "export interface Plugin {" in content
        assert "createLoggingPlugin" not in content

    def test_default_plugins(self, make_config) -> None:
        content = render_plugins(make_config(plugins={"includeDefaultPlugins": True}))
        assert "export function createLoggingPlugin(" in content

    def test_utils(self, config) -> None:
        content = render_utils(config)
        assert "export function buildHeaders(" in content
        assert "export function serializeParams(" in content
        assert "buildQueryString" not in content


class TestClientClass:
    def test_class(self, config) -> None:
        content = generate_client(SCHEMA, config)["client/client.ts"]
        assert "import * as operations from '../api/index';" in content
        assert "export class ReatchifyClient {" in content
        assert "export interface ReatchifyClientConfig {" in content
        assert "get api(): typeof operations {" in content
        assert "environment: 'prod'," in content

    def test_prefix_and_namespace(self, make_config) -> None:
        config = make_config(
            naming={"clientPrefix": "Acme"},
            client={"className": "Sdk"},
            api={"namespaceName": "endpoints"},
        )
        content = generate_client(SCHEMA, config)["client/client.ts"]
        assert "export class AcmeSdk {" in content
        assert "get endpoints(): typeof operations {" in content

    def test_request_only_with_plugins(self, make_config) -> None:
        with_plugins = generate_client(SCHEMA, make_config())["client/client.ts"]
        without = generate_client(SCHEMA, make_config(plugins={"enabled": False}))["client/client.ts"]
        assert "async request<T = unknown>(" in with_plugins
        assert "request<" not in without
        assert "./plugins" not in without

    def test_no_http_helper(self, make_config) -> None:
        content = generate_client(SCHEMA, make_config(api={"includeHttpClient": False}))[
            "client/client.ts"
        ]
        assert "configureHttp" not in content
