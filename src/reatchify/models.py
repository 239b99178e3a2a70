"""Canonical Pydantic models shared across all reatchify modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- read from ``reatchify.config.json``:
    :class:`NamingConfig`, :class:`FolderStructureConfig`, :class:`ClientConfig`,
    :class:`ApiConfig`, :class:`ServicesConfig`, :class:`ResponseConfig`,
    :class:`PluginsConfig`, :class:`VersioningConfig`, :class:`AuthConfig`,
    :class:`ErrorHandlingConfig`, :class:`HttpConfig`, :class:`GenerationConfig`,
    :class:`AdvancedConfig`, the sparse :class:`UserConfig` and the fully
    populated :class:`ResolvedConfig`.

**Schema models** -- the endpoint/type description driving generation:
    :class:`Parameter`, :class:`ResponseSpec`, :class:`Endpoint` and
    :class:`ApiSchema`.

**Result models** -- :class:`ProjectDetection` and :class:`GenerationResult`.

Configuration keys are camelCase in JSON files (``stateManagement``,
``client.className``) and snake_case in Python. Every configuration model
accepts both spellings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

StateManagement = Literal["zustand", "redux", "none"]
ResponsePattern = Literal["promise", "result"]
ProjectType = Literal[
    "auto", "next", "qwik", "react", "vite", "vue", "svelte", "angular", "vanilla"
]

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
"""HTTP verbs a schema endpoint may use."""


class _ConfigModel(BaseModel):
    """Base for configuration groups: camelCase aliases, snake_case names allowed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# --- Configuration groups ---


class NamingConfig(_ConfigModel):
    """Prefixes applied to generated identifiers."""

    client_prefix: str = ""
    store_prefix: str = "use"
    hook_prefix: str = "use"


class FolderStructureConfig(_ConfigModel):
    """Directory names for each artifact group under the output root."""

    types: str = "types"
    api: str = "api"
    client: str = "client"
    stores: str = "stores"


class ClientConfig(_ConfigModel):
    """Options for the generated client class."""

    enabled: bool = True
    class_name: str = "ReatchifyClient"
    export_as_default: bool = False
    include_utils: bool = True


class ApiConfig(_ConfigModel):
    """Options for the generated API functions.

    ``group_by_resource`` selects one file per resource (``True``) or a
    single flat ``index`` file (``False``). ``include_http_client`` wires
    every function to the shared HTTP helper; when off the functions are
    stubs that throw.
    """

    enabled: bool = True
    namespace_name: str = "api"
    group_by_resource: bool = True
    include_http_client: bool = True


class ServicesConfig(_ConfigModel):
    """Service selection. ``include=None`` means every resource in the schema."""

    include: Optional[list[str]] = None


class ResponseConfig(_ConfigModel):
    pattern: ResponsePattern = "result"
    include_error_classes: bool = True


class PluginsConfig(_ConfigModel):
    """Options for the generated runtime plugin registry."""

    enabled: bool = True
    registry_class_name: str = "PluginRegistry"
    include_default_plugins: bool = False


class VersioningConfig(_ConfigModel):
    enabled: bool = True
    header_name: str = "X-API-Version"


class AuthConfig(_ConfigModel):
    """When enabled the client sends ``Authorization: Bearer <apiKey>``."""

    enabled: bool = True


class CustomErrorClass(_ConfigModel):
    """A user-declared error class emitted into ``errors.ts``.

    Example::

        CustomErrorClass(
            name="RateLimitError",
            base_class="ApiError",
            properties=["retryAfter"],
        )
    """

    name: str
    base_class: str = "Error"
    properties: list[str] = Field(default_factory=list)


class ErrorHandlingConfig(_ConfigModel):
    enabled: bool = True
    include_network_errors: bool = True
    include_validation_errors: bool = True
    custom_error_classes: list[CustomErrorClass] = Field(default_factory=list)


class RetryConfig(_ConfigModel):
    enabled: bool = False
    max_attempts: int = Field(default=3, ge=1)
    delay: int = Field(default=1000, ge=0, description="Delay between attempts in ms")


DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "X-Client": "reatchify-sdk",
}


class HttpConfig(_ConfigModel):
    """Transport settings baked into the generated HTTP helper.

    ``headers`` from the user are merged key-wise with the defaults, so
    adding one header keeps ``Content-Type``.
    """

    timeout: int = Field(default=30000, ge=0, description="Request timeout in ms")
    headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    retry: RetryConfig = Field(default_factory=RetryConfig)


class GenerationConfig(_ConfigModel):
    include_comments: bool = True
    include_jsdoc: bool = Field(default=True, alias="includeJSDoc")
    minify: bool = False
    overwrite: bool = False
    dry_run: bool = False
    validate_output: bool = False


class AdvancedConfig(_ConfigModel):
    """Extension selection.

    An empty ``extensions`` list loads every discovered extension except the
    ones named in ``disabled_extensions``.
    """

    extensions: list[str] = Field(default_factory=list)
    disabled_extensions: list[str] = Field(default_factory=list)


# --- User and resolved configuration ---


class UserConfig(_ConfigModel):
    """Sparse configuration as written by the user.

    Every field is optional. Which fields were actually supplied is tracked
    by Pydantic, so ``model_dump(exclude_unset=True)`` yields exactly the
    user's overrides, at every nesting depth. ``environments`` maps an
    environment name to another sparse config applied on top of the
    top-level values.
    """

    api_key: Optional[str] = None
    language: Optional[str] = None
    state_management: Optional[StateManagement] = None
    http_client: Optional[str] = None
    output_dir: Optional[str] = None
    api_version: Optional[str] = None
    project_type: Optional[ProjectType] = None
    base_url: Optional[str] = None

    naming: Optional[NamingConfig] = None
    folder_structure: Optional[FolderStructureConfig] = None
    client: Optional[ClientConfig] = None
    api: Optional[ApiConfig] = None
    services: Optional[ServicesConfig] = None
    response: Optional[ResponseConfig] = None
    plugins: Optional[PluginsConfig] = None
    versioning: Optional[VersioningConfig] = None
    auth: Optional[AuthConfig] = None
    error_handling: Optional[ErrorHandlingConfig] = None
    http: Optional[HttpConfig] = None
    generation: Optional[GenerationConfig] = None
    advanced: Optional[AdvancedConfig] = None

    environments: dict[str, UserConfig] = Field(default_factory=dict)

    def overrides(self) -> dict[str, Any]:
        """Return the user-supplied values as a nested snake_case dict, minus ``environments``."""
        return self.model_dump(exclude_unset=True, exclude={"environments"})


class ResolvedConfig(_ConfigModel):
    """Fully populated configuration for one generation run.

    Produced by :func:`~reatchify.config.resolve_config`. Every group is
    present with every field set; generators never see a missing value.
    """

    api_key: Optional[str] = None
    language: str = "ts"
    state_management: StateManagement = "zustand"
    http_client: str = "axios"
    output_dir: str = "src/services"
    api_version: str = "v2"
    project_type: ProjectType = "vanilla"
    base_url: str = ""
    environment: str = "prod"

    naming: NamingConfig = Field(default_factory=NamingConfig)
    folder_structure: FolderStructureConfig = Field(default_factory=FolderStructureConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    services: ServicesConfig = Field(default_factory=ServicesConfig)
    response: ResponseConfig = Field(default_factory=ResponseConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    versioning: VersioningConfig = Field(default_factory=VersioningConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    error_handling: ErrorHandlingConfig = Field(default_factory=ErrorHandlingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    @property
    def uses_result_pattern(self) -> bool:
        return self.response.pattern == "result"

    @property
    def stores_enabled(self) -> bool:
        return self.state_management != "none"


# --- Schema models ---


class Parameter(BaseModel):
    """One endpoint parameter. Path placeholders and query/body fields share this shape."""

    name: str
    type: str = "any"
    required: bool = False
    description: Optional[str] = None


class ResponseSpec(BaseModel):
    type: str = "any"
    description: Optional[str] = None


class Endpoint(BaseModel):
    """A single API operation.

    The model is deliberately loose: a malformed path or unknown verb is
    accepted here and reported by
    :func:`~reatchify.schema.validator.validate_schema`, which collects every
    problem at once.
    """

    path: str
    method: str
    description: Optional[str] = None
    parameters: list[Parameter] = Field(default_factory=list)
    response: Optional[ResponseSpec] = None

    @field_validator("method")
    @classmethod
    def _normalise_method(cls, value: str) -> str:
        return value.upper()


class ApiSchema(BaseModel):
    """Endpoints plus named types (type name -> field name -> type expression)."""

    endpoints: list[Endpoint] = Field(default_factory=list)
    types: dict[str, dict[str, str]] = Field(default_factory=dict)


# --- Results ---


class ProjectDetection(BaseModel):
    """Outcome of :func:`~reatchify.workspace.detect_project_type`."""

    type: ProjectType
    confidence: Literal["high", "medium", "low"]
    indicators: list[str] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """What a generation run produced.

    ``files`` maps paths relative to ``output_dir`` (POSIX separators) to
    file contents. ``validated`` is ``None`` when output validation was not
    requested, otherwise whether the type-check passed.
    """

    output_dir: Path
    files: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    dry_run: bool = False
    validated: Optional[bool] = None


UserConfig.model_rebuild()
