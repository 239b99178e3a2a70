"""Configuration loading, layered resolution, and atomic writes.

This module turns the user's sparse ``reatchify.config.json`` into the fully
populated :class:`~reatchify.models.ResolvedConfig` every generator reads:

* **Loading** -- :func:`load_user_config` parses the JSON file, substitutes
  ``${VAR}`` credential placeholders from the workspace environment, and
  validates the result into a :class:`~reatchify.models.UserConfig`.
* **Resolution** -- :func:`resolve_config` deep-merges an ordered list of
  layers (built-in defaults, project-type preferences, user values,
  environment overrides). Later layers win; dicts merge key by key.
* **Templates** -- :func:`write_config_template` writes a starter config
  using an atomic temp-file-then-rename strategy (:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import logging
import os
import platform
import re
import tempfile
from functools import reduce
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from reatchify.exceptions import ConfigError
from reatchify.models import ResolvedConfig, UserConfig
from reatchify.workspace import Workspace, detect_project_type

logger = logging.getLogger(__name__)

_APP_NAME = "reatchify"
CONFIG_FILENAME = "reatchify.config.json"

DEFAULT_ENVIRONMENT = "prod"
API_KEY_ENV_VAR = "REATCHIFY_API_KEY"

BASE_URLS: dict[str, str] = {
    "dev": "https://api-dev.internal-company.com",
    "staging": "https://api-staging.internal-company.com",
    "prod": "https://api.internal-company.com",
}
SUPPORTED_API_VERSIONS = ("v1", "v2", "v3")
SCHEMA_TIMEOUT = 30.0
"""Seconds allowed for the schema fetch."""

# Common NODE_ENV spellings mapped onto environment block names.
_ENVIRONMENT_ALIASES = {
    "production": "prod",
    "development": "dev",
    "stage": "staging",
}

PROJECT_PREFERENCES: dict[str, dict[str, Any]] = {
    "next": {"http_client": "fetch", "state_management": "zustand"},
    "qwik": {
        "http_client": "fetch",
        "state_management": "zustand",
        "generation": {"minify": True},
    },
    "react": {"http_client": "axios", "state_management": "zustand"},
    "vite": {"http_client": "axios", "state_management": "zustand"},
    "vue": {"http_client": "axios", "state_management": "zustand"},
    "svelte": {
        "http_client": "fetch",
        "state_management": "zustand",
        "generation": {"minify": True},
    },
    "angular": {
        "http_client": "fetch",
        "state_management": "zustand",
        "language": "ts",
    },
    "vanilla": {},
}
"""Preferred defaults per project type. They sit below every user layer."""

_PLACEHOLDER_RE = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")


# --- Paths ---


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/reatchify/`` (default ``~/.local/share/reatchify/``).
    On macOS/Windows: ``~/.reatchify/``.
    """
    if platform.system() == "Linux" or platform.system().endswith("BSD"):
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Merging ---


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with *override* merged into *base*.

    Nested dicts merge key by key at every depth. Any other value in
    *override* (scalars, lists, ``None``) replaces the value in *base*.
    Neither argument is mutated.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


# --- Loading ---


def is_placeholder(value: Optional[str]) -> bool:
    """Return True if *value* is a literal ``${NAME}`` placeholder."""
    return value is not None and _PLACEHOLDER_RE.match(value) is not None


def _substitute_api_key(raw: dict[str, Any], workspace: Workspace) -> None:
    """Replace ``${VAR}`` api keys in *raw* (and its environment blocks) in place."""
    for key in ("apiKey", "api_key"):
        value = raw.get(key)
        if not isinstance(value, str):
            continue
        match = _PLACEHOLDER_RE.match(value)
        if match is None:
            continue
        var_name = match.group(1)
        resolved = workspace.env(var_name)
        if resolved:
            raw[key] = resolved
        else:
            logger.warning(
                "Environment variable '%s' is not set; apiKey left as %s", var_name, value
            )

    environments = raw.get("environments")
    if isinstance(environments, dict):
        for block in environments.values():
            if isinstance(block, dict):
                _substitute_api_key(block, workspace)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_user_config(raw: Any, source: str = "<config>") -> UserConfig:  # noqa: ANN401
    """Validate an already-decoded config object into a :class:`UserConfig`.

    Raises:
        ConfigError: If *raw* is not an object or a field has the wrong type.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"{source} must contain a JSON object")
    try:
        return UserConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration in {source}: {_format_validation_error(exc)}"
        ) from exc


def load_user_config(
    path: Optional[Path] = None,
    workspace: Optional[Workspace] = None,
) -> UserConfig:
    """Load ``reatchify.config.json`` into a :class:`UserConfig`.

    Args:
        path: Config file path. Defaults to ``reatchify.config.json`` in the
            workspace root.
        workspace: Supplies the root directory and the environment used for
            ``${VAR}`` substitution. Defaults to :meth:`Workspace.current`.

    Returns:
        The sparse, validated user configuration.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or fails
            validation.
    """
    workspace = workspace or Workspace.current()
    config_path = Path(path) if path is not None else workspace.path(CONFIG_FILENAME)

    if not config_path.is_file():
        raise ConfigError(f"{config_path.name} not found at {config_path}")

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc

    if isinstance(raw, dict):
        _substitute_api_key(raw, workspace)
    return parse_user_config(raw, source=str(config_path))


# --- Resolution ---


def resolve_environment_name(
    explicit: Optional[str] = None,
    workspace: Optional[Workspace] = None,
) -> str:
    """Pick the runtime environment name.

    Precedence (high to low): *explicit* (the ``--env`` flag),
    ``REATCHIFY_ENV``, ``NODE_ENV``, then ``"prod"``. ``production`` and
    ``development`` are normalised to ``prod`` and ``dev``.
    """
    name = explicit
    if not name and workspace is not None:
        name = workspace.env("REATCHIFY_ENV") or workspace.env("NODE_ENV")
    if not name:
        return DEFAULT_ENVIRONMENT
    return _ENVIRONMENT_ALIASES.get(name, name)


def default_layer(workspace: Workspace) -> dict[str, Any]:
    """Return the built-in defaults as a snake_case dict."""
    return ResolvedConfig(output_dir=workspace.default_output_dir()).model_dump()


def resolve_config(
    user: UserConfig,
    environment: str = DEFAULT_ENVIRONMENT,
    workspace: Optional[Workspace] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> ResolvedConfig:
    """Merge *user* with layered defaults into a :class:`ResolvedConfig`.

    Layers, applied left to right (later wins, dicts merge key-wise):

        1. Built-in defaults
        2. Project-type preferences (:data:`PROJECT_PREFERENCES`)
        3. User top-level values
        4. ``user.environments[environment]``
        5. *overrides* (snake_case, e.g. from command-line flags)

    ``projectType: "auto"`` (or unset) runs
    :func:`~reatchify.workspace.detect_project_type` first. The base URL is
    the user's value if given, otherwise the internal URL for *environment*
    (falling back to ``prod``).

    Resolution never fails on a missing credential; the orchestrator checks
    that before generating.

    Args:
        user: Sparse user configuration.
        environment: Name of the environment block to apply.
        workspace: Project used for detection and the default output dir.
        overrides: Sparse snake_case values applied last.

    Returns:
        A fully populated configuration.
    """
    workspace = workspace or Workspace.current()

    user_layer = user.overrides()
    env_block = user.environments.get(environment)
    env_layer = env_block.overrides() if env_block is not None else {}

    project_type = env_layer.get("project_type") or user_layer.get("project_type") or "auto"
    if project_type == "auto":
        detection = detect_project_type(workspace)
        logger.debug(
            "Detected project type %s (%s confidence): %s",
            detection.type,
            detection.confidence,
            ", ".join(detection.indicators) or "no indicators",
        )
        project_type = detection.type

    layers = [
        default_layer(workspace),
        PROJECT_PREFERENCES.get(project_type, {}),
        user_layer,
        env_layer,
        overrides or {},
    ]
    merged = reduce(deep_merge, layers, {})
    merged["project_type"] = project_type
    merged["environment"] = environment
    if not merged.get("base_url"):
        merged["base_url"] = BASE_URLS.get(environment, BASE_URLS[DEFAULT_ENVIRONMENT])

    if merged.get("api_version") not in SUPPORTED_API_VERSIONS:
        logger.warning(
            "API version '%s' is not one of the supported versions (%s)",
            merged.get("api_version"),
            ", ".join(SUPPORTED_API_VERSIONS),
        )

    return ResolvedConfig.model_validate(merged)


# --- Templates ---


def config_template(project_type: str = "auto", enable_auth: bool = True) -> dict[str, Any]:
    """Return the starter configuration written by ``reatchify init``."""
    return {
        "apiKey": "${" + API_KEY_ENV_VAR + "}",
        "language": "ts",
        "stateManagement": "zustand",
        "httpClient": "axios",
        "projectType": project_type,
        "auth": {"enabled": enable_auth},
    }


def write_config_template(
    path: Path,
    project_type: str = "auto",
    enable_auth: bool = True,
    force: bool = False,
) -> Path:
    """Write :func:`config_template` to *path*.

    Raises:
        ConfigError: If *path* exists and *force* is false.
    """
    if path.exists() and not force:
        raise ConfigError(f"{path} already exists (use --force to overwrite)")
    data = json.dumps(config_template(project_type, enable_auth), indent=2) + "\n"
    _atomic_write(path, data)
    return path
