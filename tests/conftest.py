"""Shared test fixtures for reatchify.

Provides a throwaway project directory, a parsed example schema, a helper
for building resolved configurations, and a CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from reatchify.config import resolve_config
from reatchify.models import ApiSchema, ResolvedConfig, UserConfig
from reatchify.output import reset_output
from reatchify.workspace import Workspace

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.  The ``reatchify`` logger is restored to
    propagate so ``caplog`` sees its records.
    """
    yield
    reset_output()
    logger = logging.getLogger("reatchify")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Schema fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def schema_raw() -> dict[str, Any]:
    """Load the raw users/posts schema dict."""
    with open(FIXTURES_DIR / "schema.json") as f:
        return json.load(f)


@pytest.fixture
def schema(schema_raw: dict[str, Any]) -> ApiSchema:
    return ApiSchema.model_validate(schema_raw)


@pytest.fixture
def schema_file() -> Path:
    return FIXTURES_DIR / "schema.json"


# ---------------------------------------------------------------------------
# Workspace and configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """An empty project directory with an empty environment."""
    return Workspace(tmp_path)


@pytest.fixture
def make_config(workspace: Workspace):
    """Build a :class:`ResolvedConfig` for a vanilla project.

    Keyword arguments are camelCase or snake_case user settings::

        config = make_config(stateManagement="redux")
    """

    def _make(environment: str = "prod", **settings: Any) -> ResolvedConfig:
        data: dict[str, Any] = {"apiKey": "test-key", "projectType": "vanilla"}
        data.update(settings)
        return resolve_config(UserConfig.model_validate(data), environment, workspace)

    return _make


@pytest.fixture
def config(make_config) -> ResolvedConfig:
    """The default resolved configuration."""
    return make_config()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, schema_raw: dict[str, Any]) -> Path:
    """A project with ``reatchify.config.json`` and ``schema.json``, set as the cwd."""
    config = {"apiKey": "${REATCHIFY_API_KEY}", "projectType": "vanilla"}
    (tmp_path / "reatchify.config.json").write_text(json.dumps(config))
    (tmp_path / "schema.json").write_text(json.dumps(schema_raw))
    monkeypatch.setenv("REATCHIFY_API_KEY", "secret-key")
    monkeypatch.delenv("REATCHIFY_ENV", raising=False)
    monkeypatch.delenv("NODE_ENV", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
