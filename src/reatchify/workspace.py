"""Workspace inspection: the project directory and environment a run targets.

Configuration resolution and project-type detection need to look at the
user's project (``package.json``, framework config files, environment
variables). Rather than reading ``os.getcwd()`` and ``os.environ`` directly,
they receive a :class:`Workspace`, so tests can point them at a temporary
directory and a fake environment.

Example::

    ws = Workspace(Path("/path/to/app"), {"NODE_ENV": "dev"})
    detection = detect_project_type(ws)
    print(detection.type, detection.confidence)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from reatchify.models import ProjectDetection

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "src/services"
NESTED_OUTPUT_DIR = "src/services/reatchify"

_NEXT_CONFIG_FILES = ("next.config.js", "next.config.mjs", "next.config.ts")
_VITE_CONFIG_FILES = ("vite.config.js", "vite.config.ts", "vite.config.mjs")


class Workspace:
    """A project root plus the environment variables visible to it.

    Args:
        root: The project directory. Relative paths are resolved against it.
        environ: Environment mapping. Defaults to an empty mapping, not the
            process environment; use :meth:`current` for that.
    """

    def __init__(self, root: Path, environ: Optional[Mapping[str, str]] = None) -> None:
        self.root = Path(root)
        self.environ: dict[str, str] = dict(environ or {})

    @classmethod
    def current(cls) -> Workspace:
        """Build a workspace from the process working directory and environment."""
        return cls(Path.cwd(), os.environ)

    def path(self, rel: str) -> Path:
        return self.root / rel

    def exists(self, rel: str) -> bool:
        return self.path(rel).exists()

    def read_json(self, rel: str) -> Any:  # noqa: ANN401
        """Read and parse a JSON file under the root.

        Raises:
            OSError: If the file cannot be read.
            json.JSONDecodeError: If the content is not valid JSON.
        """
        with open(self.path(rel), encoding="utf-8") as f:
            return json.load(f)

    def env(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.environ.get(name, default)

    def default_output_dir(self) -> str:
        """Return ``src/services``, nesting under ``reatchify`` if that directory already exists."""
        if self.path(DEFAULT_OUTPUT_DIR).is_dir():
            return NESTED_OUTPUT_DIR
        return DEFAULT_OUTPUT_DIR

    def __repr__(self) -> str:
        return f"Workspace(root={str(self.root)!r})"


def _detect_from_dependencies(deps: dict[str, Any]) -> Optional[tuple[str, str, str]]:
    """Map ``package.json`` dependencies to ``(type, confidence, indicator)``."""
    if "next" in deps:
        return "next", "high", "Found Next.js dependency"
    if "@builder.io/qwik" in deps or "qwik" in deps:
        return "qwik", "high", "Found Qwik dependency"
    if "vite" in deps and ("react" in deps or "@types/react" in deps):
        return "vite", "high", "Found Vite + React dependencies"
    if "vue" in deps or "@vue/cli-service" in deps:
        return "vue", "high", "Found Vue.js dependency"
    if "svelte" in deps:
        return "svelte", "high", "Found Svelte dependency"
    if "@angular/core" in deps or "@angular/cli" in deps:
        return "angular", "high", "Found Angular dependency"
    if "react" in deps and "react-scripts" in deps:
        return "react", "high", "Found Create React App setup"
    if "react" in deps:
        return "react", "medium", "Found React dependency"
    return None


def detect_project_type(workspace: Workspace) -> ProjectDetection:
    """Guess the front-end framework of the project in *workspace*.

    Checks run in order and the first hit wins: ``package.json``
    dependencies, framework config files, conventional directories, then
    environment variables. A project with none of these is ``vanilla``.

    Args:
        workspace: The project to inspect.

    Returns:
        The detected type, a confidence level and the indicators found.
    """
    indicators: list[str] = []

    if workspace.exists("package.json"):
        try:
            package = workspace.read_json("package.json")
        except (OSError, ValueError) as exc:
            logger.warning("Could not read package.json: %s", exc)
            return ProjectDetection(
                type="vanilla",
                confidence="low",
                indicators=["Detection failed, defaulting to vanilla"],
            )
        deps: dict[str, Any] = {}
        if isinstance(package, dict):
            deps.update(package.get("dependencies") or {})
            deps.update(package.get("devDependencies") or {})
        hit = _detect_from_dependencies(deps)
        if hit is not None:
            kind, confidence, indicator = hit
            return ProjectDetection(type=kind, confidence=confidence, indicators=[indicator])

    checks: list[tuple[bool, str, str, str]] = [
        (
            any(workspace.exists(f) for f in _NEXT_CONFIG_FILES),
            "next", "high", "Found Next.js config file",
        ),
        (
            any(workspace.exists(f) for f in _VITE_CONFIG_FILES),
            "vite", "high", "Found Vite config file",
        ),
        (workspace.exists("pages"), "next", "medium", "Found pages/ directory (Next.js)"),
        (
            workspace.exists("src/app"),
            "next", "medium", "Found src/app directory (Next.js App Router)",
        ),
        (workspace.exists("qwik-city.config.ts"), "qwik", "high", "Found Qwik City config"),
        (
            bool(workspace.env("NEXT_PUBLIC_API_URL") or workspace.env("NEXTAUTH_URL")),
            "next", "medium", "Found Next.js environment variables",
        ),
        (
            bool(workspace.env("VITE_API_URL") or workspace.env("VITE_APP_API_URL")),
            "vite", "medium", "Found Vite environment variables",
        ),
    ]
    for matched, kind, confidence, indicator in checks:
        if matched:
            indicators.append(indicator)
            return ProjectDetection(type=kind, confidence=confidence, indicators=indicators)

    return ProjectDetection(type="vanilla", confidence="low", indicators=indicators)
