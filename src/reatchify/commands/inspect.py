"""Inspect commands -- show what a run would use.

* ``reatchify inspect config`` prints the fully resolved configuration.
* ``reatchify inspect project`` prints the detected project type.

Both are read-only and never contact the schema endpoint.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from reatchify.commands import fail
from reatchify.exceptions import ReatchifyError
from reatchify.output import get_output

inspect_app = typer.Typer(no_args_is_help=True)

_MASK = "****"


@inspect_app.command("config")
def inspect_config(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to reatchify.config.json."
    ),
    env: Optional[str] = typer.Option(None, "--env", "-e", help="Environment block to apply."),
) -> None:
    """Print the resolved configuration as JSON (camelCase keys).

    The API key is masked.

    Example::

        reatchify inspect config --env staging
    """
    from reatchify.config import load_user_config, resolve_config, resolve_environment_name
    from reatchify.workspace import Workspace

    workspace = Workspace.current()
    try:
        user = load_user_config(config, workspace)
        environment = resolve_environment_name(env, workspace)
        resolved = resolve_config(user, environment, workspace)
    except ReatchifyError as exc:
        fail(exc)

    data = resolved.model_dump(mode="json", by_alias=True)
    if data.get("apiKey"):
        data["apiKey"] = _MASK
    get_output().print_json(data)


@inspect_app.command("project")
def inspect_project() -> None:
    """Show the detected project type and what it was detected from.

    Example::

        reatchify inspect project
    """
    from reatchify.workspace import Workspace, detect_project_type

    detection = detect_project_type(Workspace.current())
    rows = [
        ["type", detection.type],
        ["confidence", detection.confidence],
        ["indicators", "; ".join(detection.indicators) or "-"],
    ]
    get_output().print_table(["Field", "Value"], rows, title="Project detection")
