"""Init command -- write a starter ``reatchify.config.json``.

The template references the API key through ``${REATCHIFY_API_KEY}`` so the
credential itself never lands in the project's repository.
"""

from __future__ import annotations

import typer

from reatchify.commands import fail
from reatchify.exceptions import InvalidUsageError, ReatchifyError
from reatchify.output import info, success, suggest

_PROJECT_TYPES = ("auto", "next", "qwik", "react", "vite", "vue", "svelte", "angular", "vanilla")


def init_command(
    project_type: str = typer.Option(
        "auto", "--project-type", "-t", help="Project type, or 'auto' to detect it on each run."
    ),
    no_auth: bool = typer.Option(
        False, "--no-auth", help="Do not send the API key as a bearer token."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config file."
    ),
) -> None:
    """Create ``reatchify.config.json`` in the current directory.

    Example::

        reatchify init
        reatchify init --project-type next --force
    """
    from reatchify.config import API_KEY_ENV_VAR, CONFIG_FILENAME, write_config_template
    from reatchify.workspace import Workspace, detect_project_type

    workspace = Workspace.current()
    try:
        if project_type not in _PROJECT_TYPES:
            raise InvalidUsageError(
                f"Unknown project type '{project_type}'. Choose one of: {', '.join(_PROJECT_TYPES)}"
            )
        path = write_config_template(
            workspace.path(CONFIG_FILENAME),
            project_type=project_type,
            enable_auth=not no_auth,
            force=force,
        )
    except ReatchifyError as exc:
        fail(exc)

    if project_type == "auto":
        detection = detect_project_type(workspace)
        info(f"Detected project type: {detection.type} ({detection.confidence} confidence)")

    success(f"Created {path}")
    suggest(f"Export your key: export {API_KEY_ENV_VAR}=<your-api-key>")
    suggest("Generate the SDK: reatchify generate")
