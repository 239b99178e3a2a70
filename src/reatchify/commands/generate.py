"""Generate and validate commands.

``reatchify generate`` resolves the project's configuration, obtains the
schema (remote, or ``--schema`` for a local file) and writes the SDK.
``reatchify validate`` runs the same checks without rendering anything.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from reatchify.commands import fail
from reatchify.exceptions import ConfigError, ReatchifyError, SchemaValidationError
from reatchify.output import debug, get_output, info, progress, success, warning


def _load(config_path: Optional[Path], env: Optional[str]):  # noqa: ANN202
    """Return ``(workspace, user_config, environment)`` for the current directory."""
    from reatchify.config import load_user_config, resolve_environment_name
    from reatchify.workspace import Workspace

    workspace = Workspace.current()
    user = load_user_config(config_path, workspace)
    environment = resolve_environment_name(env, workspace)
    debug(f"Environment: {environment}")
    return workspace, user, environment


def _cli_overrides(output_dir: Optional[str], dry_run: bool, force: bool) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if output_dir:
        overrides["output_dir"] = output_dir
    generation: dict[str, Any] = {}
    if dry_run:
        generation["dry_run"] = True
    if force:
        generation["overwrite"] = True
    if generation:
        overrides["generation"] = generation
    return overrides


def generate_command(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to reatchify.config.json."
    ),
    env: Optional[str] = typer.Option(
        None, "--env", "-e", help="Environment block to apply (default: REATCHIFY_ENV, NODE_ENV, prod)."
    ),
    schema: Optional[Path] = typer.Option(
        None, "--schema", "-s", help="Local JSON/YAML schema instead of fetching it."
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output directory, relative to the project."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show the files that would be written."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite files in a non-empty output directory."
    ),
) -> None:
    """Generate the TypeScript SDK.

    Example::

        reatchify generate
        reatchify generate --schema ./schema.json --dry-run
        reatchify generate --env staging --force
    """
    from reatchify.generator import generate
    from reatchify.schema import load_schema_file

    schema_provider = None
    if schema is not None:
        schema_file = schema
        schema_provider = lambda _config: load_schema_file(schema_file)  # noqa: E731

    try:
        workspace, user, environment = _load(config, env)
        progress("Generating SDK...")
        result = generate(
            user,
            environment=environment,
            workspace=workspace,
            schema_provider=schema_provider,
            overrides=_cli_overrides(output_dir, dry_run, force),
        )
    except ReatchifyError as exc:
        fail(exc)

    if result.dry_run:
        rows = [[path, str(content.count("\n"))] for path, content in result.files.items()]
        get_output().print_table(
            ["File", "Lines"], rows, title=f"Dry run: {len(rows)} file(s) for {result.output_dir}"
        )
        info("Dry run complete. No files were written.")
        return

    success(f"Generated {len(result.files)} file(s) in {result.output_dir}")
    if result.validated is False:
        warning("Type check of the generated files did not pass")


def validate_command(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to reatchify.config.json."
    ),
    env: Optional[str] = typer.Option(None, "--env", "-e", help="Environment block to apply."),
    schema: Optional[Path] = typer.Option(
        None, "--schema", "-s", help="Local JSON/YAML schema instead of fetching it."
    ),
) -> None:
    """Check the configuration and schema without generating.

    Every schema problem is listed, not only the first. Exits with code 7
    when the schema is invalid.
    """
    from reatchify.config import resolve_config
    from reatchify.generator import check_config, validate_for_config
    from reatchify.schema import fetch_schema, load_schema_file, validate_store_config

    try:
        workspace, user, environment = _load(config, env)
        resolved = resolve_config(user, environment, workspace)
        api_schema = load_schema_file(schema) if schema is not None else fetch_schema(resolved)
    except ReatchifyError as exc:
        fail(exc)

    problems = check_config(resolved)
    if problems:
        fail(ConfigError("Invalid configuration:\n" + "\n".join(f"  - {p}" for p in problems)))
    for advisory in validate_store_config(resolved):
        warning(advisory)

    errors = validate_for_config(api_schema, resolved)
    if errors:
        fail(SchemaValidationError(errors))

    success(
        f"Schema is valid: {len(api_schema.endpoints)} endpoint(s), {len(api_schema.types)} type(s)"
    )
