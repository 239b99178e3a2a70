"""Generation orchestrator.

:func:`generate` runs one end-to-end generation:

1. Resolve the configuration and reject a missing credential or
   inconsistent settings before touching the network or the disk.
2. Obtain the schema (fetched, or from a caller-supplied provider) and
   validate it, reporting every violation at once.
3. Check the output root: it must be writable and, unless overwriting is
   allowed, empty.
4. Render every group in dependency order (types, api, client, stores,
   root index), reject schema types that clash with a generated export,
   then apply minification and extension transforms.
5. Write the files into a staging directory next to the output root, then
   move them into place. Any failure restores the previous state: files
   that existed are put back, directories this run made are removed, and
   so is an output root it created.
6. Optionally type-check the written tree. Failures are warnings.

Checking for an empty output root and writing into it are separate steps;
two concurrent runs against one directory can race. That is accepted for a
single-user CLI.
"""

from __future__ import annotations

import logging
import os
import posixpath
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Optional

from reatchify.config import DEFAULT_ENVIRONMENT, is_placeholder, resolve_config
from reatchify.exceptions import (
    ConfigError,
    ExtensionError,
    GenerationError,
    OutputDirectoryError,
    ReatchifyError,
    SchemaValidationError,
)
from reatchify.extensions import Extension, ExtensionManager, HookRunner
from reatchify.generator.api import ServiceSelection, generate_api, select_services
from reatchify.generator.client import BUILTIN_ERROR_BASES, emitted_error_classes, generate_client
from reatchify.generator.index import ROOT_INDEX, generate_index
from reatchify.generator.render import exported_names, finalize
from reatchify.generator.stores import generate_stores
from reatchify.generator.types import generate_types
from reatchify.models import ApiSchema, GenerationResult, ResolvedConfig, UserConfig
from reatchify.naming import is_identifier
from reatchify.schema import fetch_schema, validate_schema, validate_store_config
from reatchify.workspace import Workspace

logger = logging.getLogger(__name__)

SchemaProvider = Callable[[ResolvedConfig], ApiSchema]

TYPE_CHECK_COMMAND = ("npx", "tsc", "--noEmit", "--skipLibCheck")
TYPE_CHECK_TIMEOUT = 300


# --- Configuration checks ---


def check_config(config: ResolvedConfig) -> list[str]:
    """Return every setting that would produce uncompilable or clashing output."""
    problems: list[str] = []

    folders = config.folder_structure.model_dump()
    for key, folder in folders.items():
        parts = Path(folder).parts
        if not folder or Path(folder).is_absolute() or ".." in parts or posixpath.normpath(folder) == ".":
            problems.append(
                f"folderStructure.{key}: '{folder}' must be a relative path inside the output directory"
            )
    # "api", "api/" and "./api" all name the same directory
    if len({posixpath.normpath(folder) for folder in folders.values()}) != len(folders):
        problems.append("folderStructure: folder names must be distinct")

    identifiers = {
        "api.namespaceName": config.api.namespace_name,
        "plugins.registryClassName": config.plugins.registry_class_name,
        "client.className (with naming.clientPrefix)": config.naming.client_prefix + config.client.class_name,
    }
    for label, value in identifiers.items():
        if not is_identifier(value):
            problems.append(f"{label}: '{value}' is not a valid identifier")
    prefixes = {
        "naming.storePrefix": config.naming.store_prefix,
        "naming.hookPrefix": config.naming.hook_prefix,
    }
    for label, prefix in prefixes.items():
        if prefix and not is_identifier(prefix):
            problems.append(f"{label}: '{prefix}' is not a valid identifier prefix")

    known = set(BUILTIN_ERROR_BASES) | set(emitted_error_classes(config))
    for custom in config.error_handling.custom_error_classes:
        label = f"errorHandling.customErrorClasses[{custom.name}]"
        if not is_identifier(custom.name):
            problems.append(f"{label}: name is not a valid identifier")
        elif custom.name in known:
            problems.append(f"{label}: name is already declared")
        if custom.base_class not in known:
            problems.append(
                f"{label}: base class '{custom.base_class}' must be Error or an error class declared before it"
            )
        seen: set[str] = set()
        for prop in custom.properties:
            if not is_identifier(prop) or prop in seen or prop in ("name", "message", "stack"):
                problems.append(f"{label}: invalid or duplicate property '{prop}'")
            seen.add(prop)
        known.add(custom.name)

    return problems


# --- Rendering ---


def build_artifacts(
    schema: ApiSchema,
    config: ResolvedConfig,
    selection: Optional[ServiceSelection] = None,
) -> dict[str, str]:
    """Render every group into one output-root-relative path to content map.

    Groups are rendered in dependency order; paths are unique across
    groups because the folder names are distinct.
    """
    selection = selection or select_services(schema, config)
    files: dict[str, str] = {}
    files.update(generate_types(schema, config))
    files.update(generate_api(schema, config, selection))
    files.update(generate_client(schema, config))
    files.update(generate_stores(schema, config, selection))
    files.update(generate_index(schema, config))
    return files


def check_type_exports(schema: ApiSchema, config: ResolvedConfig, files: dict[str, str]) -> list[str]:
    """Report schema types whose name another generated group also exports.

    The root index re-exports every group with ``export *``, so a name
    exported by two groups is ambiguous and fails to compile. Which names
    the client and store groups export depends on the configuration
    (client class, plugin registry, custom errors), hence the check runs
    against the rendered files.
    """
    types_folder = posixpath.normpath(config.folder_structure.types)
    taken: dict[str, str] = {}
    for path, content in sorted(files.items()):
        if path == ROOT_INDEX or posixpath.normpath(posixpath.dirname(path)) == types_folder:
            continue
        for name in exported_names(content):
            taken.setdefault(name, path)
    return [
        f"type '{name}': name clashes with an export of the generated '{taken[name]}'"
        for name in schema.types
        if name in taken
    ]


def validate_for_config(schema: ApiSchema, config: ResolvedConfig) -> list[str]:
    """:func:`validate_schema` plus the checks that depend on *config*."""
    errors = validate_schema(schema)
    if errors:
        return errors
    return check_type_exports(schema, config, build_artifacts(schema, config))


# --- Output directory ---


def output_root(config: ResolvedConfig, workspace: Workspace) -> Path:
    return workspace.path(config.output_dir)


def _nearest_existing(path: Path) -> Path:
    current = path
    while not current.exists() and current != current.parent:
        current = current.parent
    return current


def _first_missing(path: Path) -> Optional[Path]:
    """Topmost ancestor of *path* (or *path* itself) that does not exist yet."""
    if path.exists():
        return None
    missing = path
    while not missing.parent.exists():
        missing = missing.parent
    return missing


def check_output_dir(root: Path, overwrite: bool) -> None:
    """Raise unless *root* can receive a fresh set of files.

    Raises:
        ConfigError: *root* is not a directory, or cannot be written.
        OutputDirectoryError: *root* contains files and *overwrite* is off.
    """
    if root.exists() and not root.is_dir():
        raise ConfigError(f"Output path {root} exists and is not a directory")
    anchor = _nearest_existing(root)
    if not os.access(anchor, os.W_OK):
        raise ConfigError(f"Output directory {root} is not writable")
    if root.is_dir() and any(root.iterdir()) and not overwrite:
        raise OutputDirectoryError(
            f"Output directory {root} is not empty. "
            "Set generation.overwrite to true or pass --force to replace its files."
        )


def _make_dirs(directory: Path, created: list[Path]) -> None:
    """``mkdir -p`` that appends every directory it creates to *created*, outermost first."""
    missing = []
    current = directory
    while not current.exists():
        missing.append(current)
        current = current.parent
    for path in reversed(missing):
        path.mkdir()
        created.append(path)


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Write *files* under *root* all-or-nothing.

    Content is first written into a staging directory beside *root*, then
    moved into place one file at a time with :func:`os.replace`. Files being
    replaced are parked in the staging directory so they can be restored,
    and directories made along the way are removed again on failure.
    """
    created_root = _first_missing(root)
    root.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f".{root.name}.", suffix=".staging", dir=root.parent))
    backups = staging / ".previous"
    committed: list[tuple[Path, Optional[Path]]] = []
    made_dirs: list[Path] = []

    try:
        for rel, content in files.items():
            staged = staging / "files" / rel
            staged.parent.mkdir(parents=True, exist_ok=True)
            staged.write_text(content, encoding="utf-8")

        for rel in files:
            dest = root / rel
            backup: Optional[Path] = None
            if dest.exists():
                backup = backups / rel
                backup.parent.mkdir(parents=True, exist_ok=True)
                os.replace(dest, backup)
            committed.append((dest, backup))
            _make_dirs(dest.parent, made_dirs)
            os.replace(staging / "files" / rel, dest)
    except BaseException:
        _rollback(committed, made_dirs, created_root)
        raise
    finally:
        shutil.rmtree(staging, ignore_errors=True)


def _rollback(
    committed: list[tuple[Path, Optional[Path]]],
    made_dirs: list[Path],
    created_root: Optional[Path],
) -> None:
    logger.debug("Rolling back %d file(s)", len(committed))
    for dest, backup in reversed(committed):
        if dest.exists():
            dest.unlink()
        if backup is not None and backup.exists():
            os.replace(backup, dest)
    for directory in reversed(made_dirs):
        if directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
    if created_root is not None:
        shutil.rmtree(created_root, ignore_errors=True)


def type_check(root: Path, files: Sequence[str]) -> tuple[bool, Optional[str]]:
    """Run the TypeScript compiler over the written files.

    Returns:
        ``(ok, message)`` where *message* describes the failure.
    """
    command = [*TYPE_CHECK_COMMAND, *files]
    try:
        proc = subprocess.run(
            command,
            cwd=root,
            capture_output=True,
            text=True,
            timeout=TYPE_CHECK_TIMEOUT,
        )
    except FileNotFoundError:
        return False, "Output validation skipped: npx is not installed"
    except subprocess.TimeoutExpired:
        return False, f"Output validation timed out after {TYPE_CHECK_TIMEOUT}s"
    if proc.returncode != 0:
        details = (proc.stdout or proc.stderr).strip().splitlines()[:10]
        return False, "Output validation failed:\n" + "\n".join(details)
    return True, None


# --- Orchestration ---


def _hook_runner(config: ResolvedConfig, extensions: Optional[Sequence[Extension]]) -> HookRunner:
    manager = ExtensionManager()
    if extensions is None:
        manager.discover(config)
    else:
        for extension in extensions:
            manager.load_extension(extension.name, extension, config)
    return manager.get_hook_runner()


def generate(
    user_config: UserConfig,
    *,
    environment: str = DEFAULT_ENVIRONMENT,
    workspace: Optional[Workspace] = None,
    schema_provider: Optional[SchemaProvider] = None,
    extensions: Optional[Sequence[Extension]] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> GenerationResult:
    """Generate the client SDK described by *user_config*.

    Args:
        user_config: Sparse user configuration, credential already substituted.
        environment: Environment block to apply.
        workspace: Project the output directory is relative to.
        schema_provider: Returns the schema for a resolved config. Defaults
            to :func:`~reatchify.schema.fetch_schema`.
        extensions: Extensions to run. ``None`` discovers them from entry
            points; an empty sequence runs none.
        overrides: Snake_case settings applied above every config layer.

    Returns:
        The output directory, the generated files and collected warnings.

    Raises:
        ConfigError: Missing credential, invalid settings or unwritable output.
        SchemaError: The schema could not be obtained or parsed.
        SchemaValidationError: The schema has structural problems.
        OutputDirectoryError: The output directory is not empty.
        GenerationError: Rendering, an extension or writing failed.
        ExtensionError: Two extensions share a name.
    """
    workspace = workspace or Workspace.current()
    config = resolve_config(user_config, environment, workspace, overrides)

    if not config.api_key or is_placeholder(config.api_key):
        raise ConfigError(
            "apiKey is required. Set it in reatchify.config.json or via ${REATCHIFY_API_KEY}."
        )
    problems = check_config(config)
    if problems:
        raise ConfigError("Invalid configuration:\n" + "\n".join(f"  - {p}" for p in problems))

    warnings = list(validate_store_config(config))
    for advisory in warnings:
        logger.warning(advisory)

    runner = _hook_runner(config, extensions)
    dry_run = config.generation.dry_run
    root = output_root(config, workspace)

    try:
        schema = (schema_provider or fetch_schema)(config)
        errors = validate_schema(schema)
        if errors:
            raise SchemaValidationError(errors)

        if dry_run:
            if root.is_dir() and any(root.iterdir()) and not config.generation.overwrite:
                warnings.append(f"Output directory {root} is not empty; a real run needs overwrite enabled")
        else:
            check_output_dir(root, config.generation.overwrite)

        runner.run_before_generate(config)
        selection = select_services(schema, config)
        if selection.warning:
            logger.warning(selection.warning)
            warnings.append(selection.warning)

        artifacts = build_artifacts(schema, config, selection)
        clashes = check_type_exports(schema, config, artifacts)
        if clashes:
            raise SchemaValidationError(clashes)
        files = finalize(config, artifacts)
        files = runner.run_transform(files)

        if not dry_run:
            write_tree(root, files)
            logger.info("Wrote %d file(s) to %s", len(files), root)
    except ReatchifyError as exc:
        runner.run_error(exc)
        raise
    except Exception as exc:
        runner.run_error(exc)
        raise GenerationError(f"Generation failed: {exc}") from exc

    validated: Optional[bool] = None
    if config.generation.validate_output and not dry_run:
        validated, message = type_check(root, sorted(files))
        if message:
            logger.warning(message)
            warnings.append(message)

    result = GenerationResult(
        output_dir=root,
        files=files,
        warnings=warnings,
        dry_run=dry_run,
        validated=validated,
    )
    try:
        runner.run_after_generate(result)
    except Exception as exc:
        raise ExtensionError(f"Extension after_generate hook failed: {exc}") from exc
    return result
