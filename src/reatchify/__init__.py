"""reatchify -- generate a typed TypeScript API client from an endpoint schema.

Given a schema of endpoints and types plus a ``reatchify.config.json``, the
generator writes a ready-to-import SDK into the front-end project: interfaces,
one request function per endpoint, an HTTP wrapper with error classes and a
plugin pipeline, a client class, and optional Zustand or Redux stores.

Typical workflow::

    reatchify init                  # write reatchify.config.json
    reatchify generate --dry-run    # preview the files
    reatchify generate              # write src/services/...

Modules:
    app: Typer application and CLI entry point.
    config: Config loading and layered resolution.
    models: Pydantic models for config, schema and results.
    generator: Per-group TypeScript generators and the orchestrator.
    schema: Schema fetching, loading and validation.
    extensions: Generation-time extension hooks.
    output: stdout/stderr formatting with Rich.
"""

__version__ = "1.0.0"
