"""Schema provider and validation.

The generator is driven by an :class:`~reatchify.models.ApiSchema`: a list
of endpoints plus named types. This sub-package obtains one and checks it
before any file is rendered.

Typical usage::

    from reatchify.schema import fetch_schema, validate_schema

    schema = fetch_schema(resolved_config)
    errors = validate_schema(schema)

Sub-modules:

* :mod:`~reatchify.schema.loader` -- remote fetch with an embedded fallback,
  and local JSON/YAML schema files.
* :mod:`~reatchify.schema.validator` -- collects every structural problem
  in a schema instead of stopping at the first.
"""

from reatchify.schema.loader import fallback_schema, fetch_schema, load_schema_file
from reatchify.schema.validator import validate_schema, validate_store_config

__all__ = [
    "fallback_schema",
    "fetch_schema",
    "load_schema_file",
    "validate_schema",
    "validate_store_config",
]
