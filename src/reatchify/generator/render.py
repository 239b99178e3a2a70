"""Small rendering helpers shared by every artifact generator.

Generators build each output file from independent fragments (import block,
header comment, doc comment, interface, exported function) and hand the list
to :func:`join_blocks`, the single place that decides spacing. Fragments that
a setting switches off render as ``""`` and are dropped by the join, so the
generators only decide *what* goes in a file, never *how* it is laid out.

Large runtime modules (the HTTP helper, plugin registry, client class and
Redux slices) are Jinja2 templates under ``generator/templates/`` rendered
through :func:`render_template`.
"""

from __future__ import annotations

import json
import posixpath
import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from reatchify.models import ResolvedConfig
from reatchify.naming import is_identifier

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""

EXTENSION = ".ts"

_RELATIVE_IMPORT_RE = re.compile(r"""from\s+['"](\.{1,2}/[^'"]*)['"]""")
_EXPORTED_NAME_RE = re.compile(
    r"^export\s+(?:declare\s+)?(?:async\s+)?(?:class|function|interface|type|const|let|enum)\s+([A-Za-z_$][\w$]*)",
    re.MULTILINE,
)


@lru_cache(maxsize=1)
def template_env() -> Environment:
    """Create the Jinja2 environment for the TypeScript templates.

    ``trim_blocks``/``lstrip_blocks`` keep control tags from leaving blank
    lines behind, and undefined variables raise instead of rendering empty.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("ts.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def render_template(name: str, **context: Any) -> str:
    return template_env().get_template(name).render(**context)


def ts_literal(value: Any) -> str:  # noqa: ANN401
    """Render a JSON-compatible value as a TypeScript literal."""
    return json.dumps(value)


def ts_string(value: str) -> str:
    """Single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def ts_property(name: str) -> str:
    """Property key, quoted when *name* is not a plain identifier."""
    return name if is_identifier(name) else ts_string(name)


# --- Paths ---


def module_path(*parts: str) -> str:
    """Join path parts into a POSIX module path without extension."""
    return posixpath.join(*parts)


def file_path(*parts: str) -> str:
    return module_path(*parts) + EXTENSION


def relative_import(from_file: str, to_module: str) -> str:
    """Import specifier for *to_module* as seen from *from_file*.

    Both arguments are relative to the output root (``api/users.ts``,
    ``client/http``). The result always starts with ``./`` or ``../``.
    """
    rel = posixpath.relpath(to_module, posixpath.dirname(from_file) or ".")
    return rel if rel.startswith("../") else f"./{rel}"


def relative_imports(content: str) -> list[str]:
    """Return every relative module specifier imported or re-exported by *content*."""
    return _RELATIVE_IMPORT_RE.findall(content)


def exported_names(content: str) -> set[str]:
    """Names declared with a top-level ``export`` in *content*."""
    return set(_EXPORTED_NAME_RE.findall(content))


# --- Fragments ---


def comment_lines(lines: Iterable[str]) -> list[str]:
    """Split free text into single physical lines with ``*/`` neutralised.

    Schema descriptions may span several lines or contain ``*/``; either
    would otherwise end a comment early and leak text into the code.
    """
    split: list[str] = []
    for line in lines:
        split.extend(part.rstrip() for part in (line.splitlines() or [""]))
    return [line.replace("*/", "*\\/") for line in split]


def header_comment(config: ResolvedConfig, *lines: str) -> str:
    """``// line`` block shown at the top of a file when comments are enabled."""
    if not config.generation.include_comments:
        return ""
    return "\n".join(f"// {line}" if line else "//" for line in comment_lines(lines))


def doc_comment(config: ResolvedConfig, lines: Sequence[str], indent: str = "") -> str:
    """JSDoc block for a declaration; ``""`` when JSDoc is disabled."""
    if not config.generation.include_jsdoc or not lines:
        return ""
    lines = comment_lines(lines)
    if len(lines) == 1:
        return f"{indent}/** {lines[0]} */"
    body = "\n".join(f"{indent} * {line}" if line else f"{indent} *" for line in lines)
    return f"{indent}/**\n{body}\n{indent} */"


def import_line(names: Iterable[str], module: str, type_only: bool = False) -> str:
    names = list(names)
    if not names:
        return ""
    keyword = "import type" if type_only else "import"
    return f"{keyword} {{ {', '.join(names)} }} from '{module}';"


def import_block(lines: Iterable[str]) -> str:
    return "\n".join(line for line in lines if line)


def export_all(modules: Iterable[str]) -> str:
    """``export * from '<module>';`` lines, or ``export {};`` when there are none."""
    lines = [f"export * from '{module}';" for module in modules]
    return "\n".join(lines) if lines else "export {};"


def interface(
    config: ResolvedConfig,
    name: str,
    fields: Sequence[tuple[str, str, Optional[str]]],
    exported: bool = True,
    doc: Optional[str] = None,
) -> str:
    """Render an interface from ``(name, type, doc)`` field triples."""
    parts = []
    if doc:
        parts.append(doc_comment(config, [doc]))
    keyword = "export interface" if exported else "interface"
    if not fields:
        parts.append(f"{keyword} {name} {{}}")
        return "\n".join(p for p in parts if p)

    body = []
    for field_name, field_type, field_doc in fields:
        if field_doc:
            field_comment = doc_comment(config, [field_doc], indent="  ")
            if field_comment:
                body.append(field_comment)
        body.append(f"  {ts_property(field_name)}: {field_type};")
    parts.append(f"{keyword} {name} {{\n" + "\n".join(body) + "\n}")
    return "\n".join(p for p in parts if p)


# --- Assembly ---


def join_blocks(blocks: Iterable[str]) -> str:
    """Join non-empty blocks with one blank line, ending in a single newline."""
    kept = [block.strip("\n") for block in blocks if block and block.strip()]
    return "\n\n".join(kept) + "\n"


def minify(content: str) -> str:
    """Drop comments, blank lines and indentation.

    Only whole-line ``//`` comments and JSDoc blocks are removed, which is
    all the generators emit; code lines are never rewritten.
    """
    kept = []
    in_doc = False
    for raw in content.splitlines():
        line = raw.strip()
        if in_doc:
            if line.endswith("*/"):
                in_doc = False
            continue
        if line.startswith("/**") or line.startswith("/*"):
            if not line.endswith("*/"):
                in_doc = True
            continue
        if not line or line.startswith("//"):
            continue
        kept.append(line)
    return "\n".join(kept) + "\n"


def finalize(config: ResolvedConfig, files: dict[str, str]) -> dict[str, str]:
    """Apply output-wide formatting (currently minification) to a file map."""
    if not config.generation.minify:
        return files
    return {path: minify(content) for path, content in files.items()}


def class_declaration(
    config: ResolvedConfig,
    name: str,
    *,
    extends: Optional[str] = None,
    fields: Sequence[tuple[str, str, Optional[str]]] = (),
    constructor_params: Sequence[str] = (),
    constructor_body: Sequence[str] = (),
    doc: Optional[str] = None,
) -> str:
    """Render an exported class with optional fields and constructor."""
    heritage = f" extends {extends}" if extends else ""
    members: list[str] = []
    for field_name, field_type, field_doc in fields:
        if field_doc:
            field_comment = doc_comment(config, [field_doc], indent="  ")
            if field_comment:
                members.append(field_comment)
        members.append(f"  {field_name}: {field_type};")
    if constructor_body:
        if members:
            members.append("")
        members.append(f"  constructor({', '.join(constructor_params)}) {{")
        members.extend(f"    {line}" for line in constructor_body)
        members.append("  }")

    parts = [doc_comment(config, [doc]) if doc else ""]
    body = "\n".join(members)
    parts.append(f"export class {name}{heritage} {{\n{body}\n}}" if body else f"export class {name}{heritage} {{}}")
    return "\n".join(p for p in parts if p)
