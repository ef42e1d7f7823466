"""Language detection, source reading and tree-sitter parsing of submissions."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from tree_sitter_language_pack import get_parser

from autoreview.exit_codes import ParseFailureError, UnsupportedLanguageError

log = logging.getLogger(__name__)

EXTENSION_MAP: dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

SUPPORTED_LANGUAGES = frozenset(EXTENSION_MAP.values())


@dataclass(frozen=True)
class ParsedSubmission:
    """Raw source plus its syntax tree. Never mutated after parsing."""

    path: str
    language: str
    source: bytes
    tree: object


def detect_language(path: str) -> str | None:
    """Return the language name for *path*, or None if unsupported."""
    _, ext = os.path.splitext(path)
    return EXTENSION_MAP.get(ext.lower())


def read_source(path: Path) -> bytes | None:
    """Read a file as bytes, returning None if it cannot be read."""
    try:
        return path.read_bytes()
    except OSError as exc:
        log.warning("cannot read %s: %s", path, exc)
        return None


@lru_cache(maxsize=None)
def _parser_for(language: str):
    return get_parser(language)


def _error_context(source: bytes, node) -> str:
    """Extract a human-readable snippet around an ERROR / MISSING node."""
    if node.is_missing:
        expected = node.type.replace("MISSING", "").strip() or "token"
        return f"missing {expected}"

    lines = source.decode("utf-8", errors="replace").split("\n")
    start_line = node.start_point[0]
    if start_line >= len(lines):
        return "(syntax error)"
    line_text = lines[start_line].rstrip()
    if node.end_point[0] == start_line:
        snippet = line_text[node.start_point[1] : node.end_point[1]]
    else:
        snippet = line_text[node.start_point[1] :]
    if len(snippet) > 120:
        snippet = snippet[:117] + "..."
    return snippet or line_text.strip()[:120]


def check_syntax(source: bytes, tree) -> list[dict]:
    """Walk a tree-sitter AST and collect ERROR / MISSING nodes.

    Returns a list of error dicts with line, column, node_type and text.
    """
    errors: list[dict] = []
    if tree is None:
        return errors

    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            errors.append(
                {
                    "line": node.start_point[0] + 1,
                    "column": node.start_point[1] + 1,
                    "node_type": "MISSING" if node.is_missing else "ERROR",
                    "text": _error_context(source, node),
                }
            )
        if node.has_error:
            stack.extend(reversed(node.children))

    errors.sort(key=lambda e: (e["line"], e["column"]))
    return errors


def parse_source(source: bytes | str, language: str = "javascript", path: str = "<submission>") -> ParsedSubmission:
    """Parse *source* with the grammar for *language*.

    Raises ParseFailureError when the tree contains syntax errors: no facts
    can be extracted from a malformed submission.
    """
    if language not in SUPPORTED_LANGUAGES:
        raise UnsupportedLanguageError(path)
    if isinstance(source, str):
        source = source.encode("utf-8")

    tree = _parser_for(language).parse(source)
    if tree.root_node.has_error:
        errors = check_syntax(source, tree)
        log.debug("%s: %d syntax errors", path, len(errors))
        raise ParseFailureError(path, errors)
    return ParsedSubmission(path=path, language=language, source=source, tree=tree)


def parse_file(path: str | Path) -> ParsedSubmission:
    """Detect the language of *path*, read it and parse it."""
    path = Path(path)
    display = str(path).replace("\\", "/")
    language = detect_language(display)
    if language is None:
        raise UnsupportedLanguageError(display)
    source = read_source(path)
    if source is None:
        raise ParseFailureError(display, [])
    return parse_source(source, language, display)
