"""Structural matching of JavaScript snippets with ``$METAVAR`` holes.

``$`` is a legal identifier character in JavaScript and TypeScript, so a
pattern such as ``Number($DIGITS)`` parses as ordinary source. Identifiers
spelled ``$UPPER_CASE`` are holes: they capture whatever subtree sits in
their place.

Two nodes agree when their types agree and their named children agree
pairwise. Leaves compare by text, operators by the ``operator`` field, and
string literals by content, so ``join('')`` matches ``join("")``.
Parentheses are transparent on both sides. A hole used twice must capture
the same text both times, modulo whitespace.

Example:
    pattern: "Number($DIGITS)"
    matches: Number(colors.map(colorCode).join(''))
    rejects: parseInt(colors.map(colorCode).join(''))
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache

from tree_sitter_language_pack import get_parser

HOLE_RE = re.compile(r"^\$[A-Z][A-Z0-9_]*$")

_WRAPPER_TYPES = frozenset({"program", "expression_statement"})
_TRANSPARENT_TYPES = frozenset({"parenthesized_expression"})
_LANGUAGES = {
    "js": "javascript",
    "javascript": "javascript",
    "ts": "typescript",
    "typescript": "typescript",
    "tsx": "tsx",
}


def normalize_language_name(language: str | None) -> str | None:
    """``JS`` -> ``javascript``; None for blank input."""
    if language is None or not language.strip():
        return None
    key = language.strip().lower()
    return _LANGUAGES.get(key, key)


def _children(node) -> list:
    return [child for child in node.named_children if child.type != "comment"]


def _see_through(node):
    while node.type in _TRANSPARENT_TYPES:
        inner = _children(node)
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def _text(node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _squash(text: str) -> str:
    return " ".join(text.split())


@dataclass(frozen=True)
class Match:
    """One place where a pattern agreed with the code."""

    node: object
    captures: dict
    source: bytes = field(repr=False)

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1

    def text(self, hole: str | None = None) -> str:
        """Source text of a captured hole, or of the whole match."""
        return _text(self.node if hole is None else self.captures[hole], self.source)


@dataclass(frozen=True)
class SnippetPattern:
    """A parsed snippet, shared and never mutated once compiled."""

    snippet: str
    language: str
    root: object = field(repr=False)
    source: bytes = field(repr=False)

    def holes(self) -> frozenset[str]:
        found = set()
        stack = [self.root]
        while stack:
            node = stack.pop()
            name = self._hole(node)
            if name is not None:
                found.add(name)
            stack.extend(_children(node))
        return frozenset(found)

    def _hole(self, node) -> str | None:
        if node.type != "identifier":
            return None
        text = _text(node, self.source)
        return text[1:] if HOLE_RE.match(text) else None

    def _operator(self, node, source: bytes) -> str | None:
        op = node.child_by_field_name("operator")
        return None if op is None else _text(op, source)

    def _agree(self, pattern, node, source: bytes, captures: dict) -> bool:
        pattern = _see_through(pattern)
        node = _see_through(node)

        hole = self._hole(pattern)
        if hole is not None:
            seen = captures.get(hole)
            if seen is not None and _squash(_text(seen, source)) != _squash(_text(node, source)):
                return False
            captures[hole] = node
            return True

        if pattern.type != node.type:
            return False
        if pattern.type == "string":
            return _text(pattern, self.source)[1:-1] == _text(node, source)[1:-1]
        if self._operator(pattern, self.source) != self._operator(node, source):
            return False

        expected = _children(pattern)
        actual = _children(node)
        if len(expected) != len(actual):
            return False
        if not expected:
            return _squash(_text(pattern, self.source)) == _squash(_text(node, source))
        return all(self._agree(p, n, source, captures) for p, n in zip(expected, actual))

    def match(self, node, source: bytes) -> Match | None:
        """Match *node* itself; captures map hole names to nodes."""
        if node is None:
            return None
        captures: dict = {}
        if not self._agree(self.root, node, source, captures):
            return None
        return Match(_see_through(node), captures, source)

    def find(self, root, source: bytes, *, limit: int = 0) -> list[Match]:
        """Every node below *root* (a tree or a node) that matches.

        Results are in source order; *limit* > 0 stops early.
        """
        if root is None or not source:
            return []
        start = getattr(root, "root_node", root)
        any_type = self._hole(self.root) is not None

        found: list[Match] = []
        stack = [start]
        while stack:
            node = stack.pop()
            if any_type or node.type == self.root.type:
                result = self.match(node, source)
                if result is not None:
                    found.append(result)
                    if limit and len(found) >= limit:
                        break
            stack.extend(reversed(_children(node)))
        return found


@lru_cache(maxsize=None)
def compile_pattern(snippet: str, language: str = "javascript") -> SnippetPattern:
    """Parse *snippet* into a reusable pattern.

    Raises ValueError for blank snippets, snippets that do not parse, and
    snippets holding more than one statement.
    """
    if not snippet or not snippet.strip():
        raise ValueError("AST pattern is empty")
    grammar = normalize_language_name(language)
    if grammar is None:
        raise ValueError("AST pattern language is required")

    source = snippet.encode("utf-8")
    tree = get_parser(grammar).parse(source)
    if tree.root_node.has_error:
        raise ValueError(f"Pattern could not be parsed as {grammar}: {snippet!r}")

    root = tree.root_node
    while root.type in _WRAPPER_TYPES:
        inner = _children(root)
        if len(inner) != 1:
            raise ValueError(f"Pattern must hold exactly one expression: {snippet!r}")
        root = inner[0]

    return SnippetPattern(snippet=snippet, language=grammar, root=_see_through(root), source=source)
