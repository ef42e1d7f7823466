"""Read-only catalogue of canonical solution shapes, loaded from YAML.

One YAML file per exercise lives next to this module. The file is parsed
once per process; the resulting ``CanonicalRules`` and the compiled AST
patterns it hands out are shared by every run and never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml

from autoreview.models import TableKind
from autoreview.rules.ast_match import Match, compile_pattern

log = logging.getLogger(__name__)

RULES_DIR = Path(__file__).resolve().parent
DEFAULT_EXERCISE = "resistor-color-duo"
_LOOKUP_HOLES = frozenset({"TABLE", "ELEMENT"})


@dataclass(frozen=True)
class CanonicalRules:
    exercise: str
    main_method: str
    colors: tuple[str, ...]
    lookups: Mapping[TableKind, str]
    patterns: Mapping[str, tuple[str, ...]]

    def alternatives(self, name: str) -> tuple[str, ...]:
        try:
            return self.patterns[name]
        except KeyError:
            raise KeyError(f"No pattern family {name!r} for {self.exercise}") from None

    def iter_matches(self, name: str, node, source: bytes, language: str):
        """Yield ``{metavar: node}`` for every alternative of a family that
        matches *node*.

        Alternatives such as ``$ACC + $TERM`` and ``$TERM + $ACC`` both match
        any addition, so callers check the captures of each in turn.
        """
        return self._iter_matches(self.alternatives(name), node, source, language)

    def match_lookup(self, kind: TableKind, node, source: bytes, language: str) -> dict | None:
        return next(self._iter_matches((self.lookups[kind],), node, source, language), None)

    def find(self, name: str, root, source: bytes, language: str) -> list[Match]:
        """All occurrences of any alternative of a family below *root*."""
        found: list[Match] = []
        for pattern in self.alternatives(name):
            found.extend(compile_pattern(pattern, language).find(root, source))
        return found

    def _iter_matches(self, patterns, node, source, language):
        if node is None:
            return
        for pattern in patterns:
            found = compile_pattern(pattern, language).match(node, source)
            if found is not None:
                yield found.captures


def _as_patterns(value, key: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ValueError(f"pattern family {key!r} must be a string or a list of strings")


def parse_canonical_rules(data: dict) -> CanonicalRules:
    """Validate a raw YAML document and build a ``CanonicalRules``."""
    if not isinstance(data, dict):
        raise ValueError("canonical rule file must be a mapping")
    for key in ("exercise", "colors", "lookups", "patterns"):
        if key not in data:
            raise ValueError(f"canonical rule file is missing {key!r}")

    lookups = {}
    for kind in TableKind:
        if kind.value not in data["lookups"]:
            raise ValueError(f"canonical rule file has no {kind.value} lookup")
        lookups[kind] = str(data["lookups"][kind.value])
        if compile_pattern(lookups[kind]).holes() != _LOOKUP_HOLES:
            raise ValueError(f"{kind.value} lookup must capture exactly $TABLE and $ELEMENT")

    patterns = {str(k): _as_patterns(v, str(k)) for k, v in (data["patterns"] or {}).items()}

    return CanonicalRules(
        exercise=str(data["exercise"]),
        main_method=str(data.get("main_method", "value")),
        colors=tuple(str(c) for c in data["colors"]),
        lookups=MappingProxyType(lookups),
        patterns=MappingProxyType(patterns),
    )


def load_canonical_rules(exercise: str | None = None) -> CanonicalRules:
    """Load the rule file for *exercise* (``resistor-color-duo`` ->
    ``resistor_color_duo.yaml``).

    Raises FileNotFoundError for unknown exercises and ValueError for
    malformed files.
    """
    return _load((exercise or DEFAULT_EXERCISE).strip().lower())


@lru_cache(maxsize=None)
def _load(exercise: str) -> CanonicalRules:
    path = RULES_DIR / f"{exercise.replace('-', '_')}.yaml"
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    rules = parse_canonical_rules(data)
    log.debug("loaded %d pattern families for %s", len(rules.patterns), rules.exercise)
    return rules


def available_exercises() -> list[str]:
    return sorted(p.stem.replace("_", "-") for p in RULES_DIR.glob("*.yaml"))
