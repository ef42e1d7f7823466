"""Structural facts extracted from a parsed submission.

Everything here is frozen: the extractor builds one ``SolutionFacts``
bundle per run and every matcher and engine stage reads from it.
Tree-sitter nodes are kept where a matcher needs to look at a function
body; nodes are immutable as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ParamKind(str, Enum):
    PLAIN = "plain"
    DEFAULTED = "defaulted"
    REST = "rest"
    DESTRUCTURED = "destructured"


class ExportStyle(str, Enum):
    INLINE = "inline"  # export function value / export const value
    SPECIFIER = "specifier"  # export { value }


class InitShape(str, Enum):
    ARRAY = "array"
    OBJECT = "object"
    FUNCTION_LIKE = "function_like"
    OTHER = "other"


class TableKind(str, Enum):
    ARRAY = "array"
    OBJECT = "object"
    MAP = "map"


@dataclass(frozen=True)
class Parameter:
    name: str
    kind: ParamKind
    type_annotation: str | None = None
    # Bound names of an array destructuring pattern, in position order.
    elements: tuple[str, ...] = ()
    node: object = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class FunctionFacts:
    """A top-level function-like binding."""

    name: str
    params: tuple[Parameter, ...]
    body: object = field(default=None, repr=False, compare=False)
    node: object = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class ExportFacts:
    """How a name leaves the module.

    ``local_name`` differs from ``name`` for ``export { local as name }``.
    """

    name: str
    local_name: str
    style: ExportStyle
    node: object = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class ExportedFunction:
    function: FunctionFacts
    export: ExportFacts

    @property
    def name(self) -> str:
        return self.export.name

    @property
    def params(self) -> tuple[Parameter, ...]:
        return self.function.params


@dataclass(frozen=True)
class LookupTable:
    """Literal colour table entries as ``(name, digit)`` pairs.

    ``string_values`` is set when every digit was written as a string
    literal (``{ black: '0' }``), which makes ``+`` concatenate.
    """

    kind: TableKind
    entries: tuple[tuple[str, int], ...]
    string_values: bool = False

    def is_positional(self, canonical: tuple[str, ...]) -> bool:
        """True if the table maps exactly *canonical* to their positions."""
        expected = tuple((name, i) for i, name in enumerate(canonical))
        return tuple(sorted(self.entries, key=lambda e: e[1])) == expected


@dataclass(frozen=True)
class TopLevelConstant:
    name: str
    kind: str  # let | const | var
    shape: InitShape
    table: LookupTable | None = None
    node: object = field(default=None, repr=False, compare=False)
    value: object = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class SolutionFacts:
    """The eager extraction result for one submission."""

    language: str
    source: bytes = field(repr=False)
    main_method: FunctionFacts | None
    main_export: ExportFacts | None
    constants: tuple[TopLevelConstant, ...] = ()
    functions: tuple[FunctionFacts, ...] = ()

    def constants_of_shape(self, shape: InitShape) -> list[TopLevelConstant]:
        return [c for c in self.constants if c.shape is shape]
