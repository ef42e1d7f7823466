"""Predicates recognising the canonical resistor-color-duo solutions.

All functions here are pure: they read a ``SolutionFacts`` bundle and the
shared ``CanonicalRules`` and answer yes or no. A shape either matches
exactly or not at all.

The two optimal solutions are a map-join::

    const COLORS = ['black', ..., 'white']
    const colorCode = (color) => COLORS.indexOf(color)
    export const value = (colors) => Number(colors.map(colorCode).join(''))

and a reduce::

    export const value = (colors) =>
      colors.reverse().reduce((value, color, i) => colorCode(color) * 10 ** i + value, 0)

The map-join family also covers the arithmetic form
``colorCode(colors[0]) * 10 + colorCode(colors[1])`` and the concatenation
form ``Number(String(C[a]) + String(C[b]))``. ``parseInt`` and friends never
match, even when the result would be correct.
"""

from __future__ import annotations

import logging

from autoreview.languages.javascript_lang import DECLARATION_TYPES, FUNCTION_VALUE_TYPES, unwrap
from autoreview.languages.registry import get_extractor
from autoreview.models import (
    ExportStyle,
    FunctionFacts,
    InitShape,
    Parameter,
    ParamKind,
    SolutionFacts,
    TableKind,
    TopLevelConstant,
)
from autoreview.rules.canonical import CanonicalRules, load_canonical_rules

log = logging.getLogger(__name__)

_REASSIGNMENT_TYPES = ("assignment_expression", "augmented_assignment_expression")


def _meaningful(node) -> list:
    return [c for c in node.named_children if c.type != "comment"]


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------


def find_lookup_table(facts: SolutionFacts, rules: CanonicalRules | None = None) -> TopLevelConstant | None:
    """The single top-level colour table of an optimal solution, if any.

    Either exactly one Array-shaped constant, or exactly one Object/Map
    constant mapping the canonical colours to their positions; never both.
    Every other top-level constant must hold a function.
    """
    rules = rules or load_canonical_rules()
    arrays = facts.constants_of_shape(InitShape.ARRAY)
    objects = facts.constants_of_shape(InitShape.OBJECT)

    if len(arrays) == 1 and not objects:
        table = arrays[0]
    elif len(objects) == 1 and not arrays:
        table = objects[0]
        if table.table is None or not table.table.is_positional(rules.colors):
            return None
    else:
        return None

    for constant in facts.constants:
        if constant is not table and constant.shape is not InitShape.FUNCTION_LIKE:
            return None
    return table


def is_using_optimal_constants(facts: SolutionFacts, rules: CanonicalRules | None = None) -> bool:
    return find_lookup_table(facts, rules) is not None


# ---------------------------------------------------------------------------
# Shape matching
# ---------------------------------------------------------------------------


class _ShapeMatcher:
    """Matches the exported function against the canonical rule set.

    Built per run from the facts bundle; holds no state beyond what is
    derived from it in ``__init__``.
    """

    def __init__(self, facts: SolutionFacts, rules: CanonicalRules, table: TopLevelConstant):
        self.facts = facts
        self.rules = rules
        self.source = facts.source
        self.language = facts.language
        self.extractor = get_extractor(facts.language)
        self.table_name = table.name
        if table.table is not None:
            self.table_kind = table.table.kind
            self.string_values = table.table.string_values
        else:
            self.table_kind = TableKind.ARRAY
            self.string_values = False

        main_name = facts.main_method.name if facts.main_method else None
        self.lookup_functions = frozenset(
            fn.name
            for fn in facts.functions
            if fn.name != main_name and self.is_lookup_function(fn.params, fn.body, allow_calls=False)
        )

    # -- helpers -----------------------------------------------------------

    def text(self, node) -> str:
        return self.extractor.node_text(node, self.source)

    def iter_matches(self, family: str, node):
        return self.rules.iter_matches(family, node, self.source, self.language)

    def resolve(self, node, scope: dict):
        """Follow single-assignment local bindings to their value."""
        node = unwrap(node)
        seen: set[str] = set()
        while node is not None and node.type == "identifier":
            name = self.text(node)
            if name not in scope or name in seen:
                break
            seen.add(name)
            node = unwrap(scope[name])
        return node

    def single_expression(self, body):
        """The only expression of an arrow body or of a lone ``return``."""
        if body is None:
            return None
        if body.type != "statement_block":
            return unwrap(body)
        statements = _meaningful(body)
        if len(statements) != 1 or statements[0].type != "return_statement":
            return None
        returned = _meaningful(statements[0])
        return unwrap(returned[0]) if len(returned) == 1 else None

    def returned_expression(self, fn: FunctionFacts) -> tuple[object, dict] | None:
        """The returned expression of *fn* plus its local bindings.

        Only ``const x = ...`` style declarations may precede the return,
        and none of them may be reassigned.
        """
        body = fn.body
        if body is None:
            return None
        if body.type != "statement_block":
            return unwrap(body), {}

        statements = _meaningful(body)
        if not statements or statements[-1].type != "return_statement":
            return None

        scope: dict = {}
        for stmt in statements[:-1]:
            if stmt.type not in DECLARATION_TYPES:
                return None
            for declarator in stmt.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                value = declarator.child_by_field_name("value")
                if name is None or name.type != "identifier" or value is None:
                    return None
                scope[self.text(name)] = value

        if scope and self._reassigns(body, scope):
            return None

        returned = _meaningful(statements[-1])
        if len(returned) != 1:
            return None
        return unwrap(returned[0]), scope

    def _reassigns(self, root, names) -> bool:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in _REASSIGNMENT_TYPES:
                if self.text(node.child_by_field_name("left")) in names:
                    return True
            elif node.type == "update_expression":
                if self.text(node.child_by_field_name("argument")) in names:
                    return True
            stack.extend(node.named_children)
        return False

    def shadows(self, names) -> bool:
        """True if any of *names* rebinds the table or a lookup function."""
        return any(name == self.table_name or name in self.lookup_functions for name in names)

    def bound_names(self, params: tuple[Parameter, ...], scope: dict) -> list[str]:
        names = list(scope)
        for param in params:
            names.extend(param.elements or (param.name,))
        return names

    def uses_radix_parse(self, root) -> bool:
        return bool(self.rules.find("radix_parse", root, self.source, self.language))

    # -- lookups -----------------------------------------------------------

    def is_lookup(self, node, is_element, allow_calls: bool = True) -> bool:
        """True if *node* looks a colour up in the table.

        *is_element* decides whether the looked-up expression is the
        expected element.
        """
        captures = self.rules.match_lookup(self.table_kind, node, self.source, self.language)
        if captures is not None and self.text(captures["TABLE"]) == self.table_name and is_element(captures["ELEMENT"]):
            return True
        if not allow_calls:
            return False
        for captures in self.iter_matches("lookup_call", node):
            function = captures["FUNCTION"]
            if function.type == "identifier" and self.text(function) in self.lookup_functions and is_element(captures["ELEMENT"]):
                return True
        return False

    def is_lookup_function(self, params: tuple[Parameter, ...], body, allow_calls: bool = True) -> bool:
        """A single plain parameter and a body that only looks it up."""
        if len(params) != 1 or params[0].kind is not ParamKind.PLAIN:
            return False
        name = params[0].name
        if name == self.table_name:
            return False
        expression = self.single_expression(body)
        if expression is None:
            return False
        return self.is_lookup(
            expression,
            lambda node: unwrap(node).type == "identifier" and self.text(unwrap(node)) == name,
            allow_calls,
        )

    def is_lookup_callable(self, node, scope: dict) -> bool:
        """A named lookup function or an inline one, as passed to ``map``."""
        node = self.resolve(node, scope)
        if node is None:
            return False
        if node.type == "identifier":
            return self.text(node) in self.lookup_functions
        if node.type in FUNCTION_VALUE_TYPES:
            params = self.extractor.extract_params(node, self.source)
            return self.is_lookup_function(params, node.child_by_field_name("body"))
        return False

    # -- input elements ----------------------------------------------------

    def is_input(self, node, param: Parameter, scope: dict) -> bool:
        node = self.resolve(node, scope)
        return (
            param.kind is ParamKind.PLAIN
            and node is not None
            and node.type == "identifier"
            and self.text(node) == param.name
        )

    def element_predicate(self, index: int, param: Parameter, scope: dict):
        """Matches ``colors[index]`` or the index-th destructured name."""

        def check(node) -> bool:
            node = self.resolve(node, scope)
            if node is None:
                return False
            if param.kind is ParamKind.DESTRUCTURED:
                return (
                    len(param.elements) >= 2
                    and node.type == "identifier"
                    and self.text(node) == param.elements[index]
                )
            if param.kind is not ParamKind.PLAIN or node.type != "subscript_expression":
                return False
            target = unwrap(node.child_by_field_name("object"))
            position = unwrap(node.child_by_field_name("index"))
            return (
                target is not None
                and self.text(target) == param.name
                and position is not None
                and position.type == "number"
                and self.text(position) == str(index)
            )

        return check

    def is_digit(self, node, index: int, param: Parameter, scope: dict) -> bool:
        return self.is_lookup(self.resolve(node, scope), self.element_predicate(index, param, scope))

    def is_digit_text(self, node, index: int, param: Parameter, scope: dict) -> bool:
        """A lookup that evaluates to a string: ``String(d)``, ``d.toString()``,
        a template, or a bare lookup into a string-valued table."""
        node = self.resolve(node, scope)
        for captures in self.iter_matches("stringify", node):
            if self.is_digit(captures["DIGIT"], index, param, scope):
                return True
        return self.string_values and self.is_digit(node, index, param, scope)

    # -- canonical shapes --------------------------------------------------

    def is_joined_digits(self, node, param: Parameter, scope: dict) -> bool:
        node = self.resolve(node, scope)
        for captures in self.iter_matches("digit_join", node):
            mapped = self.resolve(captures["LIST"], scope)
            for inner in self.iter_matches("digit_map", mapped):
                if self.is_input(inner["INPUT"], param, scope) and self.is_lookup_callable(inner["LOOKUP"], scope):
                    return True
        for captures in self.iter_matches("string_concat", node):
            if self.is_digit_text(captures["HIGH"], 0, param, scope) and self.is_digit_text(
                captures["LOW"], 1, param, scope
            ):
                return True
        for captures in self.iter_matches("template_concat", node):
            if self.is_digit(captures["HIGH"], 0, param, scope) and self.is_digit(captures["LOW"], 1, param, scope):
                return True
        return False

    def matches_map_join(self, fn: FunctionFacts) -> bool:
        returned = self.returned_expression(fn)
        if returned is None or not fn.params or self.uses_radix_parse(fn.body):
            return False
        expression, scope = returned
        param = fn.params[0]
        if self.shadows(self.bound_names(fn.params, scope)):
            return False

        for captures in self.iter_matches("numeric_coercion", expression):
            if self.is_joined_digits(captures["DIGITS"], param, scope):
                return True
        if self.string_values:
            # '3' * 10 + '3' is "303"
            return False
        for captures in self.iter_matches("positional_sum", expression):
            if self.is_digit(captures["HIGH"], 0, param, scope) and self.is_digit(captures["LOW"], 1, param, scope):
                return True
        return False

    def is_reversed_input(self, node, param: Parameter, scope: dict) -> bool:
        if self.is_input(node, param, scope):
            return True
        node = self.resolve(node, scope)
        return any(self.is_input(c["INPUT"], param, scope) for c in self.iter_matches("input_copy", node))

    def is_positional_reducer(self, node, scope: dict) -> bool:
        """``(acc, color, i) => acc + digit(color) * 10 ** i`` and commutations."""
        node = self.resolve(node, scope)
        if node is None or node.type not in FUNCTION_VALUE_TYPES:
            return False
        params = self.extractor.extract_params(node, self.source)
        if len(params) != 3 or any(p.kind is not ParamKind.PLAIN for p in params):
            return False
        acc, item, index = (p.name for p in params)
        if len({acc, item, index}) != 3 or self.shadows((acc, item, index)):
            return False
        expression = self.single_expression(node.child_by_field_name("body"))
        if expression is None:
            return False

        def named(expected):
            return lambda n: unwrap(n).type == "identifier" and self.text(unwrap(n)) == expected

        for step in self.iter_matches("accumulate", expression):
            if not named(acc)(step["ACC"]):
                continue
            for term in self.iter_matches("weighted_digit", step["TERM"]):
                if not self.is_lookup(unwrap(term["DIGIT"]), named(item)):
                    continue
                if any(named(index)(p["INDEX"]) for p in self.iter_matches("power_of_ten", term["POWER"])):
                    return True
        return False

    def matches_reduce(self, fn: FunctionFacts) -> bool:
        returned = self.returned_expression(fn)
        if returned is None or not fn.params or self.uses_radix_parse(fn.body):
            return False
        expression, scope = returned
        param = fn.params[0]
        if self.shadows(self.bound_names(fn.params, scope)):
            return False

        for captures in self.iter_matches("reversed_reduce", expression):
            if self.is_reversed_input(captures["INPUT"], param, scope) and self.is_positional_reducer(
                captures["REDUCER"], scope
            ):
                return True
        return False


def _shape_matcher(facts: SolutionFacts, rules: CanonicalRules | None) -> _ShapeMatcher | None:
    rules = rules or load_canonical_rules()
    if facts.main_method is None:
        return None
    table = find_lookup_table(facts, rules)
    if table is None:
        log.debug("~> Constants are not optimal")
        return None
    return _ShapeMatcher(facts, rules, table)


def is_optimal_map_join(facts: SolutionFacts, rules: CanonicalRules | None = None) -> bool:
    """One colour table, an optional lookup function and a numeric join."""
    matcher = _shape_matcher(facts, rules)
    return matcher is not None and matcher.matches_map_join(facts.main_method)


def is_optimal_reduce(facts: SolutionFacts, rules: CanonicalRules | None = None) -> bool:
    """Reverse the colours and accumulate ``digit * 10 ** index``.

    The seed of ``reduce`` may be omitted.
    """
    matcher = _shape_matcher(facts, rules)
    return matcher is not None and matcher.matches_reduce(facts.main_method)


def has_inline_export(facts: SolutionFacts) -> bool:
    """``export function value`` rather than ``export { value }``."""
    return facts.main_export is not None and facts.main_export.style is ExportStyle.INLINE
