"""Tests for the canonical-shape predicates in autoreview.matchers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))
from conftest import COLORS_ARRAY, COLORS_OBJECT, facts_for

from autoreview.matchers import (
    find_lookup_table,
    has_inline_export,
    is_optimal_map_join,
    is_optimal_reduce,
    is_using_optimal_constants,
)

LOOKUP = "const colorCode = (color) => COLORS.indexOf(color);\n"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------


class TestOptimalConstants:
    def test_single_array(self):
        facts = facts_for(COLORS_ARRAY + LOOKUP + "export const value = (c) => 1")
        assert is_using_optimal_constants(facts)
        assert find_lookup_table(facts).name == "COLORS"

    def test_positional_object(self):
        facts = facts_for(COLORS_OBJECT + "export const value = (c) => 1")
        assert is_using_optimal_constants(facts)

    def test_positional_map(self):
        facts = facts_for(
            "const COLORS = new Map([['black', 0], ['brown', 1], ['red', 2], ['orange', 3], ['yellow', 4], "
            "['green', 5], ['blue', 6], ['violet', 7], ['grey', 8], ['white', 9]]);\n"
            "export const value = (c) => 1"
        )
        assert is_using_optimal_constants(facts)

    def test_object_with_wrong_positions(self):
        facts = facts_for("const COLORS = { black: 1, brown: 0 };\nexport const value = (c) => 1")
        assert not is_using_optimal_constants(facts)

    def test_two_unrelated_objects(self):
        facts = facts_for("const A = { x: 1 };\nconst B = { y: 2 };\nexport const value = (c) => 1")
        assert not is_using_optimal_constants(facts)

    def test_array_and_object_mixed(self):
        facts = facts_for(COLORS_ARRAY + "const CODES = { black: 0 };\nexport const value = (c) => 1")
        assert not is_using_optimal_constants(facts)

    def test_extra_scalar_constant(self):
        facts = facts_for(COLORS_ARRAY + "const TEN = 10;\nexport const value = (c) => 1")
        assert not is_using_optimal_constants(facts)

    def test_no_table(self):
        facts = facts_for("export const value = (c) => 1")
        assert find_lookup_table(facts) is None


# ---------------------------------------------------------------------------
# Map-join
# ---------------------------------------------------------------------------

MAP_JOIN_ACCEPTED = {
    "named_lookup": LOOKUP + "export const value = (colors) => Number(colors.map(colorCode).join(''))",
    "inline_lookup": "export const value = (colors) => Number(colors.map((c) => COLORS.indexOf(c)).join(''))",
    "inline_calls_lookup": LOOKUP + "export const value = (colors) => Number(colors.map(c => colorCode(c)).join(''))",
    "unary_plus": LOOKUP + "export const value = (colors) => +colors.map(colorCode).join('')",
    "block_body": LOOKUP + "export function value(colors) {\n  return Number(colors.map(colorCode).join(''));\n}",
    "local_binding": LOOKUP
    + "export const value = (colors) => {\n  const digits = colors.map(colorCode);\n  return Number(digits.join(''));\n}",
    "positional_sum": LOOKUP + "export const value = (colors) => colorCode(colors[0]) * 10 + colorCode(colors[1])",
    "positional_sum_commuted": "export const value = (c) => COLORS.indexOf(c[1]) + 10 * COLORS.indexOf(c[0])",
    "destructured_concat": "export const value = ([a, b]) => Number(String(COLORS.indexOf(a)) + String(COLORS.indexOf(b)))",
    "template_concat": "export const value = (c) => Number(`${COLORS.indexOf(c[0])}${COLORS.indexOf(c[1])}`)",
    "to_string_concat": "export const value = (c) => Number(COLORS.indexOf(c[0]).toString() + COLORS.indexOf(c[1]).toString())",
    "lookup_function_declaration": "function colorCode(color) { return COLORS.indexOf(color) }\n"
    + "export const value = (colors) => Number(colors.map(colorCode).join(''))",
}

MAP_JOIN_REJECTED = {
    "parse_int": LOOKUP + "export const value = (colors) => parseInt(colors.map(colorCode).join(''))",
    "number_parse_int": LOOKUP + "export const value = (colors) => Number.parseInt(colors.map(colorCode).join(''), 10)",
    "parse_inside_number": LOOKUP + "export const value = (colors) => Number(parseInt(colors.map(colorCode).join('')))",
    "separator_join": LOOKUP + "export const value = (colors) => Number(colors.map(colorCode).join(','))",
    "defaulted_input": LOOKUP + "export const value = (colors = []) => Number(colors.map(colorCode).join(''))",
    "wrong_table": "export const value = (colors) => Number(colors.map((c) => OTHER.indexOf(c)).join(''))",
    "defaulted_lookup": "const colorCode = (color = 'black') => COLORS.indexOf(color);\n"
    + "export const value = (colors) => Number(colors.map(colorCode).join(''))",
    "conditional_lookup": "const colorCode = (color) => color ? COLORS.indexOf(color) : 0;\n"
    + "export const value = (colors) => Number(colors.map(colorCode).join(''))",
    "swapped_positions": LOOKUP + "export const value = (colors) => colorCode(colors[1]) * 10 + colorCode(colors[0])",
    "reassigned_binding": LOOKUP
    + "export const value = (colors) => {\n  let digits = colors.map(colorCode);\n  digits = [];\n"
    + "  return Number(digits.join(''));\n}",
    "side_effect_statement": LOOKUP
    + "export const value = (colors) => {\n  console.log(colors);\n  return Number(colors.map(colorCode).join(''));\n}",
    "numeric_concat_without_string": "export const value = (c) => Number(COLORS.indexOf(c[0]) + COLORS.indexOf(c[1]))",
    "local_table_shadows": "export const value = (c) => {\n  const COLORS = ['white'];\n"
    + "  return Number(c.map((x) => COLORS.indexOf(x)).join(''));\n}",
    "input_named_like_table": "export const value = (COLORS) => Number(COLORS.map((x) => COLORS.indexOf(x)).join(''))",
    "callback_param_named_like_table": "export const value = (c) => Number(c.map((COLORS) => COLORS.indexOf(COLORS)).join(''))",
    "local_lookup_shadows": LOOKUP
    + "export const value = (colors) => {\n  const colorCode = (x) => 0;\n"
    + "  return colorCode(colors[0]) * 10 + colorCode(colors[1]);\n}",
}


class TestMapJoin:
    @pytest.mark.parametrize("name", sorted(MAP_JOIN_ACCEPTED))
    def test_accepted(self, name):
        facts = facts_for(COLORS_ARRAY + MAP_JOIN_ACCEPTED[name])
        assert is_optimal_map_join(facts), name

    @pytest.mark.parametrize("name", sorted(MAP_JOIN_REJECTED))
    def test_rejected(self, name):
        facts = facts_for(COLORS_ARRAY + MAP_JOIN_REJECTED[name])
        assert not is_optimal_map_join(facts), name

    def test_object_table_lookup(self):
        facts = facts_for(COLORS_OBJECT + "export const value = (c) => COLORS[c[0]] * 10 + COLORS[c[1]]")
        assert is_optimal_map_join(facts)

    def test_object_table_with_indexof_is_rejected(self):
        facts = facts_for(COLORS_OBJECT + "export const value = (c) => COLORS.indexOf(c[0]) * 10 + COLORS.indexOf(c[1])")
        assert not is_optimal_map_join(facts)

    def test_string_valued_table_concatenates_bare_lookups(self):
        facts = facts_for(
            "const R = { black: '0', brown: '1', red: '2', orange: '3', yellow: '4', "
            "green: '5', blue: '6', violet: '7', grey: '8', white: '9' };\n"
            "export const value = (c) => Number(R[c[0]] + R[c[1]])"
        )
        assert is_optimal_map_join(facts)

    def test_string_valued_table_rejects_arithmetic(self):
        facts = facts_for(
            "const R = { black: '0', brown: '1', red: '2', orange: '3', yellow: '4', "
            "green: '5', blue: '6', violet: '7', grey: '8', white: '9' };\n"
            "export const value = (c) => R[c[0]] * 10 + R[c[1]]"
        )
        assert not is_optimal_map_join(facts)

    def test_map_table_get(self):
        facts = facts_for(
            "const M = new Map([['black', 0], ['brown', 1], ['red', 2], ['orange', 3], ['yellow', 4], "
            "['green', 5], ['blue', 6], ['violet', 7], ['grey', 8], ['white', 9]]);\n"
            "export const value = (c) => Number(c.map((x) => M.get(x)).join(''))"
        )
        assert is_optimal_map_join(facts)

    def test_no_main_method(self):
        facts = facts_for(COLORS_ARRAY)
        assert not is_optimal_map_join(facts)

    def test_typescript(self):
        facts = facts_for(
            COLORS_ARRAY
            + "const colorCode = (color: string): number => COLORS.indexOf(color);\n"
            + "export const value = (colors: string[]): number => Number(colors.map(colorCode).join(''));\n",
            "typescript",
        )
        assert is_optimal_map_join(facts)


# ---------------------------------------------------------------------------
# Reduce
# ---------------------------------------------------------------------------

REDUCE_ACCEPTED = {
    "canonical": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color, i) => acc + colorCode(color) * 10 ** i, 0)",
    "no_seed": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color, i) => acc + colorCode(color) * 10 ** i)",
    "commuted": "export const value = (colors) => "
    + "colors.reverse().reduce((acc, color, i) => 10 ** i * COLORS.indexOf(color) + acc, 0)",
    "math_pow": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color, i) => acc + colorCode(color) * Math.pow(10, i), 0)",
    "spread_copy": LOOKUP
    + "export const value = (colors) => [...colors].reverse().reduce((acc, color, i) => acc + colorCode(color) * 10 ** i, 0)",
    "slice_copy": LOOKUP
    + "export const value = (colors) => colors.slice().reverse().reduce((acc, color, i) => acc + colorCode(color) * 10 ** i, 0)",
    "block_callback": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color, i) => {\n"
    + "  return acc + colorCode(color) * 10 ** i;\n}, 0)",
}

REDUCE_REJECTED = {
    "not_reversed": LOOKUP
    + "export const value = (colors) => colors.reduce((acc, color, i) => acc + colorCode(color) * 10 ** i, 0)",
    "branching_callback": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color, i) => i ? acc + colorCode(color) * 10 : acc + colorCode(color), 0)",
    "wrong_seed": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color, i) => acc + colorCode(color) * 10 ** i, 1)",
    "two_params": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color) => acc * 10 + colorCode(color), 0)",
    "power_of_wrong_name": LOOKUP
    + "export const value = (colors) => colors.reverse().reduce((acc, color, i) => acc + colorCode(color) * 10 ** acc, 0)",
    "string_accumulator": LOOKUP
    + "export const value = (colors) => parseInt(colors.reduce((acc, next) => acc + colorCode(next), ''))",
    "accumulator_named_like_table": "export const value = (colors) => "
    + "colors.reverse().reduce((COLORS, color, i) => COLORS + COLORS.indexOf(color) * 10 ** i, 0)",
    "local_table_shadows": "export const value = (colors) => {\n  const COLORS = [];\n"
    + "  return colors.reverse().reduce((acc, color, i) => acc + COLORS.indexOf(color) * 10 ** i, 0);\n}",
}


class TestReduce:
    @pytest.mark.parametrize("name", sorted(REDUCE_ACCEPTED))
    def test_accepted(self, name):
        facts = facts_for(COLORS_ARRAY + REDUCE_ACCEPTED[name])
        assert is_optimal_reduce(facts), name

    @pytest.mark.parametrize("name", sorted(REDUCE_REJECTED))
    def test_rejected(self, name):
        facts = facts_for(COLORS_ARRAY + REDUCE_REJECTED[name])
        assert not is_optimal_reduce(facts), name

    def test_requires_optimal_constants(self):
        facts = facts_for(
            COLORS_ARRAY
            + "const EXTRA = { a: 1 };\n"
            + REDUCE_ACCEPTED["canonical"]
        )
        assert not is_optimal_reduce(facts)

    def test_map_join_is_not_a_reduce(self):
        facts = facts_for(COLORS_ARRAY + MAP_JOIN_ACCEPTED["named_lookup"])
        assert not is_optimal_reduce(facts)


# ---------------------------------------------------------------------------
# Inline export
# ---------------------------------------------------------------------------


class TestInlineExport:
    def test_inline(self):
        assert has_inline_export(facts_for("export const value = (c) => 1"))

    def test_specifier(self):
        assert not has_inline_export(facts_for("const value = (c) => 1\nexport { value }"))

    def test_missing(self):
        assert not has_inline_export(facts_for("const value = (c) => 1"))
