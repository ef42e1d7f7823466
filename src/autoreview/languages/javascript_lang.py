from __future__ import annotations

from autoreview.models import (
    ExportFacts,
    ExportStyle,
    FunctionFacts,
    InitShape,
    LookupTable,
    Parameter,
    ParamKind,
    TableKind,
    TopLevelConstant,
)

from .base import DEFAULT_CONSTANT_KINDS, FactExtractor

# "function" is the pre-0.21 grammar name of function_expression
FUNCTION_VALUE_TYPES = frozenset({"arrow_function", "function_expression", "function", "generator_function"})
FUNCTION_DECLARATION_TYPES = frozenset({"function_declaration", "generator_function_declaration"})
DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})

# Wrappers that do not change the runtime value of an initializer
_TRANSPARENT_TYPES = frozenset({"parenthesized_expression", "as_expression", "satisfies_expression", "non_null_expression"})

_COMMONJS_TARGETS = ("module.exports", "exports")


def unwrap(node):
    """Strip parentheses (and TS type assertions) around an expression."""
    while node is not None and node.type in _TRANSPARENT_TYPES:
        children = [c for c in node.named_children if c.type != "comment"]
        if not children:
            break
        node = children[0]
    return node


class JavaScriptExtractor(FactExtractor):
    """Fact extractor for ES modules and CommonJS scripts."""

    @property
    def language_name(self) -> str:
        return "javascript"

    @property
    def file_extensions(self) -> list[str]:
        return [".js", ".mjs", ".cjs", ".jsx"]

    # -- top-level traversal ---------------------------------------------

    def _top_level_statements(self, tree):
        """Yield top-level statements, looking through ``export`` wrappers."""
        for child in tree.root_node.named_children:
            if child.type == "export_statement":
                declaration = child.child_by_field_name("declaration")
                if declaration is not None:
                    yield declaration
                continue
            yield child

    def _declarators(self, declaration):
        return [c for c in declaration.named_children if c.type == "variable_declarator"]

    def _declaration_kind(self, declaration, source: bytes) -> str:
        if declaration.type == "variable_declaration":
            return "var"
        kind = declaration.child_by_field_name("kind")
        if kind is None:
            kind = declaration.children[0]
        return self.node_text(kind, source)

    # -- functions ---------------------------------------------------------

    def _function_facts(self, name: str, node, source: bytes) -> FunctionFacts:
        return FunctionFacts(
            name=name,
            params=self.extract_params(node, source),
            body=node.child_by_field_name("body"),
            node=node,
        )

    def extract_params(self, node, source: bytes) -> tuple[Parameter, ...]:
        single = node.child_by_field_name("parameter")
        if single is not None:
            return (self._make_parameter(single, source),)
        params = node.child_by_field_name("parameters")
        if params is None:
            return ()
        return tuple(self._make_parameter(p, source) for p in params.named_children if p.type != "comment")

    def _make_parameter(self, node, source: bytes) -> Parameter:
        if node.type == "assignment_pattern":
            left = node.child_by_field_name("left")
            inner = self._make_parameter(left, source)
            return Parameter(inner.name, ParamKind.DEFAULTED, elements=inner.elements, node=node)
        if node.type == "rest_pattern":
            target = node.named_children[0] if node.named_children else node
            return Parameter(self.node_text(target, source), ParamKind.REST, node=node)
        if node.type == "array_pattern":
            elements = tuple(
                self.node_text(c, source) for c in node.named_children if c.type == "identifier"
            )
            if len(elements) != len([c for c in node.named_children if c.type != "comment"]):
                elements = ()
            return Parameter(self.node_text(node, source), ParamKind.DESTRUCTURED, elements=elements, node=node)
        if node.type == "object_pattern":
            return Parameter(self.node_text(node, source), ParamKind.DESTRUCTURED, node=node)
        return Parameter(self.node_text(node, source), ParamKind.PLAIN, node=node)

    def extract_main_method(self, tree, source, name):
        for stmt in self._top_level_statements(tree):
            if stmt.type in FUNCTION_DECLARATION_TYPES:
                if self.node_text(stmt.child_by_field_name("name"), source) == name:
                    return self._function_facts(name, stmt, source)
            elif stmt.type in DECLARATION_TYPES:
                for declarator in self._declarators(stmt):
                    value = unwrap(declarator.child_by_field_name("value"))
                    if (
                        self.node_text(declarator.child_by_field_name("name"), source) == name
                        and value is not None
                        and value.type in FUNCTION_VALUE_TYPES
                    ):
                        return self._function_facts(name, value, source)
        return self._extract_commonjs_method(tree, source, name)

    def _extract_commonjs_method(self, tree, source, name):
        """``module.exports = { name() {} }`` and ``exports.name = fn``."""
        for stmt in tree.root_node.named_children:
            if stmt.type != "expression_statement" or not stmt.named_children:
                continue
            assignment = stmt.named_children[0]
            if assignment.type != "assignment_expression":
                continue
            target = self.node_text(assignment.child_by_field_name("left"), source)
            value = unwrap(assignment.child_by_field_name("right"))
            if value is None:
                continue
            if target in (f"{t}.{name}" for t in _COMMONJS_TARGETS) and value.type in FUNCTION_VALUE_TYPES:
                return self._function_facts(name, value, source)
            if target in _COMMONJS_TARGETS and value.type == "object":
                for member in value.named_children:
                    if member.type == "method_definition":
                        if self.node_text(member.child_by_field_name("name"), source) == name:
                            return self._function_facts(name, member, source)
                    elif member.type == "pair":
                        member_value = unwrap(member.child_by_field_name("value"))
                        if (
                            self._property_key(member.child_by_field_name("key"), source) == name
                            and member_value is not None
                            and member_value.type in FUNCTION_VALUE_TYPES
                        ):
                            return self._function_facts(name, member_value, source)
        return None

    def extract_top_level_functions(self, tree, source):
        functions: list[FunctionFacts] = []
        for stmt in self._top_level_statements(tree):
            if stmt.type in FUNCTION_DECLARATION_TYPES:
                name = self.node_text(stmt.child_by_field_name("name"), source)
                functions.append(self._function_facts(name, stmt, source))
            elif stmt.type in DECLARATION_TYPES:
                for declarator in self._declarators(stmt):
                    value = unwrap(declarator.child_by_field_name("value"))
                    if value is not None and value.type in FUNCTION_VALUE_TYPES:
                        name = self.node_text(declarator.child_by_field_name("name"), source)
                        functions.append(self._function_facts(name, value, source))
        return functions

    # -- exports -----------------------------------------------------------

    def extract_export(self, tree, source, name):
        for stmt in tree.root_node.named_children:
            if stmt.type != "export_statement":
                continue
            if any(child.type == "default" for child in stmt.children):
                continue

            declaration = stmt.child_by_field_name("declaration")
            if declaration is not None:
                if declaration.type in DECLARATION_TYPES:
                    names = [self.node_text(d.child_by_field_name("name"), source) for d in self._declarators(declaration)]
                else:
                    names = [self.node_text(declaration.child_by_field_name("name"), source)]
                if name in names:
                    return ExportFacts(name=name, local_name=name, style=ExportStyle.INLINE, node=stmt)
                continue

            for clause in stmt.named_children:
                if clause.type != "export_clause":
                    continue
                for specifier in clause.named_children:
                    if specifier.type != "export_specifier":
                        continue
                    local = self._property_key(specifier.child_by_field_name("name"), source)
                    alias = specifier.child_by_field_name("alias")
                    exported = self._property_key(alias, source) if alias is not None else local
                    if exported == name:
                        return ExportFacts(name=name, local_name=local, style=ExportStyle.SPECIFIER, node=stmt)
        return None

    # -- constants ---------------------------------------------------------

    def extract_top_level_constants(self, tree, source, kinds=DEFAULT_CONSTANT_KINDS):
        constants: list[TopLevelConstant] = []
        for stmt in self._top_level_statements(tree):
            if stmt.type not in DECLARATION_TYPES:
                continue
            kind = self._declaration_kind(stmt, source)
            if kind not in kinds:
                continue
            for declarator in self._declarators(stmt):
                value = declarator.child_by_field_name("value")
                shape, table = self._classify_initializer(unwrap(value), source)
                constants.append(
                    TopLevelConstant(
                        name=self.node_text(declarator.child_by_field_name("name"), source),
                        kind=kind,
                        shape=shape,
                        table=table,
                        node=declarator,
                        value=value,
                    )
                )
        return constants

    def _classify_initializer(self, node, source: bytes) -> tuple[InitShape, LookupTable | None]:
        if node is None:
            return InitShape.OTHER, None
        if node.type in FUNCTION_VALUE_TYPES:
            return InitShape.FUNCTION_LIKE, None
        if node.type == "array":
            return InitShape.ARRAY, self._array_table(node, source)
        if node.type == "object":
            return InitShape.OBJECT, self._object_table(node, source)
        if node.type == "new_expression":
            if self.node_text(node.child_by_field_name("constructor"), source) == "Map":
                return InitShape.OBJECT, self._map_table(node, source)
            return InitShape.OTHER, None
        if node.type == "call_expression":
            # Object.freeze([...]) is still the literal it wraps
            args = node.child_by_field_name("arguments")
            if self.node_text(node.child_by_field_name("function"), source) == "Object.freeze" and args is not None:
                values = [c for c in args.named_children if c.type != "comment"]
                if len(values) == 1:
                    return self._classify_initializer(unwrap(values[0]), source)
        return InitShape.OTHER, None

    # -- literal tables ----------------------------------------------------

    def _string_value(self, node, source: bytes) -> str | None:
        if node is None or node.type != "string":
            return None
        return self.node_text(node, source)[1:-1]

    def _property_key(self, node, source: bytes) -> str:
        if node is None:
            return ""
        if node.type == "string":
            return self._string_value(node, source)
        return self.node_text(node, source)

    def _digit(self, node, source: bytes) -> tuple[int, bool] | None:
        """Parse a digit literal, returning (digit, written_as_string)."""
        node = unwrap(node)
        if node is None:
            return None
        if node.type == "number":
            text = self.node_text(node, source)
            return (int(text), False) if text.isdigit() else None
        text = self._string_value(node, source)
        if text is not None and text.isdigit():
            return int(text), True
        return None

    def _array_table(self, node, source: bytes) -> LookupTable | None:
        elements = [c for c in node.named_children if c.type != "comment"]
        names = [self._string_value(c, source) for c in elements]
        if not names or any(n is None for n in names):
            return None
        return LookupTable(TableKind.ARRAY, tuple((n, i) for i, n in enumerate(names)))

    def _build_table(self, kind: TableKind, pairs) -> LookupTable | None:
        entries = []
        as_strings = []
        for key, value in pairs:
            if key is None or value is None:
                return None
            entries.append((key, value[0]))
            as_strings.append(value[1])
        if not entries:
            return None
        return LookupTable(kind, tuple(entries), string_values=all(as_strings))

    def _object_table(self, node, source: bytes) -> LookupTable | None:
        pairs = []
        for member in node.named_children:
            if member.type == "comment":
                continue
            if member.type != "pair":
                return None
            key = member.child_by_field_name("key")
            if key is None or key.type not in ("property_identifier", "string", "number"):
                return None
            pairs.append((self._property_key(key, source), self._digit(member.child_by_field_name("value"), source)))
        return self._build_table(TableKind.OBJECT, pairs)

    def _map_table(self, node, source: bytes) -> LookupTable | None:
        args = node.child_by_field_name("arguments")
        values = [c for c in args.named_children if c.type != "comment"] if args is not None else []
        if len(values) != 1 or unwrap(values[0]).type != "array":
            return None
        pairs = []
        for entry in unwrap(values[0]).named_children:
            if entry.type == "comment":
                continue
            items = [c for c in entry.named_children if c.type != "comment"] if entry.type == "array" else []
            if len(items) != 2:
                return None
            pairs.append((self._string_value(items[0], source), self._digit(items[1], source)))
        return self._build_table(TableKind.MAP, pairs)
