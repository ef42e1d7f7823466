from __future__ import annotations

from autoreview.models import Parameter, ParamKind

from .javascript_lang import JavaScriptExtractor


class TypeScriptExtractor(JavaScriptExtractor):
    """TypeScript extractor extending JavaScript with typed parameters."""

    @property
    def language_name(self) -> str:
        return "typescript"

    @property
    def file_extensions(self) -> list[str]:
        return [".ts", ".tsx", ".mts", ".cts"]

    def _make_parameter(self, node, source: bytes) -> Parameter:
        if node.type not in ("required_parameter", "optional_parameter"):
            return super()._make_parameter(node, source)

        pattern = node.child_by_field_name("pattern")
        inner = super()._make_parameter(pattern, source) if pattern is not None else None
        if inner is None:
            return Parameter(self.node_text(node, source), ParamKind.PLAIN, node=node)

        kind = inner.kind
        if kind is not ParamKind.REST and (
            node.type == "optional_parameter" or node.child_by_field_name("value") is not None
        ):
            kind = ParamKind.DEFAULTED

        return Parameter(
            name=inner.name,
            kind=kind,
            type_annotation=self._annotation_text(node.child_by_field_name("type"), source),
            elements=inner.elements,
            node=node,
        )

    def _annotation_text(self, node, source: bytes) -> str | None:
        """``: string[]`` -> ``string[]``."""
        if node is None:
            return None
        text = self.node_text(node, source).strip()
        if text.startswith(":"):
            text = text[1:].strip()
        return text or None
