from __future__ import annotations

from abc import ABC, abstractmethod

from autoreview.models import (
    ExportedFunction,
    ExportFacts,
    FunctionFacts,
    Parameter,
    SolutionFacts,
    TopLevelConstant,
)

DEFAULT_CONSTANT_KINDS = ("let", "const", "var")


class FactExtractor(ABC):
    """Base class for language-specific fact extraction.

    Extractors are stateless: every method is a pure tree -> facts
    function and instances are shared between runs.
    """

    @property
    @abstractmethod
    def language_name(self) -> str: ...

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]: ...

    @abstractmethod
    def extract_main_method(self, tree, source: bytes, name: str) -> FunctionFacts | None:
        """Find the top-level function bound to *name*, exported or not."""
        ...

    @abstractmethod
    def extract_export(self, tree, source: bytes, name: str) -> ExportFacts | None:
        """Find the named ES export of *name* (inline or via an export list)."""
        ...

    @abstractmethod
    def extract_top_level_constants(self, tree, source: bytes, kinds=DEFAULT_CONSTANT_KINDS) -> list[TopLevelConstant]:
        """All top-level declarators of the given declaration kinds, in order.

        Each constant carries its initializer shape tag and, for literal
        colour tables, the parsed lookup entries.
        """
        ...

    @abstractmethod
    def extract_top_level_functions(self, tree, source: bytes) -> list[FunctionFacts]: ...

    @abstractmethod
    def extract_params(self, node, source: bytes) -> tuple[Parameter, ...]:
        """Parameters of any function-like node, in declaration order."""
        ...

    def extract_exported_function(self, tree, source: bytes, name: str) -> ExportedFunction | None:
        """The function exported as *name*, or None unless both exist.

        ``export { local as name }`` is resolved through the local name.
        """
        export = self.extract_export(tree, source, name)
        if export is None:
            return None
        method = self.extract_main_method(tree, source, export.local_name)
        if method is None:
            return None
        return ExportedFunction(method, export)

    def extract_facts(
        self,
        tree,
        source: bytes,
        name: str = "value",
        kinds=DEFAULT_CONSTANT_KINDS,
    ) -> SolutionFacts:
        """Run every extraction once and bundle the results."""
        export = self.extract_export(tree, source, name)
        local_name = export.local_name if export is not None else name
        return SolutionFacts(
            language=self.language_name,
            source=source,
            main_method=self.extract_main_method(tree, source, local_name),
            main_export=export,
            constants=tuple(self.extract_top_level_constants(tree, source, kinds)),
            functions=tuple(self.extract_top_level_functions(tree, source)),
        )

    def node_text(self, node, source: bytes) -> str:
        if node is None:
            return ""
        return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
