"""Feedback comments attached to a verdict.

A comment is only an identifier, a parameter mapping and a severity. The
engine never produces text; ``TEMPLATES`` is the default wording used by
the CLI renderer (``autoreview.output.formatter.render_comment``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping


class Severity(str, Enum):
    BLOCKING = "blocking"
    ADVISORY = "advisory"


@dataclass(frozen=True)
class Comment:
    identifier: str
    params: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    severity: Severity = Severity.ADVISORY

    @property
    def is_blocking(self) -> bool:
        return self.severity is Severity.BLOCKING

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "params": dict(self.params),
            "severity": self.severity.value,
        }


_TEMPLATES: dict[str, str] = {}
TEMPLATES: Mapping[str, str] = MappingProxyType(_TEMPLATES)


def factory(identifier: str, template: str, severity: Severity) -> Callable[..., Comment]:
    """Register a template and return a constructor for its comments."""
    _TEMPLATES[identifier] = " ".join(template.split())

    def make(params: Mapping[str, str] | None = None) -> Comment:
        return Comment(identifier, MappingProxyType(dict(params or {})), severity)

    make.identifier = identifier
    return make


NO_METHOD = factory(
    "javascript.general.no_method",
    "No function called `%{method.name}`. The tests won't pass without it.",
    Severity.BLOCKING,
)

NO_NAMED_EXPORT = factory(
    "javascript.general.no_named_export",
    """
    No export called `%{export.name}`. The tests won't pass without it.
    Did you forget adding: `export %{export.name}`?
    """,
    Severity.BLOCKING,
)

NO_PARAMETER = factory(
    "javascript.general.no_parameter",
    "Create a parameter for `%{function.name}`. The tests won't pass without it.",
    Severity.BLOCKING,
)

UNEXPECTED_SPLAT_ARGS = factory(
    "javascript.general.unexpected_splat_args",
    """
    Instead of using `...%{splat-arg.name}` (%{parameter.type}), accept the
    colours as a single array parameter.
    """,
    Severity.BLOCKING,
)

TIP_EXPORT_INLINE = factory(
    "javascript.resistor-color-duo.export_inline",
    """
    Did you know that you can export functions, classes and constants
    directly inline?
    """,
    Severity.ADVISORY,
)
