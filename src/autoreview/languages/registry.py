"""Extractor registry and parameter accessors used for comment parameters."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from autoreview.models import Parameter

if TYPE_CHECKING:
    from .base import FactExtractor

UNTYPED = "untyped"


@lru_cache(maxsize=None)
def get_extractor(language: str) -> "FactExtractor":
    """Return the shared extractor instance for a language.

    Raises:
        ValueError: If no extractor handles the language.
    """
    if language == "javascript":
        from .javascript_lang import JavaScriptExtractor

        return JavaScriptExtractor()
    elif language in ("typescript", "tsx"):
        from .typescript_lang import TypeScriptExtractor

        return TypeScriptExtractor()
    raise ValueError(f"Unsupported language: {language}")


def parameter_name(param: Parameter) -> str:
    return param.name


def annotate_type(param: Parameter) -> str:
    """The declared type of a parameter, or ``"untyped"``."""
    return param.type_annotation or UNTYPED
