"""Directive grammar package."""
from ndraft.directives.grammar import (
    DIRECTIVE_PATTERN,
    KEYWORDS,
    has_directives,
    parse_directives,
    parse_theme_payload,
    with_default_unit,
)

__all__ = [
    "DIRECTIVE_PATTERN",
    "KEYWORDS",
    "has_directives",
    "parse_directives",
    "parse_theme_payload",
    "with_default_unit",
]
