"""Card and theme styling."""
from ndraft.styles.colors import (
    ColorValidationError,
    get_css_color,
    validate_color,
    validate_hex_color,
)
from ndraft.styles.css import card_css, card_declarations, card_selector, scoped_css, theme_css

__all__ = [
    "ColorValidationError",
    "get_css_color",
    "validate_color",
    "validate_hex_color",
    "card_css",
    "card_declarations",
    "card_selector",
    "scoped_css",
    "theme_css",
]
