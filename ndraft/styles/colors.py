"""Color validation for card and theme styling.

Directive payloads are stored verbatim; these checks decide what is safe to
emit as CSS.
"""

import re
from typing import Any, Dict, Optional

from ndraft.exceptions import ValidationError


class ColorValidationError(ValidationError):
    """Raised when color validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="INVALID_COLOR", message=message, details=details)


# CSS keywords accepted alongside hex and functional notation
NAMED_COLORS = {
    "transparent",
    "currentcolor",
    "black",
    "white",
    "red",
    "green",
    "blue",
    "yellow",
    "orange",
    "purple",
    "pink",
    "brown",
    "gray",
    "grey",
    "silver",
    "gold",
    "navy",
    "teal",
    "maroon",
    "olive",
    "lime",
    "aqua",
    "cyan",
    "magenta",
    "fuchsia",
    "indigo",
    "violet",
    "crimson",
    "coral",
    "salmon",
    "tomato",
    "khaki",
    "beige",
    "ivory",
    "lavender",
    "turquoise",
    "tan",
    "chocolate",
    "orchid",
    "plum",
    "darkred",
    "darkblue",
    "darkgreen",
    "darkgray",
    "darkgrey",
    "lightgray",
    "lightgrey",
    "lightblue",
    "lightgreen",
    "skyblue",
    "steelblue",
    "slategray",
    "slategrey",
    "midnightblue",
    "royalblue",
    "forestgreen",
    "seagreen",
    "goldenrod",
    "firebrick",
    "hotpink",
    "deeppink",
    "whitesmoke",
    "gainsboro",
}

HEX_PATTERN = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
FUNCTION_PATTERN = re.compile(r"^(rgba?|hsla?)\(\s*[0-9.%\s,/+-]+\)$", re.IGNORECASE)
VARIABLE_PATTERN = re.compile(r"^var\(--[a-z0-9_-]+(\s*,\s*[^;{}()]+)?\)$", re.IGNORECASE)


def validate_hex_color(color: str) -> bool:
    """Validate that color is a hex code (#RGB, #RGBA, #RRGGBB or #RRGGBBAA)."""
    if not color:
        return False
    return bool(HEX_PATTERN.match(color.strip()))


def validate_color(color: Optional[str]) -> bool:
    """Validate a CSS color value.

    Args:
        color: Hex code, named color, rgb()/hsl() call or CSS variable

    Returns:
        True if valid, False otherwise
    """
    if not color or not color.strip():
        return False

    color = color.strip()
    if color.lower() in NAMED_COLORS:
        return True
    if color.startswith("#"):
        return validate_hex_color(color)
    return bool(FUNCTION_PATTERN.match(color) or VARIABLE_PATTERN.match(color))


def get_css_color(color: str) -> str:
    """Return the color normalized for CSS output.

    Raises:
        ColorValidationError: If color is invalid
    """
    if not validate_color(color):
        raise ColorValidationError(f"Invalid color: {color}", details={"color": color})
    color = color.strip()
    if color.lower() in NAMED_COLORS:
        return color.lower()
    return color
