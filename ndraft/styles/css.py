"""CSS rendering for cards and the global theme."""

import re
from typing import Dict, List, Optional

from ndraft.logger import Logger, session_logger
from ndraft.models import Card, Theme
from ndraft.styles.colors import ColorValidationError, get_css_color

COLOR_PROPERTIES = {
    "color": "color",
    "background_color": "background-color",
    "border_color": "border-color",
}

PLAIN_PROPERTIES = {
    "padding": "padding",
    "border_radius": "border-radius",
    "border_width": "border-width",
    "font_size": "font-size",
    "font_weight": "font-weight",
    "font_style": "font-style",
    "text_decoration": "text-decoration",
}

THEME_VARIABLES = {
    "primary": "--primary",
    "bg": "--bg",
    "card_bg": "--card-bg",
    "text": "--text",
    "border": "--border",
}

# Quoted strings and comments, whose braces do not open or close blocks
STRING_OR_COMMENT_PATTERN = re.compile(
    r"'(?:[^'\\\n]|\\.)*'" r'|"(?:[^"\\\n]|\\.)*"' r"|/\*.*?\*/",
    re.DOTALL,
)


def card_selector(card_id: str) -> str:
    return f'[data-id="{card_id}"]'


def _braces_balanced(fragment: str) -> bool:
    # Anything left unterminated would swallow the closing brace
    code = STRING_OR_COMMENT_PATTERN.sub("", fragment)
    if any(token in code for token in ('"', "'", "/*", "\\")):
        return False
    depth = 0
    for char in code:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def scoped_css(card_id: str, fragment: str) -> Optional[str]:
    """Nest a custom CSS fragment inside the owning card's selector.

    The fragment may be bare declarations or nested rules; every selector in
    it resolves relative to the card. Returns ``None`` when the fragment could
    close the card block early: unbalanced braces, or an unterminated string
    or comment.
    """
    fragment = fragment.strip()
    if not fragment or not _braces_balanced(fragment):
        return None
    return f"{card_selector(card_id)} {{ {fragment} }}"


def _declaration_value(value: str) -> Optional[str]:
    # A value must not be able to close the declaration block
    if any(char in value for char in ";{}"):
        return None
    return value.strip() or None


def card_declarations(card: Card, logger: Optional[Logger] = None) -> Dict[str, str]:
    """CSS declarations for ``card``; invalid colors are dropped."""
    logger = logger or session_logger
    styles = card.styles.provided()
    declarations: Dict[str, str] = {}

    for field, prop in COLOR_PROPERTIES.items():
        value = styles.get(field)
        if not value:
            continue
        try:
            declarations[prop] = get_css_color(value)
        except ColorValidationError:
            logger.debug("Dropping invalid color", card_id=card.id, property=prop, value=value)

    for field, prop in PLAIN_PROPERTIES.items():
        value = _declaration_value(styles.get(field) or "")
        if value:
            declarations[prop] = value

    return declarations


def card_css(card: Card, logger: Optional[Logger] = None) -> str:
    """Stylesheet for one card: its overrides plus its scoped custom CSS."""
    logger = logger or session_logger
    rules: List[str] = []
    declarations = card_declarations(card, logger)
    if declarations:
        body = " ".join(f"{prop}: {value};" for prop, value in declarations.items())
        rules.append(f"{card_selector(card.id)} {{ {body} }}")
    if card.styles.custom_css:
        scoped = scoped_css(card.id, card.styles.custom_css)
        if scoped is None:
            logger.debug("Dropping unscopable custom CSS", card_id=card.id)
        else:
            rules.append(scoped)
    return "\n".join(rules)


def theme_css(theme: Theme) -> str:
    """Custom-property block applying the global theme."""
    values = theme.model_dump()
    body = " ".join(
        f"{variable}: {values[field]};"
        for field, variable in THEME_VARIABLES.items()
        if _declaration_value(values[field] or "")
    )
    return f":root {{ {body} }}"
