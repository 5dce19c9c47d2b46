"""Directive grammar.

AI responses may embed control tokens of the form ``!keyword[:payload]!``::

    !theme:Gold,#1a1a1a,#2a2a2a,#ffd700,#ffd700,#b8860b!
    Hello
    !action:view:grid!

``parse_directives`` extracts them from a complete buffer and returns the
prose with every token span removed. It is pure: the same text always yields
the same ``DirectiveResult``.
"""

import re
from typing import Dict, List, Optional, Tuple

from ndraft.models.cards import StyleOverrides
from ndraft.models.directives import DirectiveResult
from ndraft.models.theme import ThemeUpdate

VALUE_KEYWORDS = ("theme", "bg", "text", "border", "pad", "radius", "font", "css", "action")
FLAG_KEYWORDS = ("bold", "italic")
KEYWORDS = VALUE_KEYWORDS + FLAG_KEYWORDS

# Flags take no payload (one is tolerated and ignored); value keywords need one.
DIRECTIVE_PATTERN = re.compile(
    r"!(?:"
    r"(?P<flag>" + "|".join(FLAG_KEYWORDS) + r")(?::[^!]*)?"
    r"|(?P<keyword>" + "|".join(VALUE_KEYWORDS) + r"):(?P<payload>[^!]+)"
    r")!",
    re.IGNORECASE,
)

DEFAULT_LENGTH_UNIT = "px"
LENGTH_UNIT_PATTERN = re.compile(r"(px|em|rem|%|pt|vh|vw|ex|ch)$", re.IGNORECASE)

COLOR_KEYS = {"bg": "background_color", "text": "color", "border": "border_color"}
LENGTH_KEYS = {"pad": "padding", "radius": "border_radius", "font": "font_size"}
FLAG_VALUES = {"bold": ("font_weight", "bold"), "italic": ("font_style", "italic")}
THEME_FIELDS = ("name", "bg", "card_bg", "text", "border", "primary")


def with_default_unit(value: str) -> str:
    """Append ``px`` to a bare length such as ``12``."""
    if LENGTH_UNIT_PATTERN.search(value):
        return value
    return value + DEFAULT_LENGTH_UNIT


def parse_theme_payload(payload: str) -> ThemeUpdate:
    """``Name,Bg,CardBg,Text,Border,Primary`` -> ThemeUpdate.

    Missing or blank fields stay ``None`` so they never overwrite the live theme.
    """
    parts = [part.strip() for part in payload.split(",")]
    values = {
        field: (parts[index] or None) if index < len(parts) else None
        for index, field in enumerate(THEME_FIELDS)
    }
    return ThemeUpdate(**values)


def _strip_spans(text: str, spans: List[Tuple[int, int]]) -> str:
    pieces = []
    cursor = 0
    for start, end in spans:
        pieces.append(text[cursor:start])
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


def _extract_once(
    text: str,
    styles: Dict[str, str],
    actions: List[str],
    theme: List[ThemeUpdate],
) -> Tuple[str, bool]:
    spans: List[Tuple[int, int]] = []
    for match in DIRECTIVE_PATTERN.finditer(text):
        spans.append(match.span())
        flag = match.group("flag")
        if flag:
            key, value = FLAG_VALUES[flag.lower()]
            styles[key] = value
            continue

        keyword = match.group("keyword").lower()
        payload = match.group("payload").strip()
        if keyword == "action":
            if payload:
                actions.append(payload)
        elif keyword == "theme":
            update = parse_theme_payload(payload)
            if update.provided():
                theme.append(update)
        elif not payload:
            continue
        elif keyword in COLOR_KEYS:
            styles[COLOR_KEYS[keyword]] = payload
        elif keyword in LENGTH_KEYS:
            styles[LENGTH_KEYS[keyword]] = with_default_unit(payload)
        elif keyword == "css":
            styles["custom_css"] = payload

    if not spans:
        return text, False
    return _strip_spans(text, spans), True


def parse_directives(text: str) -> DirectiveResult:
    """Extract every directive from ``text``.

    Spans are removed by position, never by value, so repeated identical tokens
    are each removed exactly once. Removing a span can join the characters on
    either side into a new token, so extraction repeats until nothing matches;
    that makes re-parsing ``clean_text`` a no-op.
    """
    styles: Dict[str, str] = {}
    actions: List[str] = []
    themes: List[ThemeUpdate] = []

    remaining = text or ""
    changed = True
    while changed:
        remaining, changed = _extract_once(remaining, styles, actions, themes)

    theme_update: Optional[ThemeUpdate] = themes[-1] if themes else None
    return DirectiveResult(
        clean_text=remaining.strip(),
        style_update=StyleOverrides(**styles),
        theme_update=theme_update,
        actions=actions,
    )


def has_directives(text: str) -> bool:
    return DIRECTIVE_PATTERN.search(text or "") is not None
