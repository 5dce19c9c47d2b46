"""Pydantic models for ndraft.

- cards.py: cards and per-card style overrides
- theme.py: the global theme and partial theme updates
- state.py: settings and the persisted application document
- directives.py: directive extraction result
- history.py: undo snapshots
"""

from .cards import Card, StyleOverrides
from .directives import DirectiveResult
from .history import HistoryEntry
from .state import AppState, Settings, ViewMode, new_session_id
from .theme import DARK_PALETTE, LIGHT_PALETTE, Theme, ThemeUpdate

__all__ = [
    "Card",
    "StyleOverrides",
    "Theme",
    "ThemeUpdate",
    "DARK_PALETTE",
    "LIGHT_PALETTE",
    "Settings",
    "ViewMode",
    "AppState",
    "new_session_id",
    "DirectiveResult",
    "HistoryEntry",
]
