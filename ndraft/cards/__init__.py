"""Card storage."""
from ndraft.cards.store import THEME_MODES, CardStore

__all__ = ["CardStore", "THEME_MODES"]
