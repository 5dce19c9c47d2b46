"""Undo history entries."""

from typing import Tuple

from pydantic import BaseModel, ConfigDict

from ndraft.models.cards import Card
from ndraft.models.theme import Theme


class HistoryEntry(BaseModel):
    """Immutable snapshot of the board taken before a mutation."""

    model_config = ConfigDict(frozen=True)

    cards: Tuple[Card, ...]
    theme: Theme
    timestamp: float
    label: str
