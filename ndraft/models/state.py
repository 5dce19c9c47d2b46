"""Persisted application state models."""

import time
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ndraft.config_docs import SESSION_ID_PREFIX
from ndraft.models.cards import Card
from ndraft.models.theme import Theme


class ViewMode(str, Enum):
    """Board layouts, in cycling order."""

    LIST = "list"
    GRID = "grid"
    FULL = "full"

    def next(self) -> "ViewMode":
        members = list(ViewMode)
        return members[(members.index(self) + 1) % len(members)]


class Settings(BaseModel):
    """User settings."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    view: ViewMode = ViewMode.LIST
    auto_tts: bool = Field(default=False, alias="autoTTS")
    asr_enabled: bool = Field(default=False, alias="asrEnabled")
    proxy_url: str = Field(default="", alias="proxyUrl")


def new_session_id() -> str:
    return f"{SESSION_ID_PREFIX}{int(time.time() * 1000)}"


class AppState(BaseModel):
    """The single persisted document ``{cards, theme, settings, sessionId}``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cards: List[Card] = Field(default_factory=list)
    theme: Theme = Field(default_factory=Theme)
    settings: Settings = Field(default_factory=Settings)
    session_id: str = Field(default_factory=new_session_id, alias="sessionId")

    def to_document(self) -> Dict[str, Any]:
        return {
            "cards": [card.to_json() for card in self.cards],
            "theme": self.theme.to_json(),
            "settings": self.settings.model_dump(mode="json", by_alias=True),
            "sessionId": self.session_id,
        }
