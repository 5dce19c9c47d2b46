"""Global theme models."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

DARK_PALETTE: Dict[str, str] = {
    "bg": "#121212",
    "card_bg": "#1e1e1e",
    "text": "#f5f5f5",
    "border": "#333",
}

LIGHT_PALETTE: Dict[str, str] = {
    "bg": "#f8f9fa",
    "card_bg": "#ffffff",
    "text": "#222",
    "border": "#ddd",
}


class Theme(BaseModel):
    """Process-wide theme. ``locked`` blocks directive-driven changes."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = "ai-Ndraft"
    primary: str = "#c41e3a"
    bg: str = DARK_PALETTE["bg"]
    card_bg: str = Field(default=DARK_PALETTE["card_bg"], alias="cardBg")
    text: str = DARK_PALETTE["text"]
    border: str = DARK_PALETTE["border"]
    locked: bool = False

    @property
    def mode(self) -> str:
        return "light" if self.bg == LIGHT_PALETTE["bg"] else "dark"

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class ThemeUpdate(BaseModel):
    """Partial theme proposed by a ``!theme:`` directive.

    Fields the directive did not supply stay ``None`` and are never merged.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Optional[str] = None
    bg: Optional[str] = None
    card_bg: Optional[str] = Field(default=None, alias="cardBg")
    text: Optional[str] = None
    border: Optional[str] = None
    primary: Optional[str] = None

    def provided(self) -> Dict[str, str]:
        return self.model_dump(exclude_none=True)
