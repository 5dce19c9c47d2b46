"""Directive parse result."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ndraft.models.cards import StyleOverrides
from ndraft.models.theme import ThemeUpdate


class DirectiveResult(BaseModel):
    """Output of one directive extraction over a complete response."""

    model_config = ConfigDict(extra="ignore")

    clean_text: str
    style_update: StyleOverrides = Field(default_factory=StyleOverrides)
    theme_update: Optional[ThemeUpdate] = None
    actions: List[str] = Field(default_factory=list)
