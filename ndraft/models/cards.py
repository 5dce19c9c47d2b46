"""Card and per-card style models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ndraft.config_docs import PENDING_RESPONSE


class StyleOverrides(BaseModel):
    """Partial per-card visual overrides.

    ``None`` means "unchanged". ``locked`` blocks directive-originated updates
    until the user clears it.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    color: Optional[str] = None
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    border_color: Optional[str] = Field(default=None, alias="borderColor")
    padding: Optional[str] = None
    border_radius: Optional[str] = Field(default=None, alias="borderRadius")
    font_size: Optional[str] = Field(default=None, alias="fontSize")
    font_weight: Optional[str] = Field(default=None, alias="fontWeight")
    font_style: Optional[str] = Field(default=None, alias="fontStyle")
    text_decoration: Optional[str] = Field(default=None, alias="textDecoration")
    custom_css: Optional[str] = Field(default=None, alias="customCSS")
    border_width: Optional[str] = Field(default=None, alias="borderWidth")
    locked: bool = False

    def provided(self) -> Dict[str, str]:
        """Visual keys that carry a value (``locked`` excluded)."""
        return self.model_dump(exclude_none=True, exclude={"locked"})

    def is_empty(self) -> bool:
        return not self.provided()

    def merged(self, update: "StyleOverrides", include_lock: bool = False) -> "StyleOverrides":
        """Return a copy with ``update``'s provided keys laid over this one.

        The lock flag is only taken from ``update`` when ``include_lock`` is set
        and the update explicitly carries it.
        """
        data = self.model_dump()
        data.update(update.provided())
        if include_lock and "locked" in update.model_fields_set:
            data["locked"] = update.locked
        return StyleOverrides(**data)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Card(BaseModel):
    """One request/response pair on the board."""

    model_config = ConfigDict(extra="ignore")

    id: str
    q: str = ""
    r: str = ""
    styles: StyleOverrides = Field(default_factory=StyleOverrides)

    @field_validator("styles", mode="before")
    @classmethod
    def _styles_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("q", "r", mode="before")
    @classmethod
    def _text_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_pending(self) -> bool:
        return self.r == PENDING_RESPONSE

    @property
    def is_locked(self) -> bool:
        return self.styles.locked

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "q": self.q, "r": self.r, "styles": self.styles.to_json()}
