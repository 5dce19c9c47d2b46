"""Persistence layer for the application state document."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ndraft.config import get_default_state_path
from ndraft.exceptions import MalformedImportError
from ndraft.logger import Logger, session_logger
from ndraft.models import AppState, Card, Settings, Theme


class StateStore:
    """JSON file storage for ``{cards, theme, settings, sessionId}``.

    ``load`` never raises: a missing or unreadable document yields defaults and
    a bad card is skipped on its own. ``parse_document`` is the strict variant
    used for imports.
    """

    def __init__(self, path: Optional[str] = None, logger: Optional[Logger] = None) -> None:
        self.path = Path(path or get_default_state_path())
        self.logger = logger or session_logger

    # ------------------------------------------------------------------
    # Public API (synchronous)
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> AppState:
        if not self.exists():
            self.logger.debug("No saved state, using defaults", path=str(self.path))
            return AppState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.logger.error("Load failed, using defaults", path=str(self.path), error=str(exc))
            return AppState()
        if not isinstance(data, dict):
            self.logger.error("Load failed, document is not an object", path=str(self.path))
            return AppState()

        defaults = AppState()
        state = AppState(
            cards=self._coerce_cards(data.get("cards")),
            theme=self._coerce_model(Theme, data.get("theme"), defaults.theme),
            settings=self._coerce_model(Settings, data.get("settings"), defaults.settings),
            session_id=self._coerce_session_id(data.get("sessionId"), defaults.session_id),
        )
        self.logger.debug("State loaded", path=str(self.path), cards=len(state.cards))
        return state

    def save(self, state: AppState) -> None:
        """Write the document atomically (temp file, then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(state.to_document(), handle, ensure_ascii=False)
        os.replace(tmp_path, self.path)
        self.logger.debug("State persisted", path=str(self.path), cards=len(state.cards))

    def delete(self) -> None:
        if self.path.exists():
            self.path.unlink(missing_ok=True)
            self.logger.info("State deleted", path=str(self.path))

    def export_document(self, state: AppState) -> str:
        return json.dumps(state.to_document(), ensure_ascii=False, indent=2)

    def parse_document(self, text: str, current: AppState) -> AppState:
        """Parse an imported document; absent sections keep ``current``'s values.

        Raises:
            MalformedImportError: text is not a JSON object
        """
        try:
            data = json.loads(text)
        except (TypeError, json.JSONDecodeError) as exc:
            raise MalformedImportError(str(exc)) from exc
        if not isinstance(data, dict):
            raise MalformedImportError(f"expected an object, got {type(data).__name__}")

        theme = data.get("theme") or None
        settings = data.get("settings") or None
        return AppState(
            cards=self._coerce_cards(data.get("cards")),
            theme=self._coerce_model(Theme, theme, None) if theme else current.theme,
            settings=self._coerce_model(Settings, settings, None) if settings else current.settings,
            session_id=self._coerce_session_id(data.get("sessionId"), current.session_id),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _coerce_cards(self, raw: Any) -> List[Card]:
        if not isinstance(raw, list):
            return []
        cards: List[Card] = []
        seen = set()
        for index, item in enumerate(raw):
            try:
                card = Card.model_validate(item)
            except PydanticValidationError as exc:
                self.logger.warning("Skipping invalid card", index=index, error=str(exc))
                continue
            if card.id in seen:
                self.logger.warning("Skipping duplicate card", index=index, card_id=card.id)
                continue
            seen.add(card.id)
            cards.append(card)
        return cards

    def _coerce_model(self, model, raw: Any, fallback):
        """Lay ``raw``'s non-null keys over the model defaults."""
        if not isinstance(raw, dict):
            return fallback if fallback is not None else model()
        values: Dict[str, Any] = {key: value for key, value in raw.items() if value is not None}
        try:
            return model.model_validate(values)
        except PydanticValidationError as exc:
            self.logger.warning(f"Invalid {model.__name__.lower()}, using defaults", error=str(exc))
            return fallback if fallback is not None else model()

    @staticmethod
    def _coerce_session_id(raw: Any, fallback: str) -> str:
        return raw if isinstance(raw, str) and raw else fallback


__all__ = ["StateStore"]
