"""Card store: cards, theme and settings plus the lock policy."""

import threading
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ndraft.config_docs import PENDING_RESPONSE
from ndraft.exceptions import CardNotFoundError, SelectionError, ValidationError
from ndraft.logger import Logger, session_logger
from ndraft.models import (
    DARK_PALETTE,
    LIGHT_PALETTE,
    AppState,
    Card,
    Settings,
    StyleOverrides,
    Theme,
    ThemeUpdate,
    new_session_id,
)

THEME_MODES = {"dark": DARK_PALETTE, "light": LIGHT_PALETTE}


class CardStore:
    """Owns every card, the global theme, the settings and the streaming slot.

    Callers only ever receive copies; the live objects never leave the store.
    Directive-originated updates go through ``apply_style_update`` and
    ``apply_theme_update``, which refuse to touch a locked target. The
    ``save_user_styles``/``set_theme_*`` methods are explicit user actions and
    bypass the lock.

    All entry points serialise on one re-entrant lock, so the store stays
    consistent when driven from several threads.
    """

    def __init__(self, state: Optional[AppState] = None, logger: Optional[Logger] = None) -> None:
        self.logger = logger or session_logger
        self._lock = threading.RLock()
        self._cards: Dict[str, Card] = {}
        self._theme = Theme()
        self._settings = Settings()
        self._session_id = new_session_id()
        self._streaming_id: Optional[str] = None
        if state is not None:
            self.replace_state(state)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _require(self, card_id: str) -> Card:
        card = self._cards.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    def get_card(self, card_id: str) -> Card:
        with self._lock:
            return self._require(card_id).model_copy(deep=True)

    def find_card(self, card_id: Optional[str]) -> Optional[Card]:
        with self._lock:
            card = self._cards.get(card_id) if card_id else None
            return card.model_copy(deep=True) if card else None

    def has_card(self, card_id: Optional[str]) -> bool:
        with self._lock:
            return card_id in self._cards

    def list_cards(self) -> List[Card]:
        with self._lock:
            return [card.model_copy(deep=True) for card in self._cards.values()]

    def card_ids(self) -> List[str]:
        with self._lock:
            return list(self._cards)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cards)

    @property
    def theme(self) -> Theme:
        with self._lock:
            return self._theme.model_copy()

    @property
    def settings(self) -> Settings:
        with self._lock:
            return self._settings.model_copy()

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def streaming_id(self) -> Optional[str]:
        return self._streaming_id

    # ------------------------------------------------------------------
    # Card mutations
    # ------------------------------------------------------------------

    def create_card(
        self, q: str, r: str = PENDING_RESPONSE, styles: Optional[StyleOverrides] = None
    ) -> str:
        card_id = str(uuid.uuid4())
        with self._lock:
            self._cards[card_id] = Card(
                id=card_id,
                q=q,
                r=r,
                styles=styles.model_copy() if styles else StyleOverrides(),
            )
        self.logger.debug("Card created", card_id=card_id)
        return card_id

    def update_card(self, card_id: str, q: Optional[str] = None, r: Optional[str] = None) -> Card:
        """Replace ``q`` and/or ``r``; ``None`` leaves a field as it is."""
        with self._lock:
            card = self._require(card_id)
            if q is not None:
                card.q = q
            if r is not None:
                card.r = r
            return card.model_copy(deep=True)

    def delete_card(self, card_id: str) -> None:
        with self._lock:
            self._require(card_id)
            del self._cards[card_id]
            if self._streaming_id == card_id:
                self._streaming_id = None
                self.logger.info("Deleted the streaming card", card_id=card_id)

    def delete_cards(self, card_ids: Iterable[str]) -> List[str]:
        """Delete every existing id; unknown ids are skipped. Returns the removed ids."""
        removed = []
        with self._lock:
            for card_id in card_ids:
                if card_id in self._cards:
                    self.delete_card(card_id)
                    removed.append(card_id)
        return removed

    def clear_cards(self) -> int:
        with self._lock:
            count = len(self._cards)
            self._cards.clear()
            self._streaming_id = None
        return count

    def merge_cards(
        self, card_ids: Sequence[str], result_q: str, result_r: str = PENDING_RESPONSE
    ) -> str:
        """Create the card that will hold the merge of ``card_ids``.

        The source cards are kept.

        Raises:
            SelectionError: fewer than two of the ids exist
        """
        with self._lock:
            existing = [card_id for card_id in dict.fromkeys(card_ids) if card_id in self._cards]
            if len(existing) < 2:
                raise SelectionError("Merge needs at least two existing cards", list(card_ids))
            return self.create_card(result_q, result_r)

    # ------------------------------------------------------------------
    # Styles and theme
    # ------------------------------------------------------------------

    def apply_style_update(self, card_id: str, update: StyleOverrides) -> bool:
        """Merge a directive-originated style update.

        Returns:
            False, with nothing changed, when the card is locked
        """
        with self._lock:
            card = self._require(card_id)
            if card.styles.locked:
                self.logger.info("Style update refused, card locked", card_id=card_id)
                return False
            card.styles = card.styles.merged(update)
            return True

    def apply_theme_update(self, update: ThemeUpdate) -> bool:
        """Merge the provided fields of a directive-originated theme.

        Returns:
            False, with nothing changed, when the theme is locked
        """
        with self._lock:
            if self._theme.locked:
                self.logger.info("Theme update refused, theme locked", name=update.name)
                return False
            self._theme = self._theme.model_copy(update=update.provided())
            return True

    def save_user_styles(self, card_id: str, styles: StyleOverrides) -> Card:
        """User edit of a card's styles; may set or clear the lock."""
        with self._lock:
            card = self._require(card_id)
            card.styles = card.styles.merged(styles, include_lock=True)
            return card.model_copy(deep=True)

    def set_theme_locked(self, locked: bool) -> Theme:
        with self._lock:
            self._theme = self._theme.model_copy(update={"locked": locked})
            return self._theme.model_copy()

    def set_theme_mode(self, mode: str) -> Theme:
        """Switch the background palette to ``light`` or ``dark``."""
        palette = THEME_MODES.get(mode)
        if palette is None:
            raise ValidationError(
                message=f"Unknown theme mode '{mode}'",
                details={"mode": mode, "allowed": sorted(THEME_MODES)},
            )
        with self._lock:
            self._theme = self._theme.model_copy(update=palette)
            return self._theme.model_copy()

    def update_settings(self, **changes: Any) -> Settings:
        with self._lock:
            data = self._settings.model_dump()
            data.update({key: value for key, value in changes.items() if value is not None})
            self._settings = Settings(**data)
            return self._settings.model_copy()

    # ------------------------------------------------------------------
    # Streaming slot
    # ------------------------------------------------------------------

    def begin_stream(self, card_id: str) -> None:
        with self._lock:
            self._require(card_id)
            self._streaming_id = card_id

    def end_stream(self, card_id: str) -> None:
        """Release the slot if ``card_id`` still holds it."""
        with self._lock:
            if self._streaming_id == card_id:
                self._streaming_id = None

    # ------------------------------------------------------------------
    # Whole-state access (history, persistence, import)
    # ------------------------------------------------------------------

    def snapshot_state(self) -> AppState:
        with self._lock:
            return AppState(
                cards=self.list_cards(),
                theme=self._theme.model_copy(),
                settings=self._settings.model_copy(),
                session_id=self._session_id,
            )

    def restore(self, cards: Iterable[Card], theme: Optional[Theme] = None) -> None:
        """Replace every card, and the theme when one is given."""
        with self._lock:
            self._cards = {card.id: card.model_copy(deep=True) for card in cards}
            if theme is not None:
                self._theme = theme.model_copy()
            if self._streaming_id not in self._cards:
                self._streaming_id = None

    def replace_state(self, state: AppState) -> None:
        with self._lock:
            self.restore(state.cards, state.theme)
            self._settings = state.settings.model_copy()
            self._session_id = state.session_id
