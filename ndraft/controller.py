"""Application controller.

Owns the application state for one user session. ``init`` loads the persisted
document; every mutation goes through a named method that snapshots history
where the operation is undoable and persists the document afterwards.
"""

import re
import time
from typing import Any, Dict, List, Optional, Tuple

from ndraft.cards.store import CardStore
from ndraft.config import Config
from ndraft.config_docs import EXPORT_FILENAME_PREFIX, SPEECH_MAX_CHARS
from ndraft.events import (
    CardChanged,
    CardRemoved,
    EventBus,
    FocusChanged,
    Notice,
    SelectionChanged,
    SpeakRequested,
    StateReplaced,
    ThemeChanged,
    ViewChanged,
)
from ndraft.exceptions import (
    EmptyHistoryError,
    ExchangeInProgressError,
    SelectionError,
    ValidationError,
)
from ndraft.history.stack import HistoryStack
from ndraft.logger import Logger, session_logger
from ndraft.models import AppState, StyleOverrides, ViewMode
from ndraft.orchestrator import ExchangeKind, ExchangeResult, RequestOrchestrator
from ndraft.orchestrator.prompts import (
    build_continue_instruction,
    build_edit_prompt,
    build_merge_prompt,
    build_split_prompt,
    merged_card_title,
)
from ndraft.storage import StateStore
from ndraft.transport import GenerateClient

MARKDOWN_PUNCTUATION = re.compile(r"[#*_`>~-]")
EDITABLE_FIELDS = ("q", "r")


class AppController:
    """Entry point for every user operation on the board."""

    def __init__(
        self,
        state_store: Optional[StateStore] = None,
        client: Optional[GenerateClient] = None,
        bus: Optional[EventBus] = None,
        history_capacity: Optional[int] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.logger = logger or session_logger
        self.state_store = state_store or StateStore(logger=self.logger)
        self.bus = bus or EventBus(logger=self.logger)
        self.store = CardStore(logger=self.logger)
        self.history = HistoryStack(
            self.store,
            capacity=history_capacity or Config.get_history_capacity(),
            logger=self.logger,
        )
        self.client = client or GenerateClient(
            url_resolver=self.proxy_url,
            timeout_seconds=Config.get_stream_timeout(),
            logger=self.logger,
        )
        self.orchestrator = RequestOrchestrator(
            self.store,
            self.history,
            self.client,
            bus=self.bus,
            action_handler=self._handle_action,
            focus_provider=lambda: self.focus_id,
            logger=self.logger,
        )
        self._selected: Dict[str, None] = {}
        self.focus_id: Optional[str] = None
        self.initialized = False

    # ------------------------------------------------------------------
    # Lifecycle and shared helpers
    # ------------------------------------------------------------------

    def init(self) -> AppState:
        """Load the persisted document into the store."""
        state = self.state_store.load()
        self.store.replace_state(state)
        self.history.clear()
        self._selected.clear()
        self.focus_id = None
        self.initialized = True
        self.logger.info("Controller initialized", cards=len(state.cards), path=str(self.state_store.path))
        self.bus.publish(StateReplaced(reason="init"))
        return state

    def proxy_url(self) -> str:
        return self.store.settings.proxy_url or Config.get_proxy_url()

    def persist(self) -> None:
        self.state_store.save(self.store.snapshot_state())

    def notify(self, message: str, level: str = "info") -> None:
        self.bus.publish(Notice(message=message, level=level))

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    def describe(self) -> Dict[str, Any]:
        """Full view of the session for presentation layers."""
        document = self.store.snapshot_state().to_document()
        document.update(
            {
                "selected": self.selected,
                "focusId": self.focus_id,
                "streamingId": self.store.streaming_id,
                "exchangeState": self.orchestrator.state.value,
                "history": self.history.labels(),
            }
        )
        return document

    def _prune_selection(self) -> None:
        existing = set(self.store.card_ids())
        stale = [card_id for card_id in self._selected if card_id not in existing]
        if not stale:
            return
        for card_id in stale:
            del self._selected[card_id]
        self.bus.publish(SelectionChanged(selected=self.selected))

    def _check_focus(self) -> None:
        if self.focus_id is not None and not self.store.has_card(self.focus_id):
            self.close_focus()

    def _after_board_change(self, reason: str) -> None:
        self._prune_selection()
        self._check_focus()
        self.bus.publish(StateReplaced(reason=reason))
        self.bus.publish(ThemeChanged(theme=self.store.theme))

    # ------------------------------------------------------------------
    # Exchanges
    # ------------------------------------------------------------------

    async def _exchange(
        self,
        prompt: str,
        target_id: Optional[str] = None,
        kind: ExchangeKind = ExchangeKind.PROMPT,
    ) -> ExchangeResult:
        try:
            result = await self.orchestrator.submit(prompt, target_id=target_id, kind=kind)
        finally:
            self._prune_selection()
            self._check_focus()
            self.persist()

        if result.finalized and self.store.settings.auto_tts:
            self.read_card(result.card_id)
        return result

    async def send_prompt(self, prompt: str) -> ExchangeResult:
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValidationError(message="Prompt is empty")
        return await self._exchange(prompt)

    def stop_stream(self) -> bool:
        return self.orchestrator.stop()

    async def continue_card(self, card_id: str, instructions: str) -> ExchangeResult:
        card = self.store.get_card(card_id)
        instruction = build_continue_instruction(card, instructions.strip())
        return await self._exchange(instruction, target_id=card_id, kind=ExchangeKind.CONTINUE)

    async def split_card(self, card_id: str, instructions: str) -> ExchangeResult:
        card = self.store.get_card(card_id)
        return await self._exchange(build_split_prompt(card, instructions.strip()), kind=ExchangeKind.SPLIT)

    async def ai_edit_card(self, card_id: str, instructions: str) -> ExchangeResult:
        card = self.store.get_card(card_id)
        return await self._exchange(build_edit_prompt(card, instructions.strip()), kind=ExchangeKind.EDIT)

    async def merge(self, instructions: str = "") -> ExchangeResult:
        """Merge the selected cards into a new card.

        Raises:
            SelectionError: fewer than two cards selected
            ExchangeInProgressError: a response is already streaming
        """
        self._prune_selection()
        selected = self.selected
        if len(selected) < 2:
            raise SelectionError("Select 2+ cards to merge", selected)
        if self.orchestrator.is_busy:
            raise ExchangeInProgressError(self.store.streaming_id)

        cards = [self.store.get_card(card_id) for card_id in selected]
        prompt = build_merge_prompt(cards, (instructions or "").strip())

        self.history.snapshot("Add Card")
        card_id = self.store.merge_cards(selected, merged_card_title(len(cards)))
        self.bus.publish(CardChanged(card=self.store.get_card(card_id)))
        self.clear_selection()
        self.persist()
        return await self._exchange(prompt, target_id=card_id, kind=ExchangeKind.MERGE)

    async def generate_theme(self, description: str, card_id: Optional[str] = None) -> bool:
        description = (description or "").strip()
        if not description:
            raise ValidationError(message="Theme description is empty")
        applied = await self.orchestrator.generate_theme(description, card_id=card_id)
        if applied:
            self.persist()
        return applied

    async def _handle_action(self, action: str) -> None:
        """Execute one ``!action:...!`` token from a finalized response."""
        action = action.strip().lower()
        if action == "clear":
            self.clear_all()
        elif action == "merge":
            if len(self.selected) > 1:
                await self.merge()
            else:
                self.notify("AI requested merge, but no cards selected.")
        elif action.startswith("view:"):
            view = action.split(":")[1].strip()
            if view in {mode.value for mode in ViewMode}:
                self.set_view(view)
                self.notify(f"AI switched to {view}")
        else:
            self.logger.debug("Ignoring unknown action", action=action)

    # ------------------------------------------------------------------
    # Card operations
    # ------------------------------------------------------------------

    def delete_card(self, card_id: str) -> None:
        self.store.delete_card(card_id)
        self._selected.pop(card_id, None)
        self.bus.publish(CardRemoved(card_id=card_id))
        self.bus.publish(SelectionChanged(selected=self.selected))
        if self.focus_id == card_id:
            self.close_focus()
        self.notify("Card deleted")
        self.persist()

    def manual_edit(self, card_id: str, field: str, text: str):
        if field not in EDITABLE_FIELDS:
            raise ValidationError(
                message=f"Field must be one of {', '.join(EDITABLE_FIELDS)}, got '{field}'",
                details={"field": field},
            )
        self.store.get_card(card_id)
        self.history.snapshot("Manual Edit")
        value = (text or "").strip()
        card = self.store.update_card(card_id, **{field: value})
        self.bus.publish(CardChanged(card=card))
        self.persist()
        return card

    def save_styles(self, card_id: str, styles: StyleOverrides):
        """User edit of a card's styles; the only way to set or clear a lock."""
        self.store.get_card(card_id)
        self.history.snapshot("Style Change")
        card = self.store.save_user_styles(card_id, styles)
        self.bus.publish(CardChanged(card=card))
        self.persist()
        return card

    def copy_text(self, card_id: str) -> str:
        card = self.store.get_card(card_id)
        self.notify("Copied to clipboard")
        return card.r or card.q or ""

    def speech_text(self, card_id: str) -> str:
        card = self.store.get_card(card_id)
        return MARKDOWN_PUNCTUATION.sub("", card.r)[:SPEECH_MAX_CHARS]

    def read_card(self, card_id: str) -> Optional[str]:
        """Hand the card's response to text-to-speech. None when it is empty."""
        if not self.store.get_card(card_id).r:
            return None
        text = self.speech_text(card_id)
        self.bus.publish(SpeakRequested(card_id=card_id, text=text))
        return text

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle_select(self, card_id: str) -> List[str]:
        self.store.get_card(card_id)
        if card_id in self._selected:
            del self._selected[card_id]
        else:
            self._selected[card_id] = None
        self.bus.publish(SelectionChanged(selected=self.selected))
        return self.selected

    def clear_selection(self) -> None:
        self._selected.clear()
        self.bus.publish(SelectionChanged(selected=[]))

    def bulk_delete(self) -> int:
        self._prune_selection()
        if not self._selected:
            return 0
        self.history.snapshot("Bulk Delete")
        removed = self.store.delete_cards(self.selected)
        for card_id in removed:
            self.bus.publish(CardRemoved(card_id=card_id))
        self.clear_selection()
        self._check_focus()
        self.persist()
        return len(removed)

    # ------------------------------------------------------------------
    # Board
    # ------------------------------------------------------------------

    def clear_all(self) -> int:
        self.history.snapshot("Clear All")
        count = self.store.clear_cards()
        self._after_board_change("clear")
        self.notify("Grid Cleared")
        self.persist()
        return count

    def undo(self) -> Optional[str]:
        """Restore the newest snapshot. None, with a notice, when there is none."""
        try:
            label = self.history.undo()
        except EmptyHistoryError as exc:
            self.notify(exc.message)
            return None
        self._after_board_change("undo")
        self.notify(f"Undid: {label}")
        self.persist()
        return label

    def export_state(self) -> Tuple[str, str]:
        """Return ``(filename, json_text)`` for a downloadable export."""
        filename = f"{EXPORT_FILENAME_PREFIX}{int(time.time() * 1000)}.json"
        text = self.state_store.export_document(self.store.snapshot_state())
        self.notify("Export downloaded")
        return filename, text

    def import_state(self, text: str) -> AppState:
        """Replace the whole state with an exported document.

        Raises:
            MalformedImportError: text is not a JSON object; nothing changes
        """
        state = self.state_store.parse_document(text, self.store.snapshot_state())
        self.history.snapshot("Pre-Import Backup")
        self.store.replace_state(state)
        self._after_board_change("import")
        self.bus.publish(ViewChanged(view=self.store.settings.view))
        self.notify("Import Successful")
        self.persist()
        return state

    # ------------------------------------------------------------------
    # Appearance and settings
    # ------------------------------------------------------------------

    def toggle_theme_lock(self) -> bool:
        theme = self.store.set_theme_locked(not self.store.theme.locked)
        self.bus.publish(ThemeChanged(theme=theme))
        self.notify("Global Theme Locked" if theme.locked else "Global Theme Unlocked")
        self.persist()
        return theme.locked

    def toggle_theme_mode(self) -> str:
        mode = "dark" if self.store.theme.mode == "light" else "light"
        theme = self.store.set_theme_mode(mode)
        self.bus.publish(ThemeChanged(theme=theme))
        self.persist()
        return mode

    def set_view(self, view) -> ViewMode:
        try:
            mode = ViewMode(view)
        except ValueError:
            raise ValidationError(
                message=f"Unknown view '{view}'",
                details={"view": view, "allowed": [mode.value for mode in ViewMode]},
            )
        self.store.update_settings(view=mode)
        self.bus.publish(ViewChanged(view=mode))
        self.persist()
        return mode

    def cycle_view(self) -> ViewMode:
        mode = self.set_view(self.store.settings.view.next())
        self.notify(f"View: {mode.value.upper()}")
        return mode

    def toggle_tts(self) -> bool:
        enabled = not self.store.settings.auto_tts
        self.store.update_settings(auto_tts=enabled)
        self.persist()
        return enabled

    def toggle_asr(self) -> bool:
        enabled = not self.store.settings.asr_enabled
        self.store.update_settings(asr_enabled=enabled)
        self.persist()
        return enabled

    def set_proxy_url(self, url: str) -> str:
        url = (url or "").strip()
        self.store.update_settings(proxy_url=url)
        self.persist()
        return url

    def save_appearance(self, proxy_url: Optional[str] = None) -> None:
        if proxy_url and proxy_url.strip():
            self.store.update_settings(proxy_url=proxy_url.strip())
        self.history.snapshot("Appearance Save")
        self.notify("Appearance Saved")
        self.persist()

    # ------------------------------------------------------------------
    # Focus view
    # ------------------------------------------------------------------

    def open_focus(self, card_id: str):
        card = self.store.get_card(card_id)
        self.focus_id = card_id
        self.bus.publish(FocusChanged(card_id=card_id))
        return card

    def close_focus(self) -> None:
        self.focus_id = None
        self.bus.publish(FocusChanged(card_id=None))
