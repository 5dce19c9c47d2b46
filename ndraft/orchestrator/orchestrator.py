"""Request orchestrator: one streaming exchange from prompt to final card."""

import asyncio
from typing import Awaitable, Callable, Optional

from ndraft.cards.store import CardStore
from ndraft.config_docs import (
    ERROR_PREFIX,
    MERGE_ERROR_PREFIX,
    MERGE_STOPPED_MARKER,
    PENDING_RESPONSE,
    STOPPED_MARKER,
)
from ndraft.events import (
    CardChanged,
    EventBus,
    ExchangeEnded,
    Notice,
    StreamDelta,
    ThemeChanged,
)
from ndraft.exceptions import ExchangeInProgressError, StreamAborted, TransportError
from ndraft.history.stack import HistoryStack
from ndraft.logger import Logger, session_logger
from ndraft.orchestrator.exchange import ExchangeKind, ExchangeResult, ExchangeState
from ndraft.orchestrator.prompts import build_continue_prompt, build_theme_prompt, build_user_prompt
from ndraft.streaming import StreamAccumulator
from ndraft.transport import GenerateClient

ActionHandler = Callable[[str], Awaitable[None]]
FocusProvider = Callable[[], Optional[str]]


class RequestOrchestrator:
    """Drives one exchange at a time: IDLE -> SENT -> STREAMING -> terminal.

    The terminal state is decided in a single place once either the reader
    finishes or ``stop()`` fires. A stop requested before that decision always
    wins, even when the last chunk arrived in the same loop iteration.
    """

    def __init__(
        self,
        store: CardStore,
        history: HistoryStack,
        client: GenerateClient,
        bus: Optional[EventBus] = None,
        action_handler: Optional[ActionHandler] = None,
        focus_provider: Optional[FocusProvider] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            store: Card store holding the streaming slot
            history: Snapshot stack, written on finalization
            client: Streaming client for the generation backend
            bus: Event bus for deltas and notices
            action_handler: Coroutine executing one ``!action:...!`` token
            focus_provider: Returns the id of the card open in the focus view
            logger: Logger instance
        """
        self.store = store
        self.history = history
        self.client = client
        self.bus = bus or EventBus()
        self.action_handler = action_handler
        self.focus_provider = focus_provider or (lambda: None)
        self.logger = logger or session_logger
        self._state = ExchangeState.IDLE
        self._cancel_event: Optional[asyncio.Event] = None

    @property
    def state(self) -> ExchangeState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state.is_active

    def stop(self) -> bool:
        """Request cancellation of the running exchange. False when idle."""
        if not self.is_busy or self._cancel_event is None or self._cancel_event.is_set():
            return False
        self._cancel_event.set()
        self.bus.publish(Notice(message="Streaming stopped"))
        return True

    async def submit(
        self,
        prompt: str,
        target_id: Optional[str] = None,
        kind: ExchangeKind = ExchangeKind.PROMPT,
        card_q: Optional[str] = None,
    ) -> ExchangeResult:
        """Run one exchange to its terminal state.

        Without ``target_id`` a pending card is created (snapshot "Add Card").
        With one, that card receives the response; a CONTINUE exchange wraps
        ``prompt`` in the card's previous request and response.

        Raises:
            ExchangeInProgressError: another exchange is SENT or STREAMING
            CardNotFoundError: ``target_id`` does not exist
        """
        if self.is_busy:
            raise ExchangeInProgressError(self.store.streaming_id)

        if target_id is not None:
            card = self.store.get_card(target_id)
            card_id = target_id
            if kind is ExchangeKind.CONTINUE:
                full_prompt = build_continue_prompt(card, prompt)
            else:
                full_prompt = build_user_prompt(prompt)
        else:
            self.history.snapshot("Add Card")
            card_id = self.store.create_card(card_q if card_q is not None else prompt, PENDING_RESPONSE)
            self.bus.publish(CardChanged(card=self.store.get_card(card_id)))
            full_prompt = build_user_prompt(prompt)

        self.store.begin_stream(card_id)
        self._state = ExchangeState.SENT
        cancel = asyncio.Event()
        self._cancel_event = cancel
        self.logger.info("Exchange sent", card_id=card_id, kind=kind.value)

        try:
            result = await self._run(card_id, kind, full_prompt, cancel)
        finally:
            self.store.end_stream(card_id)
            self._cancel_event = None
            self._state = ExchangeState.IDLE

        self.logger.info("Exchange ended", card_id=card_id, state=result.state.value)
        if result.finalized and result.directives is not None:
            await self._run_actions(result.directives.actions)
        return result

    # ------------------------------------------------------------------
    # Exchange phases
    # ------------------------------------------------------------------

    async def _run(
        self, card_id: str, kind: ExchangeKind, full_prompt: str, cancel: asyncio.Event
    ) -> ExchangeResult:
        accumulator = StreamAccumulator(logger=self.logger)
        reader = asyncio.ensure_future(self._read(card_id, full_prompt, accumulator))
        canceller = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({reader, canceller}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            canceller.cancel()
            if not reader.done() or cancel.is_set():
                reader.cancel()
                accumulator.close()
            await asyncio.gather(reader, canceller, return_exceptions=True)

        # Terminal decision
        if cancel.is_set():
            return self._abort(card_id, kind)
        if reader.cancelled():
            return self._abort(card_id, kind)

        error = reader.exception()
        if isinstance(error, TransportError):
            return self._fail(card_id, kind, error)
        if error is not None and not isinstance(error, StreamAborted):
            raise error

        if error is not None or self.store.streaming_id != card_id:
            self.logger.info("Streaming card deleted, dropping response", card_id=card_id)
            self._publish_end(card_id, ExchangeState.ABORTED)
            return ExchangeResult(card_id=card_id, kind=kind, state=ExchangeState.ABORTED)

        return self._finalize(card_id, kind, accumulator)

    async def _read(self, card_id: str, full_prompt: str, accumulator: StreamAccumulator) -> None:
        stream = self.client.stream(full_prompt, self.store.session_id)
        try:
            async for chunk in stream:
                if self._state is ExchangeState.SENT:
                    self._state = ExchangeState.STREAMING
                    self.logger.debug("First byte received", card_id=card_id)
                if self.store.streaming_id != card_id:
                    raise StreamAborted(card_id)
                self._show(card_id, accumulator.feed(chunk))
                if accumulator.done:
                    break
        finally:
            await stream.aclose()
        if self.store.streaming_id == card_id:
            self._show(card_id, accumulator.finish())

    def _show(self, card_id: str, visible: Optional[str]) -> None:
        if visible is None:
            return
        self.store.update_card(card_id, r=visible)
        self.bus.publish(
            StreamDelta(card_id=card_id, text=visible, focused=self.focus_provider() == card_id)
        )

    def _finalize(self, card_id: str, kind: ExchangeKind, accumulator: StreamAccumulator) -> ExchangeResult:
        directives = accumulator.finalize()
        self.history.snapshot("AI Response")

        style_applied = None
        if not directives.style_update.is_empty():
            style_applied = self.store.apply_style_update(card_id, directives.style_update)
            if not style_applied:
                self.bus.publish(Notice(message="Card Locked - Style changes ignored"))

        theme_applied = None
        if directives.theme_update is not None:
            theme_applied = self._apply_theme(directives.theme_update)

        card = self.store.update_card(card_id, r=directives.clean_text)
        self.store.end_stream(card_id)
        self._state = ExchangeState.FINALIZED
        self.bus.publish(CardChanged(card=card))
        self._publish_end(card_id, ExchangeState.FINALIZED)

        return ExchangeResult(
            card_id=card_id,
            kind=kind,
            state=ExchangeState.FINALIZED,
            text=directives.clean_text,
            directives=directives,
            style_applied=style_applied,
            theme_applied=theme_applied,
        )

    def _abort(self, card_id: str, kind: ExchangeKind) -> ExchangeResult:
        marker = MERGE_STOPPED_MARKER if kind is ExchangeKind.MERGE else STOPPED_MARKER
        text = ""
        if self.store.streaming_id == card_id:
            current = self.store.get_card(card_id).r
            if current == PENDING_RESPONSE:
                current = ""
            text = f"{current}\n\n{marker}" if current else marker
            self.bus.publish(CardChanged(card=self.store.update_card(card_id, r=text)))
        self.store.end_stream(card_id)
        self._state = ExchangeState.ABORTED
        self._publish_end(card_id, ExchangeState.ABORTED)
        return ExchangeResult(card_id=card_id, kind=kind, state=ExchangeState.ABORTED, text=text)

    def _fail(self, card_id: str, kind: ExchangeKind, error: TransportError) -> ExchangeResult:
        prefix = MERGE_ERROR_PREFIX if kind is ExchangeKind.MERGE else ERROR_PREFIX
        text = f"{prefix}{error.message}"
        self.logger.error("Exchange failed", card_id=card_id, error=error.message)
        if self.store.streaming_id == card_id:
            self.bus.publish(CardChanged(card=self.store.update_card(card_id, r=text)))
        self.store.end_stream(card_id)
        self._state = ExchangeState.FAILED
        self._publish_end(card_id, ExchangeState.FAILED)
        return ExchangeResult(
            card_id=card_id, kind=kind, state=ExchangeState.FAILED, text=text, error=error.message
        )

    def _publish_end(self, card_id: str, state: ExchangeState) -> None:
        self.bus.publish(ExchangeEnded(card_id=card_id, state=state.value))

    def _apply_theme(self, update) -> bool:
        if not self.store.apply_theme_update(update):
            self.bus.publish(Notice(message="Global Theme Locked"))
            return False
        self.bus.publish(ThemeChanged(theme=self.store.theme))
        self.bus.publish(Notice(message=f"Theme: {update.name or 'Updated'}"))
        return True

    async def _run_actions(self, actions) -> None:
        if self.action_handler is None:
            return
        for action in actions:
            await self.action_handler(action)

    # ------------------------------------------------------------------
    # Theme-only generation
    # ------------------------------------------------------------------

    async def generate_theme(self, description: str, card_id: Optional[str] = None) -> bool:
        """Ask the backend for a theme matching ``description`` and apply it.

        Rejected up-front when the referenced card or the theme is locked. Does
        not touch the streaming slot.
        """
        card = self.store.find_card(card_id)
        if card is not None and card.is_locked:
            self.bus.publish(Notice(message="Card Locked - Rejected"))
            return False
        if self.store.theme.locked:
            self.bus.publish(Notice(message="Global Theme Locked"))
            return False

        self.bus.publish(Notice(message="Generating Theme..."))
        accumulator = StreamAccumulator(logger=self.logger)
        stream = self.client.stream(build_theme_prompt(description), self.store.session_id)
        try:
            async for chunk in stream:
                accumulator.feed(chunk)
                if accumulator.done:
                    break
            accumulator.finish()
        except TransportError as exc:
            self.logger.error("Theme generation failed", error=exc.message)
            self.bus.publish(Notice(message="Theme generation failed", level="error"))
            return False
        finally:
            await stream.aclose()

        theme_update = accumulator.finalize().theme_update
        if theme_update is None:
            self.bus.publish(Notice(message="Theme generation failed (parse error)", level="error"))
            return False
        return self._apply_theme(theme_update)
