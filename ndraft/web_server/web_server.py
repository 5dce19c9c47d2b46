"""ndraft Web Server - REST API over the application controller.

Exposes:
- board state, card, selection and history endpoints (JSON)
- exchange endpoints that stream controller events as server-sent events
- import/export of the state document
- CSS for cards and the global theme
"""

import asyncio
import json
from datetime import datetime
from typing import Any, AsyncIterator, Awaitable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from ndraft.controller import AppController
from ndraft.exceptions import (
    ExchangeInProgressError,
    NdraftError,
    ResourceNotFoundError,
    SelectionError,
    TransportError,
    ValidationError,
)
from ndraft.logger import Logger, session_logger
from ndraft.models import StyleOverrides
from ndraft.storage import StateStore
from ndraft.styles import card_css, theme_css

RECOVERY_STRATEGIES: Dict[str, str] = {
    "CARD_NOT_FOUND": "Reload the board with GET /state and retry with an existing card id.",
    "INVALID_SELECTION": "Select at least two cards with POST /selection/{id} before merging.",
    "EXCHANGE_IN_PROGRESS": "Wait for the current response to finish or call POST /stream/stop.",
    "MALFORMED_IMPORT": "Upload a JSON object previously produced by GET /export.",
    "VALIDATION_ERROR": "Correct the request body and retry.",
    "INVALID_COLOR": "Use a hex, named, rgb() or hsl() color.",
    "TRANSPORT_ERROR": "Check the proxy URL in the settings and that the backend is reachable.",
    "CONFIGURATION_ERROR": "Fix the NDRAFT_* environment variable named in the details.",
}
DEFAULT_RECOVERY = "Retry the request; if the problem persists check the server logs."


def status_for(exc: NdraftError) -> int:
    if isinstance(exc, ResourceNotFoundError):
        return 404
    if isinstance(exc, ExchangeInProgressError):
        return 409
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, TransportError):
        return 502
    return 500


def error_body(exc: NdraftError) -> Dict[str, Any]:
    return {
        "status": "error",
        "error_code": exc.code,
        "message": exc.message,
        "recovery_strategy": RECOVERY_STRATEGIES.get(exc.code, DEFAULT_RECOVERY),
        "details": exc.details,
    }


def success(data: Any = None, message: Optional[str] = None) -> JSONResponse:
    payload: Dict[str, Any] = {"status": "success", "data": data}
    if message:
        payload["message"] = message
    return JSONResponse(content=payload)


def sse(event: str, payload: Dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(payload, ensure_ascii=False)}\n\n"


class PromptRequest(BaseModel):
    prompt: str


class InstructionsRequest(BaseModel):
    instructions: str = ""


class CardEditRequest(BaseModel):
    field: str
    text: str


class ThemeGenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str
    card_id: Optional[str] = Field(default=None, alias="cardId")


class ViewRequest(BaseModel):
    view: str


class SettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    proxy_url: Optional[str] = Field(default=None, alias="proxyUrl")
    auto_tts: Optional[bool] = Field(default=None, alias="autoTTS")
    asr_enabled: Optional[bool] = Field(default=None, alias="asrEnabled")


class NdraftWebServer:
    """FastAPI web server for one ndraft session."""

    def __init__(
        self,
        controller: Optional[AppController] = None,
        state_path: Optional[str] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the ndraft web server.

        Args:
            controller: Application controller (built from ``state_path`` when omitted)
            state_path: Path of the state document (default: from Config)
            logger: Logger instance
        """
        self.logger: Logger = logger or session_logger
        self.controller = controller or AppController(
            state_store=StateStore(state_path, logger=self.logger), logger=self.logger
        )
        if not self.controller.initialized:
            self.controller.init()

        self.app = FastAPI(title="ndraft", description="Card-based AI drafting REST API")
        self.logger.info(
            "ndraft web server initialized",
            state_path=str(self.controller.state_store.path),
            cards=len(self.controller.store),
        )
        self._setup_routes()

    # ------------------------------------------------------------------
    # Streaming helpers
    # ------------------------------------------------------------------

    def _start_stream(self, operation: Awaitable) -> StreamingResponse:
        """Run ``operation`` in the background and stream bus events until it ends."""
        sub_id, queue = self.controller.bus.subscribe_queue()
        task = asyncio.ensure_future(operation)
        return StreamingResponse(
            self._event_stream(queue, sub_id, task), media_type="text/event-stream"
        )

    async def _event_stream(
        self, queue: asyncio.Queue, sub_id: str, task: asyncio.Future
    ) -> AsyncIterator[str]:
        try:
            while not (task.done() and queue.empty()):
                getter = asyncio.ensure_future(queue.get())
                await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
                if getter.done():
                    event = getter.result()
                    yield sse(event.type, event.to_json())
                else:
                    getter.cancel()

            error = task.exception()
            if isinstance(error, NdraftError):
                self.logger.warning("Exchange request failed", error_code=error.code, error=error.message)
                yield sse("error", error_body(error))
            elif error is not None:
                self.logger.error("Exchange crashed", error=str(error), error_type=type(error).__name__)
                yield sse("error", error_body(NdraftError(message=str(error))))
            else:
                result = task.result()
                yield sse(
                    "result",
                    {
                        "card_id": result.card_id,
                        "kind": result.kind.value,
                        "state": result.state.value,
                        "text": result.text,
                        "error": result.error,
                    },
                )
        finally:
            self.controller.bus.unsubscribe(sub_id)

    def _ensure_idle(self) -> None:
        if self.controller.orchestrator.is_busy:
            raise ExchangeInProgressError(self.controller.store.streaming_id)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def _setup_routes(self):
        """Set up all API routes."""

        @self.app.exception_handler(NdraftError)
        async def ndraft_error_handler(request: Request, exc: NdraftError):
            status = status_for(exc)
            self.logger.warning(
                f"{request.method} {request.url.path} failed",
                error_code=exc.code,
                error=exc.message,
                status=status,
            )
            return JSONResponse(status_code=status, content=error_body(exc))

        # ====================================================================
        # STATE
        # ====================================================================

        @self.app.get("/ping")
        async def ping():
            """
            Health check endpoint.

            Returns:
                {status: "ok", timestamp: ISO8601, service: "ndraft"}
            """
            current_time = datetime.now().isoformat()
            self.logger.info("GET /ping", timestamp=current_time)
            return JSONResponse(
                content={"status": "ok", "timestamp": current_time, "service": "ndraft"}
            )

        @self.app.get("/state")
        async def get_state():
            self.logger.info("GET /state")
            return success(self.controller.describe())

        # ====================================================================
        # EXCHANGES (server-sent events)
        # ====================================================================

        @self.app.post("/prompt")
        async def send_prompt(body: PromptRequest):
            """Submit a prompt; streams controller events, then a ``result`` event."""
            self.logger.info("POST /prompt", prompt_chars=len(body.prompt))
            self._ensure_idle()
            if not body.prompt.strip():
                raise ValidationError(message="Prompt is empty")
            return self._start_stream(self.controller.send_prompt(body.prompt))

        @self.app.post("/stream/stop")
        async def stop_stream():
            self.logger.info("POST /stream/stop")
            stopped = self.controller.stop_stream()
            return success({"stopped": stopped})

        @self.app.post("/cards/{card_id}/continue")
        async def continue_card(card_id: str, body: InstructionsRequest):
            self.logger.info("POST /cards/{id}/continue", card_id=card_id)
            self.controller.store.get_card(card_id)
            self._ensure_idle()
            return self._start_stream(self.controller.continue_card(card_id, body.instructions))

        @self.app.post("/cards/{card_id}/split")
        async def split_card(card_id: str, body: InstructionsRequest):
            self.logger.info("POST /cards/{id}/split", card_id=card_id)
            self.controller.store.get_card(card_id)
            self._ensure_idle()
            return self._start_stream(self.controller.split_card(card_id, body.instructions))

        @self.app.post("/cards/{card_id}/edit")
        async def ai_edit_card(card_id: str, body: InstructionsRequest):
            self.logger.info("POST /cards/{id}/edit", card_id=card_id)
            self.controller.store.get_card(card_id)
            self._ensure_idle()
            return self._start_stream(self.controller.ai_edit_card(card_id, body.instructions))

        @self.app.post("/merge")
        async def merge(body: InstructionsRequest):
            self.logger.info("POST /merge", selected=len(self.controller.selected))
            if len(self.controller.selected) < 2:
                raise SelectionError("Select 2+ cards to merge", self.controller.selected)
            self._ensure_idle()
            return self._start_stream(self.controller.merge(body.instructions))

        @self.app.post("/theme/generate")
        async def generate_theme(body: ThemeGenerateRequest):
            self.logger.info("POST /theme/generate", card_id=body.card_id)
            applied = await self.controller.generate_theme(body.description, card_id=body.card_id)
            return success(
                {"applied": applied, "theme": self.controller.store.theme.to_json()}
            )

        # ====================================================================
        # CARDS
        # ====================================================================

        @self.app.patch("/cards/{card_id}")
        async def manual_edit(card_id: str, body: CardEditRequest):
            self.logger.info("PATCH /cards/{id}", card_id=card_id, field=body.field)
            card = self.controller.manual_edit(card_id, body.field, body.text)
            return success(card.to_json())

        @self.app.put("/cards/{card_id}/styles")
        async def save_styles(card_id: str, body: StyleOverrides):
            self.logger.info("PUT /cards/{id}/styles", card_id=card_id, locked=body.locked)
            card = self.controller.save_styles(card_id, body)
            return success(card.to_json())

        @self.app.get("/cards/{card_id}/css")
        async def get_card_css(card_id: str):
            card = self.controller.store.get_card(card_id)
            return PlainTextResponse(card_css(card, self.logger), media_type="text/css")

        @self.app.get("/cards/{card_id}/speech")
        async def get_speech_text(card_id: str):
            return success({"text": self.controller.speech_text(card_id)})

        @self.app.delete("/cards/{card_id}")
        async def delete_card(card_id: str):
            self.logger.info("DELETE /cards/{id}", card_id=card_id)
            self.controller.delete_card(card_id)
            return success({"card_id": card_id}, message="Card deleted")

        # ====================================================================
        # SELECTION
        # ====================================================================

        @self.app.post("/selection/delete")
        async def bulk_delete():
            self.logger.info("POST /selection/delete", selected=len(self.controller.selected))
            deleted = self.controller.bulk_delete()
            return success({"deleted": deleted})

        @self.app.post("/selection/{card_id}")
        async def toggle_select(card_id: str):
            return success({"selected": self.controller.toggle_select(card_id)})

        @self.app.delete("/selection")
        async def clear_selection():
            self.controller.clear_selection()
            return success({"selected": []})

        # ====================================================================
        # BOARD AND HISTORY
        # ====================================================================

        @self.app.post("/clear")
        async def clear_all():
            self.logger.info("POST /clear")
            return success({"cleared": self.controller.clear_all()})

        @self.app.post("/undo")
        async def undo():
            self.logger.info("POST /undo", depth=len(self.controller.history))
            label = self.controller.undo()
            if label is None:
                return success({"label": None}, message="Nothing to undo")
            return success({"label": label}, message=f"Undid: {label}")

        @self.app.get("/export")
        async def export_state():
            filename, text = self.controller.export_state()
            self.logger.info("GET /export", filename=filename)
            return Response(
                content=text,
                media_type="application/json",
                headers={"Content-Disposition": f'attachment; filename="{filename}"'},
            )

        @self.app.post("/import")
        async def import_state(request: Request):
            raw = await request.body()
            self.logger.info("POST /import", size=len(raw))
            state = self.controller.import_state(raw.decode("utf-8", errors="replace"))
            return success({"cards": len(state.cards)}, message="Import Successful")

        # ====================================================================
        # APPEARANCE AND SETTINGS
        # ====================================================================

        @self.app.post("/theme/lock")
        async def toggle_theme_lock():
            return success({"locked": self.controller.toggle_theme_lock()})

        @self.app.post("/theme/mode")
        async def toggle_theme_mode():
            return success({"mode": self.controller.toggle_theme_mode()})

        @self.app.get("/theme/css")
        async def get_theme_css():
            return PlainTextResponse(theme_css(self.controller.store.theme), media_type="text/css")

        @self.app.post("/view")
        async def set_view(body: ViewRequest):
            return success({"view": self.controller.set_view(body.view).value})

        @self.app.post("/view/cycle")
        async def cycle_view():
            return success({"view": self.controller.cycle_view().value})

        @self.app.put("/settings")
        async def update_settings(body: SettingsRequest):
            self.logger.info("PUT /settings")
            settings = self.controller.store.settings
            if body.proxy_url is not None:
                self.controller.set_proxy_url(body.proxy_url)
            if body.auto_tts is not None and body.auto_tts != settings.auto_tts:
                self.controller.toggle_tts()
            if body.asr_enabled is not None and body.asr_enabled != settings.asr_enabled:
                self.controller.toggle_asr()
            return success(
                self.controller.store.settings.model_dump(mode="json", by_alias=True)
            )
