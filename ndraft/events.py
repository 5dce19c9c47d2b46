"""In-process event bus.

The controller and orchestrator publish typed events describing every state
change; presentation layers subscribe and render. Subscribers are plain
callables, or an ``asyncio.Queue`` obtained from ``subscribe_queue``.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel

from ndraft.logger import Logger, session_logger
from ndraft.models import Card, Theme, ViewMode


class Event(BaseModel):
    type: ClassVar[str] = "event"

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.type, **self.model_dump(mode="json", by_alias=True)}


class CardChanged(Event):
    type: ClassVar[str] = "card_changed"
    card: Card


class CardRemoved(Event):
    type: ClassVar[str] = "card_removed"
    card_id: str


class StreamDelta(Event):
    """Visible text of the streaming card so far (directives masked)."""

    type: ClassVar[str] = "stream_delta"
    card_id: str
    text: str
    focused: bool = False


class ExchangeEnded(Event):
    type: ClassVar[str] = "exchange_ended"
    card_id: Optional[str]
    state: str


class ThemeChanged(Event):
    type: ClassVar[str] = "theme_changed"
    theme: Theme


class ViewChanged(Event):
    type: ClassVar[str] = "view_changed"
    view: ViewMode


class FocusChanged(Event):
    type: ClassVar[str] = "focus_changed"
    card_id: Optional[str]


class SelectionChanged(Event):
    type: ClassVar[str] = "selection_changed"
    selected: List[str]


class Notice(Event):
    """User-facing toast."""

    type: ClassVar[str] = "notice"
    message: str
    level: str = "info"


class SpeakRequested(Event):
    type: ClassVar[str] = "speak_requested"
    card_id: str
    text: str


class StateReplaced(Event):
    """Cards and theme were replaced wholesale (undo, import, clear)."""

    type: ClassVar[str] = "state_replaced"
    reason: str


Subscriber = Callable[[Event], Any]


class EventBus:
    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger or session_logger
        self._subscribers: List[Tuple[str, Subscriber]] = []

    def subscribe(self, callback: Subscriber) -> str:
        sub_id = uuid.uuid4().hex
        self._subscribers.append((sub_id, callback))
        return sub_id

    def subscribe_queue(self) -> Tuple[str, "asyncio.Queue[Event]"]:
        """Deliver events into a fresh queue; unsubscribe with the returned id."""
        queue: asyncio.Queue[Event] = asyncio.Queue()
        return self.subscribe(queue.put_nowait), queue

    def unsubscribe(self, sub_id: str) -> None:
        self._subscribers = [(sid, cb) for sid, cb in self._subscribers if sid != sub_id]

    def publish(self, event: Event) -> None:
        for sub_id, callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as exc:
                self.logger.error(
                    "Event subscriber failed", event=event.type, sub_id=sub_id, error=str(exc)
                )

    def __len__(self) -> int:
        return len(self._subscribers)
