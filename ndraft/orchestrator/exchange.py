"""Exchange states and results."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ndraft.models import DirectiveResult


class ExchangeState(str, Enum):
    IDLE = "idle"
    SENT = "sent"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (ExchangeState.SENT, ExchangeState.STREAMING)


class ExchangeKind(str, Enum):
    """What the exchange was started for; decides prompt and markers."""

    PROMPT = "prompt"
    CONTINUE = "continue"
    SPLIT = "split"
    EDIT = "edit"
    MERGE = "merge"


@dataclass
class ExchangeResult:
    card_id: str
    kind: ExchangeKind
    state: ExchangeState
    text: str = ""
    directives: Optional[DirectiveResult] = None
    error: Optional[str] = None
    style_applied: Optional[bool] = None
    theme_applied: Optional[bool] = None

    @property
    def finalized(self) -> bool:
        return self.state is ExchangeState.FINALIZED
