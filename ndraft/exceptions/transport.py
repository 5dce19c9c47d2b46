"""Streaming transport exceptions."""

from typing import Optional

from ndraft.exceptions.base import NdraftError, ValidationError


class TransportError(NdraftError):
    """Non-success response or network failure while streaming."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {"status_code": status_code} if status_code is not None else {}
        super().__init__(code="TRANSPORT_ERROR", message=message, details=details)
        self.status_code = status_code


class StreamAborted(NdraftError):
    """Cancellation of an in-flight stream. Not a failure."""

    def __init__(self, card_id: Optional[str] = None):
        super().__init__(
            code="STREAM_ABORTED",
            message="Streaming stopped",
            details={"card_id": card_id} if card_id else {},
        )
        self.card_id = card_id


class FrameParseError(ValidationError):
    """A single server-sent frame could not be decoded."""

    def __init__(self, payload: str, reason: str):
        super().__init__(
            code="FRAME_PARSE_ERROR",
            message=f"Malformed stream frame: {reason}",
            details={"payload": payload[:200]},
        )
