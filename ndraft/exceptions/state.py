"""Application-state exceptions (import, exchanges)."""

from typing import Optional

from ndraft.exceptions.base import NdraftError, ValidationError


class MalformedImportError(ValidationError):
    """Raised when an imported document is not a valid state document."""

    def __init__(self, reason: str):
        super().__init__(
            code="MALFORMED_IMPORT",
            message=f"Invalid JSON file: {reason}",
            details={"reason": reason},
        )


class ExchangeInProgressError(NdraftError):
    """Raised when a prompt is submitted while another exchange is streaming."""

    def __init__(self, streaming_id: Optional[str]):
        super().__init__(
            code="EXCHANGE_IN_PROGRESS",
            message="A response is already streaming; stop it before sending another prompt",
            details={"streaming_id": streaming_id},
        )
        self.streaming_id = streaming_id
