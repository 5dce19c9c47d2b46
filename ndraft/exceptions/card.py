"""Card- and selection-related exceptions."""

from typing import Any, Dict, List, Optional

from ndraft.exceptions.base import ResourceNotFoundError, ValidationError


class CardNotFoundError(ResourceNotFoundError):
    """Raised when a card id does not exist in the store."""

    def __init__(self, card_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="CARD_NOT_FOUND",
            message=f"Card '{card_id}' not found",
            details=details or {},
        )
        self.card_id = card_id


class SelectionError(ValidationError):
    """Raised when a batch operation gets an unusable set of card ids."""

    def __init__(self, message: str, card_ids: Optional[List[str]] = None):
        super().__init__(
            code="INVALID_SELECTION",
            message=message,
            details={"card_ids": list(card_ids or [])},
        )
