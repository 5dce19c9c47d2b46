"""History exceptions."""

from ndraft.exceptions.base import NdraftError


class EmptyHistoryError(NdraftError):
    """Raised by undo when there is no snapshot to restore."""

    def __init__(self):
        super().__init__(code="EMPTY_HISTORY", message="Nothing to undo")
