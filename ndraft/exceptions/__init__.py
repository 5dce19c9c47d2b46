"""Custom exceptions for ndraft.

All exceptions carry a code, a message and a details mapping so the web
layer can turn them into uniform error responses.
"""

from ndraft.exceptions.base import (
    NdraftError,
    ValidationError,
    ResourceNotFoundError,
    ConfigurationError,
)
from ndraft.exceptions.card import CardNotFoundError, SelectionError
from ndraft.exceptions.history import EmptyHistoryError
from ndraft.exceptions.transport import TransportError, StreamAborted, FrameParseError
from ndraft.exceptions.state import MalformedImportError, ExchangeInProgressError

__all__ = [
    # Base exceptions
    "NdraftError",
    "ValidationError",
    "ResourceNotFoundError",
    "ConfigurationError",
    # Specific exceptions
    "CardNotFoundError",
    "SelectionError",
    "EmptyHistoryError",
    "TransportError",
    "StreamAborted",
    "FrameParseError",
    "MalformedImportError",
    "ExchangeInProgressError",
]
