"""Base exception classes for ndraft.

Every error carries a machine-readable ``code``, a human-readable ``message``
and an optional ``details`` mapping so that presentation layers can render a
consistent error body.
"""

from typing import Any, Dict, Optional


class NdraftError(Exception):
    """Root of the ndraft exception hierarchy."""

    def __init__(
        self,
        code: str = "NDRAFT_ERROR",
        message: str = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message or code)
        self.code = code
        self.message = message or code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {"error_code": self.code, "message": self.message, "details": self.details}


class ValidationError(NdraftError):
    """Raised when input fails validation."""

    def __init__(self, code: str = "VALIDATION_ERROR", message: str = "", details=None):
        super().__init__(code=code, message=message, details=details)


class ResourceNotFoundError(NdraftError):
    """Raised when a referenced resource does not exist."""

    def __init__(self, code: str = "NOT_FOUND", message: str = "", details=None):
        super().__init__(code=code, message=message, details=details)


class ConfigurationError(NdraftError):
    """Raised for invalid configuration values."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONFIGURATION_ERROR", message=message, details=details)


__all__ = [
    "NdraftError",
    "ValidationError",
    "ResourceNotFoundError",
    "ConfigurationError",
]
