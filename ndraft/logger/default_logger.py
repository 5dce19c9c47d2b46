"""Default logger backed by the standard ``logging`` module."""

import logging
from typing import Any

from ndraft.logger.interface import Logger


def format_fields(message: str, fields: dict) -> str:
    """Render ``message key=value ...`` with fields in call order."""
    if not fields:
        return message
    rendered = " ".join(f"{key}={value}" for key, value in fields.items())
    return f"{message} {rendered}"


class DefaultLogger(Logger):
    """Structured logger that delegates to a named stdlib logger.

    Handlers and levels are left to the application's logging configuration.
    """

    def __init__(self, name: str = "ndraft") -> None:
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, fields: dict) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, format_fields(message, fields))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)
