"""
Logger module for ndraft

This module provides a small structured logging interface so that callers
can drop in their own logger implementations.

Usage:
    from ndraft.logger import Logger, DefaultLogger

    # Use the default logger
    logger = DefaultLogger()
    logger.info("Application started")

    # Or implement your own
    class MyCustomLogger(Logger):
        def info(self, message: str, **kwargs):
            # Your custom implementation
            pass
"""

import logging
import os

from .interface import Logger
from .default_logger import DefaultLogger
from .console_logger import ConsoleLogger

_level_name = os.environ.get("NDRAFT_LOG_LEVEL", "INFO").upper()

# Shared logger instance for modules that just need basic console logging
session_logger: Logger = ConsoleLogger(level=getattr(logging, _level_name, logging.INFO))

__all__ = [
    "Logger",
    "DefaultLogger",
    "ConsoleLogger",
    "session_logger",
]
