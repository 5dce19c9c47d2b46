"""Console logger: a DefaultLogger that owns a stderr handler."""

import logging
import sys

from ndraft.logger.default_logger import DefaultLogger

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ConsoleLogger(DefaultLogger):
    """Logger writing to stderr at a fixed level."""

    def __init__(self, name: str = "ndraft", level: int = logging.INFO) -> None:
        super().__init__(name)
        self._logger.setLevel(level)
        # Repeated construction with the same name must not duplicate output
        if not any(getattr(h, "_ndraft_console", False) for h in self._logger.handlers):
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler._ndraft_console = True  # type: ignore[attr-defined]
            self._logger.addHandler(handler)
        self._logger.propagate = False

    def set_level(self, level: int) -> None:
        self._logger.setLevel(level)
