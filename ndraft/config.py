"""Runtime configuration for ndraft.

Values come from ``NDRAFT_*`` environment variables with the defaults listed in
``ndraft.config_docs``. Tests redirect the data directory with
``Config.set_test_mode``.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from ndraft import config_docs
from ndraft.exceptions import ConfigurationError

PROJECT_ROOT = Path(__file__).parent.parent


class Config:
    """Class-level configuration accessors."""

    _test_data_dir: Optional[Path] = None

    @classmethod
    def set_test_mode(cls, data_dir: Path) -> None:
        """Redirect all data paths to ``data_dir``."""
        cls._test_data_dir = Path(data_dir)

    @classmethod
    def clear_test_mode(cls) -> None:
        cls._test_data_dir = None

    @classmethod
    def is_test_mode(cls) -> bool:
        return cls._test_data_dir is not None

    @classmethod
    def get_data_dir(cls) -> Path:
        if cls._test_data_dir is not None:
            return cls._test_data_dir
        env_dir = os.environ.get("NDRAFT_DATA_DIR")
        if env_dir:
            return Path(env_dir)
        return PROJECT_ROOT / "data"

    @classmethod
    def get_state_file(cls) -> Path:
        return cls.get_data_dir() / config_docs.STATE_FILENAME

    @classmethod
    def get_proxy_url(cls) -> str:
        return os.environ.get("NDRAFT_PROXY_URL") or config_docs.DEFAULT_PROXY_URL

    @classmethod
    def get_stream_timeout(cls) -> Optional[float]:
        """Timeout for each read of a streaming response, in seconds; ``None`` when disabled."""
        raw = os.environ.get("NDRAFT_STREAM_TIMEOUT_SECONDS")
        if raw is None or raw.strip() == "":
            return config_docs.DEFAULT_STREAM_TIMEOUT_SECONDS
        try:
            value = float(raw)
        except ValueError:
            raise ConfigurationError(
                f"NDRAFT_STREAM_TIMEOUT_SECONDS must be a number, got '{raw}'",
                details={"variable": "NDRAFT_STREAM_TIMEOUT_SECONDS", "value": raw},
            )
        if value < 0:
            raise ConfigurationError(
                "NDRAFT_STREAM_TIMEOUT_SECONDS must be >= 0",
                details={"variable": "NDRAFT_STREAM_TIMEOUT_SECONDS", "value": raw},
            )
        return value or None

    @classmethod
    def get_history_capacity(cls) -> int:
        raw = os.environ.get("NDRAFT_HISTORY_CAPACITY")
        if raw is None or raw.strip() == "":
            return config_docs.DEFAULT_HISTORY_CAPACITY
        try:
            value = int(raw)
            if value < 1:
                raise ValueError("must be >= 1")
            return value
        except ValueError:
            raise ConfigurationError(
                f"NDRAFT_HISTORY_CAPACITY must be a positive integer, got '{raw}'",
                details={"variable": "NDRAFT_HISTORY_CAPACITY", "value": raw},
            )

    @classmethod
    def get_log_level(cls) -> int:
        """Numeric logging level named by NDRAFT_LOG_LEVEL."""
        raw = os.environ.get("NDRAFT_LOG_LEVEL") or config_docs.DEFAULT_LOG_LEVEL
        name = raw.strip().upper()
        if name not in config_docs.LOG_LEVELS:
            raise ConfigurationError(
                f"NDRAFT_LOG_LEVEL must be one of {', '.join(config_docs.LOG_LEVELS)}, got '{raw}'",
                details={"variable": "NDRAFT_LOG_LEVEL", "value": raw},
            )
        return getattr(logging, name)

    @classmethod
    def get_web_port(cls) -> int:
        return int(os.environ.get("NDRAFT_WEB_PORT", str(config_docs.DEFAULT_WEB_PORT)))


def get_default_state_path() -> str:
    """Path of the persisted state document."""
    return str(Config.get_state_file())
