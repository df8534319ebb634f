"""
Configuration management for Relay Station.

Reads configuration from .env file and environment variables with sensible defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from relay.constants import DEFAULT_TRANSMISSIONS_PATH, REFRESH_TICK_SEC


# Default .env file location
DEFAULT_ENV_FILE = Path(".env")

logger = logging.getLogger(__name__)


def _load_env_file():
    """Load environment variables from .env file if it exists."""
    env_file = os.getenv("RELAY_ENV_FILE", str(DEFAULT_ENV_FILE))
    env_path = Path(env_file)

    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars
        logger.debug(f"Loaded environment from {env_path}")


def _parse_positive_int(name: str, default: str) -> int:
    """
    Read a positive integer environment variable.

    Raises:
        ValueError: If the value is not an integer or not positive
    """
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be an integer)")
    if value <= 0:
        raise ValueError(f"Invalid {name}: {raw} (must be positive)")
    return value


@dataclass
class RelayConfig:
    """Relay configuration loaded from .env file and environment variables."""

    # Server settings
    host: str = "127.0.0.1"
    port: int = 3000

    # Transmission feed
    transmissions_path: str = DEFAULT_TRANSMISSIONS_PATH
    refresh_tick_sec: int = REFRESH_TICK_SEC

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def load_config(cls) -> "RelayConfig":
        """
        Load configuration from environment variables.

        Returns:
            RelayConfig instance with loaded values

        Raises:
            ValueError: If configuration is invalid
        """
        # Load .env file first (if it exists)
        _load_env_file()

        host = os.getenv("RELAY_HOST", "127.0.0.1")
        port = _parse_positive_int("RELAY_PORT", "3000")
        if port > 65535:
            raise ValueError(f"Invalid RELAY_PORT: {port} (must be <= 65535)")

        transmissions_path = os.getenv("RELAY_TRANSMISSIONS_PATH", DEFAULT_TRANSMISSIONS_PATH)
        if not transmissions_path.strip():
            raise ValueError("RELAY_TRANSMISSIONS_PATH cannot be empty")

        refresh_tick_sec = _parse_positive_int("RELAY_REFRESH_TICK_SEC", str(REFRESH_TICK_SEC))

        log_level = os.getenv("RELAY_LOG_LEVEL", "INFO").upper()
        if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid RELAY_LOG_LEVEL: {log_level}")

        log_file = os.getenv("RELAY_LOG_FILE") or None

        return cls(
            host=host,
            port=port,
            transmissions_path=transmissions_path,
            refresh_tick_sec=refresh_tick_sec,
            log_level=log_level,
            log_file=log_file,
        )
