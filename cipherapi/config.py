"""
Process configuration for CipherAPI.

Values come from environment variables, optionally seeded from a .env file.
The --addr command-line flag overrides CIPHERAPI_ADDR.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError, ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"
DEFAULT_ADDR = ":4000"
DEFAULT_KEY_SIZE = 32
DEFAULT_LOG_LEVEL = "INFO"


def load_env_file(path: Optional[str] = None) -> bool:
    """Load a .env file into the environment. A missing file is not an error."""
    path = path or os.environ.get("CIPHERAPI_ENV_FILE", DEFAULT_ENV_FILE)
    if not os.path.isfile(path):
        logger.info("No .env file found at %s", path)
        return False
    load_dotenv(path)
    logger.info("Loaded configuration from %s", path)
    return True


def parse_addr(addr: str) -> tuple[str, int]:
    """Split a host:port address. An empty host means all interfaces."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigurationError(ErrorKind.INVALID_SETTING, f"Invalid listen address: {addr!r}")
    port_num = int(port)
    if not 0 < port_num < 65536:
        raise ConfigurationError(ErrorKind.INVALID_SETTING, f"Port out of range: {port_num}")
    return host.strip("[]") or "0.0.0.0", port_num


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    key_size: int
    log_level: str

    @property
    def addr(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls, addr: Optional[str] = None) -> "Settings":
        addr = addr or os.environ.get("CIPHERAPI_ADDR", DEFAULT_ADDR)
        host, port = parse_addr(addr)

        raw_size = os.environ.get("CIPHERAPI_KEY_SIZE", str(DEFAULT_KEY_SIZE))
        try:
            key_size = int(raw_size)
        except ValueError:
            raise ConfigurationError(ErrorKind.INVALID_SETTING, f"CIPHERAPI_KEY_SIZE must be an integer, got {raw_size!r}")

        log_level = os.environ.get("CIPHERAPI_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(ErrorKind.INVALID_SETTING, f"Unknown log level: {log_level!r}")

        return cls(host=host, port=port, key_size=key_size, log_level=log_level)
