"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Everything the counter server can be tuned with, in one dataclass that is
validated once at startup and never changes afterwards.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── counterserver --port 3000                                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── COUNTER_PORT=3000 counterserver                           │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (got {value!r})")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {value!r})") from None


@dataclass
class ServerConfig:
    """
    Configuration for the counter server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - keep_alive, keep_alive_timeout, max_request_size, server_name

    THREADING
    - worker_idle_timeout

    CONTENT
    - static_dir, index_file, cors_preflight

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """The IP address to bind to. "0.0.0.0" listens on all interfaces."""

    port: int = 8080
    """Port to listen on. 0 picks a free ephemeral port."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Bytes read per recv() call."""

    timeout: Optional[float] = 30.0
    """
    Seconds to wait for the first request on a new connection.
    None blocks forever.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Allow several requests on one TCP connection."""

    keep_alive_timeout: float = 5.0
    """Idle seconds between requests before a keep-alive connection closes."""

    max_request_size: int = 1024 * 1024  # 1 MB
    """Largest accepted request (headers plus body) in bytes."""

    server_name: str = "CounterServer/1.0"
    """Value of the Server response header."""

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    worker_idle_timeout: float = 60.0
    """Idle seconds before a cached worker thread exits."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    static_dir: str = "static"
    """Directory holding index.html and everything under /static/."""

    index_file: str = "index.html"
    """File served at "/", relative to static_dir."""

    cors_preflight: bool = False
    """Answer OPTIONS with 204 and the CORS headers instead of 405."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        COUNTER_HOST            Server host (default: 0.0.0.0)
        COUNTER_PORT            Server port (default: 8080)
        COUNTER_STATIC_DIR      Static files directory (default: static)
        COUNTER_CORS_PREFLIGHT  Answer OPTIONS preflights (default: off)
        COUNTER_LOG_LEVEL       Logging level (default: INFO)

        Unset variables keep the dataclass default.

        Raises:
            ValueError: If a numeric or boolean variable does not parse.
        """
        env = os.environ if environ is None else environ
        config = cls()

        if "COUNTER_HOST" in env:
            config.host = env["COUNTER_HOST"]
        if "COUNTER_PORT" in env:
            config.port = _parse_int("COUNTER_PORT", env["COUNTER_PORT"])
        if "COUNTER_STATIC_DIR" in env:
            config.static_dir = env["COUNTER_STATIC_DIR"]
        if "COUNTER_CORS_PREFLIGHT" in env:
            config.cors_preflight = _parse_bool(
                "COUNTER_CORS_PREFLIGHT", env["COUNTER_CORS_PREFLIGHT"]
            )
        if "COUNTER_LOG_LEVEL" in env:
            config.log_level = env["COUNTER_LOG_LEVEL"]

        return config

    def validate(self) -> None:
        """
        Validate configuration values. Called once at startup.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.keep_alive_timeout <= 0:
            raise ValueError("keep_alive_timeout must be > 0")

        if self.max_request_size < 1024:
            raise ValueError("max_request_size must be >= 1024")

        if self.worker_idle_timeout <= 0:
            raise ValueError("worker_idle_timeout must be > 0")

        if not self.static_dir:
            raise ValueError("static_dir must not be empty")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
