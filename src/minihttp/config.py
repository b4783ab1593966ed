"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass. Values come from three places, later
ones winning:

    1. Defaults below
    2. Environment variables   (ServerConfig.from_env)
    3. Command-line flags      (python -m minihttp --port 4221 ...)

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    HTTP_HOST        Bind address            (default: 0.0.0.0)
    HTTP_PORT        Listen port             (default: 4221)
    HTTP_DIRECTORY   Root for /files         (default: current directory)
    HTTP_TIMEOUT     Socket timeout, seconds (default: none, block forever)
    HTTP_LOG_LEVEL   DEBUG/INFO/WARNING/...  (default: INFO)
    HTTP_LOG_FORMAT  text or json            (default: text)

    HTTP_PORT=8080 HTTP_DIRECTORY=/tmp/data python -m minihttp

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Validated once at startup (validate()), so a bad value fails before
    the socket is bound rather than on the first request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    port: int = 4221

    backlog: int = 128
    """Length of the kernel accept queue."""

    buffer_size: int = 1024
    """Bytes per recv() call."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None blocks until the client sends or closes.
    """

    max_request_size: int = 10 * 1024 * 1024
    """Requests larger than this are dropped without a response."""

    # ─────────────────────────────────────────────────────────────────────
    # FILE STORAGE
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """Root directory for GET/POST /files/<name>. None means the cwd."""

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE ENCODING
    # ─────────────────────────────────────────────────────────────────────

    gzip_level: int = 6

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"

    server_name: str = "minihttp/1.0"
    """Shown in the startup log line."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create configuration from HTTP_* environment variables."""
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            directory=os.getenv("HTTP_DIRECTORY"),
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    @property
    def storage_root(self) -> str:
        return self.directory if self.directory is not None else os.getcwd()

    def validate(self) -> None:
        """
        Check every value, raising ValueError on the first bad one.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if not 1 <= self.gzip_level <= 9:
            raise ValueError(f"gzip_level must be 1-9, got {self.gzip_level}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"directory does not exist: {self.directory}")
