"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables of the server in one dataclass. The embedding application
builds a ServerConfig (or lets HTTPServer use the defaults); nothing in the
core reads the environment or the command line on its own.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


def parse_address(address: str) -> tuple[str, int]:
    """
    Split a "host:port" bind address.

    The split happens at the last colon.

    Args:
        address: Address string, e.g. "127.0.0.1:3000".

    Returns:
        (host, port) tuple.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Invalid address {address!r}: expected host:port")
    if not port.isdigit():
        raise ValueError(f"Invalid port in address {address!r}")
    return host, int(port)


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    PARSER LIMITS
    - initial_read_size, buffer_size, max_header_size, max_body_size

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 3000
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """
    Maximum number of queued connections.
    Connections are served one at a time, so this is how many clients
    can wait while another is being handled.
    """

    timeout: Optional[float] = 30.0
    """
    Per-connection socket timeout in seconds.
    None = blocking. A stalled client then blocks the whole server,
    because connections are handled one at a time.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PARSER LIMITS
    # ─────────────────────────────────────────────────────────────────────

    initial_read_size: int = 2048
    """Size of the first read on a new connection."""

    buffer_size: int = 8192
    """Size of each further read while the header block is incomplete."""

    max_header_size: int = 64 * 1024
    """Largest accepted header block in bytes (request line included)."""

    max_body_size: int = 10 * 1024 * 1024  # 10 MB
    """Largest accepted Content-Length in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-style) or 'json'."""

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_address(cls, address: str, **kwargs) -> "ServerConfig":
        """
        Create configuration for a "host:port" bind address.

        Example:
            config = ServerConfig.from_address("127.0.0.1:3000", timeout=5.0)
        """
        host, port = parse_address(address)
        return cls(host=host, port=port, **kwargs)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST        Server host (default: 127.0.0.1)
        HTTP_PORT        Server port (default: 3000)
        HTTP_TIMEOUT     Socket timeout in seconds (default: 30)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_LOG_FORMAT  Access log format (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "3000")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called when the server is constructed, so a bad value fails at
        startup and not on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.initial_read_size < 1 or self.buffer_size < 1:
            raise ValueError("read sizes must be >= 1")

        if self.max_header_size < self.initial_read_size:
            raise ValueError("max_header_size must be >= initial_read_size")

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")
