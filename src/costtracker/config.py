"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables in one dataclass, filled from defaults, environment
variables or the command line.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌───────────────┐     ┌───────────────┐     ┌───────────────┐
    │   Defaults    │ ──► │  Environment  │ ──► │ CLI arguments │
    │ (dataclass)   │     │  (from_env)   │     │ (__main__.py) │
    └───────────────┘     └───────────────┘     └───────────────┘
      lowest priority                             highest priority

    HTTP_PORT=9000 python -m costtracker             # port 9000
    HTTP_PORT=9000 python -m costtracker --port 7000 # port 7000

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the cost tracker server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog

    REQUEST FRAMING
    - buffer_size, timeout, max_request_size

    STATIC FILES
    - static_dir

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
    - "0.0.0.0" - All network interfaces (containers)
    """

    port: int = 8080
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """
    Maximum number of queued connections.

    Connections are served one at a time, so under a burst the rest wait
    here until the accept loop gets to them.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST FRAMING
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 4096
    """Maximum bytes requested per recv() call (4 KB default)."""

    timeout: Optional[float] = None
    """
    Socket read timeout in seconds.

    None = block until the client sends or closes. A client that stalls
    mid-request then holds the (sequential) server until it goes away.
    Set a value to bound that; a timed-out read is treated like a close.
    """

    max_request_size: int = 1024 * 1024  # 1 MB
    """
    Largest request (headers + body) accepted, in bytes.

    Item forms are tiny; anything near this size is not a browser form.
    Larger requests get 413 Payload Too Large.
    """

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    static_dir: Optional[str] = None
    """
    Directory served under /static/.
    None = the styles.css and formatter.js bundled with the package.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """
    Access log format: 'json' or 'text'.
    JSON is better for log aggregators, text for human reading.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST        Server host (default: 127.0.0.1)
        HTTP_PORT        Server port (default: 8080)
        HTTP_TIMEOUT     Read timeout in seconds (default: none)
        HTTP_STATIC_DIR  Static files directory (default: bundled assets)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_LOG_FORMAT  Access log format, text or json (default: text)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")

        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            timeout=float(timeout) if timeout else None,
            static_dir=os.getenv("HTTP_STATIC_DIR"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead
        of on the first request.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format: {self.log_format}. Use 'text' or 'json'.")

        if self.static_dir is not None and not os.path.isdir(self.static_dir):
            raise ValueError(f"static_dir is not a directory: {self.static_dir}")
