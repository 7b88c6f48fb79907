"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the server lives in one dataclass.

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
    │      └── python -m wilson --port 3000                               │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WILSON_PORT=3000 python -m wilson                          │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TIMING KNOBS
=============================================================================

    bind_attempts / bind_backoff
        bind() is retried; before retry k the server sleeps k * backoff.
        With the defaults (5, 1.0s) a busy port is given 1+2+3+4 = 10s
        to free up.

    accept_poll_interval
        The accept loop never blocks longer than this, so a cleared run
        flag is noticed within one interval.

    read_timeout
        Per-connection socket timeout. A client that stalls mid-request
        releases its worker after this many seconds.

=============================================================================
"""

import os
from dataclasses import dataclass, field

from .exceptions import ConfigurationError


def _default_workers() -> int:
    return os.cpu_count() or 1


@dataclass
class ServerConfig:
    """
    Configuration for the Wilson HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", port=8080, log_level="DEBUG")

    Production:
        ServerConfig(host="0.0.0.0", port=80, workers=16)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """IP address to bind. "0.0.0.0" listens on every IPv4 interface."""

    port: int = 3000
    """Port to listen on. 0 asks the OS for a free port (handy in tests)."""

    backlog: int = 3
    """
    Depth of the kernel accept queue (the "number of listeners").
    Connections beyond it are refused until the acceptor catches up.
    """

    bind_attempts: int = 5
    """How many times bind() is tried before giving up."""

    bind_backoff: float = 1.0
    """Base delay between bind attempts; attempt k waits k * bind_backoff."""

    accept_poll_interval: float = 0.5
    """Upper bound, in seconds, on one wait for an incoming connection."""

    read_timeout: float = 5.0
    """Seconds a client may stall while sending its request."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_header_size: int = 64 * 1024  # 64 KB
    """Request line plus headers may not exceed this many bytes."""

    max_body_size: int = 10 * 1024 * 1024  # 10 MB
    """Largest Content-Length accepted."""

    server_name: str = "Wilson-Server"
    """Value of the x-powered-by header on every dispatched response."""

    # ─────────────────────────────────────────────────────────────────────
    # WORKER POOL
    # ─────────────────────────────────────────────────────────────────────

    workers: int = field(default_factory=_default_workers)
    """Number of worker threads. Defaults to the CPU count."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        WILSON_HOST          Server host (default: 0.0.0.0)
        WILSON_PORT          Server port (default: 3000)
        WILSON_BACKLOG       Accept queue depth (default: 3)
        WILSON_WORKERS       Worker threads (default: CPU count)
        WILSON_READ_TIMEOUT  Per-connection read timeout (default: 5)
        WILSON_LOG_LEVEL     Logging level (default: INFO)
        """
        try:
            return cls(
                host=os.getenv("WILSON_HOST", "0.0.0.0"),
                port=int(os.getenv("WILSON_PORT", "3000")),
                backlog=int(os.getenv("WILSON_BACKLOG", "3")),
                workers=int(os.getenv("WILSON_WORKERS", str(_default_workers()))),
                read_timeout=float(os.getenv("WILSON_READ_TIMEOUT", "5")),
                log_level=os.getenv("WILSON_LOG_LEVEL", "INFO"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by HTTPServer at construction so mistakes surface before
        any socket is opened.

        Raises:
            ConfigurationError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ConfigurationError("backlog must be >= 1")

        if self.workers < 1:
            raise ConfigurationError("workers must be >= 1")

        if self.bind_attempts < 1:
            raise ConfigurationError("bind_attempts must be >= 1")

        if self.bind_backoff < 0:
            raise ConfigurationError("bind_backoff must be >= 0")

        if self.accept_poll_interval <= 0:
            raise ConfigurationError("accept_poll_interval must be > 0")

        if self.read_timeout <= 0:
            raise ConfigurationError("read_timeout must be > 0")

        if self.max_header_size < 16:
            raise ConfigurationError("max_header_size must be >= 16")

        if self.max_body_size < 0:
            raise ConfigurationError("max_body_size must be >= 0")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
