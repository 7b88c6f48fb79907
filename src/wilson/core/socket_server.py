"""
=============================================================================
LISTENER / ACCEPTOR
=============================================================================

Owns the listening TCP socket: create, bind (with retries), listen, and the
accept loop that hands every new connection to the worker pool.

=============================================================================
SOCKET SETUP
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Listener.open()                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   create_socket()   socket(AF_INET, SOCK_STREAM)                     │
    │        │            SO_REUSEADDR, non-blocking                       │
    │        ▼                                                             │
    │   bind(port)        attempt 1 ── fail ── sleep 1 × backoff           │
    │        │            attempt 2 ── fail ── sleep 2 × backoff           │
    │        │            ...                                              │
    │        │            attempt N ── fail ── ServerSetupError            │
    │        ▼                                                             │
    │   listen(backlog)   kernel queues up to `backlog` pending clients    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

SO_REUSEADDR lets a restarted server bind while the previous one's
sockets sit in TIME_WAIT. The linear backoff covers the other common case:
the previous process is still shutting down and frees the port a few
seconds later.

=============================================================================
ACCEPT LOOP
=============================================================================

    while run_flag:
        select([listener], timeout=accept_poll_interval)
            │
            ├── nothing ready ─────────► loop (re-check run_flag)
            │
            └── readable ─► accept()
                               ├── BlockingIOError ─► loop (another
                               │                      waiter won the race)
                               ├── other OSError ───► clear run_flag,
                               │                      raise AcceptError
                               └── ok ──► dispatch(Connection(...))

The wait is bounded, so a cleared run flag stops the loop within one poll
interval. Without a bound, a SIGINT arriving while no clients connect would
never be noticed.
=============================================================================
"""

import logging
import select
import socket
import time
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from ..exceptions import AcceptError, ServerSetupError
from .connection import Connection
from .shutdown import RunFlag

logger = logging.getLogger(__name__)


class Listener:
    """
    Listening socket plus accept loop.

    Usage:
        listener = Listener(config, run_flag)
        listener.open()
        try:
            listener.serve(lambda conn: pool.enqueue(...))
        finally:
            listener.close()

    Args:
        config: Host, port, backlog, bind retry and poll settings.
        run_flag: Loop runs while this is set.
        sleep: Used between bind attempts (replaceable in tests).
    """

    def __init__(
        self,
        config: ServerConfig,
        run_flag: RunFlag,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.run_flag = run_flag
        self._sleep = sleep
        self._socket: Optional[socket.socket] = None

    @property
    def address(self) -> Tuple[str, int]:
        """Actual bound (host, port). Resolves port 0 to the OS's choice."""
        if self._socket is None:
            return (self.config.host, self.config.port)
        return self._socket.getsockname()[:2]

    @property
    def is_open(self) -> bool:
        return self._socket is not None

    # =========================================================================
    # SETUP
    # =========================================================================

    def create_socket(self) -> socket.socket:
        """
        Create the listening socket.

        Raises:
            ServerSetupError: If the OS refuses to create it.
        """
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            raise ServerSetupError(f"Failed to create socket: {e}") from e

        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setblocking(False)
        self._socket = sock
        return sock

    def bind(self, port: Optional[int] = None) -> None:
        """
        Bind to (host, port), retrying with linear backoff.

        Raises:
            ServerSetupError: When every attempt failed.
        """
        port = self.config.port if port is None else port
        attempts = self.config.bind_attempts
        last_error: Optional[OSError] = None

        for attempt in range(1, attempts + 1):
            try:
                self._socket.bind((self.config.host, port))
                return
            except OSError as e:
                last_error = e
                if attempt == attempts:
                    break
                delay = attempt * self.config.bind_backoff
                logger.warning(
                    f"Bind to {self.config.host}:{port} failed ({e}); "
                    f"retry {attempt}/{attempts - 1} in {delay:.1f}s"
                )
                self._sleep(delay)

        logger.error(f"Failed to bind to {self.config.host}:{port} after {attempts} attempts")
        raise ServerSetupError(
            f"Could not bind to {self.config.host}:{port}: {last_error}"
        ) from last_error

    def listen(self, backlog: Optional[int] = None) -> None:
        backlog = self.config.backlog if backlog is None else backlog
        try:
            self._socket.listen(backlog)
        except OSError as e:
            raise ServerSetupError(f"listen() failed: {e}") from e

    def open(self, port: Optional[int] = None) -> Tuple[str, int]:
        """
        create_socket() + bind() + listen(). Closes the socket again if any
        step fails.

        Returns:
            The bound address.
        """
        self.create_socket()
        try:
            self.bind(port)
            self.listen()
        except ServerSetupError:
            self.close()
            raise

        host, bound_port = self.address
        logger.info(f"Listening on {host}:{bound_port} (backlog {self.config.backlog})")
        return host, bound_port

    # =========================================================================
    # ACCEPTING
    # =========================================================================

    def accept_one(self) -> Optional[Connection]:
        """
        Wait up to accept_poll_interval for a client.

        Returns:
            The new connection, or None if nobody connected in time.

        Raises:
            AcceptError: On an unrecoverable socket error. The run flag is
                         cleared first.
        """
        try:
            readable, _, _ = select.select([self._socket], [], [], self.config.accept_poll_interval)
            if not readable:
                return None
            client_socket, client_address = self._socket.accept()
        except (BlockingIOError, InterruptedError):
            return None
        except (OSError, ValueError) as e:
            # ValueError: select() on a socket that was closed under us
            self.run_flag.clear()
            logger.error(f"Accept failed: {e}")
            raise AcceptError(f"accept() failed: {e}") from e

        logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")
        return Connection(client_socket, client_address, read_timeout=self.config.read_timeout)

    def serve(self, dispatch: Callable[[Connection], None]) -> None:
        """Accept until the run flag is cleared, passing each connection on."""
        while self.run_flag.is_set():
            conn = self.accept_one()
            if conn is not None:
                dispatch(conn)

        logger.info("Accept loop stopped")

    def close(self) -> None:
        if self._socket is None:
            return
        try:
            self._socket.close()
        except OSError:
            pass
        self._socket = None
