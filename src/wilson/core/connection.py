"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for the single request/response exchange
it carries.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     Connection Lifecycle                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept() ──► Connection(sock, addr, read_timeout)                  │
    │                    │                                                 │
    │                    ├──► recv(n)     parser pulls the request         │
    │                    ├──► send(data)  worker pushes the response       │
    │                    └──► close()     FIN, drain, close                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive: after one response the connection is closed.

=============================================================================
READ TIMEOUT
=============================================================================

Every accepted socket gets a timeout. A client that connects and then goes
quiet makes recv() raise socket.timeout after read_timeout seconds, and the
worker moves on to the next connection. Without it, a handful of idle
clients could occupy every worker.
=============================================================================
"""

import logging
import socket
import time
from enum import Enum
from typing import Tuple

logger = logging.getLogger(__name__)

DRAIN_TIMEOUT = 0.5  # total, not per recv()


class ConnectionState(Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Connection:
    """
    One client connection.

    Usage:
        with Connection(sock, addr, read_timeout=5.0) as conn:
            request = parser.read_request(conn)
            conn.send(response.serialize())
        # closed here

    Args:
        sock: Socket returned by accept().
        address: (ip, port) of the client.
        read_timeout: Seconds a single recv() may block.
    """

    def __init__(self, sock: socket.socket, address: Tuple[str, int], read_timeout: float = 5.0):
        self.socket = sock
        self.address = address
        self.read_timeout = read_timeout
        self.state = ConnectionState.OPEN

        # Listening socket is non-blocking; accepted sockets must not be
        self.socket.settimeout(read_timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    def recv(self, size: int) -> bytes:
        """
        Read up to size bytes.

        Returns b"" when the peer has closed or reset the connection.

        Raises:
            socket.timeout: If nothing arrives within read_timeout.
        """
        try:
            return self.socket.recv(size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def send(self, data: bytes) -> bool:
        """
        Send all of data.

        Returns:
            False if the client went away before it could be sent.
        """
        try:
            self.socket.sendall(data)
            return True
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug(f"{self.client_ip}:{self.client_port} went away during send: {e}")
            return False

    def close(self):
        """
        Close gracefully: send FIN, discard whatever the client still sends,
        then release the socket.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        # ─────────────────────────────────────────────────────────────────
        # DRAIN
        # ─────────────────────────────────────────────────────────────────
        # Closing with unread bytes in the receive buffer makes the kernel
        # send RST, which can destroy the response before the client reads
        # it. Read until the client's FIN or the drain deadline passes.
        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"Connection from {self.client_ip}:{self.client_port} closed")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"Connection({self.client_ip}:{self.client_port}, {self.state.value})"
