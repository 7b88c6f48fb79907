"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, List

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from wilson import HTTPServer, ServerConfig
from wilson.http import HTTPRequest, HTTPResponse


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /hello HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/plain\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "Ada", "email": "ada@example.com"}'
    return (
        b"POST /api/users HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


class ChunkedStream:
    """
    recv()-compatible stream that hands out pre-cut chunks, one per call,
    the way TCP may deliver a request in several segments.
    """

    def __init__(self, chunks: List[bytes]):
        self._chunks = [c for c in chunks if c]
        self._current = b""
        self.address = ("10.0.0.7", 50123)

    def recv(self, size: int) -> bytes:
        if not self._current:
            if not self._chunks:
                return b""
            self._current = self._chunks.pop(0)
        data, self._current = self._current[:size], self._current[size:]
        return data


@pytest.fixture
def chunked_stream():
    """Factory: chunked_stream([b"GET / ", b"HTTP/1.1\\r\\n\\r\\n"])."""
    return ChunkedStream


@pytest.fixture
def config() -> ServerConfig:
    """Test server configuration on an OS-assigned port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        backlog=32,
        workers=4,
        read_timeout=1.0,
        accept_poll_interval=0.05,
        bind_attempts=1,
        log_level="WARNING",
    )


class TestServer:
    """Runs an HTTPServer in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None
        self.error: BaseException = None

    @property
    def port(self) -> int:
        return self.server.server_address[1]

    def _run(self):
        try:
            self.server.run()
        except BaseException as e:  # surfaced to the test through .error
            self.error = e

    def start(self):
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error}")

    def stop(self):
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    @property
    def stopped(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, return everything the server sends back."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            return recv_all(s)


def recv_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def server(config: ServerConfig) -> HTTPServer:
    """Unstarted server with the demo routes registered."""
    srv = HTTPServer(config)

    @srv.get("/")
    def hello(request: HTTPRequest, response: HTTPResponse):
        response.text("Hello, World!")

    @srv.post("/echo")
    def echo(request: HTTPRequest, response: HTTPResponse):
        response.set_header("Content-Type", request.get_header("content-type", "text/plain"))
        response.set_body(request.body)

    @srv.get("/boom")
    def boom(request: HTTPRequest, response: HTTPResponse):
        raise RuntimeError("handler exploded")

    return srv


@pytest.fixture
def running_server(server: HTTPServer) -> Generator[TestServer, None, None]:
    """The server fixture, started in a background thread."""
    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
