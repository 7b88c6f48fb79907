"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the bytes of one connection into one immutable HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      HTTP REQUEST STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    POST /api/users HTTP/1.1\r\n        ← request line                │
    │    ──┬─ ─────┬──── ───┬────                                          │
    │    method   path    version (read, then ignored)                     │
    │                                                                      │
    │    Host: localhost:3000\r\n            ← headers, "Key: Value"       │
    │    Content-Length: 16\r\n                                            │
    │    \r\n                                ← end of head                 │
    │                                                                      │
    │    {"name": "Ada"}                     ← body, Content-Length bytes  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FRAMING
=============================================================================

    1. HEAD: read ONE byte at a time until the buffer ends in \r\n\r\n.
       Reading byte-wise means we never consume a byte past the head, so
       nothing has to be pushed back before the body read.

    2. BODY: if there is a content-length header, read exactly that many
       bytes. recv() may hand back fewer bytes than asked for (TCP
       delivers segments, not messages), so we loop:

            body = b""
            while len(body) < n:
                chunk = recv(n - len(body))
                if not chunk: → peer closed early → 400
                body += chunk

       No content-length → empty body, and nothing more is read.

=============================================================================
NORMALIZATION
=============================================================================

Header lines are split on the FIRST ": ". Key and value are both trimmed
and lowercased:

    "Content-Type: Application/JSON"  →  {"content-type": "application/json"}

A repeated header overwrites the earlier one (last write wins).

=============================================================================
MALFORMED INPUT
=============================================================================

Every structural problem raises HTTPParseError (status_code 400):

    - request line with fewer than two space-separated tokens
    - header line without ": "
    - content-length that is not a non-negative integer
    - head larger than max_header_size, body larger than max_body_size
    - connection closed before the declared body arrived

The worker catches it, answers 400 Bad Request and closes the connection.
=============================================================================
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Protocol, Tuple

from ..exceptions import HTTPServerError

logger = logging.getLogger(__name__)

HEAD_TERMINATOR = b"\r\n\r\n"
DEFAULT_MAX_HEADER_SIZE = 64 * 1024
DEFAULT_MAX_BODY_SIZE = 10 * 1024 * 1024


class HTTPParseError(HTTPServerError):
    """
    The request bytes are not a well-formed HTTP request.

    Attributes:
        status_code: HTTP status to answer with (400 unless stated).
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class ByteStream(Protocol):
    """Anything the parser can read from: a Connection, a test double."""

    def recv(self, size: int) -> bytes:
        ...


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request. Immutable once built.

    Attributes:
        method: Request method exactly as sent ("GET", "POST", ...).
        path: Request target exactly as sent. Query strings are not split.
        headers: Read-only mapping with lowercased keys and values.
        body: Raw body bytes, empty when there was no content-length.
        client_address: (ip, port) of the peer, ("", 0) when unknown.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: bytes = b""
    client_address: Tuple[str, int] = ("", 0)

    def __post_init__(self):
        if not isinstance(self.headers, MappingProxyType):
            # Copy so the caller's dict can't mutate us afterwards
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (undecodable bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")


class _BufferStream:
    """Reads from an in-memory bytes object, recv()-style."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def recv(self, size: int) -> bytes:
        chunk = self._data[self._pos:self._pos + size]
        self._pos += len(chunk)
        return chunk


class RequestParser:
    """
    Reads and parses requests from a byte stream.

    Usage:
        parser = RequestParser()
        request = parser.read_request(conn)   # None if client sent nothing
    """

    def __init__(
        self,
        max_header_size: int = DEFAULT_MAX_HEADER_SIZE,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ):
        self.max_header_size = max_header_size
        self.max_body_size = max_body_size

    # ─────────────────────────────────────────────────────────────────────
    # READING
    # ─────────────────────────────────────────────────────────────────────

    def read_head(self, stream: ByteStream) -> Optional[bytes]:
        """
        Read up to and including the blank line that ends the head.

        Returns:
            The head bytes (ending in \\r\\n\\r\\n), or None if the peer closed
            the connection before completing it.

        Raises:
            HTTPParseError: If the head exceeds max_header_size.
        """
        buffer = bytearray()

        while not buffer.endswith(HEAD_TERMINATOR):
            byte = stream.recv(1)
            if not byte:
                if buffer:
                    logger.debug(f"Peer closed after {len(buffer)} header bytes")
                return None

            buffer += byte
            if len(buffer) > self.max_header_size:
                raise HTTPParseError(
                    f"Request head exceeds {self.max_header_size} bytes"
                )

        return bytes(buffer)

    def read_body(self, stream: ByteStream, length: int) -> bytes:
        """
        Read exactly length bytes, however the peer fragments them.

        Raises:
            HTTPParseError: If the stream ends before length bytes arrive.
        """
        body = bytearray()

        while len(body) < length:
            chunk = stream.recv(length - len(body))
            if not chunk:
                raise HTTPParseError(
                    f"Connection closed after {len(body)} of {length} body bytes"
                )
            body += chunk

        return bytes(body)

    # ─────────────────────────────────────────────────────────────────────
    # PARSING
    # ─────────────────────────────────────────────────────────────────────

    def parse_head(self, head: bytes) -> Tuple[str, str, dict]:
        """
        Split a head into (method, path, headers).

        Raises:
            HTTPParseError: On a short request line or a header without ": ".
        """
        # latin-1 maps every byte, so decoding never fails
        text = head.decode("iso-8859-1")
        if text.endswith("\r\n\r\n"):
            text = text[:-4]

        lines = text.split("\r\n")

        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE
        # ─────────────────────────────────────────────────────────────────
        tokens = lines[0].split(" ")
        if len(tokens) < 2 or not tokens[0] or not tokens[1]:
            raise HTTPParseError(f"Malformed request line: {lines[0]!r}")

        method, path = tokens[0], tokens[1]

        # ─────────────────────────────────────────────────────────────────
        # HEADERS
        # ─────────────────────────────────────────────────────────────────
        headers = {}
        for line in lines[1:]:
            key, sep, value = line.partition(": ")
            if not sep:
                raise HTTPParseError(f"Malformed header line: {line!r}")
            headers[key.strip().lower()] = value.strip().lower()

        return method, path, headers

    def body_length(self, headers: Mapping[str, str]) -> int:
        """
        Number of body bytes announced by content-length (0 if absent).

        Raises:
            HTTPParseError: If the value is not a non-negative integer or
                            exceeds max_body_size.
        """
        raw = headers.get("content-length")
        if raw is None:
            return 0

        # isdigit() alone accepts Latin-1 superscripts such as "\xb2"
        if not (raw.isascii() and raw.isdigit()):
            raise HTTPParseError(f"Invalid Content-Length: {raw!r}")

        length = int(raw)
        if length > self.max_body_size:
            raise HTTPParseError(
                f"Body of {length} bytes exceeds limit of {self.max_body_size}"
            )
        return length

    def read_request(self, stream: ByteStream) -> Optional[HTTPRequest]:
        """
        Read and parse one complete request.

        Returns:
            The request, or None when the peer sent nothing at all.

        Raises:
            HTTPParseError: On any malformed input.
        """
        head = self.read_head(stream)
        if head is None:
            return None

        method, path, headers = self.parse_head(head)
        body = self.read_body(stream, self.body_length(headers))

        return HTTPRequest(
            method=method,
            path=path,
            headers=headers,
            body=body,
            client_address=getattr(stream, "address", ("", 0)),
        )


def parse_request(data: bytes, parser: Optional[RequestParser] = None) -> Optional[HTTPRequest]:
    """
    Parse a request held entirely in memory.

        >>> parse_request(b"GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n").path
        '/'
    """
    parser = parser or RequestParser()
    return parser.read_request(_BufferStream(data))
