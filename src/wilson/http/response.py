"""
=============================================================================
HTTP RESPONSE
=============================================================================

The mutable response object a handler fills in, and its serialization to
HTTP/1.1 wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                 ← status line                 │
    │    x-powered-by: Wilson-Server\r\n     ← headers, insertion order    │
    │    Content-Type: text/plain\r\n                                      │
    │    Content-Length: 13\r\n              ← only when body is non-empty │
    │    \r\n                                ← blank line                  │
    │    Hello, World!                       ← body bytes, verbatim        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Response headers are NOT case-normalized: set_header("Content-Type", ...)
and set_header("content-type", ...) are two different entries. Only request
headers are lowercased (by the parser).

=============================================================================
LIFECYCLE
=============================================================================

    Router.dispatch()                handler.handle(req, res)      worker
    HTTPResponse()   ───────────►   res.text("Hello")  ───────►   res.serialize()
    + x-powered-by                  res.set_status(...)            sendall()

A response is created fresh for every dispatch, mutated only by the handler
(and the dispatch glue), and serialized exactly once.

=============================================================================
CONVENIENCE SETTERS
=============================================================================

    text(msg)                     Content-Type: text/plain
    html_string(markup)           Content-Type: text/html
    html(path)                    file contents, text/html
    json(data)                    Content-Type: application/json
    image(path, type="png")       file bytes, image/<type>
    static_file(path)             file bytes, no Content-Type
    downloadable(path, ctype)     Content-Disposition: attachment
    redirect(location, 301)       Location header + status

Every setter returns self, so calls chain:

    response.set_status(201).json({"id": 7})
=============================================================================
"""

from copy import deepcopy
import json as _json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

from .status_codes import HTTPStatus, reason_phrase


@dataclass
class HTTPResponse:
    """
    An HTTP response under construction.

    Attributes:
        status: Numeric status code. Any int is allowed; the reason phrase
                falls back to "OK" for codes without a table entry.
        headers: Header name → value. Last write wins per exact name.
        body: Raw body bytes.
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    # ─────────────────────────────────────────────────────────────────────
    # CORE SETTERS
    # ─────────────────────────────────────────────────────────────────────

    def set_status(self, code: int) -> "HTTPResponse":
        """Store the numeric status code."""
        self.status = int(code)
        return self

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header, replacing any previous value for that exact
        name.

            response.set_header("X-Request-Id", "42").set_header("X-Retry", "no")
        """
        self.headers[name] = str(value)
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body. Strings are encoded as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = bytes(body)
        return self

    @property
    def status_line(self) -> str:
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT HELPERS
    # ─────────────────────────────────────────────────────────────────────

    def text(self, message: str) -> "HTTPResponse":
        """Plain text body."""
        self.set_header("Content-Type", "text/plain")
        return self.set_body(message)

    def html_string(self, markup: str) -> "HTTPResponse":
        """HTML body from a string."""
        self.set_header("Content-Type", "text/html")
        return self.set_body(markup)

    def html(self, path: Union[str, Path]) -> "HTTPResponse":
        """
        HTML body read from a file.

        Raises:
            OSError: If the file cannot be read.
        """
        self.set_header("Content-Type", "text/html")
        return self.set_body(Path(path).read_bytes())

    def json(self, data: Any) -> "HTTPResponse":
        """
        JSON body.

        A str is sent as-is (it is assumed to already be JSON); anything else
        is serialized with json.dumps.
        """
        if not isinstance(data, (str, bytes)):
            data = _json.dumps(data)
        self.set_header("Content-Type", "application/json")
        return self.set_body(data)

    def image(self, path: Union[str, Path], type: str = "png") -> "HTTPResponse":
        """Image body read from a file, served as image/<type>."""
        self.set_header("Content-Type", f"image/{type}")
        return self.set_body(Path(path).read_bytes())

    def static_file(self, path: Union[str, Path]) -> "HTTPResponse":
        """Raw file body. The caller picks the Content-Type."""
        return self.set_body(Path(path).read_bytes())

    def downloadable(self, path: Union[str, Path], content_type: str) -> "HTTPResponse":
        """
        File body the browser should save instead of render.

            Content-Type: application/pdf
            Content-Disposition: attachment; filename="report.pdf"
        """
        path = Path(path)
        self.set_header("Content-Type", content_type)
        self.set_header("Content-Disposition", f'attachment; filename="{path.name}"')
        return self.set_body(path.read_bytes())

    def redirect(self, location: str, status: int = HTTPStatus.MOVED_PERMANENTLY) -> "HTTPResponse":
        """Redirect to location (301 unless told otherwise)."""
        self.set_status(status)
        return self.set_header("Location", location)

    def copy(self) -> "HTTPResponse":
        """Independent copy; mutating it never touches self."""
        return deepcopy(self)

    # ─────────────────────────────────────────────────────────────────────
    # SERIALIZATION
    # ─────────────────────────────────────────────────────────────────────

    def serialize(self) -> bytes:
        """
        Serialize to wire bytes.

        Headers go out in insertion order. When the body is non-empty a
        Content-Length computed from it is appended last; a Content-Length
        set by the handler is dropped in that case so the two can never
        disagree. An empty body gets no Content-Length at all.
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            if self.body and name.lower() == "content-length":
                continue
            lines.append(f"{name}: {value}")

        if self.body:
            lines.append(f"Content-Length: {len(self.body)}")

        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + self.body

    to_bytes = serialize
