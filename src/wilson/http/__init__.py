"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

Everything that knows about HTTP itself; no sockets, no threads.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        HTTP MODULE COMPONENTS                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   request.py       bytes ──► HTTPRequest      (RequestParser)        │
    │   router.py        HTTPRequest ──► HTTPResponse (Router.dispatch)    │
    │   response.py      HTTPResponse ──► bytes     (serialize)            │
    │   status_codes.py  code ──► reason phrase                            │
    │   mime_types.py    file extension ──► Content-Type                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import HTTPResponse
from .status_codes import HTTPStatus, reason_phrase
from .mime_types import get_content_type
# Last: router pulls in the handlers package, which needs the modules above
from .router import Router, SUPPORTED_METHODS

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Responses
    "HTTPResponse",
    "HTTPStatus",
    "reason_phrase",

    # Routing
    "Router",
    "SUPPORTED_METHODS",

    # MIME types
    "get_content_type",
]
