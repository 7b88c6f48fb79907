"""
=============================================================================
WILSON - A minimal threaded HTTP/1.1 server
=============================================================================

Raw sockets, a hand-written parser, a worker pool and a method + path
route table.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       WILSON ARCHITECTURE                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Listener ──► WorkerPool ──► RequestParser ──► Router ──► Response  │
    │   (accept)     (threads)      (bytes→request)   (dispatch) (→bytes)  │
    │                                                                      │
    │   ShutdownController: Ctrl+C clears the run flag, the accept loop    │
    │   exits, queued requests finish, the process returns.                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

QUICK START:

    from wilson import HTTPServer

    server = HTTPServer()

    @server.get("/")
    def hello(request, response):
        response.text("Hello, World!")

    server.run()        # http://0.0.0.0:3000

=============================================================================
"""

__version__ = "1.0.0"

from .exceptions import (
    HTTPServerError,
    ConfigurationError,
    ServerSetupError,
    AcceptError,
)
from .config import ServerConfig
from .http import HTTPRequest, HTTPResponse, HTTPStatus, HTTPParseError, Router
from .handlers import Handler, FunctionHandler, StaticFileHandler, RedirectHandler
from .server import HTTPServer

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "Router",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPStatus",
    "Handler",
    "FunctionHandler",
    "StaticFileHandler",
    "RedirectHandler",
    "HTTPServerError",
    "ConfigurationError",
    "ServerSetupError",
    "AcceptError",
    "HTTPParseError",
    "__version__",
]
