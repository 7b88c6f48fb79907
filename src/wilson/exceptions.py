"""
=============================================================================
SERVER EXCEPTIONS
=============================================================================

One small hierarchy for everything the server can refuse to do.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       EXCEPTION HIERARCHY                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTPServerError                                                    │
    │     ├── ConfigurationError   setup-time mistakes (also ValueError)   │
    │     ├── ServerSetupError     socket / bind / listen failed           │
    │     ├── AcceptError          accept() failed, serving must stop      │
    │     └── HTTPParseError       malformed request (http.request)        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Setup and accept errors propagate out of HTTPServer.run(). Parse errors never
leave the worker task: they are turned into a 400 response.
=============================================================================
"""


class HTTPServerError(Exception):
    """Base class for every error raised by the server."""


class ConfigurationError(HTTPServerError, ValueError):
    """
    Raised when the server is configured in a way it cannot honor.

    Examples: an invalid port, registering a route after static mode was
    enabled, mounting a directory without an index.html.
    """


class ServerSetupError(HTTPServerError):
    """Socket creation, bind (after all retries) or listen failed."""


class AcceptError(HTTPServerError):
    """accept() failed with a non-transient error."""
