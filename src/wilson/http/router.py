"""
=============================================================================
ROUTER
=============================================================================

Maps (method, path) to a handler, and turns a request into a response.

=============================================================================
ROUTE TABLE
=============================================================================

Two dictionary lookups, no patterns:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ROUTE TABLE                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "GET"  ──►  { "/"          : FunctionHandler(hello),               │
    │                 "/about"     : StaticFileHandler(about.html) }       │
    │                                                                      │
    │   "POST" ──►  { "/api/users" : FunctionHandler(create_user) }        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Paths match exactly. "/users" and "/users/" are different routes, and a
query string is part of the path. Registering the same (method, path) twice
replaces the earlier handler.

The table is written while the server is being set up (single-threaded) and
only read while serving, so dispatch takes no locks.

=============================================================================
DISPATCH
=============================================================================

    dispatch(request)
        │
        ├── no routes at all for request.method ───► 405, empty body
        │
        ├── method known, path unknown ────────────► copy of the not-found
        │                                            template, status 404
        │
        └── found ─► response = HTTPResponse()       (200)
                     handler.handle(request, response)
                     return response

Every dispatched response carries "x-powered-by: <server name>". For the
404 case the header goes on the COPY: the template is shared by every worker
thread and is never written to after setup.

=============================================================================
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..exceptions import ConfigurationError
from ..handlers.base import Handler, HandlerFunc, as_handler
from .request import HTTPRequest
from .response import HTTPResponse
from .status_codes import HTTPStatus

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")

DEFAULT_POWERED_BY = "Wilson-Server"
DEFAULT_NOT_FOUND_TEXT = "Wilson's Server: page request is not found"

HandlerLike = Union[Handler, HandlerFunc]


class Router:
    """
    Method + path routing table with 404/405 fallbacks.

    Usage:
        router = Router()

        @router.get("/")
        def hello(request, response):
            response.text("Hello, World!")

        router.post("/echo", lambda req, res: res.set_body(req.body))

        response = router.dispatch(request)
    """

    def __init__(self, powered_by: str = DEFAULT_POWERED_BY):
        self.powered_by = powered_by
        self._routes: Dict[str, Dict[str, Handler]] = {}
        self._static_mode = False
        self._not_found = HTTPResponse(status=HTTPStatus.NOT_FOUND).text(DEFAULT_NOT_FOUND_TEXT)

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    @property
    def static_mode(self) -> bool:
        return self._static_mode

    def enable_static_mode(self) -> None:
        """Reject every ordinary registration from now on."""
        self._static_mode = True

    def register(self, method: str, path: str, handler: HandlerLike) -> Handler:
        """
        Add a route, replacing any handler already at (method, path).

        Raises:
            ConfigurationError: If the method is not supported or the router
                                is in static mode.
        """
        if self._static_mode:
            raise ConfigurationError(
                f"Cannot register {method} {path}: a static directory is mounted"
            )
        return self._register(method, path, handler)

    def _register(self, method: str, path: str, handler: HandlerLike) -> Handler:
        # Static-mount bootstrap goes through here directly
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ConfigurationError(
                f"Unsupported method {method!r}; expected one of {', '.join(SUPPORTED_METHODS)}"
            )

        handler = as_handler(handler)
        bucket = self._routes.setdefault(method, {})
        if path in bucket:
            logger.debug(f"Replacing handler for {method} {path}")
        bucket[path] = handler
        return handler

    # ─────────────────────────────────────────────────────────────────────
    # DECORATOR-STYLE REGISTRATION
    # ─────────────────────────────────────────────────────────────────────
    #
    # Each of these works two ways:
    #
    #     router.get("/", hello)            # direct
    #
    #     @router.get("/")                  # decorator
    #     def hello(request, response): ...
    #
    # ─────────────────────────────────────────────────────────────────────

    def route(
        self,
        path: str,
        method: str = "GET",
        handler: Optional[HandlerLike] = None,
    ) -> Callable:
        if handler is not None:
            self.register(method, path, handler)
            return handler

        def decorator(func: HandlerLike) -> HandlerLike:
            self.register(method, path, func)
            return func

        return decorator

    def get(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        """Register a GET route."""
        return self.route(path, "GET", handler)

    def post(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        """Register a POST route."""
        return self.route(path, "POST", handler)

    def put(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        """Register a PUT route."""
        return self.route(path, "PUT", handler)

    def delete(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        """Register a DELETE route."""
        return self.route(path, "DELETE", handler)

    # =========================================================================
    # NOT-FOUND TEMPLATE
    # =========================================================================

    @property
    def not_found(self) -> HTTPResponse:
        """The 404 template. Treat it as read-only."""
        return self._not_found

    def set_not_found(self, response: HTTPResponse) -> None:
        """Use a copy of response (status forced to 404) for unknown paths."""
        self._not_found = response.copy().set_status(HTTPStatus.NOT_FOUND)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def lookup(self, method: str, path: str) -> Optional[Handler]:
        return self._routes.get(method, {}).get(path)

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Produce the response for request.

        Handler exceptions propagate; the caller decides how to answer them.
        """
        bucket = self._routes.get(request.method)
        if bucket is None:
            logger.debug(f"No routes for method {request.method}")
            response = HTTPResponse(status=HTTPStatus.METHOD_NOT_ALLOWED)
            return response.set_header("x-powered-by", self.powered_by)

        handler = bucket.get(request.path)
        if handler is None:
            logger.debug(f"No route for {request.method} {request.path}")
            response = self._not_found.copy()
            return response.set_header("x-powered-by", self.powered_by)

        response = HTTPResponse()
        response.set_header("x-powered-by", self.powered_by)
        handler.handle(request, response)
        return response

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Tuple[str, str]]:
        """All registered (method, path) pairs, sorted."""
        return sorted(
            (method, path)
            for method, bucket in self._routes.items()
            for path in bucket
        )

    def print_routes(self) -> None:
        """
        Print all registered routes (useful for debugging).

            Registered Routes:
            ------------------------------------------------------------
              GET      /
              POST     /echo
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for method, path in self.routes():
            print(f"  {method:8} {path}")
        print("-" * 60)
