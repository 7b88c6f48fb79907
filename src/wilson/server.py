"""
=============================================================================
WILSON HTTP SERVER
=============================================================================

The orchestrator: wires configuration, listener, worker pool, parser and
router into a server you configure and then run().

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WILSON SERVER ARCHITECTURE                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                           │
    │                        │   HTTPServer    │                           │
    │                        └────────┬────────┘                           │
    │           ┌──────────────┬──────┴───────┬──────────────┐             │
    │           ▼              ▼              ▼              ▼             │
    │     ┌──────────┐  ┌────────────┐  ┌──────────┐  ┌────────────┐      │
    │     │ Listener │  │ WorkerPool │  │  Parser  │  │   Router   │      │
    │     │ (accept) │  │ (threads)  │  │ (bytes → │  │ (request → │      │
    │     │          │  │            │  │ request) │  │ response)  │      │
    │     └──────────┘  └────────────┘  └──────────┘  └────────────┘      │
    │           ▲                                                          │
    │           │ run flag                                                 │
    │     ┌─────┴──────────────┐                                           │
    │     │ ShutdownController │  SIGINT → run_flag.clear()                │
    │     └────────────────────┘                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST FLOW (one connection, one worker)
=============================================================================

    accept ─► pool.enqueue(task) ─► worker runs task:
                                      │
                                      ├── parser.read_request(conn)
                                      │     ├── None (client sent nothing) → close
                                      │     ├── timeout                    → close
                                      │     └── HTTPParseError             → 400
                                      │
                                      ├── router.dispatch(request)
                                      │     └── handler raised             → 500
                                      │
                                      ├── conn.send(response.serialize())
                                      └── conn.close()

Nothing raised while handling a connection escapes its task.

=============================================================================
SETUP vs SERVING
=============================================================================

Routes and the not-found page are configured BEFORE run(). While serving,
the route table and the not-found template are only read, by many worker
threads at once, which is why dispatch copies the template instead of
touching it.
=============================================================================
"""

import logging
import socket
import threading
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from .config import ServerConfig
from .core.connection import Connection
from .core.shutdown import RunFlag, ShutdownController
from .core.socket_server import Listener
from .core.thread_pool import WorkerPool
from .handlers.static import mount_static_directory
from .http.request import HTTPParseError, HTTPRequest, RequestParser
from .http.response import HTTPResponse
from .http.router import HandlerLike, Router
from .http.status_codes import HTTPStatus

logger = logging.getLogger(__name__)


class HTTPServer:
    """
    A minimal threaded HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=3000))

        @server.get("/")
        def hello(request, response):
            response.text("Hello, World!")

        server.set_not_found_text("Nothing here")
        server.run()            # blocks until Ctrl+C or server.stop()

    Or serve a directory:

        server = HTTPServer()
        server.mount_static_directory("./site")
        server.run(8080)

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._run_flag = RunFlag()
        self._router = Router(powered_by=self.config.server_name)
        self._parser = RequestParser(
            max_header_size=self.config.max_header_size,
            max_body_size=self.config.max_body_size,
        )

        self._listener: Optional[Listener] = None
        self._ready = threading.Event()

    # =========================================================================
    # CONFIGURATION METHODS
    # =========================================================================

    @property
    def router(self) -> Router:
        return self._router

    @property
    def run_flag(self) -> RunFlag:
        return self._run_flag

    def set_num_listeners(self, count: int) -> "HTTPServer":
        """Set the accept queue depth (listen backlog)."""
        if count < 1:
            raise ValueError(f"Listener count must be >= 1, got {count}")
        self.config.backlog = count
        return self

    def set_not_found_response(self, response: HTTPResponse) -> "HTTPServer":
        """Answer unknown paths with a copy of response (status set to 404)."""
        self._router.set_not_found(response)
        return self

    def set_not_found_text(self, message: str) -> "HTTPServer":
        return self.set_not_found_response(HTTPResponse().text(message))

    def set_not_found_page(self, path: Union[str, Path]) -> "HTTPServer":
        """Answer unknown paths with an HTML file, read once, now."""
        return self.set_not_found_response(HTTPResponse().html(path))

    def mount_static_directory(self, directory: Union[str, Path], mount_point: str = "/") -> "HTTPServer":
        """
        Serve every file under directory; see handlers.static.

        After this call the server is in static mode and get()/post()/...
        raise ConfigurationError.
        """
        mount_static_directory(self._router, directory, mount_point)
        return self

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================
    #
    # Direct or decorator style, see Router.route().
    #
    # =========================================================================

    def route(self, path: str, method: str = "GET", handler: Optional[HandlerLike] = None) -> Callable:
        return self._router.route(path, method, handler)

    def get(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        return self._router.get(path, handler)

    def post(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        return self._router.post(path, handler)

    def put(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        return self._router.put(path, handler)

    def delete(self, path: str, handler: Optional[HandlerLike] = None) -> Callable:
        return self._router.delete(path, handler)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    @property
    def server_address(self) -> Tuple[str, int]:
        """Bound (host, port) once running; the configured pair before."""
        if self._listener is not None and self._listener.is_open:
            return self._listener.address
        return (self.config.host, self.config.port)

    @property
    def is_running(self) -> bool:
        return self._ready.is_set() and self._run_flag.is_set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until run() is listening. False on timeout."""
        return self._ready.wait(timeout)

    def stop(self) -> None:
        """Ask the accept loop to stop. run() returns once in-flight work is done."""
        self._run_flag.clear()

    def run(self, port: Optional[int] = None) -> None:
        """
        Serve until the run flag is cleared (SIGINT or stop()).

        Raises:
            ServerSetupError: If the socket cannot be created, bound or
                              put in listening state.
            AcceptError: If accept() fails unrecoverably.
        """
        self._setup_logging()

        controller = ShutdownController(self._run_flag)
        controller.install()

        self._listener = Listener(self.config, self._run_flag)
        try:
            host, bound_port = self._listener.open(port)
            logger.info(
                f"Wilson server running on http://{host}:{bound_port} "
                f"with {self.config.workers} workers"
            )
            self._ready.set()

            with WorkerPool(self.config.workers) as pool:
                try:
                    self._listener.serve(lambda conn: pool.enqueue(lambda: self._process_connection(conn)))
                finally:
                    # Stop taking clients before the pool drains in-flight work
                    self._listener.close()
        finally:
            # ─────────────────────────────────────────────────────────────
            # CLEANUP
            # ─────────────────────────────────────────────────────────────
            # Listener is closed (close() is a no-op the second time) and
            # the pool has drained. Give the signal handlers back.
            self._listener.close()
            controller.uninstall()
            self._ready.clear()
            logger.info("Server stopped")

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("wilson").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING (worker threads)
    # =========================================================================

    def _process_connection(self, conn: Connection):
        """Handle one connection from first byte to close. Never raises."""
        with conn:
            # ─────────────────────────────────────────────────────────────
            # READ + PARSE
            # ─────────────────────────────────────────────────────────────
            try:
                request = self._parser.read_request(conn)
            except HTTPParseError as e:
                logger.warning(f"Bad request from {conn.client_ip}: {e}")
                self._send_error(conn, e.status_code, "Bad Request")
                return
            except socket.timeout:
                logger.warning(
                    f"Read timeout ({self.config.read_timeout}s) from "
                    f"{conn.client_ip}:{conn.client_port}, closing"
                )
                return
            except OSError as e:
                logger.warning(f"Read error from {conn.client_ip}: {e}")
                return

            if request is None:
                logger.debug(f"{conn.client_ip}:{conn.client_port} closed without a request")
                return

            logger.info(f"Received {request.method} request for route: {request.path}")

            # ─────────────────────────────────────────────────────────────
            # DISPATCH
            # ─────────────────────────────────────────────────────────────
            response = self._dispatch(request)

            # ─────────────────────────────────────────────────────────────
            # SEND
            # ─────────────────────────────────────────────────────────────
            try:
                conn.send(response.serialize())
            except OSError as e:
                logger.warning(f"Failed to send response to {conn.client_ip}: {e}")

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._router.dispatch(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return self._error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")

    def _error_response(self, status: int, message: str) -> HTTPResponse:
        return (HTTPResponse(status=status)
                .set_header("x-powered-by", self.config.server_name)
                .text(message))

    def _send_error(self, conn: Connection, status: int, message: str):
        """Answer before any handler ran (parse errors)."""
        try:
            conn.send(self._error_response(status, message).serialize())
        except OSError as e:
            logger.debug(f"Could not send {status} to {conn.client_ip}: {e}")
