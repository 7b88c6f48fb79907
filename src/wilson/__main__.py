"""
=============================================================================
WILSON CLI ENTRY POINT
=============================================================================

    # Hello-world demo on port 3000
    python -m wilson

    # Custom port and workers
    python -m wilson --port 8080 --workers 8

    # Serve a built front-end (must contain index.html)
    python -m wilson --static ./dist

    # Custom 404 page
    python -m wilson --static ./dist --not-found-page ./dist/404.html

Settings come from three places, highest priority first: command-line
flags, WILSON_* environment variables (see ServerConfig.from_env), then
the ServerConfig defaults.

The wilson-server console script installed by pip runs the same main().
=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .exceptions import HTTPServerError
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wilson-server",
        description="Minimal threaded HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m wilson                          # Hello-world demo on :3000
  python -m wilson --port 8080              # Custom port
  python -m wilson --static ./public        # Serve a directory
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: 3000)")
    parser.add_argument(
        "--backlog", "-b",
        type=int,
        help="Number of pending connections the kernel queues (default: 3)"
    )
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Seconds a client may stall while sending a request (default: 5)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--workers", "-w", type=int, help="Worker threads (default: CPU count)")

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--static", "-s", help="Directory to serve (must contain index.html)")
    parser.add_argument(
        "--mount-point",
        default="/",
        help="URL the static index page is served at (default: /)"
    )
    parser.add_argument("--not-found-page", help="HTML file to answer unknown paths with")

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument("--version", "-v", action="version", version=f"Wilson-Server {__version__}")

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment-derived config with any given CLI flags applied on top."""
    config = ServerConfig.from_env()

    overrides = {
        "host": args.host,
        "port": args.port,
        "backlog": args.backlog,
        "read_timeout": args.timeout,
        "workers": args.workers,
        "log_level": args.log_level,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    return config


def build_server(args: argparse.Namespace) -> HTTPServer:
    server = HTTPServer(build_config(args))

    if args.not_found_page:
        server.set_not_found_page(args.not_found_page)

    if args.static:
        server.mount_static_directory(args.static, args.mount_point)
    else:
        @server.get("/")
        def hello(request, response):
            response.text("Hello, World!")

    return server


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        server = build_server(args)
    except (HTTPServerError, OSError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    print()
    print("╔══════════════════════════════════════════════════════════════╗")
    print(f"  Wilson-Server {__version__}")
    print(f"  http://{server.config.host}:{server.config.port}")
    print(f"  Workers: {server.config.workers}   Backlog: {server.config.backlog}")
    print("  Press Ctrl+C to stop")
    print("╚══════════════════════════════════════════════════════════════╝")
    server.router.print_routes()

    try:
        server.run()
    except HTTPServerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
