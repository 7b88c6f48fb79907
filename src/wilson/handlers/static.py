"""
=============================================================================
STATIC DIRECTORY MOUNTING
=============================================================================

Serves a directory of files (a built front-end, a docs site) by turning
every file into its own GET route at startup.

=============================================================================
HOW MOUNTING WORKS
=============================================================================

    site/                             Routes registered
    ├── index.html          ───►     GET /                 → index.html
    ├── favicon.ico         ───►     GET /index.html       → index.html
    ├── css/                         GET /favicon.ico      → favicon.ico
    │   └── app.css         ───►     GET /css/app.css      → css/app.css
    └── js/
        └── app.js          ───►     GET /js/app.js        → js/app.js

The directory is walked ONCE, in mount_static_directory(). Files added
later are not served until the server is restarted; files removed later
produce an error when requested (the handler raises, the worker answers 500).

Because every route maps to a file that was found under the mounted
directory, there is no request-path → filesystem-path translation at
request time, and "GET /../../etc/passwd" is simply an unknown route (404).

=============================================================================
STATIC MODE
=============================================================================

Mounting switches the router into static mode. From then on ordinary
registrations (server.get(...), ...) are rejected with ConfigurationError:
a static site owns the whole route table. The mount itself registers
through the router's internal path, which skips that check.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  mount_static_directory("site")                                      │
    │      ├── validate: is a directory, not empty, has index.html        │
    │      ├── router.enable_static_mode()                                 │
    │      ├── router._register("GET", "/", index.html)                   │
    │      └── for each file: router._register("GET", "/<rel>", file)     │
    └─────────────────────────────────────────────────────────────────────┘
=============================================================================
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from ..exceptions import ConfigurationError
from ..http.mime_types import get_content_type
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from .base import Handler

if TYPE_CHECKING:
    from ..http.router import Router

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"


class StaticFileHandler(Handler):
    """
    Serves one file from disk.

    The file is read on every request, so edits to an already mounted file
    show up without a restart.

    Args:
        path: File to serve.
        content_type: Overrides the type guessed from the extension.
    """

    def __init__(self, path: Union[str, Path], content_type: Optional[str] = None):
        self.path = Path(path)
        self.content_type = content_type or get_content_type(self.path)

    def handle(self, request: HTTPRequest, response: HTTPResponse) -> None:
        response.set_header("Content-Type", self.content_type)
        response.static_file(self.path)

    def __repr__(self) -> str:
        return f"StaticFileHandler({str(self.path)!r}, {self.content_type!r})"


def _validate_directory(directory: Path) -> None:
    if not directory.is_dir():
        raise ConfigurationError(f"Static path is not a directory: {directory}")

    if not any(directory.iterdir()):
        raise ConfigurationError(f"Static directory is empty: {directory}")

    if not (directory / INDEX_FILE).is_file():
        raise ConfigurationError(f"Static directory has no {INDEX_FILE}: {directory}")


def mount_static_directory(
    router: "Router",
    directory: Union[str, Path],
    mount_point: str = "/",
) -> int:
    """
    Register one GET route per regular file under directory.

    Args:
        router: Router to register into. It is switched to static mode.
        directory: Directory to serve. Must contain index.html.
        mount_point: URL the index page is served at.

    Returns:
        Number of routes registered.

    Raises:
        ConfigurationError: If the directory is missing, empty or has no
                            index.html.
    """
    directory = Path(directory)
    _validate_directory(directory)

    router.enable_static_mode()

    router._register("GET", mount_point, StaticFileHandler(directory / INDEX_FILE, "text/html"))
    count = 1

    prefix = mount_point.rstrip("/")
    for path in sorted(directory.rglob("*")):
        if not path.is_file():
            continue
        route = f"{prefix}/{path.relative_to(directory).as_posix()}"
        router._register("GET", route, StaticFileHandler(path))
        count += 1

    logger.info(f"Mounted {directory} at {mount_point} ({count} routes)")
    return count
