"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type a mounted static file is served
with.

    ┌────────────────────────────────────────────────────────────────────┐
    │                    STATIC FILE TYPES                               │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  .html  → text/html            .json → application/json            │
    │  .css   → text/css             .map  → application/json            │
    │  .js    → text/javascript      .png  → image/png                   │
    │  .txt   → text/plain           .svg  → image/svg+xml               │
    │                                .ico  → image/x-icon                │
    │                                                                     │
    │  anything else → text/plain                                        │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

Source maps (.map) are JSON documents, so they share JSON's type.

Unknown extensions are served as text/plain rather than
application/octet-stream: a static site mounted at "/" is browsed, not
downloaded. Use HTTPResponse.downloadable() for attachments.
=============================================================================
"""

from pathlib import Path
from typing import Union

MIME_TYPES = {
    # Text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".txt": "text/plain",

    # Data
    ".json": "application/json",
    ".map": "application/json",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
}

DEFAULT_MIME_TYPE = "text/plain"


def get_content_type(path: Union[str, Path]) -> str:
    """
    Get the Content-Type for a file based on its extension.

        >>> get_content_type("static/app.js")
        'text/javascript'
        >>> get_content_type("LOGO.PNG")
        'image/png'
        >>> get_content_type("Makefile")
        'text/plain'
    """
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)
