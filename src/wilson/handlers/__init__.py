"""
=============================================================================
HANDLERS MODULE
=============================================================================

A handler answers one routed request by filling in the response the router
hands it:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Type               │ Use Case                                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │ FunctionHandler    │ Computed content from a plain function         │
    │                    │ def hello(req, res): res.text("Hi")            │
    ├─────────────────────────────────────────────────────────────────────┤
    │ StaticFileHandler  │ One file from disk, typed by extension         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RedirectHandler    │ Location header + 301/302                      │
    └─────────────────────────────────────────────────────────────────────┘

mount_static_directory() registers a StaticFileHandler for every file of a
directory in one call.
=============================================================================
"""

from .base import Handler, FunctionHandler, as_handler
from .static import StaticFileHandler, mount_static_directory
from .redirect import RedirectHandler

__all__ = [
    "Handler",
    "FunctionHandler",
    "as_handler",
    "StaticFileHandler",
    "mount_static_directory",
    "RedirectHandler",
]
