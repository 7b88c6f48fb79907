"""
Handler interface.

A handler fills in the response it is given; it does not build one. The
router creates a fresh HTTPResponse (status 200) per request, passes it to
handle() and sends whatever the handler left in it.

    class Hello(Handler):
        def handle(self, request, response):
            response.text("Hello, World!")

Plain functions with the same signature work too; the router wraps them in
a FunctionHandler:

    @server.get("/")
    def hello(request, response):
        response.text("Hello, World!")
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Union

from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..http.request import HTTPRequest
    from ..http.response import HTTPResponse

HandlerFunc = Callable[["HTTPRequest", "HTTPResponse"], None]


class Handler(ABC):
    """Something that can answer a routed request."""

    @abstractmethod
    def handle(self, request: "HTTPRequest", response: "HTTPResponse") -> None:
        ...


class FunctionHandler(Handler):
    """Computed content: wraps a func(request, response) callable."""

    def __init__(self, func: HandlerFunc):
        self.func = func

    def handle(self, request: "HTTPRequest", response: "HTTPResponse") -> None:
        self.func(request, response)

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", repr(self.func))
        return f"FunctionHandler({name})"


def as_handler(obj: Union[Handler, HandlerFunc]) -> Handler:
    """
    Normalize a registration target to a Handler.

    Raises:
        ConfigurationError: If obj is neither a Handler nor callable.
    """
    if isinstance(obj, Handler):
        return obj
    if callable(obj):
        return FunctionHandler(obj)
    raise ConfigurationError(f"Not a handler: {obj!r}")
