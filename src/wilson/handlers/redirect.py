"""Redirect handler: answers every request with a Location header."""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.status_codes import HTTPStatus
from .base import Handler


class RedirectHandler(Handler):
    """
    Send the client elsewhere.

        server.get("/old", RedirectHandler("/new"))            # 301
        server.get("/tmp", RedirectHandler("/new", 302))       # 302
    """

    def __init__(self, location: str, status: int = HTTPStatus.MOVED_PERMANENTLY):
        self.location = location
        self.status = status

    def handle(self, request: HTTPRequest, response: HTTPResponse) -> None:
        response.redirect(self.location, self.status)

    def __repr__(self) -> str:
        return f"RedirectHandler({self.location!r}, {self.status})"
