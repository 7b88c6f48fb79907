"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server produces, and the reason phrases written on
the status line.

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase (looked up here)
              └───────── Status code (stored as a plain int)

=============================================================================
THE REASON TABLE
=============================================================================

Only the codes the server itself emits have an entry:

    ┌────────┬────────────────────────┬──────────────────────────────────┐
    │  Code  │ Phrase                 │ Produced by                      │
    ├────────┼────────────────────────┼──────────────────────────────────┤
    │  200   │ OK                     │ every handler by default         │
    │  301   │ Moved Permanently      │ HTTPResponse.redirect()          │
    │  302   │ Found                  │ HTTPResponse.redirect(..., 302)  │
    │  400   │ Bad Request            │ malformed request                │
    │  404   │ Not Found              │ no route for the path            │
    │  405   │ Method Not Allowed     │ no route for the method          │
    │  500   │ Internal Server Error  │ handler raised                   │
    └────────┴────────────────────────┴──────────────────────────────────┘

Any other code a handler chooses is written with the phrase "OK". Clients
only look at the number; RFC 7230 makes the phrase purely informational.

Status codes are full-width ints. Nothing truncates a handler's 599.
=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Named status codes.

    IntEnum, so members compare and serialize as plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
    """

    OK = 200
    MOVED_PERMANENTLY = 301
    FOUND = 302
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return reason_phrase(self)

    @property
    def is_redirect(self) -> bool:
        return 300 <= self < 400

    @property
    def is_error(self) -> bool:
        return self >= 400


DEFAULT_REASON = "OK"

STATUS_REASONS = {
    200: "OK",
    301: "Moved Permanently",
    302: "Found",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


def reason_phrase(code: int) -> str:
    """
    Look up the reason phrase for a status code.

    Unknown codes fall back to "OK":

        >>> reason_phrase(404)
        'Not Found'
        >>> reason_phrase(201)
        'OK'
    """
    return STATUS_REASONS.get(int(code), DEFAULT_REASON)
