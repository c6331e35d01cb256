"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes a handler may answer with, each paired with
the fixed reason phrase written on the status line.

=============================================================================
STATUS CODE CATEGORIES
=============================================================================

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ SUCCESS                                                   │
    │        │ 200 OK, 201 CREATED, 202 ACCEPTED, 204 NO CONTENT         │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ REDIRECTION                                               │
    │        │ 301 MOVED PERMANENTLY, 302 FOUND, 304 NOT MODIFIED        │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ CLIENT ERROR                                              │
    │        │ 400 BAD REQUEST, 401 UNAUTHORIZED, 403 FORBIDDEN,         │
    │        │ 404 NOT FOUND, 405 METHOD NOT ALLOWED                     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ SERVER ERROR                                              │
    │        │ 500 INTERNAL SERVER ERROR, 501 NOT IMPLEMENTED,           │
    │        │ 502 BAD GATEWAY, 503 SERVICE UNAVAILABLE                  │
    └────────┴───────────────────────────────────────────────────────────┘

Reason phrases are upper case on the wire:

    HTTP/1.1 404 NOT FOUND
             ─── ─────────
              │      │
              │      └── Reason phrase
              └───────── Status code

Clients must not depend on the phrase (RFC 7230 §3.1.2), only on the code.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare and format as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> f"{HTTPStatus.NOT_FOUND:d}"
        '404'
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301
    FOUND = 302
    NOT_MODIFIED = 304

    # 4xx CLIENT ERROR
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405

    # 5xx SERVER ERROR
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """
        Check if this is an error status code (4xx or 5xx).

        The access log uses this to pick the log level of a request line.
        """
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "CREATED",
    HTTPStatus.ACCEPTED: "ACCEPTED",
    HTTPStatus.NO_CONTENT: "NO CONTENT",

    HTTPStatus.MOVED_PERMANENTLY: "MOVED PERMANENTLY",
    HTTPStatus.FOUND: "FOUND",
    HTTPStatus.NOT_MODIFIED: "NOT MODIFIED",

    HTTPStatus.BAD_REQUEST: "BAD REQUEST",
    HTTPStatus.UNAUTHORIZED: "UNAUTHORIZED",
    HTTPStatus.FORBIDDEN: "FORBIDDEN",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
    HTTPStatus.METHOD_NOT_ALLOWED: "METHOD NOT ALLOWED",

    HTTPStatus.INTERNAL_SERVER_ERROR: "INTERNAL SERVER ERROR",
    HTTPStatus.NOT_IMPLEMENTED: "NOT IMPLEMENTED",
    HTTPStatus.BAD_GATEWAY: "BAD GATEWAY",
    HTTPStatus.SERVICE_UNAVAILABLE: "SERVICE UNAVAILABLE",
}
