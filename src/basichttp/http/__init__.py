"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows what HTTP/1.1 looks like on the wire:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ status_codes.py   HTTPStatus: code ↔ reason phrase                  │
    │ methods.py        HTTPMethod: closed set of request methods         │
    │ errors.py         HTTPParseError                                    │
    │ request.py        RequestParser: bytes → HTTPRequest                │
    │ response.py       HTTPResponse.to_bytes(): HTTPResponse → bytes     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
HTTP MESSAGE FORMAT (RFC 7230)
=============================================================================

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    GET /path HTTP/1.1\r\n            HTTP/1.1 200 OK\r\n
    Header: Value\r\n                 Header: Value\r\n
    \r\n                              \r\n
    [body]                            [body]

- Lines end with CRLF (\r\n), not just \n
- Headers and body are separated by an empty line (\r\n\r\n)
- Body length is given by the Content-Length header

=============================================================================
"""

from .errors import HTTPParseError
from .methods import HTTPMethod
from .request import HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,             # 200 OK
    bad_request,    # 400 Bad Request
    not_found,      # 404 Not Found
    internal_error, # 500 Internal Server Error
)
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPMethod",
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "bad_request",
    "not_found",
    "internal_error",

    # Status codes
    "HTTPStatus",
]
