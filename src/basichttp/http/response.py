"""
=============================================================================
HTTP RESPONSE SERIALIZER
=============================================================================

Turns a structured HTTPResponse into the exact HTTP/1.1 bytes written back
on the connection.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                    ← Status line              │
    │    ────┬─── ─┬─ ─┬─                                                  │
    │    Version  Code Phrase                                              │
    │                                                                      │
    │    Content-Type: text/html\r\n            ← One line per header      │
    │    X-Test: 1\r\n                                                     │
    │                                                                      │
    │    \r\n                                   ← Blank line               │
    │                                                                      │
    │    <h1>Hi</h1>                            ← Body, nothing appended   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT THE SERIALIZER DOES NOT DO
=============================================================================

to_bytes() writes exactly the headers the handler set. It never adds
Content-Length, Date or Server. A handler that wants Content-Length must
set it, for example with ResponseBuilder().content_length(). Without it
the client finds the end of the body when the server closes the
connection, which always happens after one response.

=============================================================================
BUILDER PATTERN
=============================================================================

    ResponseBuilder()
        .status(HTTPStatus.OK)
        .header("Content-Type", "text/html")
        .header("X-Powered-By", "python/basic-http-server")
        .body("<h1>Hello, world!</h1>")
        .build()

Each method returns self; build() returns the HTTPResponse.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
import json

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    A plain data container: the handler builds it (directly or through
    ResponseBuilder), the server serializes it once with to_bytes().
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: Union[str, bytes] = b""

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"HTTP/1.1 {self.status:d} {self.status.phrase}"

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes; strings are encoded as UTF-8."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Returns:
            Status line, header lines, blank line, then the raw body.
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body_bytes


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Usage:
        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .json({"id": 1})
            .content_length()
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""
        self._set_content_length = False

    # =========================================================================
    # STATUS AND HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code (default 200 OK)."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """
        Add a single response header.

        Setting the same name twice keeps the last value.
        """
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        """Add multiple headers at once."""
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def content_length(self) -> "ResponseBuilder":
        """
        Set Content-Length from the body when build() runs.

        This is the only place Content-Length is ever computed for you;
        the serializer itself never adds it.
        """
        self._set_content_length = True
        return self

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body (string auto-encoded to UTF-8).

        For structured data, prefer json(), html(), or text().
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str, content_type: str = "text/plain; charset=utf-8") -> "ResponseBuilder":
        """Set a plain text body and its Content-Type."""
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = content_type
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """Set an HTML body and its Content-Type."""
        return self.text(html, content_type="text/html; charset=utf-8")

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        Set a JSON body.

        Args:
            data: Any json.dumps()-serializable value.
            pretty: Indent the output for humans.
        """
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, default=str).encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        headers = dict(self._headers)
        if self._set_content_length:
            headers["Content-Length"] = str(len(self._body))

        return HTTPResponse(
            status=self._status,
            headers=headers,
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Quick one-liners for common responses. All of them set Content-Length,
# since a handler reaching for a shortcut wants a well-formed reply.
#
#     return ok("Hello")
#     return not_found("No such user")
#
# =============================================================================

def ok(body: Union[str, bytes, dict, list] = "", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    dict/list bodies become JSON, str bodies plain text, bytes are sent raw.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK).content_length()

    if isinstance(body, (dict, list)):
        builder.json(body)
    elif isinstance(body, str):
        builder.text(body, content_type or "text/plain; charset=utf-8")
    else:
        builder.body(body)
        if content_type:
            builder.content_type(content_type)

    return builder.build()


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    return _error(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str = "Not Found") -> HTTPResponse:
    return _error(HTTPStatus.NOT_FOUND, message)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """
    Create a 500 Internal Server Error response.

    The server sends this when a handler raises. Keep the message generic;
    details belong in the log, not in the response.
    """
    return _error(HTTPStatus.INTERNAL_SERVER_ERROR, message)


def _error(status: HTTPStatus, message: str) -> HTTPResponse:
    return (ResponseBuilder()
        .status(status)
        .json({"error": message})
        .content_length()
        .build())
