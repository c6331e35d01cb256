"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request off a byte stream and turns it into a structured
HTTPRequest. This is where untrusted bytes from the network become data the
handler can rely on, so every framing decision lives here.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  POST /api/users HTTP/1.1\r\n             ← Request line             │
    │  ──┬─ ────┬───── ───┬────                                            │
    │  Method  Path     Version                                            │
    │                                                                      │
    │  Host: localhost:3000\r\n                 ← Header block             │
    │  Content-Type: application/json\r\n                                  │
    │  Content-Length: 20\r\n                   ← Body length              │
    │  \r\n                                     ← Blank line               │
    │                                                                      │
    │  {"name": "Ada L."}                       ← Exactly 20 body bytes    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
READING FROM A STREAM
=============================================================================

TCP delivers bytes in arbitrary chunks. The parser reads in three phases:

    1. INITIAL READ     One bounded recv() (2048 bytes by default). For
                        almost every request this already holds the whole
                        header block and often the whole body.

    2. HEADER GROWTH    While \r\n\r\n has not been seen, keep reading.
                        The request line is checked as soon as its
                        \r\n arrives, so a bad one fails without waiting
                        for the rest of the header block.
                        The buffer may grow up to max_header_size; past
                        that the request is rejected (431).

    3. BODY COMPLETION  Content-Length says how many body bytes to expect.
                        Whatever followed \r\n\r\n is the first chunk. If
                        it is short, recv(remaining) asks for exactly the
                        deficit and never more.

        recv(2048) ──► b"POST / HTTP/1.1\r\nContent-Length: 20\r\n\r\nhello"
                                                                  └─5─┘
        recv(15)   ──► b" world, again!!"                   15 more bytes
                       └────── body = 20 bytes ──────┘

Only the header block is decoded as text (UTF-8, invalid bytes replaced).
The body stays raw bytes so binary payloads are never corrupted.

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "What do you do when Content-Length is smaller than the body you got?"
A: "Reject the request. Truncating silently hides a client bug, and the
   extra bytes could be a smuggled second request."

Q: "Why not decode the whole request as UTF-8?"
A: "Headers are text, bodies are not. An image upload decoded with
   errors='replace' would be silently corrupted."

=============================================================================
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Protocol
import logging

from .errors import HTTPParseError
from .methods import HTTPMethod


logger = logging.getLogger(__name__)

LINE_END = b"\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"


class Readable(Protocol):
    """Anything the parser can pull bytes from: a socket or a Connection."""

    def recv(self, bufsize: int) -> bytes:
        ...


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Fully built before the handler sees it and never mutated afterwards:
    the dataclass is frozen and headers is a read-only mapping.

    Attributes:
        method:         HTTPMethod from the request line.
        path:           Request target exactly as sent ("/users?page=1").
        headers:        Header name → value. Names keep the case the client
                        sent; a repeated name keeps its last value.
        body:           Raw body bytes, exactly Content-Length long.
        version:        Protocol token from the request line.
        client_address: (ip, port) of the peer, for logging.
    """

    method: HTTPMethod
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"
    client_address: tuple[str, int] = ("", 0)

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value with a case-insensitive name lookup.

        Headers are stored with their received case, so "content-type"
        and "Content-Type" are both found here. If the client sent the
        same name in two spellings the later line wins.

        Example:
            request.get_header("content-type")  # "text/html"
        """
        wanted = name.lower()
        found = default
        for key, value in self.headers.items():
            if key.lower() == wanted:
                found = value
        return found

    @property
    def content_length(self) -> int:
        """Number of body bytes (always equals the declared Content-Length)."""
        return len(self.body)

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, invalid sequences replaced."""
        return self.body.decode("utf-8", errors="replace")


class RequestParser:
    """
    Reads and parses HTTP requests.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        stream.recv()
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Initial bounded read ───────────────► empty? → fail           │
        │  2. Grow until \r\n\r\n ─────────────────► too big / EOF? → fail   │
        │  3. Request line → method, path ─────────► unknown method → fail  │
        │  4. Header lines → dict (last wins)                               │
        │  5. Content-Length ──────────────────────► bad / too big → fail    │
        │  6. Complete body with recv(deficit) ───► EOF / excess → fail      │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    Every failure is an HTTPParseError. Socket errors and timeouts while
    reading are failures too; the caller only has to handle one exception.

    ==========================================================================
    """

    def __init__(
        self,
        initial_read_size: int = 2048,
        buffer_size: int = 8192,
        max_header_size: int = 64 * 1024,
        max_body_size: int = 10 * 1024 * 1024,
    ):
        """
        Initialize the request parser.

        Args:
            initial_read_size: Size of the first recv() on a connection.
            buffer_size: Size of each further recv() while the header
                         block is still incomplete.
            max_header_size: Largest header block accepted, in bytes.
            max_body_size: Largest Content-Length accepted, in bytes.
        """
        self.initial_read_size = initial_read_size
        self.buffer_size = buffer_size
        self.max_header_size = max_header_size
        self.max_body_size = max_body_size

    # =========================================================================
    # STREAM INTERFACE
    # =========================================================================

    def read(
        self,
        stream: Readable,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read exactly one request from a stream.

        Args:
            stream: Object with a socket-style recv(n) method.
            client_address: Peer (ip, port), copied onto the request.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the stream cannot be read or the request
                            is malformed.
        """
        # ─────────────────────────────────────────────────────────────────
        # PHASE 1: Initial bounded read
        # ─────────────────────────────────────────────────────────────────
        buffer = self._recv(stream, self.initial_read_size)
        if not buffer:
            raise HTTPParseError("Connection closed before request line")

        # ─────────────────────────────────────────────────────────────────
        # PHASE 2: Grow the buffer until the header block is complete
        # ─────────────────────────────────────────────────────────────────
        request_line_checked = False
        while HEADER_TERMINATOR not in buffer:
            # Reject a bad request line as soon as it is complete, before
            # blocking on header bytes that may never come
            if not request_line_checked and LINE_END in buffer:
                line = buffer[:buffer.index(LINE_END)]
                self._parse_request_line(line.decode("utf-8", errors="replace"))
                request_line_checked = True

            if len(buffer) > self.max_header_size:
                raise HTTPParseError(
                    f"Header block too large: over {self.max_header_size} bytes",
                    status_code=431,
                )
            chunk = self._recv(stream, self.buffer_size)
            if not chunk:
                raise HTTPParseError("Incomplete request: no header terminator")
            buffer += chunk

        header_end = buffer.index(HEADER_TERMINATOR)
        if header_end > self.max_header_size:
            raise HTTPParseError(
                f"Header block too large: {header_end} bytes",
                status_code=431,
            )

        head = buffer[:header_end]
        body = buffer[header_end + len(HEADER_TERMINATOR):]
        method, path, version, headers = self._parse_head(head)
        content_length = self._content_length(headers)

        # ─────────────────────────────────────────────────────────────────
        # PHASE 3: Complete the body
        # ─────────────────────────────────────────────────────────────────
        if len(body) > content_length:
            raise HTTPParseError(
                f"Content-Length {content_length} is smaller than the "
                f"{len(body)} body bytes received"
            )

        remaining = content_length - len(body)
        while remaining > 0:
            chunk = self._recv(stream, remaining)
            if not chunk:
                raise HTTPParseError(
                    f"Incomplete body: expected {content_length} bytes, got {len(body)}"
                )
            body += chunk
            remaining -= len(chunk)

        return HTTPRequest(
            method=method,
            path=path,
            headers=headers,
            body=body,
            version=version,
            client_address=client_address,
        )

    def _recv(self, stream: Readable, size: int) -> bytes:
        try:
            return stream.recv(size)
        except OSError as e:
            # Covers timeouts, resets and reads on a closed socket
            raise HTTPParseError(f"Failed to read request: {e}") from e

    # =========================================================================
    # IN-MEMORY INTERFACE
    # =========================================================================

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse a complete request that is already in memory.

        Same rules as read(), minus the I/O: the body in data must be
        exactly Content-Length bytes long.
        """
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        method, path, version, headers = self._parse_head(data[:header_end])
        content_length = self._content_length(headers)

        body = data[header_end + len(HEADER_TERMINATOR):]
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )
        if len(body) > content_length:
            raise HTTPParseError(
                f"Content-Length {content_length} is smaller than the "
                f"{len(body)} body bytes received"
            )

        return HTTPRequest(
            method=method,
            path=path,
            headers=headers,
            body=body,
            version=version,
            client_address=client_address,
        )

    # =========================================================================
    # HEADER BLOCK
    # =========================================================================

    def _parse_head(
        self,
        head: bytes,
    ) -> tuple[HTTPMethod, str, str, Dict[str, str]]:
        """
        Parse the request line and header lines.

        Args:
            head: Raw bytes before the \r\n\r\n separator.

        Returns:
            Tuple of (method, path, version, headers).
        """
        # Lossy on purpose: a stray invalid byte in a header value is not
        # worth dropping the request over
        lines = head.decode("utf-8", errors="replace").split("\r\n")

        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])
        return method, path, version, headers

    def _parse_request_line(self, line: str) -> tuple[HTTPMethod, str, str]:
        """
        Parse "METHOD SP PATH [SP VERSION]".

        Raises:
            HTTPParseError: On an empty line, unknown method or missing path.
        """
        tokens = line.split()
        if not tokens:
            raise HTTPParseError("Empty request line")

        method = HTTPMethod.from_token(tokens[0])

        if len(tokens) < 2:
            raise HTTPParseError(f"Missing path in request line: {line!r}")
        path = tokens[1]

        version = tokens[2] if len(tokens) > 2 else "HTTP/1.1"
        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: Value" lines into a dictionary.

        Splits on the first ": " only, so values may contain colons
        ("Host: localhost:3000"). A repeated name overwrites the earlier
        value. Lines without ": " are skipped.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            if not line:
                break

            name, sep, value = line.partition(": ")
            if not sep:
                logger.debug(f"Skipping malformed header line: {line!r}")
                continue

            headers[name] = value

        return headers

    def _content_length(self, headers: Dict[str, str]) -> int:
        """
        Get the declared body length.

        A missing header means no body. The name is matched without regard
        to case; when several spellings are present the last one wins.

        Raises:
            HTTPParseError: If the value is not a non-negative integer or
                            exceeds max_body_size.
        """
        raw: Optional[str] = None
        for name, value in headers.items():
            if name.lower() == "content-length":
                raw = value

        if raw is None:
            return 0

        raw = raw.strip()
        if not (raw.isascii() and raw.isdigit()):
            raise HTTPParseError(f"Invalid Content-Length: {raw!r}")

        length = int(raw)
        if length > self.max_body_size:
            raise HTTPParseError(
                f"Request body too large: {length} bytes",
                status_code=413,
            )
        return length


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Parse a complete in-memory request with default limits.

    Use RequestParser directly to read from a socket or to change limits.
    """
    return RequestParser().parse(data, client_address)
