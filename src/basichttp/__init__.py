"""
=============================================================================
BASICHTTP - Minimal HTTP/1.1 Server Over Raw Sockets
=============================================================================

A small, single-threaded HTTP/1.1 server: it accepts one TCP connection at
a time, parses exactly one request, hands it to a user-supplied handler,
writes the handler's response and closes the connection.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    BASICHTTP SERVER ARCHITECTURE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RAW SOCKET PROGRAMMING                                          │
    │      - TCP socket creation and binding                               │
    │      - Serial accept loop, one connection at a time                  │
    │      - Bounded reads, growing until the header block is complete     │
    │                                                                      │
    │   2. HTTP/1.1 PROTOCOL                                               │
    │      - Request parsing (method, path, headers, body)                 │
    │      - Body completion driven by Content-Length                      │
    │      - Response serialization (status line, headers, body)           │
    │                                                                      │
    │   3. ROBUSTNESS                                                      │
    │      - Malformed requests drop the connection, never the server      │
    │      - Handler exceptions become 500 responses                       │
    │      - Socket timeouts bound how long one client can stall           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    basichttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m basichttp)
    ├── server.py            # HTTPServer: parse → handle → respond
    ├── config.py            # ServerConfig dataclass, parse_address()
    ├── access_log.py        # One log line per served request
    ├── core/                # Low-level components
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # Accepted-socket wrapper
    └── http/                # HTTP protocol components
        ├── methods.py       # HTTPMethod enum
        ├── status_codes.py  # HTTPStatus enum
        ├── errors.py        # HTTPParseError
        ├── request.py       # Request parsing
        └── response.py      # Response serialization and builder

=============================================================================
QUICK START
=============================================================================

    from basichttp import HTTPServer, HTTPStatus, ResponseBuilder

    def hello(request):
        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("Content-Type", "text/html")
            .body("<h1>Hello, world!</h1>")
            .build())

    HTTPServer(hello).listen("127.0.0.1:3000")

=============================================================================
"""

__version__ = "0.1.0"

from .server import HTTPServer, Handler
from .config import ServerConfig, parse_address
from .http import (
    HTTPMethod, HTTPStatus, HTTPRequest, HTTPResponse,
    HTTPParseError, ResponseBuilder,
)

__all__ = [
    "HTTPServer",
    "Handler",
    "ServerConfig",
    "parse_address",
    "HTTPMethod",
    "HTTPStatus",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPParseError",
    "ResponseBuilder",
    "__version__",
]
