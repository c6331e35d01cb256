"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

Ties the pieces together: the accept loop, the request parser, the
user-supplied handler and the response serializer.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser.read(conn) ──── HTTPParseError ──► close, no reply   │
    │        │                                                             │
    │        ▼ HTTPRequest                                                 │
    │   handler(request) ──────────── exception ──────► 500 response       │
    │        │                                                             │
    │        ▼ HTTPResponse                                                │
    │   response.to_bytes()                                                │
    │        │                                                             │
    │        ▼                                                             │
    │   conn.send_response() ───────── write error ────► logged            │
    │        │                                                             │
    │        ▼                                                             │
    │   conn.close()                   ← always, exactly one response      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only a bind failure stops the server. Everything that goes wrong on one
connection stays on that connection.

=============================================================================
INTERVIEW QUESTIONS ABOUT WEB SERVERS
=============================================================================

Q: "Why not answer a malformed request with 400?"
A: "If we can't parse the request we don't know what the client expects.
   Dropping the connection is the least surprising thing we can do, and
   it keeps the server from being used as a reflector for garbage input."

Q: "What happens if a client connects and sends nothing?"
A: "The read blocks until the socket timeout fires. That timeout is a
   parse failure, the connection is closed, and the loop moves on. With
   timeout=None it would block the server indefinitely."

=============================================================================
"""

import logging
from typing import Callable, Optional, Tuple

from .access_log import AccessLogger
from .config import ServerConfig, parse_address
from .core import Connection, ConnectionState, SocketServer
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, internal_error,
)


logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]
"""A request handler: takes the parsed request, returns the response."""


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        def hello(request):
            return (ResponseBuilder()
                .status(HTTPStatus.OK)
                .header("Content-Type", "text/html")
                .body("<h1>Hello, world!</h1>")
                .build())

        server = HTTPServer(hello)
        server.listen("127.0.0.1:3000")   # Blocks until Ctrl+C

    =========================================================================
    """

    def __init__(self, handler: Handler, config: Optional[ServerConfig] = None):
        """
        Initialize the HTTP server.

        Args:
            handler: Called once per successfully parsed request. It must
                     always return an HTTPResponse; errors are expressed
                     as 4xx/5xx responses.
            config: Server configuration. Uses defaults if not provided.
        """
        self.handler = handler
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(
            initial_read_size=self.config.initial_read_size,
            buffer_size=self.config.buffer_size,
            max_header_size=self.config.max_header_size,
            max_body_size=self.config.max_body_size,
        )
        self._access_log = AccessLogger(log_format=self.config.log_format)

        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening on port 0."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def listen(self, address: str):
        """
        Bind to a "host:port" address and serve (blocking).

        Raises:
            ValueError: If the address is malformed.
            OSError: If the address cannot be bound.
        """
        host, port = parse_address(address)
        self.run(host=host, port=port)

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Blocks until shutdown() is called or SIGINT/SIGTERM arrives.

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            OSError: If the address cannot be bound.
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")

        self._running = True
        try:
            self._socket_server.start(self._process_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped")

    def shutdown(self):
        """Stop the server after the connection in progress (if any)."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. Returns False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("basichttp").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on a connection, then close it.

        Called by SocketServer for each accepted connection, on the accept
        loop's own thread. Nothing raised here reaches the loop.
        """
        with conn:
            # ─────────────────────────────────────────────────────────────
            # READ + PARSE
            # ─────────────────────────────────────────────────────────────
            try:
                request = self._parser.read(conn, conn.address)
            except HTTPParseError as e:
                logger.warning(
                    f"[{conn.id}] Dropping connection from {conn.client_ip}: "
                    f"{e} ({e.status_code})"
                )
                return

            # ─────────────────────────────────────────────────────────────
            # HANDLE
            # ─────────────────────────────────────────────────────────────
            conn.state = ConnectionState.HANDLING
            try:
                response = self.handler(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                response = internal_error()

            # ─────────────────────────────────────────────────────────────
            # SERIALIZE + WRITE
            # ─────────────────────────────────────────────────────────────
            try:
                data = response.to_bytes()
            except Exception as e:
                # e.g. a handler returned something that is not an HTTPResponse
                logger.exception(f"[{conn.id}] Could not serialize response: {e}")
                response = internal_error()
                data = response.to_bytes()

            if not conn.send_response(data):
                return

            self._access_log.log(
                request,
                response,
                duration_ms=conn.age * 1000,
                request_id=conn.id,
            )
