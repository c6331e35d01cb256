"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the single request/response exchange
it carries.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

    Client sends:
        send("GET / HTTP/1.1\r\nHost: x\r\n\r\n")

    Server might receive:
        recv() → "GET / HTTP/1.1\r\nHo"   (partial)
        recv() → "st: x\r\n\r\n"          (rest)

recv() returns whatever has arrived, up to the size asked for, and only the
bytes that arrived: there is no padding to strip. Finding message
boundaries is the parser's job; this class only moves bytes and tracks
where the exchange is.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ACCEPTED ──► PARSING ──► HANDLING ──► WRITING ──┐
                    │                               │
                    │ parse failed                  │
                    ▼                               ▼
                 CLOSING ◄──────────────────────────┘
                    │
                    ▼
                  CLOSED

There is no keep-alive edge: every connection is closed after at most one
response.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)

# Upper bounds on what close() discards: bytes, and seconds in total
MAX_DRAIN_BYTES = 64 * 1024
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and close bookkeeping."""
    ACCEPTED = "accepted"    # Just accepted, nothing read yet
    PARSING = "parsing"      # Reading and parsing the request
    HANDLING = "handling"    # Request parsed, handler is executing
    WRITING = "writing"      # Sending response data
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Exposes recv() so the request parser can read from it directly, and
    send_response() / close() for the rest of the exchange.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used as a log prefix.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    timeout: Optional[float] = 30.0

    def __post_init__(self):
        # None means fully blocking reads and writes
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def recv(self, bufsize: int) -> bytes:
        """
        Receive up to bufsize bytes.

        Errors (timeouts, resets) propagate to the caller. The parser turns
        them into a parse failure, which drops the connection.
        """
        self.state = ConnectionState.PARSING
        return self.socket.recv(bufsize)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so that every byte is written; send() may write only
        part of the data when the kernel buffer is full.

        Returns:
            True if send succeeded, False if the write failed.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): flush what was written and send FIN
        2. Drain what the client still sends, for at most DRAIN_TIMEOUT
           seconds in total; none of it is served
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            drained = 0
            while drained < MAX_DRAIN_BYTES:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                request = parser.read(conn)
                conn.send_response(response.to_bytes())
            # Connection closed here, whatever happened above
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
