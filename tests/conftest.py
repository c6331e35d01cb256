"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, List, Optional, Union
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from basichttp import HTTPServer, ServerConfig
from basichttp.server import Handler


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /api/users?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "John", "email": "john@example.com"}'
    return (
        b"POST /api/users HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"Content-Type: application/json\r\n"
    ) + f"Content-Length: {len(body)}\r\n\r\n".encode() + body


# =============================================================================
# SCRIPTED STREAM
# =============================================================================

class FakeStream:
    """
    Stand-in for a socket that replays scripted recv() results.

    Each recv(n) returns the next chunk, cut to n bytes (the rest is kept
    for the following call). An exception in the script is raised instead.
    Once the script runs out, recv() returns b"" like a closed peer.

    The sizes passed to recv() are recorded in `sizes`.
    """

    def __init__(self, chunks):
        self._chunks: List[Union[bytes, Exception]] = list(chunks)
        self.sizes: List[int] = []

    def recv(self, bufsize: int) -> bytes:
        self.sizes.append(bufsize)
        if not self._chunks:
            return b""

        chunk = self._chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk

        if len(chunk) > bufsize:
            self._chunks.insert(0, chunk[bufsize:])
            chunk = chunk[:bufsize]
        return chunk


@pytest.fixture
def make_stream() -> Callable[..., FakeStream]:
    """Factory: make_stream(b"chunk1", b"chunk2", ...)."""
    def _make(*chunks) -> FakeStream:
        return FakeStream(chunks)
    return _make


class FakeSocket(FakeStream):
    """
    Stand-in for an accepted client socket.

    Reads replay the script like FakeStream. Writes are collected in
    `sent`, or raise `send_error` when one is given.
    """

    def __init__(self, chunks=(), send_error: Optional[Exception] = None):
        super().__init__(chunks)
        self.send_error = send_error
        self.sent = b""
        self.timeouts: List[Optional[float]] = []
        self.closed = False

    def settimeout(self, value: Optional[float]):
        self.timeouts.append(value)

    def sendall(self, data: bytes):
        if self.send_error is not None:
            raise self.send_error
        self.sent += data

    def shutdown(self, how: int):
        pass

    def close(self):
        self.closed = True


@pytest.fixture
def make_socket() -> Callable[..., FakeSocket]:
    """Factory: make_socket(b"request bytes", send_error=BrokenPipeError())."""
    def _make(*chunks, send_error: Optional[Exception] = None) -> FakeSocket:
        return FakeSocket(chunks, send_error=send_error)
    return _make


# =============================================================================
# LIVE SERVER
# =============================================================================

@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def read_until_closed(sock: socket.socket) -> bytes:
    """Read everything the server sends until it closes the connection."""
    data = b""
    while True:
        try:
            chunk = sock.recv(4096)
        except ConnectionResetError:
            break
        if not chunk:
            break
        data += chunk
    return data


class ServerThread:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        return socket.create_connection(("127.0.0.1", self.port), timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes on a fresh connection, return the full reply."""
        with self.connect() as sock:
            sock.sendall(raw)
            sock.shutdown(socket.SHUT_WR)
            return read_until_closed(sock)

    @staticmethod
    def read_reply(sock: socket.socket) -> bytes:
        return read_until_closed(sock)


@pytest.fixture
def serve() -> Generator[Callable[..., ServerThread], None, None]:
    """
    Factory for live servers on an OS-chosen port.

        server = serve(handler)
        reply = server.request(b"GET / HTTP/1.1\\r\\n\\r\\n")

    Every server started through the factory is stopped after the test.
    """
    started: List[ServerThread] = []

    def _serve(handler: Handler, **overrides) -> ServerThread:
        options = dict(host="127.0.0.1", port=0, timeout=2.0, log_level="WARNING")
        options.update(overrides)

        srv = ServerThread(HTTPServer(handler, ServerConfig(**options)))
        srv.start()
        started.append(srv)
        return srv

    yield _serve

    for srv in started:
        srv.stop()
