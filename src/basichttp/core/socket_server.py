"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and runs the accept loop. For each accepted
client it wraps the socket in a Connection and hands it to a callback,
which runs to completion before the next accept().

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Reserve IP:PORT          ← failure here is fatal
    3. listen()    OS starts queueing incoming connections
    4. accept()    Wait for a client, get a NEW socket for it
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ accept()
                                ▼
                    ┌───────────────────────┐
                    │  Client Socket        │ ◄── One at a time: read,
                    │  (Connection)         │     handle, write, close
                    └───────────────────────┘

=============================================================================
ONE CONNECTION AT A TIME
=============================================================================

The loop is strictly sequential. A slow client delays every client queued
behind it (up to `backlog` of them wait in the kernel). The per-connection
socket timeout is what bounds that delay. Responses therefore go out in
the order connections were accepted.

=============================================================================
STOPPING
=============================================================================

    shutdown() ──► _stop_requested.set()
                        │
                        ▼
    accept() wakes up at most ACCEPT_POLL_INTERVAL later, sees the flag,
    and the loop ends. The connection being served (if any) finishes first.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ConnectionHandler = Callable[[Connection], None]

# How long accept() blocks before the loop re-checks for shutdown
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._listener: Optional[socket.socket] = None

        # Set by shutdown(); the accept loop polls it
        self._stop_requested = threading.Event()
        # Set while the listener accepts, so other threads know when
        # connect() will succeed
        self._listening = threading.Event()

        self._saved_signal_handlers: Dict[int, Any] = {}

    @property
    def is_running(self) -> bool:
        return self._listening.is_set() and not self._stop_requested.is_set()

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the server's bound address (IP, port).

        Once listening this is the real socket address, so a configured
        port of 0 reports the port the OS picked.
        """
        if self._listener is not None:
            return self._listener.getsockname()[:2]
        return (self.config.host, self.config.port)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, connection_handler: ConnectionHandler):
        """
        Bind, listen and serve connections until shutdown().

        This method BLOCKS.

        Args:
            connection_handler: Called synchronously with each accepted
                                Connection. The next accept() happens only
                                after it returns.

        Raises:
            OSError: If the address cannot be bound. Nothing is served.
        """
        self._listener = self._open_listener()
        self._stop_requested.clear()
        self._install_signal_handlers()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port} (backlog {self.config.backlog})")
        self._listening.set()

        try:
            self._serve_forever(connection_handler)
        finally:
            self._close_listener()

    def shutdown(self):
        """
        Ask the accept loop to stop.

        Safe to call from a signal handler or another thread, and more than
        once.
        """
        if not self._stop_requested.is_set():
            logger.info("Shutting down socket server...")
        self._stop_requested.set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the server is listening.

        Returns:
            True once listening, False on timeout.
        """
        return self._listening.wait(timeout)

    # =========================================================================
    # LISTENING SOCKET
    # =========================================================================

    def _open_listener(self) -> socket.socket:
        """Create, configure, bind and listen. Bind errors are re-raised."""
        host, port = self.config.host, self.config.port
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        try:
            # TIME_WAIT leftovers from a previous run don't block a restart;
            # a live listener on the same port still does
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            # Responses go out in one write; don't hold them back
            listener.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

            listener.bind((host, port))
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Cannot listen on {host}:{port}: {e}")
            listener.close()
            raise

        listener.settimeout(ACCEPT_POLL_INTERVAL)
        return listener

    def _close_listener(self):
        self._listening.clear()
        self._restore_signal_handlers()

        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                pass
            self._listener = None

        logger.info("Socket server stopped")

    # =========================================================================
    # ACCEPT LOOP
    # =========================================================================

    def _serve_forever(self, connection_handler: ConnectionHandler):
        """
        Serve connections one at a time.

            until stop requested:
                accept()                    ← wakes up every poll interval
                connection_handler(conn)    ← runs to completion
        """
        while not self._stop_requested.is_set():
            accepted = self._accept()
            if accepted is None:
                continue

            client_socket, client_address = accepted
            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            connection_handler(Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            ))

    def _accept(self) -> Optional[Tuple[socket.socket, Tuple[str, int]]]:
        """
        Accept one client.

        Returns None when the poll interval passes without a client, or
        when the listener failed; a failed listener also stops the loop.
        """
        try:
            return self._listener.accept()
        except socket.timeout:
            return None
        except OSError as e:
            if not self._stop_requested.is_set():
                logger.error(f"Accept failed, stopping: {e}")
            self._stop_requested.set()
            return None

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _install_signal_handlers(self):
        """
        Turn SIGINT/SIGTERM into shutdown().

        Python only allows signal handlers on the main thread; when the
        server runs on another thread, shutdown() is the way to stop it.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}")
            self.shutdown()

        for signum in (signal.SIGINT, signal.SIGTERM):
            self._saved_signal_handlers[signum] = signal.signal(signum, on_signal)

    def _restore_signal_handlers(self):
        while self._saved_signal_handlers:
            signum, handler = self._saved_signal_handlers.popitem()
            signal.signal(signum, handler)
