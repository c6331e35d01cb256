"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The low-level networking pieces: the listening socket with its accept loop,
and the wrapper around each accepted client socket. Nothing in here knows
about HTTP.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates the TCP listening socket                                  │
    │  • Binds to IP:PORT, fails loudly if it can't                        │
    │  • Runs the accept() loop on the calling thread                      │
    │  • Handles graceful shutdown via signals (SIGTERM, SIGINT)           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One connection at a time
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps a client socket, applies the socket timeout                 │
    │  • recv() for the parser, send_response() for the reply              │
    │  • Tracks state (ACCEPTED → PARSING → HANDLING → WRITING → CLOSED)   │
    │  • Always closed after one exchange                                  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Listening socket and accept loop
    "Connection",       # Wrapper for an accepted client socket
    "ConnectionState",  # Enum for connection lifecycle states
]
