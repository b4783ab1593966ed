"""
=============================================================================
CORE NETWORKING
=============================================================================

The TCP layer under the HTTP code:

    SocketServer   listening socket and accept loop
    Connection     one client socket: read a request, write a response, close

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Client socket I/O
    "ConnectionState",  # Connection lifecycle states
]
