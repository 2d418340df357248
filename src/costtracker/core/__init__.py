"""
=============================================================================
CORE NETWORKING
=============================================================================

The transport layer of the server:

    socket_server.py   listening socket, accept loop, signals, shutdown
    connection.py      one client socket: frame one request, send one
                       response, close

Everything above this layer works with bytes and HTTPRequest objects and
never touches a socket.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLargeError

__all__ = [
    "SocketServer",          # Listening socket + sequential accept loop
    "Connection",            # One client socket: read request, send response
    "ConnectionState",       # Connection lifecycle states
    "RequestTooLargeError",  # Request grew past max_request_size
]
