"""
=============================================================================
COSTTRACKER - IN-MEMORY INVENTORY AND COST TRACKER
=============================================================================

A small web app for keeping a running list of items, quantities and unit
costs, served by an HTTP/1.1 layer written directly on top of sockets.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          costtracker                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  core/          SocketServer (accept loop)                  │   │
    │   │                 Connection  (frame one request, reply)      │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │                               │ raw bytes                           │
    │                               ▼                                     │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  http/          RequestParser → Router → HTTPResponse       │   │
    │   │                 form codec, status codes, MIME types        │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │                               │ HTTPRequest                         │
    │                               ▼                                     │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  handlers/      ItemHandlers, StaticFileHandler             │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │                               │                                     │
    │                               ▼                                     │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  inventory/     ItemStore, validation, HTML/CSV rendering   │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    python -m costtracker --port 8080

    # or from code
    from costtracker import create_app, ServerConfig

    create_app(ServerConfig(port=8080)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .app import create_app

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
