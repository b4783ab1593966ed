"""
=============================================================================
minihttp: A SMALL HTTP/1.1 SERVER ON RAW SOCKETS
=============================================================================

Listens on TCP, decodes one request per connection, routes it by method and
first path segment, gzips the body when the client asks for it, and writes
the response back.

    python -m minihttp --directory /tmp/data

    curl -v http://localhost:4221/echo/abc
    curl -v http://localhost:4221/user-agent
    curl -v --data-binary @notes.txt http://localhost:4221/files/notes.txt
    curl -v http://localhost:4221/files/notes.txt
    curl -v -H "Accept-Encoding: gzip" http://localhost:4221/echo/abc

=============================================================================
PACKAGE LAYOUT
=============================================================================

    core/        TCP accept loop and per-connection I/O
    http/        request decoding, response encoding, routing
    middleware/  access log, gzip negotiation
    handlers/    /, /echo, /user-agent, /files
    storage.py   files under the --directory root
    server.py    connection loop (one thread per connection)
    app.py       create_app(): routes + middleware
    config.py    ServerConfig

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig
from .app import create_app

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
