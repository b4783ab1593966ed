"""
Application wiring: the standard routes and middleware on an HTTPServer.

    ┌────────┬─────────────┬──────────────────────┐
    │ Method │ Prefix      │ Handler              │
    ├────────┼─────────────┼──────────────────────┤
    │ GET    │ /           │ index                │
    │ GET    │ /echo       │ echo                 │
    │ GET    │ /user-agent │ user_agent           │
    │ GET    │ /files      │ FileHandler.get      │
    │ POST   │ /files      │ FileHandler.post     │
    └────────┴─────────────┴──────────────────────┘
"""

from typing import Optional

from .config import ServerConfig
from .server import HTTPServer
from .storage import FileStorage
from .handlers import index, echo, user_agent, FileHandler
from .middleware import LoggingMiddleware, CompressionMiddleware


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Build a server with every route and middleware registered.

    Example:
        app = create_app(ServerConfig(port=4221, directory="/tmp/data"))
        app.run()
    """
    config = config or ServerConfig()
    server = HTTPServer(config)

    server.use(LoggingMiddleware(log_format=config.log_format))
    server.use(CompressionMiddleware(level=config.gzip_level))

    files = FileHandler(FileStorage(config.storage_root))

    router = server.router
    router.add_route("/", index, method="GET")
    router.add_route("/echo", echo, method="GET")
    router.add_route("/user-agent", user_agent, method="GET")
    router.add_route("/files", files.get, method="GET")
    router.add_route("/files", files.post, method="POST")

    return server
