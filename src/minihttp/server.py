"""
=============================================================================
HTTP SERVER: THE CONNECTION LOOP
=============================================================================

Ties the pieces together. For every accepted connection:

    ┌──────────────────────────────────────────────────────────────────┐
    │   accept loop (main thread)                                      │
    │       │                                                          │
    │       └──► threading.Thread(_process_connection, conn)           │
    │                 │                                                │
    │                 ├── conn.read_request()       raw bytes          │
    │                 ├── parser.parse()            HTTPRequest        │
    │                 ├── handler(request)          middleware+router  │
    │                 │      ├── LoggingMiddleware                     │
    │                 │      ├── CompressionMiddleware (gzip)          │
    │                 │      └── Router → route handler                │
    │                 ├── response.to_bytes()       wire bytes         │
    │                 ├── conn.send_response()                         │
    │                 └── conn.close()                                 │
    └──────────────────────────────────────────────────────────────────┘

One thread per connection, one request per connection. Nothing is shared
between connection threads except the router table (read-only once the
server runs) and the file storage.

=============================================================================
FAILURE HANDLING
=============================================================================

    Client sent nothing / closed early   → close, nothing written
    Malformed request line or path       → close, nothing written
    Request over max_request_size        → close, nothing written
    Socket error or timeout while reading→ close, nothing written
    Handler raised                       → 500, logged with traceback

None of these reach the accept loop: a bad connection only ever costs its
own thread.

=============================================================================
"""

import logging
import threading
from typing import Optional, Callable, Set

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, Router,
)
from .http.response import internal_error
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


SHUTDOWN_JOIN_TIMEOUT = 5.0


class HTTPServer:
    """
    HTTP/1.1 server on raw sockets.

    Usage:
        server = HTTPServer(ServerConfig(port=4221))

        @server.get("/echo")
        def echo(request):
            return text_response(request.segments[2])

        server.use(LoggingMiddleware())
        server.run()  # Blocks until SIGINT/SIGTERM or stop()

    Most callers use minihttp.app.create_app(), which registers the
    standard routes and middleware.
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._router = router or Router()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built in run()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

        self._threads: Set[threading.Thread] = set()
        self._threads_lock = threading.Lock()

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware. First added is outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def middleware(self) -> MiddlewarePipeline:
        return self._middleware

    def route(self, prefix: str, method: str = "GET"):
        return self._router.route(prefix, method)

    def get(self, prefix: str):
        return self._router.get(prefix)

    def post(self, prefix: str):
        return self._router.post(prefix)

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server and block until it is stopped.

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            ValueError: An override leaves the config invalid.
            OSError: The address cannot be bound.
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port
        self.config.validate()

        self._setup_logging()

        self._handler = self._middleware.wrap(self._router.handle)

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"(files: {self.config.storage_root})"
        )
        for key in self._router.routes():
            logger.info(f"  route {key}")
        for middleware in self._middleware:
            logger.info(f"  middleware {middleware.name}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask the accept loop to exit. run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        """Wait briefly for in-flight connection threads, then return."""
        logger.info("Shutting down server...")

        with self._threads_lock:
            threads = list(self._threads)

        for thread in threads:
            thread.join(SHUTDOWN_JOIN_TIMEOUT)

        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a thread for the connection. Called on the accept thread."""
        thread = threading.Thread(
            target=self._run_connection_thread,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        with self._threads_lock:
            self._threads.add(thread)
        thread.start()

    def _run_connection_thread(self, conn: Connection):
        try:
            self._process_connection(conn)
        finally:
            with self._threads_lock:
                self._threads.discard(threading.current_thread())

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on the connection, then close it.
        """
        with conn:
            # ─────────────────────────────────────────────────────────────
            # READ
            # ─────────────────────────────────────────────────────────────
            try:
                raw_request = conn.read_request()
            except HTTPParseError as e:
                logger.debug(f"[{conn.id}] Dropped: {e} ({e.status_code})")
                return
            except OSError as e:
                logger.debug(f"[{conn.id}] Read failed: {e}")
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            # ─────────────────────────────────────────────────────────────
            # DECODE
            # ─────────────────────────────────────────────────────────────
            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.debug(f"[{conn.id}] Dropped malformed request: {e}")
                return

            # ─────────────────────────────────────────────────────────────
            # ROUTE, HANDLE, NEGOTIATE (middleware + router)
            # ─────────────────────────────────────────────────────────────
            conn.state = ConnectionState.PROCESSING
            response = self.dispatch(request, conn.id)

            # ─────────────────────────────────────────────────────────────
            # ENCODE AND WRITE
            # ─────────────────────────────────────────────────────────────
            conn.send_response(response.to_bytes())

    def dispatch(self, request: HTTPRequest, conn_id: str = "-") -> HTTPResponse:
        """
        Run a decoded request through middleware and router.

        A handler exception becomes a 500 response.
        """
        handler = self._handler or self._middleware.wrap(self._router.handle)
        try:
            return handler(request)
        except Exception as e:
            logger.exception(f"[{conn_id}] Handler error: {e}")
            return internal_error()
