"""
=============================================================================
LISTENING SOCKET AND ACCEPT LOOP
=============================================================================

SocketServer knows nothing about HTTP. It binds the configured address,
accepts clients and passes each one, wrapped in a Connection, to a
callback. HTTPServer's callback starts a thread and returns at once, so
the accept loop is never held up by a slow client.

    bind(host, port) ─► listen(backlog) ─► ┌─────────────────────────┐
                                           │ accept()                │
                                           │   ├─ client ─► on_accept│
                                           │   ├─ timeout ─► recheck │
                                           │   └─ error ─► stop      │
                                           └─────────────────────────┘

=============================================================================
LISTENER SETTINGS
=============================================================================

    ┌──────────────────┬──────────────────────────────────────────────┐
    │ SO_REUSEADDR     │ rebind right after a restart (TIME_WAIT)     │
    │ TCP_NODELAY      │ responses leave without Nagle batching       │
    │ accept() timeout │ ACCEPT_POLL_INTERVAL, so shutdown() is seen  │
    │                  │ even when no client ever connects again      │
    └──────────────────┴──────────────────────────────────────────────┘

SIGINT and SIGTERM call shutdown() while the loop runs. Handlers can only
be installed from the main thread; a server started on any other thread
is stopped with shutdown() instead.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Dict, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ACCEPT_POLL_INTERVAL = 1.0

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)

ConnectionCallback = Callable[[Connection], None]


class SocketServer:
    """
    Accepts TCP clients on the configured address.

    Usage:
        listener = SocketServer(config)
        listener.start(on_accept)   # returns after shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._listener: Optional[socket.socket] = None
        self._accepting = False
        self._previous_handlers: Dict[int, object] = {}

    @property
    def is_running(self) -> bool:
        return self._accepting

    @property
    def address(self) -> Tuple[str, int]:
        """The bound address, or the configured one before start()."""
        if self._listener is not None:
            return self._listener.getsockname()[:2]
        return (self.config.host, self.config.port)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, on_accept: ConnectionCallback):
        """
        Bind, listen and run the accept loop until shutdown().

        Args:
            on_accept: Called on this thread with each new Connection.

        Raises:
            OSError: The address could not be bound.
        """
        self._listener = self._bind()
        self._accepting = True
        self._install_signal_handlers()

        host, port = self.address
        logger.info(f"Listening on {host}:{port} (backlog {self.config.backlog})")

        try:
            while self._accepting:
                conn = self._next_connection()
                if conn is not None:
                    on_accept(conn)
        finally:
            self._close_listener()

    def shutdown(self):
        """Make the accept loop exit within ACCEPT_POLL_INTERVAL. Idempotent."""
        if self._accepting:
            logger.info("Stopping accept loop")
        self._accepting = False

    # =========================================================================
    # SOCKET
    # =========================================================================

    def _bind(self) -> socket.socket:
        address = (self.config.host, self.config.port)

        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        listener.settimeout(ACCEPT_POLL_INTERVAL)

        try:
            listener.bind(address)
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Cannot listen on {address[0]}:{address[1]}: {e}")
            listener.close()
            raise

        return listener

    def _next_connection(self) -> Optional[Connection]:
        """
        Wait up to one poll interval for a client.

        Returns None on timeout. A listener error ends the loop.
        """
        try:
            client, peer = self._listener.accept()
        except socket.timeout:
            return None
        except OSError as e:
            if self._accepting:
                logger.error(f"accept() failed, stopping: {e}")
            self._accepting = False
            return None

        logger.debug(f"Client connected from {peer[0]}:{peer[1]}")

        return Connection(
            socket=client,
            address=peer,
            buffer_size=self.config.buffer_size,
            timeout=self.config.timeout,
            max_request_size=self.config.max_request_size,
        )

    def _close_listener(self):
        self._remove_signal_handlers()

        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                pass
            self._listener = None

        logger.info("Listener closed")

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _install_signal_handlers(self):
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Running off the main thread, leaving signals alone")
            return

        def on_signal(signum, frame):
            logger.info(f"Caught {signal.Signals(signum).name}")
            self.shutdown()

        for sig in STOP_SIGNALS:
            self._previous_handlers[sig] = signal.signal(sig, on_signal)

    def _remove_signal_handlers(self):
        while self._previous_handlers:
            sig, handler = self._previous_handlers.popitem()
            signal.signal(sig, handler)
