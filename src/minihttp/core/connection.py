"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: buffered reading of a single request,
writing the response, and closing.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

A request sent in one write can arrive in several recv() calls:

    Client sends:   "GET /echo/abc HTTP/1.1\r\nHost: x\r\n\r\n"

    Server gets:    recv() → "GET /echo/a"
                    recv() → "bc HTTP/1.1\r\nHost: x\r\n\r\n"

So the reader keeps calling recv() until it sees the blank line that ends
the headers, then keeps going until Content-Length body bytes are in:

    ┌───────────────────────────────┐
    │ while no \r\n\r\n in buffer:  │  ← headers
    │     recv(buffer_size)         │
    ├───────────────────────────────┤
    │ while body < Content-Length:  │  ← body
    │     recv(buffer_size)         │
    └───────────────────────────────┘

If the client closes its side early (EOF), whatever arrived is returned
and the decoder decides what to make of it.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    ACCEPTED ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
        │           │                                      ▲
        │           └── EOF / error / too large ───────────┤
        └──────────────────────────────────────────────────┘

There is no keep-alive: after the response is written the server closes
the socket, and the client sees EOF after the response.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import (
    HEADER_TERMINATOR, HTTPParseError, header_content_length, parse_headers,
)


logger = logging.getLogger(__name__)


DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, used in logs."""

    ACCEPTED = "accepted"      # Just accepted, nothing read yet
    READING = "reading"        # Reading request bytes
    PROCESSING = "processing"  # Decoding, routing, running the handler
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence running
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: Current ConnectionState.
        created_at: When the connection was accepted.
        bytes_read: Total bytes received.
        bytes_sent: Total bytes written.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)
    bytes_read: int = 0
    bytes_sent: int = 0

    # From ServerConfig
    buffer_size: int = 1024
    timeout: Optional[float] = None
    max_request_size: int = 10 * 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one HTTP request from the socket.

        Returns:
            The request bytes (possibly incomplete if the client closed
            early), or None if the client closed without sending anything.

        Raises:
            HTTPParseError: The request exceeds max_request_size (413).
            TimeoutError: No data within the socket timeout.
            OSError: Any other socket failure.
        """
        self.state = ConnectionState.READING

        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Read until the end of the headers
        # ─────────────────────────────────────────────────────────────────
        while HEADER_TERMINATOR not in self._buffer:
            if not self._fill():
                return self._take() or None

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: Read the body, if Content-Length announces one
        # ─────────────────────────────────────────────────────────────────
        header_end = self._buffer.find(HEADER_TERMINATOR)
        body_start = header_end + len(HEADER_TERMINATOR)
        content_length = self._content_length(self._buffer[:header_end])

        while len(self._buffer) - body_start < content_length:
            if not self._fill():
                break  # Client closed mid-body

        return self._take()

    def _fill(self) -> bool:
        """recv() once into the buffer. False on EOF."""
        chunk = self.socket.recv(self.buffer_size)
        if not chunk:
            return False

        self._buffer += chunk
        self.bytes_read += len(chunk)

        if len(self._buffer) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: more than {self.max_request_size} bytes",
                status_code=413,
            )
        return True

    def _take(self) -> bytes:
        data, self._buffer = self._buffer, b""
        return data

    def _content_length(self, header_section: bytes) -> int:
        """
        Body length announced by the raw header section, 0 if none.

        Uses the decoder's header rules, so a repeated Content-Length
        resolves to the same (last) value the decoder will keep.
        """
        lines = header_section.decode("utf-8", errors="replace").split("\r\n")
        return header_content_length(parse_headers(lines[1:])) or 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write the whole response with sendall().

        Returns:
            True if sent, False if the client had gone away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.bytes_sent += len(data)
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR) sends FIN so the client sees end of response
        2. drain anything the client still sends, briefly
        3. close() releases the descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(DRAIN_TIMEOUT)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes the drain timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed: {self.bytes_read} bytes in, "
            f"{self.bytes_sent} bytes out, {self.age * 1000:.1f}ms"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
