"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from pathlib import Path
from typing import Dict, Generator, Optional, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig, create_app
from minihttp.http import HTTPRequest


def make_request(
    method: str = "GET",
    path: str = "/",
    headers: Optional[Dict[str, str]] = None,
    body: bytes = b"",
) -> HTTPRequest:
    """Build a decoded request directly, headers given already lowercased."""
    return HTTPRequest(method=method, path=path, headers=headers or {}, body=body)


@pytest.fixture
def echo_request() -> bytes:
    """GET /echo/abc as it arrives on the wire."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"\r\n"
    )


@pytest.fixture
def post_file_request() -> bytes:
    """POST /files/notes.txt with a 12 byte body."""
    body = b"hello, world"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class BackgroundServer:
    """Runs an HTTPServer on a daemon thread for socket-level tests."""

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start the server and wait until it accepts connections."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        for _ in range(50):  # 5 seconds max
            if not self.server.is_running:
                time.sleep(0.1)
                continue
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(("127.0.0.1", self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, data: bytes, half_close: bool = True, timeout: float = 5.0) -> bytes:
        """
        Send raw bytes and read until the server closes the connection.

        With half_close the client shuts down its write side after sending,
        so the server sees EOF even when the request has no blank line.
        """
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(data)
            if half_close:
                s.shutdown(socket.SHUT_WR)

            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
            return b"".join(chunks)


def split_response(raw: bytes) -> Tuple[str, Dict[str, str], bytes]:
    """
    Split raw response bytes into (status line, headers, body).

    The body is cut to Content-Length when present, dropping the trailing
    CRLF the server writes after it.
    """
    head, _, rest = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")

    headers: Dict[str, str] = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value

    if "Content-Length" in headers:
        rest = rest[: int(headers["Content-Length"])]

    return lines[0], headers, rest


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "files"
    directory.mkdir()
    return directory


@pytest.fixture
def live_server(free_port: int, files_dir: Path) -> Generator[BackgroundServer, None, None]:
    """The full application on a free port, files rooted in a temp dir."""
    server = create_app(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        directory=str(files_dir),
        timeout=5.0,
        log_level="WARNING",
    ))

    runner = BackgroundServer(server, free_port)
    runner.start()

    yield runner

    runner.stop()
