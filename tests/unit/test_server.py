"""
Unit tests for HTTPServer request processing, without a listening socket.
"""

import gzip
import socket

import pytest

from minihttp import HTTPServer, ServerConfig, create_app
from minihttp.core.connection import Connection, ConnectionState
from minihttp.http.request import RequestParser
from minihttp.http.response import HTTPStatus, text_response

from conftest import make_request, split_response


@pytest.fixture
def app(tmp_path) -> HTTPServer:
    return create_app(ServerConfig(directory=str(tmp_path), log_level="WARNING"))


def serve_once(server: HTTPServer, data: bytes) -> bytes:
    """Feed raw bytes through _process_connection over a socket pair."""
    server_side, client_side = socket.socketpair()
    client_side.settimeout(5.0)
    try:
        client_side.sendall(data)
        client_side.shutdown(socket.SHUT_WR)

        conn = Connection(socket=server_side, address=("127.0.0.1", 1), timeout=5.0)
        server._process_connection(conn)
        assert conn.state == ConnectionState.CLOSED

        chunks = []
        while True:
            chunk = client_side.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)
    finally:
        client_side.close()


class TestCreateApp:
    """Tests for application wiring."""

    def test_routes(self, app):
        assert app.router.routes() == [
            "GET/", "GET/echo", "GET/user-agent", "GET/files", "POST/files",
        ]

    def test_middleware(self, app):
        assert [m.name for m in app.middleware] == ["LoggingMiddleware", "CompressionMiddleware"]

    def test_invalid_config_fails_fast(self):
        with pytest.raises(ValueError):
            create_app(ServerConfig(port=-1))


class TestDispatch:
    """Tests for HTTPServer.dispatch()."""

    def test_handler_exception_becomes_500(self):
        server = HTTPServer(ServerConfig())

        @server.get("/boom")
        def boom(request):
            raise RuntimeError("kaboom")

        response = server.dispatch(make_request("GET", "/boom"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"Internal Server Error"

    def test_decorators(self):
        server = HTTPServer(ServerConfig())

        @server.post("/things")
        def things(request):
            return text_response("made", HTTPStatus.CREATED)

        assert server.dispatch(make_request("POST", "/things/1")).status_code == 201
        assert server.dispatch(make_request("GET", "/things/1")).status_code == 404

    def test_unusable_file_name_is_404(self, app):
        request = RequestParser().parse(b"GET /files/a\x00b HTTP/1.1\r\n\r\n")

        assert app.dispatch(request).status_code == 404

    def test_gzip_through_app(self, app):
        response = app.dispatch(make_request("GET", "/echo/abc", {"accept-encoding": "gzip"}))

        assert response.headers["Content-Encoding"] == "gzip"
        assert gzip.decompress(response.body) == b"abc"


class TestProcessConnection:
    """Tests for the per-connection flow."""

    def test_echo(self, app, echo_request):
        raw = serve_once(app, echo_request)

        assert raw == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc\r\n"
        )

    def test_unknown_route(self, app):
        raw = serve_once(app, b"GET /nowhere HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n")

        assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n\r\n"

    def test_post_file(self, app, post_file_request, tmp_path):
        status, headers, body = split_response(serve_once(app, post_file_request))

        assert status == "HTTP/1.1 201 Created"
        assert body == b"saved"
        assert (tmp_path / "notes.txt").read_bytes() == b"hello, world"

    @pytest.mark.parametrize("data", [
        b"",
        b"GARBAGE\r\n\r\n",
        b"GET nopath HTTP/1.1\r\n\r\n",
    ])
    def test_malformed_gets_no_response(self, app, data):
        """Undecodable requests are dropped without a reply."""
        assert serve_once(app, data) == b""

    def test_oversized_gets_no_response(self, tmp_path):
        server = create_app(ServerConfig(
            directory=str(tmp_path), buffer_size=64, max_request_size=128,
        ))

        assert serve_once(server, b"GET / HTTP/1.1\r\nX-Pad: " + b"a" * 300 + b"\r\n\r\n") == b""


class TestRun:
    """Tests for HTTPServer.run() argument handling."""

    @pytest.mark.parametrize("overrides", [{"port": 70000}, {"port": -5}])
    def test_invalid_override_rejected(self, overrides):
        server = HTTPServer(ServerConfig(host="127.0.0.1"))

        with pytest.raises(ValueError):
            server.run(**overrides)

        assert not server.is_running
