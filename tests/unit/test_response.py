"""
Unit tests for HTTP response building and encoding.
"""

from minihttp.http.response import (
    HTTPResponse, ResponseBuilder, HTTPStatus,
    encode_response, text_response, not_found, route_not_found, internal_error,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_default_response(self):
        """Test default response values."""
        response = HTTPResponse()

        assert response.status == HTTPStatus.OK
        assert response.headers == {}
        assert response.body == b""
        assert response.version == "HTTP/1.1"

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.CREATED).status_line == "HTTP/1.1 201 Created"
        assert HTTPResponse(status=HTTPStatus.BAD_REQUEST).status_line == "HTTP/1.1 400 Bad Request"

    def test_set_header_chains(self):
        response = HTTPResponse().set_header("X-A", "1").set_header("X-B", "2")

        assert response.headers == {"X-A": "1", "X-B": "2"}

    def test_to_bytes(self):
        """Status line, headers in order, blank line, body, trailing CRLF."""
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"Content-Type": "text/plain", "Content-Length": "3"},
            body=b"abc",
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc\r\n"
        )

    def test_to_bytes_adds_no_headers(self):
        """The encoder writes only the headers the response carries."""
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).to_bytes() == (
            b"HTTP/1.1 404 Not Found\r\n\r\n\r\n"
        )

    def test_to_bytes_binary_body(self):
        """Binary bodies pass through untouched."""
        body = bytes(range(256))
        raw = HTTPResponse(headers={"Content-Length": "256"}, body=body).to_bytes()

        assert raw.endswith(body + b"\r\n")

    def test_encode_response(self):
        response = text_response("hi")

        assert encode_response(response) == response.to_bytes()


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_text(self):
        """Content-Type comes before Content-Length."""
        response = ResponseBuilder().text("abc").build()

        assert list(response.headers.items()) == [
            ("Content-Type", "text/plain"),
            ("Content-Length", "3"),
        ]
        assert response.body == b"abc"

    def test_html(self):
        response = ResponseBuilder().html("<h1>Hello World</h1>").build()

        assert response.content_type == "text/html"
        assert response.headers["Content-Length"] == "20"

    def test_octet_stream(self):
        response = ResponseBuilder().octet_stream(b"\x00\x01").build()

        assert response.content_type == "application/octet-stream"
        assert response.body == b"\x00\x01"

    def test_length_counts_utf8_bytes(self):
        """Content-Length is the encoded byte length, not characters."""
        response = ResponseBuilder().text("héllo").build()

        assert response.headers["Content-Length"] == "6"

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.CREATED).text("saved").build()

        assert response.status_code == 201
        assert response.reason == "Created"

    def test_custom_header(self):
        response = ResponseBuilder().header("X-Custom", "value").build()

        assert response.headers == {"X-Custom": "value"}


class TestConvenienceFunctions:
    """Tests for the response helpers."""

    def test_text_response(self):
        response = text_response("x", HTTPStatus.BAD_REQUEST)

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.content_type == "text/plain"

    def test_not_found(self):
        response = not_found()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"Not Found"
        assert response.content_type == "text/plain"

    def test_route_not_found_is_bare(self):
        """The router's 404 has no headers and no body."""
        response = route_not_found()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.headers == {}
        assert response.body == b""

    def test_internal_error(self):
        response = internal_error()

        assert response.status_code == 500
        assert response.body == b"Internal Server Error"


class TestHTTPStatus:
    """Tests for HTTPStatus."""

    def test_int_comparison(self):
        assert HTTPStatus.OK == 200
        assert HTTPStatus.NOT_FOUND == 404

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.PAYLOAD_TOO_LARGE.phrase == "Payload Too Large"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_categories(self):
        assert HTTPStatus.CREATED.is_success
        assert not HTTPStatus.OK.is_error
        assert HTTPStatus.BAD_REQUEST.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
