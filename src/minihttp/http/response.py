"""
=============================================================================
HTTP RESPONSE AND RESPONSE ENCODER
=============================================================================

Handlers build an HTTPResponse; the connection loop serializes it with
to_bytes() and writes it to the socket in one sendall().

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n                 ← status line
    Content-Type: text/plain\r\n        ← headers, insertion order
    Content-Length: 3\r\n
    \r\n                                ← blank line
    abc                                 ← body
    \r\n                                ← trailing CRLF

The encoder writes exactly the headers the response carries. It never adds
Date, Server or Content-Length on its own; handlers set Content-Type and
Content-Length through ResponseBuilder.content(), and the gzip negotiator
rewrites Content-Length when it compresses. The trailing CRLF after the
body is not counted in Content-Length.

=============================================================================
RESPONSE CONSTRUCTION
=============================================================================

    # Fluent builder
    response = (ResponseBuilder()
        .status(HTTPStatus.CREATED)
        .text("saved")
        .build())

    # One-liners for the common cases
    return text_response("abc")
    return not_found()

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


CRLF = "\r\n"

TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"
OCTET_STREAM = "application/octet-stream"


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be written.

    Mutable on purpose: the Content-Encoding negotiator replaces the body
    and rewrites headers in place before the encoder runs.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_code(self) -> int:
        return int(self.status)

    @property
    def reason(self) -> str:
        return self.status.phrase

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {self.status_code} {self.reason}"

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header, keeping its position if it already exists."""
        self.headers[name] = value
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response.

        Returns:
            status line, headers, blank line, body, trailing CRLF.
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        head = (CRLF.join(lines) + CRLF + CRLF).encode("utf-8")
        return head + self.body + CRLF.encode("ascii")


def encode_response(response: HTTPResponse) -> bytes:
    """Response Encoder entry point; same as response.to_bytes()."""
    return response.to_bytes()


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Every body-setting method writes Content-Type first and Content-Length
    second, so handler responses always carry both headers in that order.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    # =========================================================================
    # STATUS & HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    # =========================================================================
    # BODY METHODS
    # =========================================================================

    def content(self, content_type: str, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the body together with Content-Type and Content-Length.

        Strings are encoded as UTF-8 before the length is taken.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")

        self._body = body
        self._headers["Content-Type"] = content_type
        self._headers["Content-Length"] = str(len(body))
        return self

    def text(self, text: str) -> "ResponseBuilder":
        return self.content(TEXT_PLAIN, text)

    def html(self, html: str) -> "ResponseBuilder":
        return self.content(TEXT_HTML, html)

    def octet_stream(self, data: bytes) -> "ResponseBuilder":
        return self.content(OCTET_STREAM, data)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def text_response(body: str, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """A text/plain response with Content-Type and Content-Length set."""
    return ResponseBuilder().status(status).text(body).build()


def not_found(message: str = "Not Found") -> HTTPResponse:
    """
    A 404 text/plain response.

    Used by handlers whose path has the wrong shape. Unknown routes use
    route_not_found() instead.
    """
    return text_response(message, HTTPStatus.NOT_FOUND)


def route_not_found() -> HTTPResponse:
    """
    The router's fallback: 404 with no headers and an empty body.

        HTTP/1.1 404 Not Found\r\n\r\n\r\n
    """
    return HTTPResponse(status=HTTPStatus.NOT_FOUND)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    return text_response(message, HTTPStatus.INTERNAL_SERVER_ERROR)
