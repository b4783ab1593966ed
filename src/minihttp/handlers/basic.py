"""
=============================================================================
BASIC HANDLERS
=============================================================================

    GET /                 → 200 text/html   "<h1>Hello World</h1>"
    GET /echo/<value>     → 200 text/plain  "<value>"
    GET /user-agent       → 200 text/plain  "<user-agent header>"

Each handler is a plain function HTTPRequest → HTTPResponse and never
touches the socket.

=============================================================================
"""

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, HTTPStatus, ResponseBuilder,
    not_found, text_response,
)


INDEX_HTML = "<h1>Hello World</h1>"

USER_AGENT_MISSING = "User-Agent header not found"


def index(request: HTTPRequest) -> HTTPResponse:
    """Landing page."""
    return ResponseBuilder().html(INDEX_HTML).build()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Return the path segment after /echo/ as the body.

    Only "/echo/<value>" is accepted. "/echo" and "/echo/a/b" have the
    wrong number of segments and get a 404.
    """
    segments = request.segments
    if len(segments) != 3:
        return not_found()

    return text_response(segments[2])


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    Return the client's User-Agent header as the body.

    The value comes back lowercased, as stored by the header parser.
    Without the header the client gets a 400.
    """
    value = request.user_agent
    if value is None:
        return text_response(USER_AGENT_MISSING, HTTPStatus.BAD_REQUEST)

    return text_response(value)
