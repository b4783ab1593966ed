"""
=============================================================================
HTTP PROTOCOL
=============================================================================

Everything that turns bytes into requests and responses into bytes, plus
the router that connects the two.

    request.py       HTTPRequest, parse_headers, RequestParser
    response.py      HTTPResponse, ResponseBuilder, encode_response
    router.py        Router keyed on (method, first path segment)
    status_codes.py  HTTPStatus

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_headers,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    encode_response,
    text_response,
    not_found,
    route_not_found,
    internal_error,
)
from .router import Router, route_key
from .status_codes import HTTPStatus

__all__ = [
    # Request decoding
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_headers",
    "parse_request",

    # Response building and encoding
    "HTTPResponse",
    "ResponseBuilder",
    "encode_response",
    "text_response",
    "not_found",
    "route_not_found",
    "internal_error",

    # Routing
    "Router",
    "route_key",

    # Status codes
    "HTTPStatus",
]
