"""
=============================================================================
CONTENT-ENCODING NEGOTIATION (gzip)
=============================================================================

Compresses a response body with gzip when the client lists "gzip" in its
Accept-Encoding header.

=============================================================================
HOW THE HEADER IS READ
=============================================================================

Commas are removed and the rest is split on whitespace. The response is
compressed when one of the resulting tokens is exactly "gzip":

    ┌──────────────────────────────┬─────────────────────────┬──────────┐
    │  Accept-Encoding             │  Tokens                 │  gzip?   │
    ├──────────────────────────────┼─────────────────────────┼──────────┤
    │  gzip                        │  [gzip]                 │  yes     │
    │  deflate, gzip, br           │  [deflate, gzip, br]    │  yes     │
    │  invalid-encoding            │  [invalid-encoding]     │  no      │
    │  gzip;q=0.5                  │  [gzip;q=0.5]           │  no      │
    │  (absent)                    │  []                     │  no      │
    └──────────────────────────────┴─────────────────────────┴──────────┘

Quality values and preference order are not interpreted. Header values are
lowercased by the Header Parser, so "GZIP" matches too.

=============================================================================
WHAT CHANGES ON THE RESPONSE
=============================================================================

    Before                            After
    ─────────────────────────────     ──────────────────────────────────
    Content-Type: text/plain          Content-Type: text/plain
    Content-Length: 3                 Content-Length: 23     (compressed)
                                      Content-Encoding: gzip
    abc                               <gzip stream>

Every response the client asked to have gzipped is compressed, however
small it is. The one exception is the router's bare 404, which carries no
Content-Type: it is sent exactly as the router built it.

=============================================================================
"""

import gzip
import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


GZIP = "gzip"
DEFAULT_LEVEL = 6


def accepted_encodings(header: str) -> list[str]:
    """
    Tokenize an Accept-Encoding value.

        >>> accepted_encodings("deflate, gzip")
        ['deflate', 'gzip']
    """
    return header.replace(",", "").split()


def negotiate_encoding(
    request: HTTPRequest,
    response: HTTPResponse,
    level: int = DEFAULT_LEVEL,
) -> HTTPResponse:
    """
    Apply gzip Content-Encoding to a response when the request accepts it.

    The response is modified in place and also returned.

    Args:
        request: The request whose Accept-Encoding is inspected.
        response: The handler's response.
        level: gzip compression level (1-9).

    Returns:
        The same response object.
    """
    if GZIP not in accepted_encodings(request.accept_encoding):
        return response

    if response.content_type is None:
        return response  # Bare router 404

    original_size = len(response.body)
    response.body = gzip.compress(response.body, compresslevel=level)

    response.headers["Content-Length"] = str(len(response.body))
    response.headers["Content-Encoding"] = GZIP

    logger.debug(f"gzip {original_size} -> {len(response.body)} bytes for {request.path}")
    return response


class CompressionMiddleware(Middleware):
    """
    Runs negotiate_encoding() on every response.

    Add it after the access log so the log sees the compressed size:

        pipeline.add(LoggingMiddleware())
        pipeline.add(CompressionMiddleware(level=6))
    """

    def __init__(self, level: int = DEFAULT_LEVEL):
        self.level = level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        response = next(request)
        return negotiate_encoding(request, response, self.level)
