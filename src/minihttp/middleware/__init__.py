"""
=============================================================================
MIDDLEWARE
=============================================================================

LoggingMiddleware:
    One access log line per request on the "minihttp.access" logger.

CompressionMiddleware:
    gzip Content-Encoding when the client's Accept-Encoding lists gzip.

Order used by create_app():

    pipeline.add(LoggingMiddleware())       # outermost
    pipeline.add(CompressionMiddleware())   # next to the router

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog
from .compression import CompressionMiddleware, negotiate_encoding

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",

    # Built-in middleware
    "LoggingMiddleware",
    "RequestLog",
    "CompressionMiddleware",
    "negotiate_encoding",
]
