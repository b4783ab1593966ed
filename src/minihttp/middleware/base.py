"""
=============================================================================
MIDDLEWARE
=============================================================================

The router only maps a request to a handler. Concerns that apply to every
route sit around it as middleware, each one a callable taking the request
and the rest of the chain:

    create_app() chain
    ──────────────────
    LoggingMiddleware          times the call, logs the final response
      └─ CompressionMiddleware   gzip when the client asks for it
           └─ Router.handle        route lookup, handler call, bare 404

A middleware must pass the request on by calling next(request). It can
then edit the response it gets back before returning it.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, Iterator, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# What a middleware calls to continue: the next middleware or the router
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """One layer around the router."""

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        ...

    @property
    def name(self) -> str:
        return type(self).__name__


class MiddlewarePipeline:
    """
    Ordered list of middleware. The first one added wraps all the others.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware()).add(CompressionMiddleware())
        handler = pipeline.wrap(router.handle)
    """

    def __init__(self):
        self._layers: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._layers.append(middleware)
        logger.debug(f"Middleware #{len(self._layers)}: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """Return a single callable running every layer, then handler."""
        chain = handler
        # Innermost first, so the first layer ends up on the outside
        for layer in reversed(self._layers):
            chain = partial(layer, next=chain)
        return chain

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._layers)
