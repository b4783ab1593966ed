"""
=============================================================================
HTTP ROUTER
=============================================================================

Maps a request to a handler by its method and the FIRST segment of its
path. There are no patterns, parameters or wildcards: a handler registered
for "/files" owns every path that starts with "/files/", and it checks the
rest of the path itself.

=============================================================================
ROUTE KEYS
=============================================================================

The lookup key is the method glued to "/" and the first path segment:

    ┌──────────────────────────┬──────────────────┐
    │  Request                 │  Key             │
    ├──────────────────────────┼──────────────────┤
    │  GET /                   │  "GET/"          │
    │  GET /echo/abc           │  "GET/echo"      │
    │  GET /user-agent         │  "GET/user-agent"│
    │  POST /files/a.txt       │  "POST/files"    │
    │  DELETE /files/a.txt     │  "DELETE/files"  │
    └──────────────────────────┴──────────────────┘

Dispatch is a single dict lookup. A miss yields a bare 404 (no headers,
no body), independent of what the request carried.

=============================================================================
USAGE
=============================================================================

    router = Router()

    @router.get("/echo")
    def echo(request):
        return text_response(request.segments[2])

    router.add_route("/files", files.post, method="POST")

=============================================================================
"""

from typing import Callable, Dict, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, route_not_found


# Handler: A function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


def route_key(method: str, path: str) -> str:
    """
    Build the lookup key for a method and a request path.

        >>> route_key("GET", "/echo/abc")
        'GET/echo'
        >>> route_key("GET", "/")
        'GET/'
    """
    segments = path.split("/")
    first = segments[1] if len(segments) > 1 else ""
    return f"{method}/{first}"


class Router:
    """
    Exact-match dispatch table keyed on (method, first path segment).

    Routes are registered before the server starts and only read while it
    runs, so the table needs no locking.
    """

    def __init__(self):
        self._routes: Dict[str, Handler] = {}

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(self, prefix: str, handler: Handler, method: str = "GET") -> str:
        """
        Register a handler for a method and a one-segment prefix.

        Args:
            prefix: "/" or "/name" (no further slashes).
            handler: Callable taking an HTTPRequest, returning an HTTPResponse.
            method: HTTP method, matched case-sensitively.

        Returns:
            The route key the handler was stored under.

        Raises:
            ValueError: prefix is not "/" or a single segment.

        Registering the same method and prefix twice replaces the first
        handler.
        """
        if not prefix.startswith("/") or "/" in prefix[1:]:
            raise ValueError(f"Route prefix must be '/' or '/<segment>': {prefix!r}")

        key = f"{method}{prefix}"
        self._routes[key] = handler
        return key

    def route(self, prefix: str, method: str = "GET") -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

            @router.route("/files", method="POST")
            def save(request): ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(prefix, handler, method)
            return handler  # Unchanged, so decorators can stack

        return decorator

    def get(self, prefix: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(prefix, "GET")

    def post(self, prefix: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(prefix, "POST")

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[Handler]:
        return self._routes.get(route_key(method, path))

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request to its handler.

        Returns:
            The handler's response, or a bare 404 when no route matches.
        """
        handler = self.match(request.method, request.path)
        if handler is None:
            return route_not_found()
        return handler(request)

    def routes(self) -> List[str]:
        """Registered route keys, in registration order."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
