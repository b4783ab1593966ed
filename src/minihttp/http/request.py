"""
=============================================================================
HTTP REQUEST DECODING
=============================================================================

This module turns the raw bytes read from a client socket into an
HTTPRequest. It holds the two parsing stages of the server:

    Raw bytes ──► RequestParser.parse ──► request line ──► HTTPRequest
                                     └──► parse_headers ──┘

=============================================================================
WHAT A REQUEST LOOKS LIKE ON THE WIRE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │  POST /files/notes.txt HTTP/1.1\r\n      ← request line         │
    │  Host: localhost:4221\r\n                ← headers              │
    │  Content-Length: 5\r\n                                          │
    │  \r\n                                    ← blank line           │
    │  hello                                   ← body (5 bytes)       │
    └─────────────────────────────────────────────────────────────────┘

The request line is split on whitespace. Only the method and the path are
required; the version falls back to HTTP/1.1 when a client leaves it out.

=============================================================================
NORMALIZATION RULES
=============================================================================

1. Header names AND values are lowercased.
   "User-Agent: Test-Client" is stored as {"user-agent": "test-client"}.
   Handlers that echo a header value therefore echo the lowercased text.

2. A repeated header replaces the earlier one (last one wins).

3. Header lines are split at the first ": " only. A line without that
   separator is dropped without an error.

4. The path is kept exactly as sent. No percent-decoding, no query
   string splitting: "/echo/a%20b?x=1" stays "/echo/a%20b?x=1".

5. The body is everything after the first blank line, cut down to
   Content-Length when that header holds a usable number.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional


HEADER_TERMINATOR = b"\r\n\r\n"
HEADER_SEPARATOR = ": "
DEFAULT_VERSION = "HTTP/1.1"


class HTTPParseError(Exception):
    """
    Raised when request bytes cannot be decoded into an HTTPRequest.

    The status code is informational. The connection loop drops the
    connection without writing a response whatever the code is.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A decoded HTTP request.

    Built once per connection and never modified afterwards, so it is
    frozen. Handlers read from it; nothing writes to it.

    Attributes:
        method:         Request method as sent ("GET", "POST", ...).
        path:           Raw request target, e.g. "/echo/abc".
        version:        Protocol version, "HTTP/1.1" when omitted.
        headers:        Lowercased name → lowercased value.
        body:           Body bytes (possibly empty).
        client_address: (ip, port) of the peer, for logging.
        raw:            The bytes the request was decoded from.
    """

    method: str
    path: str
    version: str = DEFAULT_VERSION
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def segments(self) -> List[str]:
        """
        The path split on "/".

        The leading slash produces an empty first element:

            "/"            → ["", ""]
            "/echo/abc"    → ["", "echo", "abc"]
            "/files/a/b"   → ["", "files", "a", "b"]
        """
        return self.path.split("/")

    @property
    def user_agent(self) -> Optional[str]:
        return self.headers.get("user-agent")

    @property
    def accept_encoding(self) -> str:
        return self.headers.get("accept-encoding", "")

    @property
    def content_length(self) -> Optional[int]:
        """Content-Length as an int, or None when missing or unusable."""
        return header_content_length(self.headers)

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)


# =============================================================================
# HEADER PARSER
# =============================================================================

def parse_headers(lines: Iterable[str]) -> Dict[str, str]:
    """
    Parse header lines into a dictionary.

    Args:
        lines: Header lines without their CRLF, in arrival order.

    Returns:
        Lowercased name → lowercased value. Never raises.

    Example:
        >>> parse_headers(["Host: x", "", "Accept-Encoding: GZIP", "junk"])
        {'host': 'x', 'accept-encoding': 'gzip'}
    """
    headers: Dict[str, str] = {}

    for line in lines:
        if not line:
            continue

        name, sep, value = line.partition(HEADER_SEPARATOR)
        if not sep:
            continue  # Malformed, no ": " separator

        # Later duplicates overwrite earlier ones
        headers[name.lower()] = value.lower()

    return headers


# =============================================================================
# REQUEST DECODER
# =============================================================================

class RequestParser:
    """
    Decodes raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSING ALGORITHM
    ==========================================================================

        1. Reject oversized input (413)
        2. Split at the first blank line: header section | body
        3. Request line: whitespace-split, need method and path
        4. Path must contain "/" so it has a first segment
        5. Remaining lines → parse_headers
        6. Body truncated to Content-Length when present

    If no blank line exists at all (a client that closed its side right
    after the headers without the final CRLF), the whole input is the
    header section and the body is empty.
    ==========================================================================
    """

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Decode one request.

        Args:
            data: Raw bytes read from the socket.
            client_address: Peer (ip, port) carried into the request.

        Returns:
            The decoded HTTPRequest.

        Raises:
            HTTPParseError: Empty or oversized input, fewer than two
                request-line fields, or a path without "/".
        """
        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Size limit
        # ─────────────────────────────────────────────────────────────────
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        if not data:
            raise HTTPParseError("Empty request")

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: Header section / body boundary
        # ─────────────────────────────────────────────────────────────────
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            header_bytes, body = data, b""
        else:
            header_bytes = data[:header_end]
            body = data[header_end + len(HEADER_TERMINATOR):]

        lines = header_bytes.decode("utf-8", errors="replace").split("\r\n")

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Request line
        # ─────────────────────────────────────────────────────────────────
        method, path, version = self._parse_request_line(lines[0])

        # ─────────────────────────────────────────────────────────────────
        # STEP 4: Headers
        # ─────────────────────────────────────────────────────────────────
        headers = parse_headers(lines[1:])

        # ─────────────────────────────────────────────────────────────────
        # STEP 5: Body
        # ─────────────────────────────────────────────────────────────────
        length = header_content_length(headers)
        if length is not None:
            body = body[:length]

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP PATH [SP VERSION]".

        Raises:
            HTTPParseError: Fewer than two fields, or a path with no "/".
        """
        fields = line.split()
        if len(fields) < 2:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, path = fields[0], fields[1]
        version = fields[2] if len(fields) > 2 else DEFAULT_VERSION

        if "/" not in path:
            raise HTTPParseError(f"Invalid request path: {path!r}")

        return method, path, version


def header_content_length(headers: Dict[str, str]) -> Optional[int]:
    """
    Content-Length from parsed headers, or None when missing or unusable.

    Used by both Connection.read_request and RequestParser.parse.
    """
    value = headers.get("content-length")
    if value is None:
        return None
    try:
        length = int(value.strip())
    except ValueError:
        return None
    return length if length >= 0 else None


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024,
) -> HTTPRequest:
    """
    Decode a request in one call.

    Use RequestParser directly when decoding many requests with the same
    size limit.
    """
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
