"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can emit, with the reason phrases written on
the status line.

    HTTP/1.1 201 Created
             ─── ───────
              │     │
              │     └── Reason phrase (HTTPStatus.phrase)
              └──────── Status code  (int(HTTPStatus))

Only the codes the server actually produces are listed. Handlers pick one
of these and the Response Encoder turns it into the status line.

=============================================================================
WHICH HANDLER USES WHAT
=============================================================================

    ┌────────┬──────────────────────────────────────────────────────────┐
    │  Code  │  Produced by                                             │
    ├────────┼──────────────────────────────────────────────────────────┤
    │  200   │  index, echo, user-agent, file read                      │
    │  201   │  file write                                              │
    │  400   │  user-agent without a User-Agent header                  │
    │  404   │  unknown route, bad echo/file path, missing file         │
    │  413   │  request over max_request_size (never sent, see server)  │
    │  500   │  handler crash, failed file write                        │
    └────────┴──────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.CREATED.phrase
        'Created'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    NOT_FOUND = 404
    PAYLOAD_TOO_LARGE = 413

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """4xx or 5xx. Used by the access log to pick a log level."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
