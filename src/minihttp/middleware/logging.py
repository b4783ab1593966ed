"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

Writes one line per handled request to the "minihttp.access" logger.

Text format (Apache-like):

    127.0.0.1 - - [17/Oct/2026:10:01:02 +0000] "GET /echo/abc" 200 3 0.41ms

JSON format, for log shippers:

    {"request_id": "1f3a9c2e", "method": "GET", "path": "/echo/abc", ...}

The access logger is separate from the module loggers, so it can be routed
on its own:

    logging.getLogger("minihttp.access").addHandler(file_handler)

Requests dropped before decoding (malformed request line, client gone)
never reach the pipeline and are not access-logged; the server logs those
at DEBUG.

=============================================================================
"""

import time
import json
import uuid
import logging
from dataclasses import asdict, dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """One access log entry."""

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    content_encoding: str
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Put it FIRST in the pipeline so the logged size is what goes on the
    wire (after gzip) and handler failures are logged before the server
    turns them into a 500.

    Args:
        log_format: "text" or "json".
        log_level: Level for successful requests. 4xx/5xx responses are
                   logged at WARNING.
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=response.status_code,
            content_length=len(response.body),
            content_encoding=response.headers.get("Content-Encoding", "identity"),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        level = logging.WARNING if response.status.is_error else self.log_level
        if self.log_format == "json":
            logger.log(level, json.dumps(entry.to_dict()))
        else:
            logger.log(level, entry.to_text())

        return response
