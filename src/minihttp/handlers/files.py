"""
=============================================================================
FILE HANDLERS
=============================================================================

    GET  /files/<name>    → 200 application/octet-stream, file bytes
    POST /files/<name>    → 201 text/plain "saved", body written to <name>

=============================================================================
ERROR MAPPING
=============================================================================

    ┌─────────────────────────────┬──────────────────────────────────────┐
    │  Situation                  │  Response                            │
    ├─────────────────────────────┼──────────────────────────────────────┤
    │  /files or /files/a/b       │  404 text/plain "Not Found"          │
    │  read fails (missing, ...)  │  404 text/plain, the error text      │
    │  write fails                │  500 text/plain, the error text      │
    └─────────────────────────────┴──────────────────────────────────────┘

=============================================================================
"""

import logging
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, HTTPStatus, ResponseBuilder,
    not_found, text_response,
)
from ..storage import FileStorage, StorageError


logger = logging.getLogger(__name__)


SAVED = "saved"


class FileHandler:
    """
    Serves and stores files through a FileStorage.

    Usage:
        files = FileHandler(FileStorage("/tmp/data"))
        router.add_route("/files", files.get, method="GET")
        router.add_route("/files", files.post, method="POST")
    """

    def __init__(self, storage: FileStorage):
        self.storage = storage

    @staticmethod
    def _file_name(request: HTTPRequest) -> Optional[str]:
        """The <name> of "/files/<name>", or None for any other shape."""
        segments = request.segments
        if len(segments) != 3:
            return None
        return segments[2]

    def get(self, request: HTTPRequest) -> HTTPResponse:
        """Return the stored file's bytes."""
        name = self._file_name(request)
        if name is None:
            return not_found()

        try:
            data = self.storage.read(name)
        except StorageError as e:
            logger.debug(f"Read of {name!r} failed: {e}")
            return text_response(str(e), HTTPStatus.NOT_FOUND)

        return ResponseBuilder().octet_stream(data).build()

    def post(self, request: HTTPRequest) -> HTTPResponse:
        """Store the request body under <name>, replacing any old content."""
        name = self._file_name(request)
        if name is None:
            return not_found()

        try:
            self.storage.write(name, request.body)
        except StorageError as e:
            logger.error(f"Write of {name!r} failed: {e}")
            return text_response(str(e), HTTPStatus.INTERNAL_SERVER_ERROR)

        return text_response(SAVED, HTTPStatus.CREATED)
