"""
=============================================================================
FILE STORAGE
=============================================================================

Byte storage behind GET/POST /files/<name>: a flat name → bytes mapping
rooted at one directory.

    FileStorage("/tmp/data")
        .read("notes.txt")           → bytes of /tmp/data/notes.txt
        .write("notes.txt", b"hi")   → create or overwrite

=============================================================================
PATH TRAVERSAL
=============================================================================

Names come straight from the request path, so "../../etc/passwd" is a
legal name on the wire. Every name is resolved (following ".." and
symlinks) and must still sit inside the root:

    root:  /tmp/data
    name:  ../../etc/passwd
    path:  /etc/passwd            ← outside root → StorageError

=============================================================================
CONCURRENCY
=============================================================================

Access is not coordinated. Two connections writing the same name at the
same time race; the last write wins.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A read or write failed. str(error) is safe to send to the client."""


class FileStorage:
    """
    Reads and writes whole files under a root directory.

    Args:
        root: Directory holding the files. It is not created; reads of a
              missing root simply fail with StorageError.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def resolve(self, name: str) -> Path:
        """
        Map a name to a filesystem path inside the root.

        Raises:
            StorageError: The name is empty, unusable as a path (e.g. an
                embedded NUL byte) or resolves outside the root.
        """
        if not name:
            raise StorageError("empty file name")

        try:
            path = (self.root / name).resolve()
        except (OSError, ValueError) as e:
            raise StorageError(str(e)) from e

        try:
            path.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name}")
            raise StorageError(f"access denied: {name}") from None

        return path

    def read(self, name: str) -> bytes:
        """
        Return the whole content of a file.

        Raises:
            StorageError: Missing file, unreadable file, or a bad name.
        """
        path = self.resolve(name)
        try:
            return path.read_bytes()
        except (OSError, ValueError) as e:
            raise StorageError(str(e)) from e

    def write(self, name: str, data: bytes) -> None:
        """
        Create or truncate a file and write data to it.

        Raises:
            StorageError: The file cannot be written, or a bad name.
        """
        path = self.resolve(name)
        try:
            path.write_bytes(data)
        except (OSError, ValueError) as e:
            raise StorageError(str(e)) from e

        logger.debug(f"Wrote {len(data)} bytes to {path}")
