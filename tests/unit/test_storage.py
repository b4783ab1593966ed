"""
Unit tests for file storage.
"""

import pytest

from minihttp.storage import FileStorage, StorageError


class TestFileStorage:
    """Tests for FileStorage."""

    def test_write_then_read(self, tmp_path):
        storage = FileStorage(tmp_path)

        storage.write("a.txt", b"content")

        assert storage.read("a.txt") == b"content"
        assert (tmp_path / "a.txt").read_bytes() == b"content"

    def test_read_missing(self, tmp_path):
        with pytest.raises(StorageError) as exc_info:
            FileStorage(tmp_path).read("missing.txt")

        assert "missing.txt" in str(exc_info.value)

    def test_write_empty(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.write("empty", b"")

        assert storage.read("empty") == b""

    def test_root_accepts_string(self, tmp_path):
        assert FileStorage(str(tmp_path)).root == tmp_path.resolve()

    @pytest.mark.parametrize("name", ["..", "../outside.txt", "/etc/passwd"])
    def test_escape_rejected(self, tmp_path, name):
        """Names resolving outside the root are refused."""
        storage = FileStorage(tmp_path / "root")

        with pytest.raises(StorageError, match="access denied"):
            storage.read(name)

        with pytest.raises(StorageError, match="access denied"):
            storage.write(name, b"x")

    def test_empty_name(self, tmp_path):
        with pytest.raises(StorageError):
            FileStorage(tmp_path).read("")

    def test_missing_root(self, tmp_path):
        """A root that does not exist fails reads and writes, not construction."""
        storage = FileStorage(tmp_path / "nowhere")

        with pytest.raises(StorageError):
            storage.write("a.txt", b"x")

    def test_read_directory(self, tmp_path):
        (tmp_path / "dir").mkdir()

        with pytest.raises(StorageError):
            FileStorage(tmp_path).read("dir")

    def test_nul_byte_in_name(self, tmp_path):
        storage = FileStorage(tmp_path)

        with pytest.raises(StorageError):
            storage.read("a\x00b")

        with pytest.raises(StorageError):
            storage.write("a\x00b", b"x")
