from __future__ import annotations

from pathlib import Path

import pytest

from flakelint.exceptions import FileOperationError
from flakelint.utils.filesystem import resolve_lockfile_path, safe_read_file


@pytest.mark.unit
class TestResolveLockfilePath:
    """Tests for resolve_lockfile_path."""

    def test_file_path_unchanged(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.lock"
        assert resolve_lockfile_path(path) == path

    def test_directory_uses_flake_lock(self, tmp_path: Path) -> None:
        assert resolve_lockfile_path(tmp_path) == tmp_path / "flake.lock"

    def test_accepts_strings(self, tmp_path: Path) -> None:
        assert resolve_lockfile_path(str(tmp_path)) == tmp_path / "flake.lock"


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for safe_read_file."""

    def test_reads_text(self, tmp_path: Path) -> None:
        path = tmp_path / "flake.lock"
        path.write_text('{"nodes": {}}', encoding="utf-8")
        assert safe_read_file(path) == '{"nodes": {}}'

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(tmp_path / "missing.lock")
        assert exc_info.value.operation == "read"

    def test_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="Not a file"):
            safe_read_file(tmp_path)

    def test_too_large(self, tmp_path: Path) -> None:
        path = tmp_path / "flake.lock"
        path.write_text("x" * 100, encoding="utf-8")
        with pytest.raises(FileOperationError, match="File too large"):
            safe_read_file(path, max_size=10)

    def test_size_limit_disabled(self, tmp_path: Path) -> None:
        path = tmp_path / "flake.lock"
        path.write_text("x" * 100, encoding="utf-8")
        assert len(safe_read_file(path, max_size=None)) == 100

    def test_invalid_encoding(self, tmp_path: Path) -> None:
        path = tmp_path / "flake.lock"
        path.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(FileOperationError, match="Failed to read file"):
            safe_read_file(path)
