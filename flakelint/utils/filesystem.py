"""
Filesystem utilities for flakelint.

Lockfiles are only ever read, never written. All filesystem errors are
normalized to ``FileOperationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from flakelint.utils.logger import get_logger
from flakelint.exceptions import FileOperationError
from flakelint.constants import DEFAULT_LOCKFILE, MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Ensure ``path`` is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def resolve_lockfile_path(path: PathLike) -> Path:
    """Return the lockfile path for ``path``.

    A directory is taken to be a flake directory, in which case its
    ``flake.lock`` is used.
    """
    candidate = Path(path).expanduser()
    if candidate.is_dir():
        candidate = candidate / DEFAULT_LOCKFILE
        logger.debug("Directory given, using %s", candidate)
    return candidate


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc
