"""
Custom exception hierarchy for flakelint.

This module defines structured exception types used across flakelint.
All exceptions inherit from :class:`FlakeLintError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class FlakeLintError(Exception):
    """Base exception for all flakelint errors.

    All flakelint-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class LockfileError(FlakeLintError):
    """Raised when a lockfile is structurally unusable.

    Covers undecodable documents as well as graphs without a root node or
    without root inputs.

    Args:
        message: Error description.
        file_path: Path to the lockfile, if known.
        reason: Short machine-friendly reason (``"no-root"``, ``"json"``...).
    """

    __slots__ = ("file_path", "reason")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        _add_if(details, "reason", reason)

        super().__init__(message, details)

        self.file_path = file_path
        self.reason = reason


class NetworkError(FlakeLintError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class NotFoundError(NetworkError):
    """Raised when an upstream resource answers with HTTP 404."""

    __slots__ = ()

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("status_code", 404)
        super().__init__(message, **kwargs)


class HostAPIError(NetworkError):
    """Raised when a hosting provider API returns an unusable response.

    Args:
        message: Error description.
        host: Provider name (``github``, ``gitlab``).
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("host",)

    def __init__(
        self,
        message: str,
        *,
        host: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.host = host
        if host is not None:
            self.details["host"] = host


class GitCommandError(FlakeLintError):
    """Raised when listing remote references through git fails.

    Args:
        message: Error description.
        command: Command line that was executed.
        returncode: Process exit status, if the process ran.
        stderr: Captured standard error, truncated for safety.
    """

    __slots__ = ("command", "returncode", "stderr")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        if command is not None:
            details["command"] = " ".join(command)
        _add_if(details, "returncode", returncode)
        if stderr:
            details["stderr"] = _truncate(stderr.strip())

        super().__init__(message, details)

        self.command = list(command) if command is not None else None
        self.returncode = returncode
        self.stderr = stderr


class UnsupportedInputError(FlakeLintError):
    """Raised when an input cannot be checked for updates.

    Args:
        message: Error description.
        input_type: Lockfile type of the input, if relevant.
    """

    __slots__ = ("input_type",)

    def __init__(self, message: str, *, input_type: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "type", input_type)

        super().__init__(message, details)

        self.input_type = input_type


class FileOperationError(FlakeLintError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/delete).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(FlakeLintError):
    """Raised when a configuration file is invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Offending option name, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
