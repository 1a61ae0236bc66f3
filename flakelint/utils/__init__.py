"""
Utility helpers for flakelint.

This package provides reusable utilities used across flakelint, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Lockfile reading helpers
- Async HTTP client

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from flakelint.utils.filesystem import resolve_lockfile_path, safe_read_file

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from flakelint.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from flakelint.utils.console import (
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
    status_icons,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from flakelint.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "status_icons",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "level_for_verbosity",
    # Filesystem
    "safe_read_file",
    "resolve_lockfile_path",
    # HTTP
    "HTTPClient",
]
