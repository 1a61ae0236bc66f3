"""
Executable module for flakelint.

Running:
    python -m flakelint

is equivalent to:
    flakelint

This module simply forwards execution to the CLI entrypoint defined in
`flakelint.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Explain on stderr why the CLI could not be loaded."""
    sys.stderr.write("flakelint could not start: a required module is missing.\n")
    sys.stderr.write(f"Python version   : {sys.version}\n")
    try:
        from flakelint.__version__ import __version__

        sys.stderr.write(f"flakelint version: {__version__}\n")
    except ImportError:
        sys.stderr.write("flakelint version: <unknown>\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m flakelint`.

    Returns:
        Exit code returned by the CLI, or 1 if it cannot be imported.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from flakelint.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
