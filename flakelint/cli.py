"""
Command-line interface for flakelint.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from flakelint.config import load_config
from flakelint.__version__ import __version__
from flakelint.context import FlakeLintContext
from flakelint.exceptions import ConfigError, FlakeLintError
from flakelint.utils.console import print_error, print_warning, reconfigure_console
from flakelint.utils.logger import get_logger, level_for_verbosity, setup_logging

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="FLAKELINT_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="FLAKELINT_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="flakelint",
    message="%(prog)s version %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """flakelint: find duplicate and outdated inputs in flake.lock files.

    \b
    Available commands:
      flakelint check              Report repositories locked at several versions
      flakelint updates            Check root inputs for upstream updates

    \b
    Examples:
      flakelint check --lockfile path/to/flake.lock
      flakelint check -o json
      flakelint -v updates --outdated-only

    Use ``flakelint COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    flakelint_ctx = FlakeLintContext()
    flakelint_ctx.config_path = config or loaded_config.source_path
    flakelint_ctx.color = color
    flakelint_ctx.verbose = verbose
    flakelint_ctx.config = loaded_config
    ctx.obj = flakelint_ctx

    # Respect NO_COLOR for the console and downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    logger.debug("flakelint v%s", __version__)
    logger.debug("Config path: %s", flakelint_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from flakelint.commands.check import check  # noqa: E402
from flakelint.commands.updates import updates  # noqa: E402

cli.add_command(check)
cli.add_command(updates)


def main() -> int:
    """Main entry point for the flakelint CLI.

    Returns:
        Exit code:
            0   Success
            1   Application error, duplicates or updates found
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except FlakeLintError as exc:
        print_error(str(exc))
        logger.debug(
            "FlakeLintError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
