"""Updates command implementation for flakelint.

Checks every input of the lockfile's root node for a newer upstream revision
of the branch or tag it tracks. GitHub and GitLab inputs are resolved through
their REST APIs, everything else through ``git ls-remote``.

Set ``GITHUB_TOKEN`` / ``GITLAB_TOKEN`` to raise the API rate limits.

Typical usage::

    # Table of all root inputs
    $ flakelint updates

    # Only inputs with updates, as JSON
    $ flakelint updates --outdated-only -f json
"""

from __future__ import annotations

import sys
import json
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.markup import escape

from flakelint.constants import UPDATES_OUTPUT_FORMATS
from flakelint.context import FlakeLintContext, pass_context
from flakelint.core import UpdateChecker
from flakelint.exceptions import FlakeLintError
from flakelint.models import UpdateResults, UpdateStatus, load_lockfile
from flakelint.utils import (
    HTTPClient,
    get_logger,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    resolve_lockfile_path,
)

logger = get_logger("commands.updates")


@click.command()
@click.option(
    "--lockfile",
    "-l",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to flake.lock or to a flake directory.  [default: flake.lock]",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(UPDATES_OUTPUT_FORMATS, case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--outdated-only",
    is_flag=True,
    help="Show only inputs with available updates.",
)
@click.option(
    "--timeout",
    type=click.IntRange(min=1),
    default=None,
    help="Network timeout in seconds.  [default: 10]",
)
@pass_context
def updates(
    ctx: FlakeLintContext,
    lockfile: Optional[Path],
    format: str,
    outdated_only: bool,
    timeout: Optional[int],
) -> None:
    """Check root inputs for newer upstream revisions.

    Inputs pinned to a commit are reported as up to date without a lookup.
    A failed lookup is reported for that input only; the others are still
    checked.

    Exits:
        0 if every input was checked and is up to date, 1 if updates are
        available or any input could not be checked.
    """
    config = ctx.config
    path = resolve_lockfile_path(lockfile or config.lockfile)
    format = format.lower()

    try:
        results = asyncio.run(_updates_async(path, timeout or config.timeout))
    except FlakeLintError as e:
        print_error(f"{e}")
        sys.exit(1)

    _display(results, format=format, outdated_only=outdated_only)
    sys.exit(1 if results.has_updates or results.errors else 0)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _updates_async(path: Path, timeout: int) -> UpdateResults:
    """Load ``path`` and check its root inputs with one shared HTTP client.

    Raises:
        FlakeLintError: The lockfile cannot be read or has no root inputs.
    """
    graph = load_lockfile(path)
    logger.info("Checking %s for updates", path)

    async with HTTPClient.from_environment(timeout=timeout) as http:
        checker = UpdateChecker(http)
        return await checker.check_updates(graph)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display(results: UpdateResults, *, format: str, outdated_only: bool) -> None:
    statuses = results.sorted()
    if outdated_only:
        statuses = [status for status in statuses if status.is_update]

    if format == "json":
        click.echo(json.dumps([status.to_json() for status in statuses], indent=2))
        return

    if not statuses:
        if outdated_only:
            print_success("All inputs are up to date!")
        else:
            print_warning("No inputs to display")
        return

    if format == "simple":
        _display_simple(statuses)
    else:
        _display_table(statuses)

    failed = len(results.errors)
    if failed:
        print_warning(f"{failed} input(s) could not be checked")

    available = len(results.available)
    if available:
        print_warning(f"{available} input(s) have updates available")
    else:
        print_success("All inputs are up to date!")


def _display_table(statuses: List[UpdateStatus]) -> None:
    """Render statuses as a Rich table.

    Example::

        ┏━━━━━━━━━━━━┳━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━━┓
        ┃ Status     ┃ Input        ┃ Current ┃ Latest  ┃ Source               ┃
        ┡━━━━━━━━━━━━╇━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━━┩
        │ ⬆ OUTDATED │ nixpkgs      │ 1a2b3c4 │ 5d6e7f8 │ github:NixOS/nixpkgs │
        └────────────┴──────────────┴─────────┴─────────┴──────────────────────┘
          private: failed to get latest revision: git ls-remote failed
    """
    column_styles: Dict[str, Dict[str, Any]] = {
        "Status": {"justify": "center", "no_wrap": True, "width": 10},
        "Input": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "Latest": {"justify": "center", "style": "bold green"},
        "Source": {"style": "url"},
    }

    print_table(
        [_create_table_row(status) for status in statuses],
        title="Input Status",
        column_styles=column_styles,
    )

    console = get_raw_console()
    for status in statuses:
        if status.failed:
            console.print(
                f"  {status.input_name}: {status.error}",
                style="error",
                markup=False,
                emoji=False,
            )


def _create_table_row(status: UpdateStatus) -> Dict[str, str]:
    if status.failed:
        return {
            "Status": "[red]✗ ERROR[/red]",
            "Input": escape(status.input_name),
            "Current": status.short_current or "[dim]-[/dim]",
            "Latest": "[red]error[/red]",
            "Source": escape(status.current_url) or "[dim]-[/dim]",
        }
    if status.is_update:
        return {
            "Status": "[yellow]⬆ OUTDATED[/yellow]",
            "Input": escape(status.input_name),
            "Current": status.short_current,
            "Latest": status.short_latest,
            "Source": escape(status.current_url) or "[dim]-[/dim]",
        }
    return {
        "Status": "[green]✓ OK[/green]",
        "Input": escape(status.input_name),
        "Current": status.short_current or "[dim]-[/dim]",
        "Latest": status.short_latest or "[dim]-[/dim]",
        "Source": escape(status.current_url) or "[dim]-[/dim]",
    }


def _display_simple(statuses: List[UpdateStatus]) -> None:
    """Render one line per input, errors indented below.

    Example::

        [OUTDATED] nixpkgs              1a2b3c4 → 5d6e7f8
        [OK]       home-manager         9f8e7d6 → 9f8e7d6
        [ERROR]    private              -
               failed to get latest revision: git ls-remote failed
    """
    console = get_raw_console()

    for status in statuses:
        if status.failed:
            label = "ERROR"
        elif status.is_update:
            label = "OUTDATED"
        else:
            label = "OK"

        tag = f"[{label}]"
        if status.failed:
            text = f"{tag:10} {status.input_name:20} {status.short_current or '-'}"
        else:
            text = (
                f"{tag:10} {status.input_name:20} "
                f"{status.short_current or '-'} → {status.short_latest or '-'}"
            )
        console.print(text, markup=False, emoji=False)

        if status.error:
            console.print(f"       {status.error}", style="error", markup=False, emoji=False)
