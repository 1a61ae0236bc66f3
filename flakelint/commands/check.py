"""Check command implementation for flakelint.

Reads a ``flake.lock`` file, builds its dependency relations and reports
every repository that is locked at more than one version.

Typical usage::

    # Rich report for the lockfile in the current directory
    $ flakelint check

    # Machine-readable JSON output
    $ flakelint check -o json > report.json

    # Fail a CI job when duplicates exist
    $ flakelint check --fail-if-multiple-versions
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import List, Optional

import click

from flakelint.constants import CHECK_OUTPUT_FORMATS
from flakelint.context import FlakeLintContext, pass_context
from flakelint.core import analyze, dependants_of, find_duplicates
from flakelint.exceptions import FlakeLintError
from flakelint.models import DuplicateGroup, Relations, load_lockfile
from flakelint.utils import (
    get_logger,
    get_raw_console,
    print_error,
    resolve_lockfile_path,
    status_icons,
)

logger = get_logger("commands.check")

_RULE = "━" * 48


@click.command()
@click.option(
    "--lockfile",
    "-l",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to flake.lock or to a flake directory.  [default: flake.lock]",
)
@click.option(
    "--output",
    "-o",
    "output_format",
    type=click.Choice(CHECK_OUTPUT_FORMATS, case_sensitive=False),
    default=None,
    help="Output format.  [default: pretty]",
)
@click.option(
    "--merge",
    "-m",
    is_flag=True,
    help="Merge all dependants into one list for each input.",
)
@click.option(
    "--fail-if-multiple-versions",
    is_flag=True,
    help="Exit with status 1 if any repository has multiple versions.",
)
@pass_context
def check(
    ctx: FlakeLintContext,
    lockfile: Optional[Path],
    output_format: Optional[str],
    merge: bool,
    fail_if_multiple_versions: bool,
) -> None:
    """Report repositories locked at more than one version.

    Options not given on the command line fall back to the configuration
    file. Flags can only switch behaviour on; a ``merge = true`` in the
    configuration cannot be undone from the command line.

    Exits:
        0 when the report was produced, 1 on errors or when
        ``--fail-if-multiple-versions`` is set and duplicates exist.
    """
    config = ctx.config
    path = resolve_lockfile_path(lockfile or config.lockfile)
    output_format = (output_format or config.output_format).lower()
    merge = merge or config.merge
    fail_if_multiple_versions = fail_if_multiple_versions or config.fail_if_multiple_versions

    try:
        graph = load_lockfile(path)
    except FlakeLintError as e:
        print_error(f"{e}")
        sys.exit(1)

    relations = analyze(graph)
    duplicates = find_duplicates(relations)
    logger.info(
        "%s: %d locked version(s), %d duplicate repository(ies)",
        path,
        len(relations.deps),
        len(duplicates),
    )

    if output_format == "json":
        _display_json(relations, duplicates)
    elif output_format == "plain":
        _display_plain(relations, duplicates, merge=merge)
    else:
        _display_pretty(relations, duplicates, merge=merge)

    if fail_if_multiple_versions and duplicates:
        print_error("multiple versions detected: exiting with error as requested")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_json(relations: Relations, duplicates: List[DuplicateGroup]) -> None:
    """Render relations and findings as indented JSON.

    Example::

        {
          "dependencies": {"github:NixOS/nixpkgs?rev=...": ["root"]},
          "reverse_dependencies": {"nixpkgs": ["root"]},
          "duplicates": []
        }
    """
    data = relations.to_json()
    data["duplicates"] = [group.to_json() for group in duplicates]
    click.echo(json.dumps(data, indent=2))


def _display_pretty(
    relations: Relations,
    duplicates: List[DuplicateGroup],
    *,
    merge: bool,
) -> None:
    """Render the rich report: statistics, one tree per finding, summary.

    Example::

        🔍 flakelint - Dependency Analysis Report
        ℹ Analyzing 4 unique inputs...
        ⚠ Found 1 inputs with multiple versions (1 total duplicates)

        (1) root
           ├─ URL: github:NixOS/nixpkgs
           ├─ Repeats: 2
           ├─ Version: github:NixOS/nixpkgs?rev=aaa
           │     └─ Alias: root
           └─ Version: github:NixOS/nixpkgs?rev=bbb
                 └─ Alias: home-manager
                       └─ Used by: root
    """
    console = get_raw_console()
    icons = status_icons()

    def line(text: str, style: Optional[str] = None) -> None:
        console.print(text, style=style, markup=False, emoji=False)

    line("🔍 flakelint - Dependency Analysis Report", "header")

    total_inputs = len(relations.deps)
    if total_inputs == 0:
        line(f"{icons['info']} No inputs found in lockfile", "info")
        return

    line(f"{icons['info']} Analyzing {total_inputs} unique inputs...", "info")

    if not duplicates:
        line(f"{icons['success']} No duplicate inputs detected", "success")
        line("")
        line("All inputs use unique versions. Your dependency tree is optimized!", "dim")
        return

    total_duplicates = sum(group.version_count - 1 for group in duplicates)
    line(
        f"{icons['warning']} Found {len(duplicates)} inputs with multiple versions "
        f"({total_duplicates} total duplicates)",
        "warning",
    )
    line("")
    line("📋 Detailed Analysis:", "bold")
    line("")

    for number, group in enumerate(duplicates, start=1):
        line(f"({number}) {group.primary_name}", "error")
        line(f"   ├─ URL: {group.identity}", "url")
        line(f"   ├─ Repeats: {group.version_count}", "warning")

        if merge:
            dependants = dependants_of(relations, group.aliases)
            if dependants:
                line(f"   └─ Used by: {', '.join(dependants)}", "dependant")
            else:
                line("   └─ No direct dependants", "dim")
            line("")
            continue

        versions = list(group.versions.items())
        for index, (url, aliases) in enumerate(versions):
            last_version = index == len(versions) - 1
            line(f"   {'└─' if last_version else '├─'} Version: {url}", "dim")
            rail = " " if last_version else "│"
            for alias_index, alias in enumerate(aliases):
                last_alias = alias_index == len(aliases) - 1
                line(f"   {rail}     {'└─' if last_alias else '├─'} Alias: {alias}", "alias")
                dependants = relations.reverse_deps.get(alias, [])
                if dependants:
                    inner = " " if last_alias else "│"
                    line(
                        f"   {rail}     {inner}     └─ Used by: {', '.join(dependants)}",
                        "dependant",
                    )
        line("")

    line(_RULE, "dim")
    line("📊 Summary:", "bold")
    line("")
    line(f"{icons['error']} {len(duplicates)} inputs have duplicate versions", "error")
    line(
        f"{icons['warning']} {total_duplicates} total duplicate dependencies detected",
        "warning",
    )
    line("")
    line(f"{icons['info']} Recommendation:", "info")
    line("   Consider using 'inputs.<name>.follows' in your flake.nix to deduplicate")
    line("   dependencies and reduce closure size.")
    line("")
    line("   Example:", "dim")
    line('   inputs.someInput.inputs.nixpkgs.follows = "nixpkgs";', "dim")


def _display_plain(
    relations: Relations,
    duplicates: List[DuplicateGroup],
    *,
    merge: bool,
) -> None:
    """Render a line-based listing suitable for grepping.

    Example::

        Dependency Analysis Report
        Input: github:NixOS/nixpkgs
          Version: github:NixOS/nixpkgs?rev=aaa
            Alias: root
              Dependants:
    """
    console = get_raw_console()

    def line(text: str, style: Optional[str] = None) -> None:
        console.print(text, style=style, markup=False, emoji=False)

    line("Dependency Analysis Report", "header")

    if not duplicates:
        line("No duplicate inputs detected in the repositories analyzed.", "warning")
        return

    for group in duplicates:
        line(f"Input: {group.identity}", "info")

        if merge:
            dependants = dependants_of(relations, group.aliases)
            if dependants:
                line(f"  Dependants: {', '.join(dependants)}", "dependant")
            continue

        for url, aliases in group.versions.items():
            line(f"  Version: {url}", "dim")
            for alias in aliases:
                line(f"    Alias: {alias}", "alias")
                dependants = relations.reverse_deps.get(alias, [])
                line(f"      Dependants: {', '.join(dependants)}", "dependant")
