"""
Shared context object for flakelint CLI commands.

The group callback in :mod:`flakelint.cli` fills one instance per
invocation; subcommands receive it through :data:`pass_context`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from flakelint.config import FlakeLintConfig


class FlakeLintContext:
    """Global context object for flakelint CLI commands.

    Attributes:
        config_path: Configuration file in effect, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration; defaults when no file was found.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: FlakeLintConfig = FlakeLintConfig()


#: Click decorator for injecting :class:`FlakeLintContext` into commands.
pass_context = click.make_pass_decorator(FlakeLintContext, ensure=True)
