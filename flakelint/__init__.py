"""
flakelint: dependency analysis for Nix flake lockfiles.

flakelint reads a ``flake.lock`` file and reports:

    • repositories locked at more than one version across the input graph
    • which inputs pull in each of those versions
    • root inputs whose upstream branch or tag has moved on

Duplicate analysis is purely local; update checks query GitHub, GitLab or
the git remote of each input.
"""

from __future__ import annotations

from flakelint.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "flakelint Contributors"
__license__ = "MPL-2.0"
__url__ = "https://github.com/notashelf/flakelint"
__description__ = "Find duplicate and outdated inputs in Nix flake lockfiles."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
