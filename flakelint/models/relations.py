"""
Graph relation models for flakelint.

:class:`Relations` is the product of the graph analyzer and
:class:`DuplicateGroup` is the finding the ``check`` command reports: one
repository locked at more than one version.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Relations:
    """Forward and reverse reference maps of a lock graph.

    Attributes:
        deps: Version-qualified URL → names of the nodes that reference a
            node locked at exactly that version. Only nodes with a known
            identity appear as keys.
        reverse_deps: Node name → names of the nodes that reference it.
    """

    deps: Dict[str, List[str]] = field(default_factory=dict)
    reverse_deps: Dict[str, List[str]] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        """Return the relation maps under the keys used by ``--output json``."""
        return {
            "dependencies": {url: list(names) for url, names in self.deps.items()},
            "reverse_dependencies": {
                name: list(refs) for name, refs in self.reverse_deps.items()
            },
        }


@dataclass(frozen=True)
class DuplicateGroup:
    """A repository referenced at more than one locked version.

    Attributes:
        identity: Repository identity shared by all versions.
        versions: Version-qualified URL → aliases referencing that version.
    """

    identity: str
    versions: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def aliases(self) -> List[str]:
        """All aliases across every version, in version order."""
        return [alias for names in self.versions.values() for alias in names]

    @property
    def version_count(self) -> int:
        return len(self.versions)

    @property
    def primary_name(self) -> str:
        """Shortest alias, used as the display name of the group."""
        aliases = self.aliases
        if not aliases:
            return self.identity
        return min(aliases, key=len)

    def to_json(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "versions": {url: list(names) for url, names in self.versions.items()},
        }
