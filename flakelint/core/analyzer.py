"""Dependency graph analysis for flakelint.

Builds the forward and reverse reference maps of a lock graph and groups the
forward map by repository identity to find repositories locked at more than
one version.

The analysis runs in two passes over the node set:

1. every node with a ``locked`` section is mapped to its version-qualified
   URL;
2. every input of every node is resolved to its target node(s), and the
   referencing node is recorded against the target's URL (``deps``) and the
   target's name (``reverse_deps``).

Keeping the passes separate means ``deps`` is always keyed by a fully
version-qualified identity, even for nodes that have both a ``locked``
section and inputs of their own. Nothing here depends on node iteration
order; all grouping is by key.

Example::

    >>> relations = analyze(graph)
    >>> relations.deps
    {'github:NixOS/nixpkgs?rev=abcdef&narHash=sha256-abc': ['root']}
    >>> find_duplicates(relations)
    []
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from flakelint.models.lock import InputRef, LockGraph
from flakelint.models.relations import DuplicateGroup, Relations
from flakelint.core.identity import extract_repo_identity, flake_url
from flakelint.utils.logger import get_logger

logger = get_logger("analyzer")

__all__ = ["analyze", "dependants_of", "find_duplicates", "iter_targets"]


def iter_targets(ref: InputRef) -> Iterator[str]:
    """Yield the node name(s) an input value points at.

    A follows path is flattened into its individual names.
    """
    if isinstance(ref, str):
        yield ref
    else:
        yield from ref


def _node_urls(graph: LockGraph) -> Dict[str, str]:
    """Map node names to version-qualified URLs, skipping unknown identities."""
    urls: Dict[str, str] = {}
    for name, node in graph.nodes.items():
        if node.locked is None:
            continue
        url = flake_url(node.locked)
        if url:
            urls[name] = url
        else:
            logger.debug("Node %r has unsupported locked type %r", name, node.locked.type)
    return urls


def analyze(graph: LockGraph) -> Relations:
    """Build the forward and reverse reference maps of ``graph``.

    References to nodes that are missing or have no locked identity are
    ignored; they never create an entry.
    """
    node_urls = _node_urls(graph)

    deps: Dict[str, List[str]] = {}
    reverse_deps: Dict[str, List[str]] = {}

    for name, node in graph.nodes.items():
        for ref in node.inputs.values():
            for target in iter_targets(ref):
                url = node_urls.get(target)
                if url is None:
                    continue
                deps.setdefault(url, []).append(name)
                reverse_deps.setdefault(target, []).append(name)

    logger.debug(
        "Analyzed %d node(s): %d locked version(s), %d referenced node(s)",
        len(graph.nodes),
        len(deps),
        len(reverse_deps),
    )
    return Relations(deps=deps, reverse_deps=reverse_deps)


def find_duplicates(relations: Relations) -> List[DuplicateGroup]:
    """Group ``relations.deps`` by repository and keep multi-version groups.

    Returns:
        One :class:`DuplicateGroup` per repository referenced at two or more
        distinct versions, sorted by identity. Versions inside a group are
        sorted by URL.
    """
    groups: Dict[str, Dict[str, List[str]]] = {}
    for url, aliases in relations.deps.items():
        groups.setdefault(extract_repo_identity(url), {})[url] = list(aliases)

    duplicates = [
        DuplicateGroup(
            identity=identity,
            versions={url: versions[url] for url in sorted(versions)},
        )
        for identity, versions in sorted(groups.items())
        if len(versions) > 1
    ]

    logger.debug(
        "%d repository identities, %d with multiple versions",
        len(groups),
        len(duplicates),
    )
    return duplicates


def dependants_of(relations: Relations, aliases: Iterable[str]) -> List[str]:
    """Merge the reverse dependencies of ``aliases`` without duplicates.

    First-seen order is kept so reports are stable for a given lockfile.
    """
    seen: Dict[str, None] = {}
    for alias in aliases:
        for dependant in relations.reverse_deps.get(alias, ()):
            seen.setdefault(dependant, None)
    return list(seen)
