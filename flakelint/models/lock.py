"""
Lockfile data model for flakelint.

A ``flake.lock`` document is decoded exactly once, at the boundary, into the
frozen dataclasses below. Everything downstream works with ordinary optional
attributes instead of probing raw dictionaries.

Decoding is deliberately forgiving: intermediate nodes frequently lack a
``locked`` section and lockfiles written by older Nix versions omit fields,
so missing or mistyped values degrade to empty defaults rather than errors.
Only a document that is not a JSON object at all is rejected.

Example:
    >>> graph = LockGraph.from_dict(json.loads(text))
    >>> graph.root_node.inputs
    {'nixpkgs': 'nixpkgs', 'utils': 'flake-utils'}
"""

from __future__ import annotations

import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from flakelint.constants import DEFAULT_ROOT_NODE
from flakelint.exceptions import LockfileError
from flakelint.utils.filesystem import PathLike, safe_read_file
from flakelint.utils.logger import get_logger

logger = get_logger("models.lock")

#: An input points at a node name, or at a "follows" path of node names.
InputRef = Union[str, Tuple[str, ...]]


def _string(raw: Mapping[str, Any], key: str) -> str:
    """Return ``raw[key]`` if it is a string, else ``""``."""
    value = raw.get(key)
    return value if isinstance(value, str) else ""


def _integer(raw: Mapping[str, Any], key: str) -> Optional[int]:
    value = raw.get(key)
    # bool is an int subclass; JSON true is not a timestamp
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


@dataclass(frozen=True)
class LockedDescriptor:
    """The resolved, pinned source of a node.

    Which attributes are meaningful depends on ``type``: hosted types use
    ``owner``/``repo``/``host``, ``git``/``hg``/``tarball`` use ``url`` and
    ``path`` uses ``path``.
    """

    type: str = ""
    owner: str = ""
    repo: str = ""
    host: str = ""
    url: str = ""
    path: str = ""
    rev: str = ""
    nar_hash: str = ""
    ref: str = ""
    last_modified: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["LockedDescriptor"]:
        if not isinstance(raw, Mapping):
            return None
        return cls(
            type=_string(raw, "type"),
            owner=_string(raw, "owner"),
            repo=_string(raw, "repo"),
            host=_string(raw, "host"),
            url=_string(raw, "url"),
            path=_string(raw, "path"),
            rev=_string(raw, "rev"),
            nar_hash=_string(raw, "narHash"),
            ref=_string(raw, "ref"),
            last_modified=_integer(raw, "lastModified"),
        )


@dataclass(frozen=True)
class OriginalDescriptor:
    """How the user originally wrote the input in ``flake.nix``.

    Used to pick the update-lookup strategy (and the branch or tag to follow),
    never to compute identities.
    """

    type: str = ""
    owner: str = ""
    repo: str = ""
    ref: str = ""
    rev: str = ""
    host: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["OriginalDescriptor"]:
        if not isinstance(raw, Mapping):
            return None
        return cls(
            type=_string(raw, "type"),
            owner=_string(raw, "owner"),
            repo=_string(raw, "repo"),
            ref=_string(raw, "ref"),
            rev=_string(raw, "rev"),
            host=_string(raw, "host"),
            url=_string(raw, "url"),
        )


def _decode_inputs(raw: Any) -> Dict[str, InputRef]:
    """Decode a node's ``inputs`` table, dropping malformed entries."""
    if not isinstance(raw, Mapping):
        return {}

    inputs: Dict[str, InputRef] = {}
    for name, value in raw.items():
        if isinstance(value, str):
            inputs[name] = value
        elif isinstance(value, list):
            inputs[name] = tuple(item for item in value if isinstance(item, str))
        else:
            logger.debug("Ignoring input %r with unexpected value %r", name, value)
    return inputs


@dataclass(frozen=True)
class Node:
    """A named vertex of the lock graph."""

    name: str
    locked: Optional[LockedDescriptor] = None
    original: Optional[OriginalDescriptor] = None
    inputs: Mapping[str, InputRef] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, raw: Any) -> "Node":
        if not isinstance(raw, Mapping):
            return cls(name=name)
        return cls(
            name=name,
            locked=LockedDescriptor.from_dict(raw.get("locked")),
            original=OriginalDescriptor.from_dict(raw.get("original")),
            inputs=_decode_inputs(raw.get("inputs")),
        )


@dataclass(frozen=True)
class LockGraph:
    """All nodes of a lockfile plus the name of the root node."""

    nodes: Mapping[str, Node] = field(default_factory=dict)
    root: str = DEFAULT_ROOT_NODE
    version: Optional[int] = None

    @property
    def root_node(self) -> Optional[Node]:
        """The root node, or ``None`` if the graph has none."""
        return self.nodes.get(self.root)

    @classmethod
    def from_dict(cls, raw: Any) -> "LockGraph":
        """Decode a parsed ``flake.lock`` document.

        Raises:
            LockfileError: ``raw`` is not an object or ``nodes`` is not an
                object.
        """
        if not isinstance(raw, Mapping):
            raise LockfileError(
                "Lockfile must be a JSON object",
                reason="not-an-object",
            )

        raw_nodes = raw.get("nodes", {})
        if not isinstance(raw_nodes, Mapping):
            raise LockfileError(
                "Lockfile 'nodes' must be a JSON object",
                reason="invalid-nodes",
            )

        nodes = {
            name: Node.from_dict(name, value) for name, value in raw_nodes.items()
        }
        return cls(
            nodes=nodes,
            root=_string(raw, "root") or DEFAULT_ROOT_NODE,
            version=_integer(raw, "version"),
        )

    @classmethod
    def from_json(cls, text: str, *, source: Optional[str] = None) -> "LockGraph":
        """Parse JSON text and decode it."""
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LockfileError(
                f"Error decoding lockfile: {exc}",
                file_path=source,
                reason="json",
            ) from exc

        try:
            return cls.from_dict(raw)
        except LockfileError as exc:
            if source is None:
                raise
            raise LockfileError(exc.message, file_path=source, reason=exc.reason) from exc


def load_lockfile(path: PathLike) -> LockGraph:
    """Read and decode the lockfile at ``path``.

    Raises:
        FileOperationError: The file is missing, too large or unreadable.
        LockfileError: The file is not a valid lockfile document.
    """
    text = safe_read_file(path)
    graph = LockGraph.from_json(text, source=str(path))
    logger.debug(
        "Loaded %s: %d node(s), root=%r, version=%s",
        Path(path).name,
        len(graph.nodes),
        graph.root,
        graph.version,
    )
    return graph
