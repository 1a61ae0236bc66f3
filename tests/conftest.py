from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional

import pytest

from flakelint.models import LockGraph
from flakelint.utils.logger import disable_logging


def github_node(
    owner: str,
    repo: str,
    rev: str,
    *,
    nar_hash: str = "",
    ref: Optional[str] = None,
    inputs: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a raw ``flake.lock`` node for a GitHub input."""
    locked: Dict[str, Any] = {"type": "github", "owner": owner, "repo": repo, "rev": rev}
    if nar_hash:
        locked["narHash"] = nar_hash
    original: Dict[str, Any] = {"type": "github", "owner": owner, "repo": repo}
    if ref is not None:
        original["ref"] = ref
    node: Dict[str, Any] = {"locked": locked, "original": original}
    if inputs is not None:
        node["inputs"] = inputs
    return node


def lock_document(root_inputs: Dict[str, Any], **nodes: Dict[str, Any]) -> Dict[str, Any]:
    """Build a raw lockfile document with a ``root`` node."""
    all_nodes: Dict[str, Any] = {"root": {"inputs": root_inputs}}
    all_nodes.update(nodes)
    return {"nodes": all_nodes, "root": "root", "version": 7}


@pytest.fixture(autouse=True)
def _quiet_logging() -> Generator[None, None, None]:
    """Keep handlers installed by CLI tests from leaking into other tests."""
    yield
    disable_logging()


@pytest.fixture
def sample_document() -> Dict[str, Any]:
    """A lockfile where nixpkgs is locked twice (directly and via home-manager)."""
    return lock_document(
        {"nixpkgs": "nixpkgs", "home-manager": "home-manager"},
        nixpkgs=github_node("NixOS", "nixpkgs", "aaa", nar_hash="sha256-a", ref="nixos-unstable"),
        nixpkgs_2=github_node("NixOS", "nixpkgs", "bbb", nar_hash="sha256-b"),
        **{
            "home-manager": github_node(
                "nix-community",
                "home-manager",
                "ccc",
                inputs={"nixpkgs": "nixpkgs_2"},
            )
        },
    )


@pytest.fixture
def sample_graph(sample_document: Dict[str, Any]) -> LockGraph:
    return LockGraph.from_dict(sample_document)


@pytest.fixture
def write_lockfile(tmp_path: Path) -> Callable[[Any], Path]:
    """Return a helper that writes a document to ``tmp_path/flake.lock``."""

    def _write(document: Any) -> Path:
        path = tmp_path / "flake.lock"
        text = document if isinstance(document, str) else json.dumps(document)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
