from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from flakelint.exceptions import FileOperationError, LockfileError
from flakelint.models import LockedDescriptor, LockGraph, Node, OriginalDescriptor, load_lockfile


@pytest.mark.unit
class TestLockedDescriptor:
    """Tests for LockedDescriptor.from_dict decoding."""

    def test_full_record(self) -> None:
        locked = LockedDescriptor.from_dict(
            {
                "type": "github",
                "owner": "NixOS",
                "repo": "nixpkgs",
                "rev": "abc",
                "narHash": "sha256-x",
                "lastModified": 1700000000,
                "unknown": "ignored",
            }
        )
        assert locked == LockedDescriptor(
            type="github",
            owner="NixOS",
            repo="nixpkgs",
            rev="abc",
            nar_hash="sha256-x",
            last_modified=1700000000,
        )

    def test_wrong_types_degrade_to_absent(self) -> None:
        locked = LockedDescriptor.from_dict({"type": "git", "url": 42, "lastModified": True})
        assert locked is not None
        assert locked.url == ""
        assert locked.last_modified is None

    @pytest.mark.parametrize("raw", [None, "github", [], 3])
    def test_non_object(self, raw: Any) -> None:
        assert LockedDescriptor.from_dict(raw) is None

    def test_is_frozen(self) -> None:
        locked = LockedDescriptor(type="path")
        with pytest.raises(AttributeError):
            locked.type = "git"  # type: ignore[misc]


@pytest.mark.unit
class TestNode:
    """Tests for Node.from_dict and input decoding."""

    def test_inputs(self) -> None:
        node = Node.from_dict(
            "a",
            {
                "inputs": {
                    "nixpkgs": "nixpkgs",
                    "utils": ["flake-utils", 3, "systems"],
                    "bogus": {"x": 1},
                    "number": 7,
                }
            },
        )
        assert dict(node.inputs) == {
            "nixpkgs": "nixpkgs",
            "utils": ("flake-utils", "systems"),
        }
        assert node.locked is None

    def test_original(self) -> None:
        node = Node.from_dict(
            "a", {"original": {"type": "github", "owner": "o", "repo": "r", "ref": "main"}}
        )
        assert node.original == OriginalDescriptor(type="github", owner="o", repo="r", ref="main")

    def test_non_object_node(self) -> None:
        assert Node.from_dict("a", "broken") == Node(name="a")


@pytest.mark.unit
class TestLockGraph:
    """Tests for LockGraph decoding."""

    def test_from_dict(self) -> None:
        graph = LockGraph.from_dict(
            {"nodes": {"root": {"inputs": {"a": "a"}}, "a": {}}, "root": "root", "version": 7}
        )
        assert set(graph.nodes) == {"root", "a"}
        assert graph.version == 7
        assert graph.root_node is graph.nodes["root"]

    def test_default_root_name(self) -> None:
        graph = LockGraph.from_dict({"nodes": {"root": {}}})
        assert graph.root == "root"

    def test_custom_root_name(self) -> None:
        graph = LockGraph.from_dict({"nodes": {"top": {}}, "root": "top"})
        assert graph.root_node is not None
        assert graph.root_node.name == "top"

    def test_missing_root_node(self) -> None:
        assert LockGraph.from_dict({"nodes": {}}).root_node is None

    @pytest.mark.parametrize("raw", [[], "text", None])
    def test_document_must_be_object(self, raw: Any) -> None:
        with pytest.raises(LockfileError) as exc_info:
            LockGraph.from_dict(raw)
        assert exc_info.value.reason == "not-an-object"

    def test_nodes_must_be_object(self) -> None:
        with pytest.raises(LockfileError) as exc_info:
            LockGraph.from_dict({"nodes": ["root"]})
        assert exc_info.value.reason == "invalid-nodes"

    def test_from_json_invalid(self) -> None:
        with pytest.raises(LockfileError) as exc_info:
            LockGraph.from_json("{not json", source="flake.lock")
        assert exc_info.value.reason == "json"
        assert exc_info.value.file_path == "flake.lock"

    def test_from_json_attaches_source(self) -> None:
        with pytest.raises(LockfileError) as exc_info:
            LockGraph.from_json("[]", source="flake.lock")
        assert exc_info.value.file_path == "flake.lock"


@pytest.mark.unit
class TestLoadLockfile:
    """Tests for load_lockfile."""

    def test_loads(self, write_lockfile: Callable[[Any], Path], sample_document: Any) -> None:
        graph = load_lockfile(write_lockfile(sample_document))
        assert "home-manager" in graph.nodes

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="File not found"):
            load_lockfile(tmp_path / "flake.lock")

    def test_invalid_json(self, write_lockfile: Callable[[Any], Path]) -> None:
        with pytest.raises(LockfileError, match="Error decoding lockfile"):
            load_lockfile(write_lockfile("{"))
