from __future__ import annotations

import pytest

from conftest import github_node, lock_document
from flakelint.core.analyzer import analyze, dependants_of, find_duplicates, iter_targets
from flakelint.models import LockGraph, Relations

NIXPKGS_URL = "github:NixOS/nixpkgs?rev=abcdef&narHash=sha256-abc"


def _graph(root_inputs, **nodes) -> LockGraph:
    return LockGraph.from_dict(lock_document(root_inputs, **nodes))


@pytest.mark.unit
class TestIterTargets:
    """Tests for iter_targets flattening."""

    def test_single_name(self) -> None:
        assert list(iter_targets("nixpkgs")) == ["nixpkgs"]

    def test_follows_path(self) -> None:
        assert list(iter_targets(("a", "b"))) == ["a", "b"]

    def test_empty_follows_path(self) -> None:
        assert list(iter_targets(())) == []


@pytest.mark.unit
class TestAnalyze:
    """Tests for analyze building forward and reverse maps."""

    def test_single_input(self) -> None:
        graph = _graph(
            {"nixpkgs": "nixpkgs"},
            nixpkgs=github_node("NixOS", "nixpkgs", "abcdef", nar_hash="sha256-abc"),
        )

        relations = analyze(graph)

        assert relations.deps == {NIXPKGS_URL: ["root"]}
        assert relations.reverse_deps == {"nixpkgs": ["root"]}

    def test_two_referrers_share_one_key(self) -> None:
        graph = _graph(
            {"nixpkgs": "nixpkgs", "a": "a"},
            nixpkgs=github_node("NixOS", "nixpkgs", "abcdef", nar_hash="sha256-abc"),
            a=github_node("o", "a", "111", inputs={"nixpkgs": "nixpkgs"}),
        )

        relations = analyze(graph)

        assert sorted(relations.deps[NIXPKGS_URL]) == ["a", "root"]
        assert sorted(relations.reverse_deps["nixpkgs"]) == ["a", "root"]

    def test_chain_records_direct_referrer_only(self) -> None:
        graph = _graph(
            {"a": "a"},
            a=github_node("o", "a", "1", inputs={"b": "b"}),
            b=github_node("o", "b", "2", inputs={"c": "c"}),
            c=github_node("o", "c", "3"),
        )

        relations = analyze(graph)

        assert relations.deps["github:o/c?rev=3"] == ["b"]
        assert relations.reverse_deps["c"] == ["b"]
        assert relations.deps["github:o/b?rev=2"] == ["a"]

    def test_follows_path_is_flattened(self) -> None:
        graph = _graph(
            {"a": "a", "nixpkgs": "nixpkgs"},
            nixpkgs=github_node("NixOS", "nixpkgs", "abcdef", nar_hash="sha256-abc"),
            a=github_node("o", "a", "1", inputs={"nixpkgs": ["nixpkgs"]}),
        )

        relations = analyze(graph)

        assert sorted(relations.deps[NIXPKGS_URL]) == ["a", "root"]

    def test_missing_and_unlocked_targets_are_ignored(self) -> None:
        graph = _graph(
            {"ghost": "does-not-exist", "local": "local", "odd": "odd"},
            local={"inputs": {}},
            odd={"locked": {"type": "indirect", "id": "nixpkgs"}},
        )

        relations = analyze(graph)

        assert relations.deps == {}
        assert relations.reverse_deps == {}

    def test_keys_are_version_qualified_for_nodes_with_inputs(self) -> None:
        graph = _graph(
            {"a": "a"},
            a=github_node("o", "a", "1", nar_hash="sha256-a", inputs={"b": "b"}),
            b=github_node("o", "b", "2"),
        )

        relations = analyze(graph)

        assert "github:o/a?rev=1&narHash=sha256-a" in relations.deps
        assert "github:o/a" not in relations.deps

    def test_node_order_does_not_change_result(self) -> None:
        nodes = {
            "a": github_node("o", "a", "1", inputs={"c": "c"}),
            "b": github_node("o", "b", "2", inputs={"c": "c"}),
            "c": github_node("o", "c", "3"),
        }
        forward = _graph({"a": "a", "b": "b"}, **nodes)
        backward = _graph({"a": "a", "b": "b"}, **dict(reversed(list(nodes.items()))))

        left = analyze(forward)
        right = analyze(backward)

        assert {k: sorted(v) for k, v in left.deps.items()} == {
            k: sorted(v) for k, v in right.deps.items()
        }

    def test_empty_graph(self) -> None:
        relations = analyze(LockGraph())
        assert relations == Relations()


@pytest.mark.unit
class TestFindDuplicates:
    """Tests for find_duplicates grouping by repository identity."""

    def test_two_versions_group_to_one_identity(self, sample_graph: LockGraph) -> None:
        duplicates = find_duplicates(analyze(sample_graph))

        assert len(duplicates) == 1
        group = duplicates[0]
        assert group.identity == "github:NixOS/nixpkgs"
        assert list(group.versions) == [
            "github:NixOS/nixpkgs?rev=aaa&narHash=sha256-a",
            "github:NixOS/nixpkgs?rev=bbb&narHash=sha256-b",
        ]
        assert group.versions["github:NixOS/nixpkgs?rev=bbb&narHash=sha256-b"] == ["home-manager"]
        assert group.primary_name == "root"

    def test_single_version_is_not_a_duplicate(self) -> None:
        relations = Relations(deps={NIXPKGS_URL: ["root", "a"]})
        assert find_duplicates(relations) == []

    def test_custom_host_groups_separately(self) -> None:
        relations = Relations(
            deps={
                "gitlab:u/p?host=a.example.com?rev=1": ["root"],
                "gitlab:u/p?host=b.example.com?rev=2": ["x"],
                "gitlab:u/p?host=a.example.com?rev=3": ["y"],
            }
        )

        duplicates = find_duplicates(relations)

        assert [group.identity for group in duplicates] == ["gitlab:u/p?host=a.example.com"]
        assert duplicates[0].version_count == 2

    def test_sorted_by_identity(self) -> None:
        relations = Relations(
            deps={
                "github:z/z?rev=1": ["root"],
                "github:z/z?rev=2": ["a"],
                "github:a/a?rev=1": ["root"],
                "github:a/a?rev=2": ["b"],
            }
        )

        identities = [group.identity for group in find_duplicates(relations)]

        assert identities == ["github:a/a", "github:z/z"]


@pytest.mark.unit
class TestDependantsOf:
    """Tests for dependants_of merging reverse dependencies."""

    def test_merges_without_duplicates(self) -> None:
        relations = Relations(reverse_deps={"a": ["root", "x"], "b": ["x", "y"]})
        assert dependants_of(relations, ["a", "b"]) == ["root", "x", "y"]

    def test_unknown_aliases(self) -> None:
        assert dependants_of(Relations(), ["root"]) == []
