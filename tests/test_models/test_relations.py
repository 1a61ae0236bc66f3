from __future__ import annotations

import pytest

from flakelint.models import DuplicateGroup, Relations


@pytest.mark.unit
class TestRelations:
    """Tests for Relations serialization."""

    def test_to_json_keys(self) -> None:
        relations = Relations(deps={"github:o/r?rev=1": ["root"]}, reverse_deps={"r": ["root"]})
        assert relations.to_json() == {
            "dependencies": {"github:o/r?rev=1": ["root"]},
            "reverse_dependencies": {"r": ["root"]},
        }

    def test_to_json_copies_lists(self) -> None:
        relations = Relations(deps={"u": ["root"]})
        data = relations.to_json()
        data["dependencies"]["u"].append("x")
        assert relations.deps["u"] == ["root"]


@pytest.mark.unit
class TestDuplicateGroup:
    """Tests for DuplicateGroup derived properties."""

    def test_properties(self) -> None:
        group = DuplicateGroup(
            identity="github:NixOS/nixpkgs",
            versions={"github:NixOS/nixpkgs?rev=1": ["home-manager"], "github:NixOS/nixpkgs?rev=2": ["root", "nix"]},
        )
        assert group.aliases == ["home-manager", "root", "nix"]
        assert group.version_count == 2
        assert group.primary_name == "nix"

    def test_primary_name_falls_back_to_identity(self) -> None:
        assert DuplicateGroup(identity="github:o/r").primary_name == "github:o/r"

    def test_to_json(self) -> None:
        group = DuplicateGroup(identity="i", versions={"i?rev=1": ["a"]})
        assert group.to_json() == {"identity": "i", "versions": {"i?rev=1": ["a"]}}
