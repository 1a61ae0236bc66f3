from __future__ import annotations

from pathlib import Path

import pytest

from flakelint.config import FlakeLintConfig, discover_config_file, load_config
from flakelint.exceptions import ConfigError


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.mark.unit
class TestFlakeLintConfig:
    """Tests for FlakeLintConfig defaults."""

    def test_defaults(self) -> None:
        config = FlakeLintConfig()

        assert config.lockfile == "flake.lock"
        assert config.output_format == "pretty"
        assert config.merge is False
        assert config.fail_if_multiple_versions is False
        assert config.timeout == 10
        assert config.source_path is None

    def test_to_log_dict_excludes_source(self) -> None:
        data = FlakeLintConfig(source_path=Path("x")).to_log_dict()
        assert "source_path" not in data
        assert data["timeout"] == 10


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file search order."""

    def test_nothing_found(self, in_tmp: Path) -> None:
        assert discover_config_file() is None

    def test_explicit_missing(self, in_tmp: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            discover_config_file(in_tmp / "nope.toml")

    def test_own_file_wins_over_pyproject(self, in_tmp: Path) -> None:
        (in_tmp / "flakelint.toml").write_text("[flakelint]\n")
        (in_tmp / "pyproject.toml").write_text("[tool.flakelint]\nmerge = true\n")

        assert discover_config_file() == (in_tmp / "flakelint.toml").resolve()

    def test_pyproject_requires_section(self, in_tmp: Path) -> None:
        (in_tmp / "pyproject.toml").write_text("[tool.other]\nx = 1\n")
        assert discover_config_file() is None

    def test_pyproject_with_section(self, in_tmp: Path) -> None:
        (in_tmp / "pyproject.toml").write_text("[tool.flakelint]\nmerge = true\n")
        assert discover_config_file() == (in_tmp / "pyproject.toml").resolve()

    def test_broken_pyproject_is_ignored(self, in_tmp: Path) -> None:
        (in_tmp / "pyproject.toml").write_text("[tool.flakelint\n")
        assert discover_config_file() is None


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config parsing and validation."""

    def test_defaults_without_file(self, in_tmp: Path) -> None:
        assert load_config() == FlakeLintConfig()

    def test_all_options(self, in_tmp: Path) -> None:
        path = in_tmp / "flakelint.toml"
        path.write_text(
            "[flakelint]\n"
            'lockfile = "nix/flake.lock"\n'
            'output_format = "JSON"\n'
            "merge = true\n"
            "fail_if_multiple_versions = true\n"
            "timeout = 30\n"
        )

        config = load_config()

        assert config.lockfile == "nix/flake.lock"
        assert config.output_format == "json"
        assert config.merge is True
        assert config.fail_if_multiple_versions is True
        assert config.timeout == 30
        assert config.source_path == path.resolve()

    def test_pyproject_section(self, in_tmp: Path) -> None:
        (in_tmp / "pyproject.toml").write_text('[tool.flakelint]\noutput_format = "plain"\n')
        assert load_config().output_format == "plain"

    def test_empty_section(self, in_tmp: Path) -> None:
        path = in_tmp / "custom.toml"
        path.write_text("[other]\n")

        config = load_config(path)

        assert config.to_log_dict() == FlakeLintConfig().to_log_dict()
        assert config.source_path == path.resolve()

    def test_invalid_toml(self, in_tmp: Path) -> None:
        path = in_tmp / "flakelint.toml"
        path.write_text("[flakelint\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path)

    def test_unknown_keys(self, in_tmp: Path) -> None:
        (in_tmp / "flakelint.toml").write_text("[flakelint]\ncolour = true\n")
        with pytest.raises(ConfigError, match="Unknown configuration keys: colour"):
            load_config()

    @pytest.mark.parametrize(
        "line, option",
        [
            ('merge = "yes"', "merge"),
            ("fail_if_multiple_versions = 1", "fail_if_multiple_versions"),
            ("timeout = true", "timeout"),
            ('timeout = "10"', "timeout"),
            ("timeout = 0", "timeout"),
            ('output_format = "yaml"', "output_format"),
            ("output_format = 3", "output_format"),
            ('lockfile = ""', "lockfile"),
        ],
    )
    def test_invalid_values(self, in_tmp: Path, line: str, option: str) -> None:
        (in_tmp / "flakelint.toml").write_text(f"[flakelint]\n{line}\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert exc_info.value.option == option

    def test_section_must_be_table(self, in_tmp: Path) -> None:
        (in_tmp / "flakelint.toml").write_text('flakelint = "oops"\n')
        with pytest.raises(ConfigError, match="must be a table"):
            load_config()
