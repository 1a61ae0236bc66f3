"""Configuration file loader for flakelint.

Supports two formats:

- ``flakelint.toml``: settings under ``[flakelint]`` table
- ``pyproject.toml``: settings under ``[tool.flakelint]`` table

Discovery order:

1. Explicit path from ``--config`` or ``FLAKELINT_CONFIG``
2. ``flakelint.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.flakelint]`` section

Configuration precedence: defaults < config file < CLI args. API tokens are
never read from configuration files; see :meth:`HTTPClient.from_environment`.

Example (``flakelint.toml``)::

    [flakelint]
    lockfile = "nix/flake.lock"
    output_format = "plain"
    fail_if_multiple_versions = true
    timeout = 20
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from flakelint.exceptions import ConfigError
from flakelint.utils.logger import get_logger
from flakelint.constants import (
    CHECK_OUTPUT_FORMATS,
    DEFAULT_FAIL_IF_MULTIPLE_VERSIONS,
    DEFAULT_LOCKFILE,
    DEFAULT_MERGE,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")

CONFIG_FILE_NAME = "flakelint.toml"
SECTION_NAME = "flakelint"

_BOOLEAN_KEYS = ("merge", "fail_if_multiple_versions")


@dataclass
class FlakeLintConfig:
    """Parsed and validated flakelint configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        lockfile: Lockfile (or flake directory) to analyze.
        output_format: Report format for ``flakelint check``.
        merge: Merge all dependants of a duplicate into one list.
        fail_if_multiple_versions: Exit with status 1 when duplicates exist.
        timeout: Network timeout in seconds for update checks.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    lockfile: str = DEFAULT_LOCKFILE
    output_format: str = DEFAULT_OUTPUT_FORMAT
    merge: bool = DEFAULT_MERGE
    fail_if_multiple_versions: bool = DEFAULT_FAIL_IF_MULTIPLE_VERSIONS
    timeout: int = DEFAULT_TIMEOUT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "lockfile": self.lockfile,
            "output_format": self.output_format,
            "merge": self.merge,
            "fail_if_multiple_versions": self.fail_if_multiple_versions,
            "timeout": self.timeout,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    own_file = cwd / CONFIG_FILE_NAME
    if own_file.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, own_file)
        return own_file

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_flakelint_section(pyproject_toml):
        logger.debug("Found [tool.flakelint] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_flakelint_section(path: Path) -> bool:
    """Return ``True`` if ``path`` parses and has a ``[tool.flakelint]`` table.

    A broken pyproject.toml is not ours to report, so it simply does not
    count as a configuration file.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and SECTION_NAME in tool


def load_config(config_path: Optional[Path] = None) -> FlakeLintConfig:
    """Load and validate flakelint configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`FlakeLintConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        return FlakeLintConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(SECTION_NAME, {})
    else:
        section = raw.get(SECTION_NAME, {})

    if not isinstance(section, dict):
        raise ConfigError(
            f"[{SECTION_NAME}] must be a table",
            config_path=str(resolved),
        )

    if not section:
        logger.debug("Config file found but no flakelint section, using defaults")
        return FlakeLintConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _type_error(option: str, expected: str, value: Any, config_path: str) -> ConfigError:
    return ConfigError(
        f"{option} must be {expected}, got {type(value).__name__}",
        config_path=config_path,
        option=option,
    )


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> FlakeLintConfig:
    """Validate a ``[flakelint]`` or ``[tool.flakelint]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types, or out-of-range values.
    """
    config = FlakeLintConfig()

    known = {"lockfile", "output_format", "timeout", *_BOOLEAN_KEYS}
    unknown = set(section) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "lockfile" in section:
        val = section["lockfile"]
        if not isinstance(val, str) or not val:
            raise _type_error("lockfile", "a non-empty string", val, config_path)
        config.lockfile = val

    if "output_format" in section:
        val = section["output_format"]
        if not isinstance(val, str):
            raise _type_error("output_format", "a string", val, config_path)
        if val.lower() not in CHECK_OUTPUT_FORMATS:
            raise ConfigError(
                f"output_format must be one of {', '.join(CHECK_OUTPUT_FORMATS)}, "
                f"got {val!r}",
                config_path=config_path,
                option="output_format",
            )
        config.output_format = val.lower()

    for key in _BOOLEAN_KEYS:
        if key in section:
            val = section[key]
            if not isinstance(val, bool):
                raise _type_error(key, "a boolean", val, config_path)
            setattr(config, key, val)

    if "timeout" in section:
        val = section["timeout"]
        # bool is an int subclass; ``timeout = true`` is a mistake
        if isinstance(val, bool) or not isinstance(val, int):
            raise _type_error("timeout", "an integer", val, config_path)
        if val <= 0:
            raise ConfigError(
                f"timeout must be positive, got {val}",
                config_path=config_path,
                option="timeout",
            )
        config.timeout = val

    return config
