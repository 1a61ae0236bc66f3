"""
Centralized constants for flakelint.

This module defines immutable configuration values used across flakelint,
including network settings, upstream API endpoints, lockfile conventions,
and logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, FrozenSet

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "flakelint/{version} (https://github.com/notashelf/flakelint)"
)

# ---------------------------------------------------------------------------
# Upstream hosting APIs
# ---------------------------------------------------------------------------

#: Base URL for the GitHub REST API.
GITHUB_API_BASE: Final[str] = "https://api.github.com"

#: Base URL for the GitLab REST API (gitlab.com only).
GITLAB_API_BASE: Final[str] = "https://gitlab.com/api/v4"

#: Environment variable holding an optional GitHub token.
ENV_GITHUB_TOKEN: Final[str] = "GITHUB_TOKEN"

#: Environment variable holding an optional GitLab token.
ENV_GITLAB_TOKEN: Final[str] = "GITLAB_TOKEN"

#: Default sourcehut git host.
SOURCEHUT_DEFAULT_HOST: Final[str] = "git.sr.ht"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 10

#: Retries are disabled unless explicitly requested.
DEFAULT_MAX_RETRIES: Final[int] = 0

#: Connection pool size shared by all concurrent lookups.
DEFAULT_MAX_CONNECTIONS: Final[int] = 10

#: Idle connections kept alive in the pool.
DEFAULT_MAX_KEEPALIVE: Final[int] = 5

#: Seconds an idle pooled connection is kept.
DEFAULT_KEEPALIVE_EXPIRY: Final[float] = 30.0

# ---------------------------------------------------------------------------
# Lockfile conventions
# ---------------------------------------------------------------------------

#: Default lockfile path, relative to the working directory.
DEFAULT_LOCKFILE: Final[str] = "flake.lock"

#: Name of the root node when the document does not declare one.
DEFAULT_ROOT_NODE: Final[str] = "root"

#: Locked types identified by ``owner/repo`` on a forge.
HOSTED_TYPES: Final[FrozenSet[str]] = frozenset({"github", "gitlab", "sourcehut"})

#: Locked types identified by their URL.
URL_TYPES: Final[FrozenSet[str]] = frozenset({"git", "hg", "tarball"})

#: Hosts that are implied by a hosted type and omitted from display URLs.
DEFAULT_FORGE_HOSTS: Final[FrozenSet[str]] = frozenset({"github.com", "gitlab.com"})

#: Transport schemes that require credentials the tool does not manage.
SSH_SCHEMES: Final[tuple] = ("ssh://", "git+ssh://")

#: Length of a full git commit hash.
COMMIT_HASH_LENGTH: Final[int] = 40

# ---------------------------------------------------------------------------
# Output and configuration defaults
# ---------------------------------------------------------------------------

#: Output formats accepted by ``flakelint check``.
CHECK_OUTPUT_FORMATS: Final[tuple] = ("pretty", "plain", "json")

#: Output formats accepted by ``flakelint updates``.
UPDATES_OUTPUT_FORMATS: Final[tuple] = ("table", "simple", "json")

#: Default output format for ``flakelint check``.
DEFAULT_OUTPUT_FORMAT: Final[str] = "pretty"

#: Merge all dependants of a duplicate into a single list.
DEFAULT_MERGE: Final[bool] = False

#: Exit with an error when duplicates are detected.
DEFAULT_FAIL_IF_MULTIPLE_VERSIONS: Final[bool] = False

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading lockfiles.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
