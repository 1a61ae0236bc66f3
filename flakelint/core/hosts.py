"""REST clients that resolve a ref to a commit on GitHub and GitLab.

Both clients follow the same steps:

1. if no ref is given (or ``HEAD``), fetch the repository's default branch;
2. look the ref up as a branch and, on 404, as a tag;
3. return the commit the ref points at.

GitHub annotated tags point at a tag object rather than a commit, so one
more request dereferences them.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from flakelint.constants import GITHUB_API_BASE, GITLAB_API_BASE
from flakelint.exceptions import HostAPIError, NetworkError, NotFoundError
from flakelint.utils.http import HTTPClient
from flakelint.utils.logger import get_logger

logger = get_logger("hosts")

__all__ = ["GitHubAPI", "GitLabAPI", "parse_repo_path"]


def parse_repo_path(clone_url: str, host: str) -> Optional[Tuple[str, str]]:
    """Extract ``(owner, repo)`` from a clone URL on ``host``.

    >>> parse_repo_path("https://github.com/NixOS/nixpkgs.git", "github.com")
    ('NixOS', 'nixpkgs')
    >>> parse_repo_path("https://example.com/a/b.git", "github.com") is None
    True
    """
    pattern = re.escape(host) + r"[/:]([^/]+)/([^/]+?)(?:\.git)?/?$"
    match = re.search(pattern, clone_url)
    if not match:
        return None
    return match.group(1), match.group(2)


def _wants_default_branch(ref: str) -> bool:
    return ref in ("", "HEAD")


def _nested(data: Dict[str, Any], outer: str, inner: str) -> str:
    """Return ``data[outer][inner]`` if it is a non-empty string, else ``""``."""
    value = data.get(outer)
    if isinstance(value, dict):
        found = value.get(inner)
        if isinstance(found, str):
            return found
    return ""


class GitHubAPI:
    """Resolve refs through the GitHub REST API.

    Args:
        http: Shared HTTP client.
        base_url: API root, overridable for tests.
    """

    name = "github"
    host = "github.com"

    def __init__(self, http: HTTPClient, *, base_url: str = GITHUB_API_BASE) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")

    def _repo_url(self, owner: str, repo: str) -> str:
        return f"{self.base_url}/repos/{owner}/{repo}"

    async def default_branch(self, owner: str, repo: str) -> str:
        data = await self.http.get_json(self._repo_url(owner, repo))
        branch = data.get("default_branch")
        if not isinstance(branch, str) or not branch:
            raise HostAPIError(
                "GitHub response has no default branch",
                host=self.name,
                url=self._repo_url(owner, repo),
            )
        return branch

    async def _get_ref(self, owner: str, repo: str, ref: str) -> Dict[str, Any]:
        """Fetch ``refs/heads/<ref>``, falling back to ``refs/tags/<ref>``."""
        repo_url = self._repo_url(owner, repo)
        try:
            return await self.http.get_json(f"{repo_url}/git/refs/heads/{ref}")
        except NotFoundError:
            logger.debug("%s/%s: no branch %r, trying tags", owner, repo, ref)
        return await self.http.get_json(f"{repo_url}/git/refs/tags/{ref}")

    async def _peel_tag(self, owner: str, repo: str, tag_sha: str) -> Optional[str]:
        """Return the commit an annotated tag object points at, if reachable."""
        url = f"{self._repo_url(owner, repo)}/git/tags/{tag_sha}"
        try:
            data = await self.http.get_json(url)
        except NetworkError as exc:
            logger.debug("Could not dereference tag %s: %s", tag_sha, exc)
            return None
        return _nested(data, "object", "sha") or None

    async def resolve(self, owner: str, repo: str, ref: str = "") -> str:
        """Return the commit SHA ``ref`` points at on ``owner/repo``."""
        if _wants_default_branch(ref):
            ref = await self.default_branch(owner, repo)

        data = await self._get_ref(owner, repo, ref)
        sha = _nested(data, "object", "sha")
        if not sha:
            raise HostAPIError(
                f"GitHub response for ref {ref} has no object sha",
                host=self.name,
                url=self._repo_url(owner, repo),
            )

        if _nested(data, "object", "type") == "tag":
            peeled = await self._peel_tag(owner, repo, sha)
            if peeled:
                return peeled
        return sha


class GitLabAPI:
    """Resolve refs through the GitLab REST API (gitlab.com only).

    Args:
        http: Shared HTTP client.
        base_url: API root, overridable for tests.
    """

    name = "gitlab"
    host = "gitlab.com"

    def __init__(self, http: HTTPClient, *, base_url: str = GITLAB_API_BASE) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")

    def _project_url(self, owner: str, repo: str) -> str:
        project = quote(f"{owner}/{repo}", safe="")
        return f"{self.base_url}/projects/{project}"

    async def default_branch(self, owner: str, repo: str) -> str:
        data = await self.http.get_json(self._project_url(owner, repo))
        branch = data.get("default_branch")
        if not isinstance(branch, str) or not branch:
            raise HostAPIError(
                "GitLab response has no default branch",
                host=self.name,
                url=self._project_url(owner, repo),
            )
        return branch

    async def resolve(self, owner: str, repo: str, ref: str = "") -> str:
        """Return the commit id ``ref`` points at on ``owner/repo``."""
        if _wants_default_branch(ref):
            ref = await self.default_branch(owner, repo)

        repository = f"{self._project_url(owner, repo)}/repository"
        encoded = quote(ref, safe="")
        try:
            data = await self.http.get_json(f"{repository}/branches/{encoded}")
        except NotFoundError:
            logger.debug("%s/%s: no branch %r, trying tags", owner, repo, ref)
            data = await self.http.get_json(f"{repository}/tags/{encoded}")

        commit = _nested(data, "commit", "id")
        if not commit:
            raise HostAPIError(
                f"GitLab response for ref {ref} has no commit id",
                host=self.name,
                url=repository,
            )
        return commit
