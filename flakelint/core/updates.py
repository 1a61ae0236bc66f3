"""Upstream update checks for the inputs of a lockfile's root node.

For every root input the checker decides how to look up the newest upstream
revision and compares it with the locked one:

* inputs pinned to a commit (a 40-character hash as ``original.ref``, or an
  ``original.rev``) are never looked up;
* ``github``/``gitlab`` inputs, ``git`` inputs and ``tarball`` inputs whose
  URL follows the usual forge archive layout are turned into a clone URL and
  a ref;
* the clone URL is resolved through the GitHub or GitLab REST API when it
  lives on ``github.com``/``gitlab.com``, and through a :class:`RefLister`
  (``git ls-remote`` by default) for any other host.

All inputs are checked concurrently, one task per input. A failure while
checking one input is recorded on that input's :class:`UpdateStatus` and
never affects the others; only a lockfile without root inputs fails the
whole call.

Typical usage::

    async with HTTPClient() as http:
        results = await UpdateChecker(http).check_updates(graph)
    for status in results.available:
        print(status.input_name, status.short_current, "->", status.short_latest)
"""

from __future__ import annotations

import re
import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from flakelint.constants import (
    COMMIT_HASH_LENGTH,
    SOURCEHUT_DEFAULT_HOST,
    SSH_SCHEMES,
)
from flakelint.core.git_remote import GitLsRemote, RefLister
from flakelint.core.hosts import GitHubAPI, GitLabAPI, parse_repo_path
from flakelint.core.identity import display_url
from flakelint.exceptions import FlakeLintError, LockfileError, UnsupportedInputError
from flakelint.models.lock import InputRef, LockGraph, Node
from flakelint.models.update import UpdateResults, UpdateStatus
from flakelint.utils.http import HTTPClient
from flakelint.utils.logger import get_logger

logger = get_logger("updates")

__all__ = [
    "LookupPlan",
    "UpdateChecker",
    "is_commit_hash",
    "parse_tarball_url",
    "plan_lookup",
]

_TARBALL_PATTERN = re.compile(
    r"(https?://[^/]+/[^/]+/[^/]+)"
    r"/(?:archive|releases/download)/"
    r"(?:refs/tags/)?([^/]+)"
    r"(?:/[^/]+)?"
    r"(?:\.tar\.gz|\.zip|\.tar\.xz)"
)

_HEX_DIGITS = frozenset("0123456789abcdef")


def is_commit_hash(value: str) -> bool:
    """Return True for a full, lowercase hexadecimal git commit hash."""
    return len(value) == COMMIT_HASH_LENGTH and set(value) <= _HEX_DIGITS


def parse_tarball_url(url: str) -> Optional[Tuple[str, str]]:
    """Recover ``(clone_url, ref)`` from a forge archive or release URL.

    >>> parse_tarball_url("https://github.com/o/r/archive/v1.2.tar.gz")
    ('https://github.com/o/r.git', 'v1.2')
    >>> parse_tarball_url("https://example.com/file.tar.gz") is None
    True
    """
    match = _TARBALL_PATTERN.search(url)
    if not match:
        return None
    return match.group(1) + ".git", match.group(2)


@dataclass(frozen=True)
class LookupPlan:
    """Where to look for the latest revision of an input.

    ``pinned`` plans skip the lookup entirely.
    """

    clone_url: str = ""
    ref: str = ""
    pinned: bool = False


def _reject_ssh(url: str) -> None:
    if url.startswith(SSH_SCHEMES):
        raise UnsupportedInputError("git+ssh URLs not supported", input_type="git")


def _forge_clone_url(kind: str, host: str, owner: str, repo: str) -> str:
    if kind == "sourcehut":
        host = host or SOURCEHUT_DEFAULT_HOST
        if not owner.startswith("~"):
            owner = "~" + owner
        return f"https://{host}/{owner}/{repo}"
    host = host or f"{kind}.com"
    return f"https://{host}/{owner}/{repo}.git"


def _plan_tarball(url: str) -> LookupPlan:
    if not url:
        raise UnsupportedInputError("no tarball URL found", input_type="tarball")

    parsed = parse_tarball_url(url)
    if parsed is None:
        raise UnsupportedInputError(
            f"cannot parse tarball URL: {url}", input_type="tarball"
        )

    clone_url, ref = parsed
    if is_commit_hash(ref):
        logger.debug("Tarball %s points to a specific commit", url)
        return LookupPlan(clone_url=clone_url, ref=ref, pinned=True)

    logger.debug("Reconstructed git URL from tarball: %s (ref: %s)", clone_url, ref)
    return LookupPlan(clone_url=clone_url, ref=ref)


def plan_lookup(node: Node) -> LookupPlan:
    """Decide how to find the latest revision of ``node``.

    The original descriptor decides the strategy; nodes without one fall
    back to their locked type.

    Raises:
        UnsupportedInputError: The input type, transport or tarball URL
            cannot be checked.
    """
    locked = node.locked
    if locked is None:
        raise UnsupportedInputError("no locked information")

    original = node.original
    if original is not None:
        if original.rev or (original.ref and is_commit_hash(original.ref)):
            return LookupPlan(pinned=True)

        kind = original.type
        if kind in ("github", "gitlab"):
            clone_url = _forge_clone_url(
                kind, locked.host, locked.owner, original.repo or locked.repo
            )
            return LookupPlan(clone_url=clone_url, ref=original.ref)
        if kind == "git":
            _reject_ssh(locked.url)
            return LookupPlan(clone_url=locked.url, ref=original.ref)
        if kind == "tarball":
            return _plan_tarball(locked.url)
        raise UnsupportedInputError(f"unsupported input type: {kind}", input_type=kind)

    kind = locked.type
    if kind in ("github", "gitlab", "sourcehut"):
        return LookupPlan(
            clone_url=_forge_clone_url(kind, locked.host, locked.owner, locked.repo)
        )
    if kind == "git":
        _reject_ssh(locked.url)
        return LookupPlan(clone_url=locked.url, ref=locked.ref)
    if kind == "tarball":
        return _plan_tarball(locked.url)
    raise UnsupportedInputError(f"unsupported locked type: {kind}", input_type=kind)


class UpdateChecker:
    """Check root inputs of a lock graph for newer upstream revisions.

    Args:
        http: HTTP client shared by every lookup of the run.
        ref_lister: Strategy for hosts without API support; defaults to
            :class:`GitLsRemote` using the client's timeout.
    """

    def __init__(
        self,
        http: HTTPClient,
        *,
        ref_lister: Optional[RefLister] = None,
    ) -> None:
        self.http = http
        self.ref_lister: RefLister = ref_lister or GitLsRemote(timeout=http.timeout)
        self.github = GitHubAPI(http)
        self.gitlab = GitLabAPI(http)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def check_updates(self, graph: LockGraph) -> UpdateResults:
        """Check every input of the root node concurrently.

        Raises:
            LockfileError: The graph has no root node, or the root node
                declares no inputs. Raised before any lookup starts.
        """
        root = graph.root_node
        if root is None:
            raise LockfileError(f"root node {graph.root!r} not found", reason="no-root")
        if not root.inputs:
            raise LockfileError("no root inputs found", reason="no-root-inputs")

        names = list(root.inputs)
        logger.info("Checking %d input(s) for updates", len(names))

        tasks = [
            asyncio.create_task(self.check_input(graph, name, root.inputs[name]))
            for name in names
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        return UpdateResults(updates=self._collect(names, results))

    async def check_input(self, graph: LockGraph, input_name: str, ref: InputRef) -> UpdateStatus:
        """Check a single root input; failures end up in ``error``."""
        if not isinstance(ref, str):
            return UpdateStatus(
                input_name=input_name, error="input follows another input"
            )

        node = graph.nodes.get(ref)
        if node is None:
            return UpdateStatus(
                input_name=input_name, error=f"input node {ref} not found"
            )
        if node.locked is None:
            return UpdateStatus(
                input_name=input_name,
                error=f"input {input_name} has no locked version",
            )

        current_rev = node.locked.rev
        current_url = display_url(node.locked)

        try:
            plan = plan_lookup(node)
            if plan.pinned:
                logger.info("Skipping %s: pinned to specific commit", input_name)
                latest_rev = current_rev
            else:
                logger.info(
                    "Checking %s for updates (ref: %s)",
                    plan.clone_url,
                    plan.ref or "HEAD",
                )
                latest_rev = await self.resolve_commit(plan.clone_url, plan.ref)
        except FlakeLintError as exc:
            logger.debug("Lookup for %s failed", input_name, exc_info=True)
            return UpdateStatus(
                input_name=input_name,
                current_rev=current_rev,
                current_url=current_url,
                error=f"failed to get latest revision: {exc}",
            )

        return UpdateStatus(
            input_name=input_name,
            current_rev=current_rev,
            current_url=current_url,
            latest_rev=latest_rev,
            latest_url=current_url,
            is_update=bool(latest_rev) and latest_rev != current_rev,
        )

    async def resolve_commit(self, clone_url: str, ref: str = "") -> str:
        """Return the latest commit of ``ref`` at ``clone_url``.

        Uses the GitHub or GitLab API for URLs on those hosts and the
        ref lister for everything else.
        """
        for api in (self.github, self.gitlab):
            if api.host in clone_url:
                repo_path = parse_repo_path(clone_url, api.host)
                if repo_path is None:
                    raise UnsupportedInputError(
                        f"invalid {api.name} URL format: {clone_url}",
                        input_type=api.name,
                    )
                owner, repo = repo_path
                return await api.resolve(owner, repo, ref)

        logger.debug("Using git ls-remote for: %s", clone_url)
        return await self.ref_lister.resolve(clone_url, ref)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _collect(names: List[str], results: List[Any]) -> List[UpdateStatus]:
        """Turn ``gather`` output into statuses, one per input."""
        updates: List[UpdateStatus] = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error("Failed to check %s: %s", name, result)
                updates.append(
                    UpdateStatus(
                        input_name=name,
                        error=f"failed to get latest revision: {result}",
                    )
                )
            else:
                updates.append(result)
        return updates
