"""Remote reference listing for hosts without a dedicated API integration.

The update checker talks to GitHub and GitLab through their REST APIs. Every
other host is asked through the git protocol itself. That lookup sits behind
the small :class:`RefLister` interface so a native implementation (or a stub
in tests) can replace the default :class:`GitLsRemote`, which shells out to
``git ls-remote``.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import List, Optional, Protocol, Sequence, Tuple

from flakelint.constants import DEFAULT_TIMEOUT
from flakelint.exceptions import GitCommandError
from flakelint.utils.logger import get_logger

logger = get_logger("git_remote")

__all__ = [
    "GitLsRemote",
    "RefLister",
    "ls_remote_args",
    "normalize_remote_url",
    "parse_ls_remote",
    "select_commit",
]

#: Suffix git appends to the peeled (dereferenced) entry of an annotated tag.
PEELED_SUFFIX = "^{}"


class RefLister(Protocol):
    """Lists remote references and returns the commit a ref points at."""

    async def resolve(self, url: str, ref: str) -> str:
        """Return the commit hash of ``ref`` (or ``HEAD`` when empty) at ``url``."""
        ...


def normalize_remote_url(url: str) -> str:
    """Rewrite ``git://`` and scheme-less URLs to ``https://``."""
    if url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    if not url.startswith(("https://", "http://")):
        url = "https://" + url
    return url


def _wants_head(ref: str) -> bool:
    return ref in ("", "HEAD")


def ls_remote_args(url: str, ref: str) -> List[str]:
    """Build the ``git ls-remote`` argument list for ``ref``.

    >>> ls_remote_args("https://example.com/repo.git", "")
    ['ls-remote', 'https://example.com/repo.git', 'HEAD']
    >>> ls_remote_args("https://example.com/repo.git", "v1.0")
    ['ls-remote', '--branches', '--tags', 'https://example.com/repo.git', 'v1.0', 'v1.0^{}']
    """
    if _wants_head(ref):
        return ["ls-remote", url, "HEAD"]
    return ["ls-remote", "--branches", "--tags", url, ref, ref + PEELED_SUFFIX]


def parse_ls_remote(output: str) -> List[Tuple[str, str]]:
    """Parse ``<hash> <refname>`` lines; lines without both fields are skipped."""
    entries: List[Tuple[str, str]] = []
    for line in output.splitlines():
        fields = line.split()
        if len(fields) >= 2:
            entries.append((fields[0], fields[1]))
    return entries


def select_commit(output: str, ref: str) -> Optional[str]:
    """Pick the commit hash for ``ref`` out of ``git ls-remote`` output.

    For ``HEAD`` the first hash wins. Otherwise a peeled tag entry (the
    commit an annotated tag points at) is preferred over the first listed
    hash.
    """
    text = output.strip()
    if not text:
        return None

    if _wants_head(ref):
        fields = text.splitlines()[0].split()
        return fields[0] if fields else None

    best: Optional[str] = None
    for commit, name in parse_ls_remote(text):
        if name.endswith(PEELED_SUFFIX):
            return commit
        if best is None:
            best = commit
    return best


class GitLsRemote:
    """:class:`RefLister` backed by the ``git`` executable.

    Args:
        git: Name or path of the git executable.
        timeout: Seconds to wait for ``git ls-remote`` before giving up.
    """

    def __init__(self, *, git: str = "git", timeout: float = DEFAULT_TIMEOUT) -> None:
        self.git = git
        self.timeout = timeout

    async def _run(self, args: Sequence[str]) -> str:
        command = [self.git, *args]
        logger.debug("Running: %s", " ".join(command))

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            raise GitCommandError(
                f"Cannot run git: {exc}",
                command=command,
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise GitCommandError(
                f"git ls-remote timed out after {self.timeout}s",
                command=command,
            ) from exc

        if process.returncode != 0:
            raise GitCommandError(
                "git ls-remote failed",
                command=command,
                returncode=process.returncode,
                stderr=stderr.decode("utf-8", errors="replace"),
            )
        return stdout.decode("utf-8", errors="replace")

    async def resolve(self, url: str, ref: str) -> str:
        remote = normalize_remote_url(url)
        args = ls_remote_args(remote, ref)
        output = await self._run(args)

        if not output.strip():
            raise GitCommandError("no output from git ls-remote", command=[self.git, *args])

        commit = select_commit(output, ref)
        if commit is None:
            raise GitCommandError(
                "could not parse git ls-remote output", command=[self.git, *args]
            )
        return commit
