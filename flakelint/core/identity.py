"""Identity URLs for locked lockfile nodes.

Two string forms identify a locked node:

* the **identity URL** names the repository regardless of version, e.g.
  ``github:NixOS/nixpkgs`` or ``gitlab:user/project?host=gitlab.example.com``;
* the **version-qualified URL** appends ``?rev=<rev>`` and/or
  ``narHash=<hash>`` so that each pinned snapshot gets its own key, e.g.
  ``github:NixOS/nixpkgs?rev=abcdef&narHash=sha256-abc``.

:func:`extract_repo_identity` recovers the first form from the second. The
separator conventions of the builder and the extractor must stay in sync:
a hosted identity that carries ``?host=`` ends up with two ``?`` characters
once version information is appended, and the extractor treats the first one
as part of the identity. That format is kept byte-for-byte for compatibility
with existing reports.

All functions here are pure and never raise.
"""

from __future__ import annotations

from typing import Optional

from flakelint.models.lock import LockedDescriptor
from flakelint.constants import DEFAULT_FORGE_HOSTS, HOSTED_TYPES, URL_TYPES

__all__ = [
    "build_identity_url",
    "build_version_qualified_url",
    "display_url",
    "extract_repo_identity",
    "flake_url",
]

_HOST_QUERY = "?host="


def build_identity_url(locked: LockedDescriptor) -> str:
    """Return the canonical identity of ``locked``, or ``""`` for unknown types.

    >>> build_identity_url(LockedDescriptor(type="github", owner="NixOS", repo="nixpkgs"))
    'github:NixOS/nixpkgs'
    >>> build_identity_url(LockedDescriptor(type="path", path="/src/flake"))
    'path:/src/flake'
    """
    kind = locked.type

    if kind in HOSTED_TYPES:
        identity = f"{kind}:{locked.owner}/{locked.repo}"
        if locked.host:
            identity += f"{_HOST_QUERY}{locked.host}"
        return identity

    if kind in URL_TYPES:
        return f"{kind}:{locked.url}"

    if kind == "path":
        return f"{kind}:{locked.path}"

    return ""


def build_version_qualified_url(identity: str, rev: str = "", nar_hash: str = "") -> str:
    """Append revision and content hash to an identity URL.

    >>> build_version_qualified_url("github:NixOS/nixpkgs", "abc", "sha256-x")
    'github:NixOS/nixpkgs?rev=abc&narHash=sha256-x'
    >>> build_version_qualified_url("tarball:https://x/y.tar.gz", nar_hash="sha256-x")
    'tarball:https://x/y.tar.gz?narHash=sha256-x'
    """
    if not rev and not nar_hash:
        return identity

    url = identity + "?"
    if rev:
        url += f"rev={rev}"
    if nar_hash:
        if rev:
            url += "&"
        url += f"narHash={nar_hash}"
    return url


def flake_url(locked: Optional[LockedDescriptor]) -> str:
    """Version-qualified URL of ``locked``; ``""`` when it has no identity."""
    if locked is None:
        return ""
    identity = build_identity_url(locked)
    if not identity:
        return ""
    return build_version_qualified_url(identity, locked.rev, locked.nar_hash)


def extract_repo_identity(url: str) -> str:
    """Strip version qualifiers from a version-qualified URL.

    >>> extract_repo_identity("github:NixOS/nixpkgs?rev=abc&narHash=sha256-x")
    'github:NixOS/nixpkgs'
    >>> extract_repo_identity("gitlab:u/p?host=example.com?rev=abc")
    'gitlab:u/p?host=example.com'
    """
    host_idx = url.find(_HOST_QUERY)
    if host_idx != -1:
        host_end = host_idx + len(_HOST_QUERY)
        version_idx = url.find("?", host_end)
        if version_idx != -1:
            return url[:version_idx]
        return url

    query_idx = url.find("?")
    if query_idx != -1:
        return url[:query_idx]
    return url


def display_url(locked: Optional[LockedDescriptor]) -> str:
    """Human-facing URL of a locked input, as shown in update reports.

    Unlike :func:`build_identity_url` the well-known forge hosts are omitted
    and URL-based inputs are shown as their plain URL.
    """
    if locked is None:
        return ""

    kind = locked.type
    if kind in HOSTED_TYPES:
        url = f"{kind}:{locked.owner}/{locked.repo}"
        if locked.host and locked.host not in DEFAULT_FORGE_HOSTS:
            url += f"{_HOST_QUERY}{locked.host}"
        return url
    if kind in ("git", "tarball"):
        return locked.url
    if kind == "path":
        return locked.path
    return ""
