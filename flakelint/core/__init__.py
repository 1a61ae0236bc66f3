"""
Core functionality exports for flakelint.

This module provides convenient access to the analysis engine:

    from flakelint.core import analyze, find_duplicates, UpdateChecker

The identity helpers and the graph analyzer are pure and synchronous; the
update checker is the only component that performs I/O.
"""

from __future__ import annotations

from flakelint.core.analyzer import analyze, dependants_of, find_duplicates
from flakelint.core.git_remote import GitLsRemote, RefLister
from flakelint.core.hosts import GitHubAPI, GitLabAPI
from flakelint.core.identity import (
    build_identity_url,
    build_version_qualified_url,
    display_url,
    extract_repo_identity,
    flake_url,
)
from flakelint.core.updates import UpdateChecker, is_commit_hash, plan_lookup

__all__ = [
    "analyze",
    "find_duplicates",
    "dependants_of",
    "build_identity_url",
    "build_version_qualified_url",
    "extract_repo_identity",
    "flake_url",
    "display_url",
    "UpdateChecker",
    "plan_lookup",
    "is_commit_hash",
    "GitHubAPI",
    "GitLabAPI",
    "GitLsRemote",
    "RefLister",
]
