"""
Unified data model exports for flakelint.

This module re-exports the lockfile schema and the engine's result types so
callers can import them from ``flakelint.models`` directly.

Example:
    >>> from flakelint.models import LockGraph, Relations, UpdateResults
"""

from __future__ import annotations

from flakelint.models.lock import (
    InputRef,
    LockGraph,
    LockedDescriptor,
    Node,
    OriginalDescriptor,
    load_lockfile,
)
from flakelint.models.relations import DuplicateGroup, Relations
from flakelint.models.update import UpdateResults, UpdateStatus

__all__ = [
    "InputRef",
    "LockGraph",
    "LockedDescriptor",
    "Node",
    "OriginalDescriptor",
    "load_lockfile",
    "Relations",
    "DuplicateGroup",
    "UpdateStatus",
    "UpdateResults",
]
