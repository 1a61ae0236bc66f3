"""
Update-check result models for flakelint.

One :class:`UpdateStatus` is produced per input declared on the root node.
``error`` is terminal: when it is set the revision fields are best-effort
and ``is_update`` is ``False``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class UpdateStatus:
    """Update state of a single root input."""

    input_name: str
    current_rev: str = ""
    current_url: str = ""
    latest_rev: str = ""
    latest_url: str = ""
    is_update: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def short_current(self) -> str:
        """Current revision shortened for display."""
        return self.current_rev[:7]

    @property
    def short_latest(self) -> str:
        """Latest revision shortened for display."""
        return self.latest_rev[:7]

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UpdateResults:
    """Results of an update check.

    The order of ``updates`` follows task completion and must not be relied
    upon; use :meth:`by_name` to look results up.
    """

    updates: List[UpdateStatus] = field(default_factory=list)

    def by_name(self) -> Dict[str, UpdateStatus]:
        return {status.input_name: status for status in self.updates}

    def sorted(self) -> List[UpdateStatus]:
        """Updates ordered by input name, for stable reports."""
        return sorted(self.updates, key=lambda status: status.input_name)

    @property
    def available(self) -> List[UpdateStatus]:
        """Inputs with a newer upstream revision."""
        return [status for status in self.updates if status.is_update]

    @property
    def errors(self) -> List[UpdateStatus]:
        return [status for status in self.updates if status.failed]

    @property
    def has_updates(self) -> bool:
        return any(status.is_update for status in self.updates)

    def to_json(self) -> Dict[str, Any]:
        return {"updates": [status.to_json() for status in self.sorted()]}
