"""Sync result data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ownersync.rules.models import OwnersFile, Ruleset


class SyncAction(str, Enum):
    UNCHANGED = "unchanged"
    CREATE = "create"
    UPDATE = "update"
    CLEAR = "clear"


@dataclass
class SyncResult:
    """Outcome of reconciling one owners file."""

    file: OwnersFile
    path: str
    action: SyncAction
    current: Optional[Ruleset] = None  # None when the file does not exist
    commit_sha: Optional[str] = None
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return self.action != SyncAction.UNCHANGED


@dataclass
class SyncReport:
    """Results of a run across every desired owners file."""

    results: List[SyncResult] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def drifted(self) -> List[SyncResult]:
        return [r for r in self.results if r.changed]

    @property
    def committed(self) -> List[SyncResult]:
        return [r for r in self.results if r.commit_sha]
