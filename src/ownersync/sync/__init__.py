"""Sync — plan and apply desired CODEOWNERS state."""

from ownersync.sync.engine import clear_file, plan_file, read_current, sync_all, sync_file
from ownersync.sync.models import SyncAction, SyncReport, SyncResult

__all__ = [
    "SyncAction",
    "SyncReport",
    "SyncResult",
    "clear_file",
    "plan_file",
    "read_current",
    "sync_all",
    "sync_file",
]
