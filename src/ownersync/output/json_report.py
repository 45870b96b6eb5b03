"""JSON reporter for CI pipelines."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ownersync.rules.models import Ruleset
from ownersync.sync.models import SyncReport


def rules_to_list(ruleset: Optional[Ruleset]) -> Optional[List[Dict[str, Any]]]:
    if ruleset is None:
        return None
    return [{"pattern": r.pattern, "owners": list(r.owners)} for r in ruleset]


def to_dict(report: SyncReport) -> Dict[str, Any]:
    """Convert a SyncReport to a JSON-serialisable dict."""
    files: List[Dict[str, Any]] = []
    for r in report.results:
        files.append({
            "repository": r.file.full_name,
            "branch": r.file.branch,
            "path": r.path,
            "action": r.action.value,
            "changed": r.changed,
            "dry_run": r.dry_run,
            "current": rules_to_list(r.current),
            "desired": rules_to_list(r.file.ruleset),
            **({"commit": r.commit_sha} if r.commit_sha else {}),
        })

    return {
        "version": "1.0",
        "total_files": len(report.results),
        "drifted": len(report.drifted),
        "committed": len(report.committed),
        "files": files,
        "duration_ms": report.duration_ms,
    }


def render(report: SyncReport) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(report), indent=2)
