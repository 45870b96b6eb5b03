"""Desired-state loader — reads the wanted owners files from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml

from ownersync.rules.models import OwnersFile, Rule, Ruleset


class DesiredStateError(Exception):
    """Raised when the desired-state file is missing or malformed."""


def _bare(owner: str) -> str:
    return owner[1:] if owner.startswith("@") else owner


def _has_space(text: str) -> bool:
    return any(ch.isspace() for ch in text)


def _parse_rules(entry: Dict[str, Any], index: int) -> Ruleset:
    raw_rules = entry.get("rules") or []
    if not isinstance(raw_rules, list):
        raise DesiredStateError(f"entry {index}: 'rules' must be a list")

    rules: Ruleset = []
    for pos, raw in enumerate(raw_rules):
        if not isinstance(raw, dict) or "pattern" not in raw:
            raise DesiredStateError(f"entry {index}, rule {pos}: missing 'pattern'")
        where = f"entry {index}, rule {pos}"
        pattern = str(raw["pattern"])
        # a rule must survive compile and re-parse unchanged
        if not pattern or _has_space(pattern) or pattern.startswith("#"):
            raise DesiredStateError(f"{where}: invalid pattern {pattern!r}")

        # 'usernames' is accepted as an alias for 'owners'
        owners = raw.get("owners", raw.get("usernames")) or []
        if isinstance(owners, str):
            owners = owners.split()
        cleaned = [_bare(str(o)) for o in owners]
        for owner in cleaned:
            if owner and (_has_space(owner) or owner.startswith("@")):
                raise DesiredStateError(f"{where}: invalid owner {owner!r}")
        cleaned = [o for o in cleaned if o]
        if not cleaned:
            raise DesiredStateError(f"{where}: needs at least one owner")

        rules.append(Rule(pattern=pattern, owners=cleaned))
    return rules


def _parse_entry(entry: Any, index: int) -> OwnersFile:
    if not isinstance(entry, dict):
        raise DesiredStateError(f"entry {index}: expected a mapping")

    if "repository" in entry:
        owner, sep, name = str(entry["repository"]).partition("/")
        if not sep or not owner or not name:
            raise DesiredStateError(
                f"entry {index}: repository must look like 'owner/name', "
                f"got {entry['repository']!r}"
            )
    else:
        owner = entry.get("repository_owner", "")
        name = entry.get("repository_name", "")
        if not owner or not name:
            raise DesiredStateError(
                f"entry {index}: needs 'repository' or "
                "'repository_owner' + 'repository_name'"
            )

    return OwnersFile(
        repository_owner=str(owner),
        repository_name=str(name),
        branch=str(entry.get("branch", "main")),
        ruleset=_parse_rules(entry, index),
    )


def load_owners_files(path: Path) -> List[OwnersFile]:
    """Load every desired owners file declared in *path*."""
    if not path.is_file():
        raise DesiredStateError(f"Desired-state file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise DesiredStateError(f"Failed to parse {path}: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]
    return [_parse_entry(entry, i) for i, entry in enumerate(data)]
