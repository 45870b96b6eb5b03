"""Sync engine — reconciles remote CODEOWNERS files with the desired state.

For each desired file: read the current content from the branch, parse it,
compare it with the desired ruleset, and when they differ commit the
compiled ruleset through the signed commit builder.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Iterable, Optional, Protocol

from ownersync.commit.builder import (
    CommitChange,
    RepositoryAPI,
    SignedCommitRequest,
    create_signed_commit,
)
from ownersync.config.schema import OwnersyncConfig
from ownersync.rules.codeowners import compile_ruleset, parse_ruleset, rulesets_equal
from ownersync.rules.models import OwnersFile, Ruleset
from ownersync.sync.models import SyncAction, SyncReport, SyncResult

logger = logging.getLogger(__name__)

_COMMIT_VERBS = {
    SyncAction.CREATE: "Create",
    SyncAction.UPDATE: "Update",
    SyncAction.CLEAR: "Clear",
}


class OwnersAPI(RepositoryAPI, Protocol):
    """Repository API plus file reads."""

    def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> Optional[bytes]: ...


def read_current(api: OwnersAPI, target: OwnersFile, path: str) -> Optional[Ruleset]:
    """Return the ruleset currently on the branch, or None if the file is absent."""
    content = api.get_file_content(
        target.repository_owner, target.repository_name, path, target.branch
    )
    if content is None:
        return None
    return parse_ruleset(content)


def plan_file(api: OwnersAPI, desired: OwnersFile, config: OwnersyncConfig) -> SyncResult:
    """Work out what sync_file would do for *desired*, without writing."""
    path = config.file.path
    current = read_current(api, desired, path)
    # compare what the branch will hold after a write, not the raw input;
    # a rule that cannot be written (no owners) would otherwise never match
    wanted = parse_ruleset(compile_ruleset(desired.ruleset or []))

    if current is None:
        action = SyncAction.CREATE
    elif rulesets_equal(wanted, current):
        action = SyncAction.UNCHANGED
    else:
        action = SyncAction.UPDATE

    logger.debug("%s@%s %s: %s", desired.full_name, desired.branch, path, action.value)
    return SyncResult(file=desired, path=path, action=action, current=current)


def _commit(
    api: RepositoryAPI,
    target: OwnersFile,
    config: OwnersyncConfig,
    action: SyncAction,
    content: bytes,
    now: Optional[datetime],
) -> str:
    path = config.file.path
    request = SignedCommitRequest(
        repo_owner=target.repository_owner,
        repo_name=target.repository_name,
        branch=target.branch,
        message=config.commit_message(f"{_COMMIT_VERBS[action]} {path}"),
        author_name=config.identity.username,
        author_email=config.identity.email,
        changes=[CommitChange(path=path, content=content)],
        signing_key=config.signing_key,
        signing_passphrase=config.signing.gpg_passphrase,
    )
    return create_signed_commit(api, request, now=now)


def sync_file(
    api: OwnersAPI,
    desired: OwnersFile,
    config: OwnersyncConfig,
    *,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> SyncResult:
    """Bring the remote file in line with *desired*, committing if needed."""
    result = plan_file(api, desired, config)
    result.dry_run = dry_run
    if not result.changed or dry_run:
        return result

    content = compile_ruleset(desired.ruleset or [])
    result.commit_sha = _commit(api, desired, config, result.action, content, now)
    logger.info(
        "%s %s on %s@%s -> %s",
        result.action.value,
        result.path,
        desired.full_name,
        desired.branch,
        result.commit_sha,
    )
    return result


def clear_file(
    api: OwnersAPI,
    target: OwnersFile,
    config: OwnersyncConfig,
    *,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> SyncResult:
    """Empty the owners file on the target branch."""
    path = config.file.path
    current = read_current(api, target, path)
    result = SyncResult(
        file=target, path=path, action=SyncAction.CLEAR, current=current, dry_run=dry_run
    )
    if dry_run:
        return result
    result.commit_sha = _commit(api, target, config, SyncAction.CLEAR, compile_ruleset(None), now)
    logger.info("cleared %s on %s@%s -> %s", path, target.full_name, target.branch, result.commit_sha)
    return result


def sync_all(
    api: OwnersAPI,
    files: Iterable[OwnersFile],
    config: OwnersyncConfig,
    *,
    dry_run: bool = False,
    plan_only: bool = False,
) -> SyncReport:
    """Run sync_file (or plan_file when *plan_only*) over every desired file."""
    start = time.perf_counter()
    report = SyncReport()
    for desired in files:
        if plan_only:
            result = plan_file(api, desired, config)
            result.dry_run = True
            report.results.append(result)
        else:
            report.results.append(sync_file(api, desired, config, dry_run=dry_run))
    report.duration_ms = (time.perf_counter() - start) * 1000
    return report
