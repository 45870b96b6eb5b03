"""Signed commit builder — lands file changes on a branch as one commit.

The protocol is strictly linear::

    resolve ref -> [upload blobs] create tree -> fetch parent -> [sign] -> create commit -> update ref

The first failing step aborts the rest. Trees or commits created before the
failure are left unreferenced on the remote, which is harmless. The final
ref update is never forced: if the branch moved since it was resolved,
GitHub rejects it and ``RefUpdateFailed`` is raised for the caller to handle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from ownersync.commit.signing import sign_payload
from ownersync.github.client import GitHubError
from ownersync.github.models import (
    Blob,
    CommitAuthor,
    GitCommit,
    Ref,
    RepositoryCommit,
    Tree,
    TreeEntry,
)

logger = logging.getLogger(__name__)


class CommitError(Exception):
    """Base class for failures of a commit protocol step."""


class RefNotFound(CommitError):
    pass


class TreeCreationFailed(CommitError):
    pass


class ParentLookupFailed(CommitError):
    pass


class CommitCreationFailed(CommitError):
    pass


class RefUpdateFailed(CommitError):
    pass


class RepositoryAPI(Protocol):
    """The remote git-object operations the builder needs."""

    def get_ref(self, owner: str, repo: str, ref: str) -> Ref: ...

    def create_blob(self, owner: str, repo: str, content: bytes) -> Blob: ...

    def create_tree(
        self, owner: str, repo: str, base_tree: str, entries: Sequence[TreeEntry]
    ) -> Tree: ...

    def get_commit(self, owner: str, repo: str, sha: str) -> RepositoryCommit: ...

    def create_commit(
        self,
        owner: str,
        repo: str,
        *,
        message: str,
        tree_sha: str,
        parent_shas: List[str],
        author: CommitAuthor,
        committer: CommitAuthor,
        signature: Optional[str] = None,
    ) -> GitCommit: ...

    def update_ref(self, owner: str, repo: str, ref: str, sha: str, *, force: bool = False) -> Ref: ...


@dataclass(frozen=True)
class CommitChange:
    """One file to write or replace in the new commit's tree."""

    path: str
    content: bytes


@dataclass
class SignedCommitRequest:
    """Everything needed for one commit. Built per call, never reused."""

    repo_owner: str
    repo_name: str
    branch: str
    message: str
    author_name: str
    author_email: str
    changes: List[CommitChange] = field(default_factory=list)
    signing_key: Optional[str] = field(default=None, repr=False)
    signing_passphrase: Optional[str] = field(default=None, repr=False)


def backfill_commit_sha(repo_commit: RepositoryCommit) -> RepositoryCommit:
    """Return *repo_commit* with the nested commit's SHA filled in.

    The commits endpoint does not always populate ``commit.sha`` on the
    nested git commit, but the outer object always carries it.
    """
    if repo_commit.commit.sha:
        return repo_commit
    return replace(repo_commit, commit=replace(repo_commit.commit, sha=repo_commit.sha))


def build_commit_payload(
    tree_sha: str, parent_sha: str, author: CommitAuthor, message: str
) -> str:
    """Return the commit object text exactly as git hashes it.

    The signature is verified against these bytes, so field order, the
    ``+0000`` zone and the absence of a trailing newline all matter.
    """
    timestamp = int(author.date.timestamp())
    ident = f"{author.name} <{author.email}> {timestamp} +0000"
    return (
        f"tree {tree_sha}\n"
        f"parent {parent_sha}\n"
        f"author {ident}\n"
        f"committer {ident}\n"
        f"\n"
        f"{message}"
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def _tree_entries(
    api: RepositoryAPI, owner: str, repo: str, changes: Sequence[CommitChange]
) -> List[TreeEntry]:
    entries = []
    for change in changes:
        try:
            entries.append(TreeEntry(path=change.path, content=change.content.decode("utf-8")))
        except UnicodeDecodeError:
            # the tree API only takes text inline; binary goes through a blob
            blob = api.create_blob(owner, repo, change.content)
            entries.append(TreeEntry(path=change.path, sha=blob.sha))
    return entries


def create_signed_commit(
    api: RepositoryAPI,
    request: SignedCommitRequest,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Commit *request.changes* on top of the branch tip and advance the branch.

    Returns the SHA of the new commit.
    """
    owner, repo = request.repo_owner, request.repo_name
    ref_name = f"heads/{request.branch}"

    try:
        ref = api.get_ref(owner, repo, ref_name)
    except GitHubError as exc:
        raise RefNotFound(str(exc)) from exc
    logger.debug("%s/%s %s is at %s", owner, repo, ref_name, ref.sha)

    try:
        entries = _tree_entries(api, owner, repo, request.changes)
        tree = api.create_tree(owner, repo, ref.sha, entries)
    except GitHubError as exc:
        raise TreeCreationFailed(str(exc)) from exc
    logger.debug("created tree %s", tree.sha)

    try:
        parent = backfill_commit_sha(api.get_commit(owner, repo, ref.sha))
    except GitHubError as exc:
        raise ParentLookupFailed(str(exc)) from exc
    parent_sha = parent.commit.sha

    date = now.astimezone(timezone.utc).replace(microsecond=0) if now else _utc_now()
    author = CommitAuthor(name=request.author_name, email=request.author_email, date=date)

    signature: Optional[str] = None
    if request.signing_key:
        payload = build_commit_payload(tree.sha, parent_sha, author, request.message)
        signature = sign_payload(payload, request.signing_key, request.signing_passphrase)

    try:
        commit = api.create_commit(
            owner,
            repo,
            message=request.message,
            tree_sha=tree.sha,
            parent_shas=[parent_sha],
            author=author,
            committer=author,
            signature=signature,
        )
    except GitHubError as exc:
        raise CommitCreationFailed(str(exc)) from exc

    try:
        api.update_ref(owner, repo, ref_name, commit.sha, force=False)
    except GitHubError as exc:
        raise RefUpdateFailed(str(exc)) from exc

    logger.info(
        "committed %s to %s/%s@%s%s",
        commit.sha,
        owner,
        repo,
        request.branch,
        " (signed)" if signature else "",
    )
    return commit.sha
