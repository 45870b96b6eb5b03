"""Signed commit construction — protocol, payload, and signing."""

from ownersync.commit.builder import (
    CommitChange,
    CommitCreationFailed,
    CommitError,
    ParentLookupFailed,
    RefNotFound,
    RefUpdateFailed,
    RepositoryAPI,
    SignedCommitRequest,
    TreeCreationFailed,
    backfill_commit_sha,
    build_commit_payload,
    create_signed_commit,
)
from ownersync.commit.signing import DecryptError, KeyParseError, SigningError, sign_payload

__all__ = [
    "CommitChange",
    "CommitCreationFailed",
    "CommitError",
    "DecryptError",
    "KeyParseError",
    "ParentLookupFailed",
    "RefNotFound",
    "RefUpdateFailed",
    "RepositoryAPI",
    "SignedCommitRequest",
    "SigningError",
    "TreeCreationFailed",
    "backfill_commit_sha",
    "build_commit_payload",
    "create_signed_commit",
    "sign_payload",
]
