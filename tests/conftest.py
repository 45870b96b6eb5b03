"""Shared test fixtures — in-memory GitHub, signing keys, configs."""

from __future__ import annotations

import textwrap
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pgpy
import pytest
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from ownersync.config.schema import OwnersyncConfig
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

PASSPHRASE = "correct horse battery staple"
FIXED_NOW = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)  # 1700000000


class FakeGitHub:
    """In-memory stand-in for the GitHub git-object API.

    Branches point at commits, commits at trees, and trees carry the files
    written through them. ``update_ref`` without force only accepts a commit
    whose parent is the current branch tip, like GitHub.
    """

    def __init__(self) -> None:
        self.refs: Dict[str, str] = {"heads/main": "c0"}
        self.commits: Dict[str, RepositoryCommit] = {
            "c0": RepositoryCommit(sha="c0", commit=GitCommit(sha=None, tree_sha="t0")),
        }
        self.trees: Dict[str, Tuple[str, List[TreeEntry]]] = {}
        self.blobs: Dict[str, bytes] = {}
        self.files: Dict[Tuple[str, str], bytes] = {}
        self.created_commits: List[dict] = []
        self.calls: List[str] = []
        self.fail: Dict[str, GitHubError] = {}
        self.hooks: Dict[str, Callable[[], None]] = {}
        self._counter = 0

    def __enter__(self) -> "FakeGitHub":
        return self

    def __exit__(self, *exc_info) -> None:
        pass

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.hooks:
            self.hooks[name]()
        if name in self.fail:
            raise self.fail[name]

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    # ---- helpers for tests ----

    def put_file(self, branch: str, path: str, content: bytes) -> None:
        self.files[(branch, path)] = content

    def advance(self, branch: str = "main") -> str:
        """Simulate another writer pushing a commit to *branch*."""
        parent = self.refs[f"heads/{branch}"]
        sha = self._next("other")
        self.commits[sha] = RepositoryCommit(
            sha=sha, commit=GitCommit(sha=None, tree_sha="t-other", parent_shas=[parent])
        )
        self.refs[f"heads/{branch}"] = sha
        return sha

    # ---- RepositoryAPI ----

    def get_ref(self, owner: str, repo: str, ref: str) -> Ref:
        self._enter("get_ref")
        if ref not in self.refs:
            raise GitHubError("Not Found", status_code=404)
        return Ref(ref=f"refs/{ref}", sha=self.refs[ref])

    def create_blob(self, owner: str, repo: str, content: bytes) -> Blob:
        self._enter("create_blob")
        sha = self._next("b")
        self.blobs[sha] = content
        return Blob(sha=sha)

    def create_tree(
        self, owner: str, repo: str, base_tree: str, entries: Sequence[TreeEntry]
    ) -> Tree:
        self._enter("create_tree")
        sha = self._next("t")
        self.trees[sha] = (base_tree, list(entries))
        return Tree(sha=sha)

    def get_commit(self, owner: str, repo: str, sha: str) -> RepositoryCommit:
        self._enter("get_commit")
        if sha not in self.commits:
            raise GitHubError("No commit found for SHA: " + sha, status_code=422)
        return self.commits[sha]

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
    ) -> GitCommit:
        self._enter("create_commit")
        sha = self._next("c")
        self.created_commits.append({
            "sha": sha,
            "message": message,
            "tree_sha": tree_sha,
            "parent_shas": list(parent_shas),
            "author": author,
            "committer": committer,
            "signature": signature,
        })
        self.commits[sha] = RepositoryCommit(
            sha=sha,
            commit=GitCommit(sha=None, tree_sha=tree_sha, parent_shas=list(parent_shas), message=message),
        )
        return GitCommit(sha=sha, tree_sha=tree_sha, parent_shas=list(parent_shas), message=message)

    def update_ref(self, owner: str, repo: str, ref: str, sha: str, *, force: bool = False) -> Ref:
        self._enter("update_ref")
        if ref not in self.refs:
            raise GitHubError("Reference does not exist", status_code=422)
        if not force and self.refs[ref] not in self.commits[sha].commit.parent_shas:
            raise GitHubError("Update is not a fast forward", status_code=422)
        self.refs[ref] = sha
        branch = ref.split("/", 1)[1]
        tree_sha = self.commits[sha].commit.tree_sha
        if tree_sha in self.trees:
            for entry in self.trees[tree_sha][1]:
                if entry.sha is not None:
                    self.files[(branch, entry.path)] = self.blobs[entry.sha]
                else:
                    self.files[(branch, entry.path)] = (entry.content or "").encode("utf-8")
        return Ref(ref=f"refs/{ref}", sha=sha)

    def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> Optional[bytes]:
        self._enter("get_file_content")
        return self.files.get((ref, path))


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def config() -> OwnersyncConfig:
    cfg = OwnersyncConfig()
    cfg.github.token = "ghp_test"
    cfg.identity.username = "Jane Doe"
    cfg.identity.email = "jane@example.com"
    return cfg


@pytest.fixture
def sample_codeowners() -> str:
    return textwrap.dedent("""\
        # Owners for the whole repo
        *       @acme/maintainers

        *.go    @alice bob
        docs/   carol@example.com   @dave
          # indented comment
        lonely-pattern
    """)


def _new_key(passphrase: Optional[str] = None, *, signing_subkey: bool = False) -> pgpy.PGPKey:
    key = pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    uid = pgpy.PGPUID.new("Jane Doe", email="jane@example.com")
    primary_usage = {KeyFlags.Certify} if signing_subkey else {KeyFlags.Sign, KeyFlags.Certify}
    key.add_uid(
        uid,
        usage=primary_usage,
        hashes=[HashAlgorithm.SHA256],
        ciphers=[SymmetricKeyAlgorithm.AES256],
        compression=[CompressionAlgorithm.Uncompressed],
    )
    if signing_subkey:
        subkey = pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
        key.add_subkey(subkey, usage={KeyFlags.Sign})
    if passphrase:
        key.protect(passphrase, SymmetricKeyAlgorithm.AES256, HashAlgorithm.SHA256)
    return key


@pytest.fixture
def passphrase() -> str:
    return PASSPHRASE


@pytest.fixture(scope="session")
def plain_key() -> pgpy.PGPKey:
    """Unprotected RSA signing key."""
    return _new_key()


@pytest.fixture(scope="session")
def protected_key() -> pgpy.PGPKey:
    """Passphrase-protected RSA signing key."""
    return _new_key(PASSPHRASE)


@pytest.fixture(scope="session")
def subkey_key() -> pgpy.PGPKey:
    """Protected certify-only primary with a separate signing sub-key."""
    return _new_key(PASSPHRASE, signing_subkey=True)
