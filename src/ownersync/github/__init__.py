"""GitHub interface layer — REST client and git-object models."""

from ownersync.github.client import GitHubClient, GitHubError
from ownersync.github.models import (
    Blob,
    CommitAuthor,
    GitCommit,
    Ref,
    RepositoryCommit,
    Tree,
    TreeEntry,
)

__all__ = [
    "Blob",
    "CommitAuthor",
    "GitCommit",
    "GitHubClient",
    "GitHubError",
    "Ref",
    "RepositoryCommit",
    "Tree",
    "TreeEntry",
]
