"""Data models for the GitHub git-object API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Ref:
    """A branch reference and the commit it points at."""

    ref: str  # e.g. refs/heads/main
    sha: str


@dataclass(frozen=True)
class TreeEntry:
    """A file to write into a new tree.

    Carries either inline UTF-8 ``content`` or the ``sha`` of an uploaded blob.
    """

    path: str
    content: Optional[str] = None
    sha: Optional[str] = None
    mode: str = "100644"
    type: str = "blob"

    def to_dict(self) -> Dict[str, str]:
        data = {"path": self.path, "mode": self.mode, "type": self.type}
        if self.sha is not None:
            data["sha"] = self.sha
        else:
            data["content"] = self.content or ""
        return data


@dataclass(frozen=True)
class Blob:
    sha: str


@dataclass(frozen=True)
class Tree:
    sha: str


@dataclass(frozen=True)
class CommitAuthor:
    """Author or committer identity with a UTC timestamp."""

    name: str
    email: str
    date: datetime

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "date": self.date.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }


@dataclass
class GitCommit:
    """A raw git commit object. ``sha`` is absent when nested in another commit."""

    sha: Optional[str] = None
    tree_sha: Optional[str] = None
    parent_shas: List[str] = field(default_factory=list)
    message: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GitCommit":
        return cls(
            sha=data.get("sha"),
            tree_sha=(data.get("tree") or {}).get("sha"),
            parent_shas=[p["sha"] for p in data.get("parents", []) if p.get("sha")],
            message=data.get("message", ""),
        )


@dataclass
class RepositoryCommit:
    """A commit as returned by ``GET /repos/{owner}/{repo}/commits/{sha}``."""

    sha: str
    commit: GitCommit

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RepositoryCommit":
        return cls(sha=data["sha"], commit=GitCommit.from_api(data.get("commit") or {}))
