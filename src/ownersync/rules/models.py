"""Ruleset data models — rules, rulesets, and desired owners files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Rule:
    """A single CODEOWNERS line: a path pattern and the owners assigned to it.

    ``pattern`` is kept as opaque text; no glob matching happens here.
    ``owners`` are bare identifiers — usernames without the ``@`` sigil, or
    email addresses.
    """

    pattern: str
    owners: List[str] = field(default_factory=list)


# Order is kept for output, ignored for equality.
Ruleset = List[Rule]


@dataclass
class OwnersFile:
    """The desired owners file for one branch of one repository."""

    repository_owner: str
    repository_name: str
    branch: str = "main"
    ruleset: Optional[Ruleset] = None

    @property
    def full_name(self) -> str:
        return f"{self.repository_owner}/{self.repository_name}"
