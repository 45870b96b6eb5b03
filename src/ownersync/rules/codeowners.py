"""CODEOWNERS text format — lenient parser, generator, and ruleset equality.

Parsing never fails: the file is edited by humans, so blank lines, comments
and lines without at least one owner are dropped rather than rejected.
"""

from __future__ import annotations

from collections import Counter
from typing import List, Optional, Union

from ownersync.rules.models import Rule, Ruleset

GENERATED_HEADER = "# automatically generated by ownersync - please do not edit here\n"


def parse_ruleset(data: Union[str, bytes]) -> Ruleset:
    """Parse CODEOWNERS text into an ordered ruleset.

    ``*.go @alice bob`` becomes ``Rule("*.go", ["alice", "bob"])``.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")

    rules: Ruleset = []
    for line in data.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        words = stripped.split()
        if len(words) < 2:
            continue
        owners: List[str] = []
        for word in words[1:]:
            if word.startswith("@"):
                word = word[1:]
            if word:
                owners.append(word)
        rules.append(Rule(pattern=words[0], owners=owners))
    return rules


def format_owner(owner: str) -> str:
    # Emails are written as-is, usernames get the @ sigil back.
    return owner if "@" in owner else f"@{owner}"


def compile_ruleset(ruleset: Optional[Ruleset]) -> bytes:
    """Render *ruleset* as CODEOWNERS bytes.

    ``None`` compiles to ``b""``. An empty list still emits the header line.
    """
    if ruleset is None:
        return b""
    lines = [GENERATED_HEADER]
    for rule in ruleset:
        parts = [rule.pattern, *(format_owner(o) for o in rule.owners)]
        lines.append(" ".join(parts) + "\n")
    return "".join(lines).encode("utf-8")


def owners_equal(x: List[str], y: List[str]) -> bool:
    """Return True if both owner lists hold the same owners with the same counts."""
    if len(x) != len(y):
        return False
    return Counter(x) == Counter(y)


def _rule_key(rule: Rule) -> tuple:
    return (rule.pattern, frozenset(Counter(rule.owners).items()))


def rulesets_equal(a: Ruleset, b: Ruleset) -> bool:
    """Compare two rulesets ignoring rule order and owner order.

    Each rule is identified by its pattern plus the multiset of its owners,
    and the two rulesets must contain the same rules the same number of
    times. Owner multiplicity matters: ``["a", "a"]`` is not ``["a"]``.
    """
    if len(a) != len(b):
        return False
    return Counter(_rule_key(r) for r in a) == Counter(_rule_key(r) for r in b)
