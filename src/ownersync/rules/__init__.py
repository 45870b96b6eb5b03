"""Ruleset engine — models, CODEOWNERS parsing/compiling, desired-state loading."""

from ownersync.rules.codeowners import (
    GENERATED_HEADER,
    compile_ruleset,
    owners_equal,
    parse_ruleset,
    rulesets_equal,
)
from ownersync.rules.loader import DesiredStateError, load_owners_files
from ownersync.rules.models import OwnersFile, Rule, Ruleset

__all__ = [
    "DesiredStateError",
    "GENERATED_HEADER",
    "OwnersFile",
    "Rule",
    "Ruleset",
    "compile_ruleset",
    "load_owners_files",
    "owners_equal",
    "parse_ruleset",
    "rulesets_equal",
]
