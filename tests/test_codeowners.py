"""Tests for CODEOWNERS parsing, compiling, and ruleset equality."""

import random

from ownersync.rules.codeowners import (
    GENERATED_HEADER,
    compile_ruleset,
    owners_equal,
    parse_ruleset,
    rulesets_equal,
)
from ownersync.rules.models import Rule


class TestParse:
    def test_documented_example(self):
        rules = parse_ruleset("*.go @alice bob\n# comment\n\ndocs/ carol\n")
        assert rules == [Rule("*.go", ["alice", "bob"]), Rule("docs/", ["carol"])]

    def test_comments_blanks_and_single_tokens_dropped(self, sample_codeowners):
        rules = parse_ruleset(sample_codeowners)
        assert [r.pattern for r in rules] == ["*", "*.go", "docs/"]
        assert rules[0].owners == ["acme/maintainers"]
        assert rules[2].owners == ["carol@example.com", "dave"]

    def test_multiple_spaces_and_tabs(self):
        rules = parse_ruleset("src/\t@alice    @bob\t\n")
        assert rules == [Rule("src/", ["alice", "bob"])]

    def test_crlf_line_endings(self):
        rules = parse_ruleset("a @x\r\nb @y\r\n")
        assert rules == [Rule("a", ["x"]), Rule("b", ["y"])]

    def test_bytes_input(self):
        assert parse_ruleset(b"*.py @alice\n") == [Rule("*.py", ["alice"])]

    def test_only_one_sigil_stripped(self):
        assert parse_ruleset("x @@odd\n")[0].owners == ["@odd"]

    def test_bare_sigil_dropped(self):
        assert parse_ruleset("x @ alice\n")[0].owners == ["alice"]

    def test_empty_input(self):
        assert parse_ruleset("") == []
        assert parse_ruleset(b"") == []

    def test_garbage_never_raises(self):
        assert parse_ruleset("\x00\x01 \n###\n   \n@@@\nonly\n") == []

    def test_duplicate_patterns_preserved(self):
        rules = parse_ruleset("a @x\na @y\n")
        assert rules == [Rule("a", ["x"]), Rule("a", ["y"])]


class TestCompile:
    def test_none_is_empty_bytes(self):
        assert compile_ruleset(None) == b""

    def test_empty_list_is_header_only(self):
        assert compile_ruleset([]) == GENERATED_HEADER.encode()

    def test_header_is_single_comment_line(self):
        assert GENERATED_HEADER.startswith("#")
        assert GENERATED_HEADER.count("\n") == 1

    def test_usernames_get_sigil_emails_do_not(self):
        out = compile_ruleset([Rule("*.go", ["alice", "bob@example.com"])])
        assert out == (GENERATED_HEADER + "*.go @alice bob@example.com\n").encode()

    def test_order_preserved(self):
        out = compile_ruleset([Rule("b", ["x"]), Rule("a", ["y"])]).decode()
        assert out.splitlines()[1:] == ["b @x", "a @y"]

    def test_teams_get_sigil(self):
        out = compile_ruleset([Rule("*", ["acme/maintainers"])]).decode()
        assert "* @acme/maintainers\n" in out


class TestRoundTrip:
    def test_parse_compile_round_trip(self):
        original = [
            Rule("*", ["acme/maintainers"]),
            Rule("*.go", ["alice", "bob"]),
            Rule("docs/", ["carol@example.com", "dave"]),
        ]
        assert rulesets_equal(parse_ruleset(compile_ruleset(original)), original)

    def test_compile_of_parsed_file_is_stable(self, sample_codeowners):
        once = compile_ruleset(parse_ruleset(sample_codeowners))
        twice = compile_ruleset(parse_ruleset(once))
        assert once == twice


class TestOwnersEqual:
    def test_order_irrelevant(self):
        assert owners_equal(["a", "b"], ["b", "a"])

    def test_multiplicity_matters(self):
        assert not owners_equal(["a", "a"], ["a"])
        assert not owners_equal(["a", "a", "b"], ["a", "b", "b"])

    def test_different_members(self):
        assert not owners_equal(["a"], ["b"])


class TestRulesetsEqual:
    def test_reflexive(self, sample_codeowners):
        rules = parse_ruleset(sample_codeowners)
        assert rulesets_equal(rules, rules)

    def test_owner_order_irrelevant(self):
        assert rulesets_equal([Rule("p", ["a", "b"])], [Rule("p", ["b", "a"])])

    def test_owner_multiplicity_matters(self):
        assert not rulesets_equal([Rule("p", ["a", "a"])], [Rule("p", ["a"])])

    def test_different_lengths(self):
        assert not rulesets_equal([], [Rule("p", ["a"])])
        assert not rulesets_equal([Rule("p", ["a"])], [])

    def test_both_empty(self):
        assert rulesets_equal([], [])

    def test_rule_order_irrelevant(self):
        a = [Rule("x", ["1"]), Rule("y", ["2"])]
        assert rulesets_equal(a, list(reversed(a)))

    def test_missing_pattern(self):
        assert not rulesets_equal([Rule("x", ["1"])], [Rule("y", ["1"])])

    def test_duplicate_patterns_not_masked_by_length(self):
        # same length, every rule of a has a match in b, but b has a rule a lacks
        a = [Rule("p", ["x"]), Rule("p", ["x"])]
        b = [Rule("p", ["x"]), Rule("q", ["y"])]
        assert not rulesets_equal(a, b)
        assert not rulesets_equal(b, a)

    def test_duplicate_patterns_with_different_owners(self):
        a = [Rule("p", ["x"]), Rule("p", ["y"])]
        b = [Rule("p", ["y"]), Rule("p", ["x"])]
        c = [Rule("p", ["x"]), Rule("p", ["x"])]
        assert rulesets_equal(a, b)
        assert not rulesets_equal(a, c)
        assert not rulesets_equal(c, a)

    def test_symmetric_on_random_rulesets(self):
        rng = random.Random(1234)
        patterns = ["a", "b", "c"]
        owners = ["x", "y", "z"]

        def make():
            return [
                Rule(rng.choice(patterns), [rng.choice(owners) for _ in range(rng.randint(1, 3))])
                for _ in range(rng.randint(0, 4))
            ]

        for _ in range(500):
            a, b = make(), make()
            assert rulesets_equal(a, b) == rulesets_equal(b, a)
            shuffled = [Rule(r.pattern, rng.sample(r.owners, len(r.owners))) for r in a]
            rng.shuffle(shuffled)
            assert rulesets_equal(a, shuffled)
