"""
Tests for constraint parsing and resolution (tfswitch/constraint.py).
"""

import pytest
from packaging.version import Version as PackagingVersion

from tfswitch.constraint import parse_constraint, resolve_constraint
from tfswitch.errors import ConstraintParseError


CATALOG = ["2.0.0", "1.1.0-rc1", "1.1.0", "1.0.0"]


class TestParseConstraint:
    """Tests for parse_constraint."""

    def test_parse_keeps_raw(self):
        c = parse_constraint(" >= 0.12, < 0.14 ")
        assert c.raw == ">= 0.12, < 0.14"
        assert str(c) == ">= 0.12, < 0.14"
        assert len(c.groups) == 1
        assert len(c.groups[0]) == 2

    def test_pessimistic_bounds(self):
        term = parse_constraint("~> 1.2").groups[0][0]
        assert [(op, str(bound)) for op, bound in term.bounds] == [(">=", "1.2.0"), ("<", "2.0.0")]
        assert all(isinstance(bound, PackagingVersion) for _, bound in term.bounds)

    def test_or_groups(self):
        c = parse_constraint("~> 0.11.0 || >= 0.13")
        assert len(c.groups) == 2

    @pytest.mark.parametrize("expression", [
        "",
        "   ",
        "latest",
        ">= 0.12,",
        ", >= 0.12",
        "=> 1.0",
        "1.2.3.4",
        "~> 1.0-beta1",
        ">= 1.x",
    ])
    def test_malformed_raises(self, expression):
        with pytest.raises(ConstraintParseError):
            parse_constraint(expression)

    def test_non_string_raises(self):
        with pytest.raises(ConstraintParseError):
            parse_constraint(None)


class TestConstraintCheck:
    """Tests for Constraint.check semantics."""

    @pytest.mark.parametrize("expression,version,expected", [
        ("1.2.3", "1.2.3", True),
        ("=1.2.3", "1.2.4", False),
        ("==1.2.3", "1.2.3", True),
        ("!=1.2.3", "1.2.4", True),
        ("!=1.2.3", "1.2.3", False),
        (">1.2.3", "1.2.4", True),
        (">1.2.3", "1.2.3", False),
        (">=0.12", "0.12.0", True),
        ("<0.14", "0.13.7", True),
        ("<=1.0.0", "1.0.0", True),
        ("v1.2.3", "1.2.3", True),
        (">= 0.12, < 0.14", "0.14.0", False),
        (">= 0.12, < 0.14", "0.12.31", True),
    ])
    def test_comparisons(self, expression, version, expected):
        assert parse_constraint(expression).check(version) is expected

    @pytest.mark.parametrize("expression,version,expected", [
        ("~> 1.0", "1.9.9", True),
        ("~> 1.0", "2.0.0", False),
        ("~> 1.0", "0.15.5", False),
        ("~> 1.2.3", "1.2.9", True),
        ("~> 1.2.3", "1.3.0", False),
        ("~> 1", "1.5.0", True),
        ("~> 1", "2.0.0", False),
    ])
    def test_pessimistic(self, expression, version, expected):
        assert parse_constraint(expression).check(version) is expected

    @pytest.mark.parametrize("expression,version,expected", [
        ("~1.2.3", "1.2.9", True),
        ("~1.2.3", "1.3.0", False),
        ("~1.2", "1.2.0", True),
        ("~1", "1.9.0", True),
        ("~1", "2.0.0", False),
    ])
    def test_tilde(self, expression, version, expected):
        assert parse_constraint(expression).check(version) is expected

    @pytest.mark.parametrize("expression,version,expected", [
        ("^1.2.3", "1.9.0", True),
        ("^1.2.3", "2.0.0", False),
        ("^1.2.3", "1.2.2", False),
        ("^0.12.1", "0.12.31", True),
        ("^0.12.1", "0.13.0", False),
    ])
    def test_caret(self, expression, version, expected):
        assert parse_constraint(expression).check(version) is expected

    def test_prerelease_needs_prerelease_operand(self):
        assert parse_constraint(">= 1.0.0").check("1.1.0-rc1") is False
        assert parse_constraint(">= 1.1.0-beta1").check("1.1.0-rc1") is True

    def test_or_matches_either_group(self):
        c = parse_constraint("~> 0.11.0 || >= 0.13")
        assert c.check("0.11.14") is True
        assert c.check("0.12.0") is False
        assert c.check("0.13.1") is True


class TestResolveConstraint:
    """Tests for resolve_constraint."""

    def test_highest_release_wins(self):
        assert resolve_constraint("~>1.0", CATALOG) == "1.1.0"

    def test_accepts_parsed_constraint(self):
        c = parse_constraint(">= 1.0.0, < 2.0.0")
        assert resolve_constraint(c, CATALOG) == "1.1.0"

    def test_order_of_catalog_does_not_matter(self):
        assert resolve_constraint("~>1.0", list(reversed(CATALOG))) == "1.1.0"

    def test_idempotent(self):
        c = parse_constraint("< 2.0.0")
        first = resolve_constraint(c, CATALOG)
        assert all(resolve_constraint(c, CATALOG) == first for _ in range(5))

    def test_prerelease_chosen_when_asked(self):
        assert resolve_constraint("1.1.0-rc1", CATALOG) == "1.1.0-rc1"

    def test_no_match_returns_none(self):
        assert resolve_constraint(">= 3.0", CATALOG) is None

    def test_empty_catalog(self):
        assert resolve_constraint(">= 0.1", []) is None

    def test_skips_unparsable_entries(self):
        assert resolve_constraint(">= 1.0", ["junk", "1.0.0", "v2.0.0"]) == "1.0.0"

    def test_malformed_constraint_raises_before_scan(self):
        class Exploding:
            def __iter__(self):
                raise AssertionError("catalog should not be scanned")

        with pytest.raises(ConstraintParseError):
            resolve_constraint(">>> 1", Exploding())
