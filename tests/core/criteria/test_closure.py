"""Tests for CriteriaSet: validation, closure, coverage, and combination."""

from __future__ import annotations

import pytest

from chainvet.core.criteria import CriteriaEntry, CriteriaSet
from chainvet.exceptions import ConfigError, CriteriaCycleError, UnknownCriteriaError


def _entry(name: str, *implies: str, default: bool = False) -> CriteriaEntry:
    return CriteriaEntry(name, frozenset(implies), is_default=default)


class TestValidation:
    """Construction-time checks over the implication graph."""

    def test_unknown_implied_name_rejected(self) -> None:
        with pytest.raises(UnknownCriteriaError, match="undefined criteria 'missing'"):
            CriteriaSet([_entry("a", "missing")])

    def test_two_node_cycle_reports_path(self) -> None:
        with pytest.raises(CriteriaCycleError) as excinfo:
            CriteriaSet([_entry("a", "b"), _entry("b", "a")])
        assert excinfo.value.cycle == ["a", "b", "a"]
        assert "a -> b -> a" in str(excinfo.value)

    def test_self_implication_is_ignored(self) -> None:
        cs = CriteriaSet([_entry("a", "a", "b"), _entry("b")])
        assert cs.closure("a") == frozenset({"a", "b"})
        assert cs.representatives(["a", "b"]) == ["a"]

    def test_cycle_is_a_config_error(self) -> None:
        with pytest.raises(ConfigError):
            CriteriaSet([_entry("x"), _entry("a", "b"), _entry("b", "c"), _entry("c", "a")])

    def test_diamond_is_not_a_cycle(self) -> None:
        cs = CriteriaSet([
            _entry("top", "left", "right"),
            _entry("left", "bottom"),
            _entry("right", "bottom"),
            _entry("bottom"),
        ])
        assert len(cs) == 4


class TestClosure:
    """Transitive implication closure."""

    def test_closure_includes_self(self, criteria: CriteriaSet) -> None:
        assert criteria.closure("weak-reviewed") == frozenset({"weak-reviewed"})

    def test_closure_is_transitive(self, criteria: CriteriaSet) -> None:
        assert criteria.closure("strong-reviewed") == frozenset(
            {"strong-reviewed", "reviewed", "weak-reviewed"}
        )

    def test_closure_is_memoized(self, criteria: CriteriaSet) -> None:
        assert criteria.closure("reviewed") is criteria.closure("reviewed")

    def test_closure_of_unknown_name_raises(self, criteria: CriteriaSet) -> None:
        with pytest.raises(UnknownCriteriaError):
            criteria.closure("nope")

    def test_closure_of_union(self, criteria: CriteriaSet) -> None:
        assert criteria.closure_of([]) == frozenset()
        assert criteria.closure_of(["reviewed", "weak-reviewed"]) == frozenset(
            {"reviewed", "weak-reviewed"}
        )

    def test_covers(self, criteria: CriteriaSet) -> None:
        assert criteria.covers({"strong-reviewed"}, {"weak-reviewed"})
        assert not criteria.covers({"weak-reviewed"}, {"reviewed"})


class TestQueries:
    """Defaults, name validation, representatives, and description."""

    def test_defaults(self, criteria: CriteriaSet) -> None:
        assert criteria.defaults() == frozenset({"reviewed"})

    def test_names_sorted(self, criteria: CriteriaSet) -> None:
        assert criteria.names == ["reviewed", "strong-reviewed", "weak-reviewed"]
        assert "reviewed" in criteria
        assert criteria.get("reviewed").is_default is True
        assert criteria.get("nope") is None

    def test_validate_names_lists_all_unknown(self, criteria: CriteriaSet) -> None:
        with pytest.raises(UnknownCriteriaError, match="undefined criteria: a, b"):
            criteria.validate_names(["b", "reviewed", "a"], "policy")

    def test_representatives_drop_implied_members(self, criteria: CriteriaSet) -> None:
        closed = criteria.closure("strong-reviewed")
        assert criteria.representatives(closed) == ["strong-reviewed"]

    def test_representatives_keep_independent_members(self) -> None:
        cs = CriteriaSet([_entry("a"), _entry("b")])
        assert cs.representatives({"a", "b"}) == ["a", "b"]

    def test_describe(self, criteria: CriteriaSet) -> None:
        described = criteria.describe()
        assert list(described) == criteria.names
        assert described["reviewed"] == frozenset({"reviewed", "weak-reviewed"})


class TestCombine:
    """Combining local and imported definitions."""

    def test_identical_redefinition_accepted(self) -> None:
        cs = CriteriaSet.combine([_entry("a")], [_entry("a")])
        assert cs.names == ["a"]

    def test_conflicting_redefinition_rejected(self) -> None:
        with pytest.raises(ConfigError, match="defined twice"):
            CriteriaSet.combine([_entry("a"), _entry("b")], [_entry("a", "b"), _entry("b")])

    def test_self_implication_does_not_conflict(self) -> None:
        cs = CriteriaSet.combine([_entry("a", "a")], [_entry("a")])
        assert cs.closure("a") == frozenset({"a"})

    def test_local_may_imply_imported(self) -> None:
        cs = CriteriaSet.combine([_entry("local", "foreign")], [_entry("foreign")])
        assert cs.closure("local") == frozenset({"local", "foreign"})

    def test_first_definition_wins_for_default_flag(self) -> None:
        cs = CriteriaSet.combine([_entry("a", default=True)], [_entry("a")])
        assert cs.defaults() == frozenset({"a"})
