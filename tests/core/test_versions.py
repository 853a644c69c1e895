"""Tests for version ordering and VersionConstraint predicates."""

from __future__ import annotations

import pytest

from chainvet.core.versions import (
    VersionConstraint,
    parse_version,
    sort_versions,
    version_key,
)


class TestParseVersion:
    """Parsing version strings into ordered keys."""

    def test_missing_components_default_to_zero(self) -> None:
        assert parse_version("10")[:3] == (10, 0, 0)
        assert parse_version("1.2")[:3] == (1, 2, 0)

    def test_prerelease_sorts_before_release(self) -> None:
        assert parse_version("1.0.0-alpha") < parse_version("1.0.0")

    def test_prerelease_fields_compare_numerically(self) -> None:
        assert parse_version("1.0.0-alpha.2") < parse_version("1.0.0-alpha.10")
        assert parse_version("1.0.0-alpha.1") < parse_version("1.0.0-alpha.beta")
        assert parse_version("1.0.0-alpha") < parse_version("1.0.0-alpha.1")

    def test_build_metadata_ignored(self) -> None:
        assert parse_version("1.0.0+abc") == parse_version("1.0.0")

    def test_invalid_version_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_version("not-a-version")


class TestOrdering:
    """Sorting mixed version strings."""

    def test_numeric_not_lexicographic(self) -> None:
        assert sort_versions(["10.0.0", "9.0.0", "1.10.0", "1.2.0"]) == [
            "1.2.0", "1.10.0", "9.0.0", "10.0.0",
        ]

    def test_semver_prerelease_precedence(self) -> None:
        ordered = [
            "1.0.0-alpha", "1.0.0-alpha.1", "1.0.0-alpha.beta", "1.0.0-beta",
            "1.0.0-beta.2", "1.0.0-beta.11", "1.0.0-rc.1", "1.0.0",
        ]
        assert sort_versions(list(reversed(ordered))) == ordered
        assert sort_versions(["1.0.0-alpha.10", "1.0.0-alpha.2"]) == [
            "1.0.0-alpha.2", "1.0.0-alpha.10",
        ]

    def test_unparsable_sorts_last(self) -> None:
        assert sort_versions({"zzz", "1.0.0"}) == ["1.0.0", "zzz"]
        assert version_key("1.0.0") < version_key("garbage")


class TestVersionConstraint:
    """Range predicates used by violation records."""

    def test_exact(self) -> None:
        vc = VersionConstraint("=10")
        assert vc.matches("10.0.0") is True
        assert vc.matches("10.0.1") is False

    def test_double_equals_and_not_equal(self) -> None:
        assert VersionConstraint("==1.0.0").matches("1.0.0")
        assert not VersionConstraint("!=1.0.0").matches("1.0.0")
        assert VersionConstraint("!=1.0.0").matches("1.0.1")

    def test_bounds(self) -> None:
        assert VersionConstraint(">=1.0.0").matches("1.0.0")
        assert not VersionConstraint(">1.0.0").matches("1.0.0")
        assert VersionConstraint("<=2.0.0").matches("2.0.0")
        assert not VersionConstraint("<2.0.0").matches("2.0.0")

    def test_bounds_on_prereleases(self) -> None:
        assert VersionConstraint("<1.0.0-alpha.10").matches("1.0.0-alpha.2")
        assert not VersionConstraint(">=1.0.0-alpha.10").matches("1.0.0-alpha.2")
        assert VersionConstraint("=1.0.0-rc.1").matches("1.0.0-rc.1")
        assert not VersionConstraint("=1.0.0-rc.1").matches("1.0.0-rc.2")

    def test_caret_and_bare_version(self) -> None:
        assert VersionConstraint("^1.2.0").matches("1.9.0")
        assert not VersionConstraint("^1.2.0").matches("2.0.0")
        assert VersionConstraint("0.3.1").matches("0.3.5")
        assert not VersionConstraint("0.3.1").matches("0.4.0")
        assert not VersionConstraint("^0.0.3").matches("0.0.4")

    def test_tilde(self) -> None:
        vc = VersionConstraint("~1.2.3")
        assert vc.matches("1.2.9")
        assert not vc.matches("1.3.0")

    def test_wildcard(self) -> None:
        assert VersionConstraint("*").matches("anything")

    def test_compound_is_conjunction(self) -> None:
        vc = VersionConstraint(">=1.0.0, <2.0.0")
        assert vc.matches("1.5.0")
        assert not vc.matches("2.0.0")
        assert not vc.matches("0.9.0")

    def test_unparsable_version_never_matches_range(self) -> None:
        assert VersionConstraint(">=0.0.0").matches("garbage") is False

    @pytest.mark.parametrize("raw", ["", ">=", "=>1.0", "1.0.0.0", "abc"])
    def test_invalid_constraint_rejected_at_construction(self, raw: str) -> None:
        with pytest.raises(ValueError):
            VersionConstraint(raw)

    def test_str_round_trips_raw(self) -> None:
        assert str(VersionConstraint(">=1.0")) == ">=1.0"
