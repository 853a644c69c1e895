"""Version ordering and version-range predicates.

Package versions follow SemVer conventions. Ordering is used by the
reachability solver to pick the nearest audited version for diagnostics;
range predicates are used by violation records, which forbid a *range* of
versions rather than a single point.

Constraint semantics follow Cargo / npm conventions with support for exact
match (``=`` and ``==``), range (``>=``, ``<=``, ``>``, ``<``), not-equal
(``!=``), caret (``^``, also the meaning of a bare version), tilde (``~``),
wildcard (``*``), and compound comma-separated constraints.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import re
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Version comparison utilities
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(
    r"^(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?$"
)

PreRelease = tuple[tuple[int, int | str], ...]
VersionKey = tuple[int, int, int, int, PreRelease]


def parse_version(version: str) -> VersionKey:
    """Parse a version string into a totally ordered key.

    Missing minor/patch components default to 0. Build metadata does not
    affect precedence and a pre-release sorts before the associated normal
    version (SemVer 2.0.0, section 11). Pre-release identifiers compare one
    dot-separated field at a time: numeric fields numerically and below
    alphanumeric ones, and a shorter prefix sorts first.

    Args:
        version: Version string (e.g., "1.2.3", "10", "0.1.0-alpha").

    Returns:
        A ``(major, minor, patch, is_release, pre)`` tuple.

    Raises:
        ValueError: If the string is not a recognizable version.
    """
    m = _VERSION_RE.match(version.strip())
    if not m:
        raise ValueError(f"Invalid version: {version!r}")
    pre = m.group("pre") or ""
    return (
        int(m.group("major")),
        int(m.group("minor") or 0),
        int(m.group("patch") or 0),
        0 if pre else 1,
        _pre_release_key(pre),
    )


def _pre_release_key(pre: str) -> PreRelease:
    if not pre:
        return ()
    return tuple(
        (0, int(part)) if part.isdigit() else (1, part) for part in pre.split(".")
    )


def version_key(version: str) -> tuple[int, VersionKey | str]:
    """Sort key that tolerates non-SemVer strings.

    Parsable versions sort before unparsable ones, which fall back to
    lexicographic order.
    """
    try:
        return (0, parse_version(version))
    except ValueError:
        return (1, version)


def sort_versions(versions: list[str] | set[str]) -> list[str]:
    """Return versions sorted ascending (oldest first)."""
    return sorted(versions, key=version_key)


# ---------------------------------------------------------------------------
# VersionConstraint: Declarative version range
# ---------------------------------------------------------------------------

_CONSTRAINT_ATOM_RE = re.compile(
    r"^\s*(?P<op>==|=|!=|>=|<=|>|<|\^|~)?\s*"
    r"(?P<ver>\d+(?:\.\d+)?(?:\.\d+)?"
    r"(?:-[0-9A-Za-z\-.]+)?(?:\+[0-9A-Za-z\-.]+)?)\s*$"
)


@dataclass(frozen=True)
class VersionConstraint:
    """A version range, analogous to Cargo requirement syntax.

    Supports:
    - Exact match: ``=1.0.0`` or ``==1.0.0``
    - Not-equal: ``!=1.0.0``
    - Minimum (inclusive): ``>=1.0.0``
    - Maximum (inclusive): ``<=2.0.0``
    - Minimum (exclusive): ``>1.0.0``
    - Maximum (exclusive): ``<2.0.0``
    - Caret (also a bare version): ``^1.2.0`` / ``1.2.0``
    - Tilde: ``~1.2.0``
    - Wildcard (any version): ``*``
    - Compound (comma-separated, all must hold): ``>=1.0.0,<2.0.0``

    Attributes:
        raw: The raw constraint string as authored (e.g., ">=1.0.0,<2.0.0").
    """

    raw: str

    def __post_init__(self) -> None:
        # Fail at load time rather than during resolution.
        stripped = self.raw.strip()
        if stripped == "*":
            return
        atoms = [a.strip() for a in stripped.split(",") if a.strip()]
        if not atoms:
            raise ValueError(f"Empty version constraint: {self.raw!r}")
        for atom in atoms:
            if not _CONSTRAINT_ATOM_RE.match(atom):
                raise ValueError(f"Invalid constraint atom: {atom!r}")

    def matches(self, version: str) -> bool:
        """Check whether a version string falls inside this range.

        For compound constraints (comma-separated), ALL atoms must be
        satisfied (conjunction semantics). An unparsable version never
        matches a bounded range.

        Args:
            version: A version string (e.g., "1.2.3").

        Returns:
            True if the version satisfies every atom in this constraint.
        """
        stripped = self.raw.strip()
        if stripped == "*":
            return True

        try:
            ver_key = parse_version(version)
        except ValueError:
            return False

        atoms = [a.strip() for a in stripped.split(",") if a.strip()]
        for atom in atoms:
            if not self._atom_matches(atom, ver_key):
                return False
        return True

    @staticmethod
    def _atom_matches(atom: str, ver: VersionKey) -> bool:
        """Evaluate a single constraint atom against a parsed version key."""
        m = _CONSTRAINT_ATOM_RE.match(atom)
        if not m:
            raise ValueError(f"Invalid constraint atom: {atom!r}")

        op = m.group("op") or "^"
        target = parse_version(m.group("ver"))

        if op in ("=", "=="):
            return ver[:3] == target[:3] and ver[4] == target[4]
        elif op == "!=":
            return not (ver[:3] == target[:3] and ver[4] == target[4])
        elif op == ">=":
            return ver >= target
        elif op == "<=":
            return ver <= target
        elif op == ">":
            return ver > target
        elif op == "<":
            return ver < target
        elif op == "^":
            # Caret: same left-most non-zero component, >= target.
            if ver < target:
                return False
            if target[0] != 0:
                return ver[0] == target[0]
            if target[1] != 0:
                return ver[0] == 0 and ver[1] == target[1]
            return ver[:3] == target[:3]
        elif op == "~":
            # Tilde: same major.minor, patch >= target patch.
            return ver[0] == target[0] and ver[1] == target[1] and ver >= target
        else:  # pragma: no cover
            raise ValueError(f"Unknown operator: {op!r}")

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"
