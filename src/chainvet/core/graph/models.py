"""Dependency graph data models: packages, dependency kinds, and edges.

These are pure, immutable data holders with no graph logic, making them safe
to import from every layer without circular-dependency concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Package: A vertex in the dependency graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Package:
    """A resolved package at a specific version from a specific origin.

    Identity is the ``(name, version, origin)`` triple: two packages with the
    same name and version but different origins (say, a registry copy and a
    git checkout) are distinct nodes.

    Attributes:
        name: Package name.
        version: Resolved version string.
        origin: Where the package comes from (registry URL, "path", ...).
        is_first_party: Whether the package is maintained in-house. First-party
            packages are trusted as themselves but still impose requirements
            on their dependencies.
        is_root: Whether the package is an entry point (workspace member).
    """

    name: str
    version: str
    origin: str = ""
    is_first_party: bool = False
    is_root: bool = False

    @property
    def identity(self) -> tuple[str, str, str]:
        """Return the ``(name, version, origin)`` identity triple."""
        return (self.name, self.version, self.origin)

    @property
    def pkgid(self) -> str:
        """Return a display id like ``"serde 1.0.0 (registry)"``."""
        if self.origin:
            return f"{self.name} {self.version} ({self.origin})"
        return f"{self.name} {self.version}"

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


# ---------------------------------------------------------------------------
# DependencyEdge: A directed edge consumer -> dependency
# ---------------------------------------------------------------------------


class DependencyKind(str, Enum):
    """How a dependency is used by its consumer."""

    NORMAL = "normal"
    BUILD = "build"
    DEV = "dev"

    @property
    def is_build_or_dev(self) -> bool:
        return self is not DependencyKind.NORMAL


@dataclass(frozen=True)
class DependencyEdge:
    """A directed dependency edge between two package identities.

    Attributes:
        source: Identity of the consuming package.
        target: Identity of the package depended upon.
        kind: Normal, build, or dev dependency.
        platform: Optional platform/target filter for the edge. ``None``
            means the dependency applies on every platform.
    """

    source: tuple[str, str, str]
    target: tuple[str, str, str]
    kind: DependencyKind = DependencyKind.NORMAL
    platform: str | None = None
