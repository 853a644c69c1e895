"""Per-first-party-package policy overrides.

A policy controls how criteria requirements flow from a first-party package
into its dependencies. Precedence for a dependency edge is an ordered
lookup, most specific first:

1. ``dependency_criteria[dependency name]``
2. ``build_and_dev_criteria`` (build and dev edges only)
3. the consumer's own resolved criteria (inheritance)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from chainvet.core.graph.models import DependencyKind


@dataclass(frozen=True)
class Policy:
    """Policy override for one first-party package.

    Attributes:
        criteria: Criteria the package requires of itself (and, by
            inheritance, of its dependencies). ``None`` means "not set".
        dependency_criteria: Per-dependency-name overrides.
        build_and_dev_criteria: Override for build and dev dependencies.
        targets: Platforms for which normal dependencies are audited.
            ``None`` means every platform.
        build_and_dev_targets: Same, for build and dev dependencies.
    """

    criteria: frozenset[str] | None = None
    dependency_criteria: Mapping[str, frozenset[str]] = field(default_factory=dict)
    build_and_dev_criteria: frozenset[str] | None = None
    targets: frozenset[str] | None = None
    build_and_dev_targets: frozenset[str] | None = None

    def edge_criteria(
        self, dependency: str, kind: DependencyKind
    ) -> frozenset[str] | None:
        """Return the override for an edge, or ``None`` to inherit."""
        override = self.dependency_criteria.get(dependency)
        if override is not None:
            return override
        if kind.is_build_or_dev and self.build_and_dev_criteria is not None:
            return self.build_and_dev_criteria
        return None

    def applies_to_platform(self, platform: str | None, kind: DependencyKind) -> bool:
        """Whether an edge restricted to ``platform`` is audited at all."""
        if platform is None:
            return True
        allowed = self.build_and_dev_targets if kind.is_build_or_dev else self.targets
        return allowed is None or platform in allowed

    def referenced_criteria(self) -> Iterable[str]:
        """Every criteria name this policy mentions."""
        if self.criteria:
            yield from self.criteria
        for names in self.dependency_criteria.values():
            yield from names
        if self.build_and_dev_criteria:
            yield from self.build_and_dev_criteria


EMPTY_POLICY = Policy()
