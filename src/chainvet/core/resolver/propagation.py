"""Top-down propagation of required criteria through the dependency graph.

Packages in use are visited in topological order from the roots toward the
leaves, so a package is processed only after every consumer has contributed
to it and its accumulated requirement is final before being passed on.

Requirement model:

    own(p)      = policy(p).criteria                 if p is first-party and set
                = ⋃ contributions(p)                 if p has consumers
                = default criteria                   otherwise (roots)
    contrib(e)  = policy(from).edge_criteria(to, kind)  or  required(from)
    required(p) = closure(own(p))

A package that receives no contribution from any active edge is not in use
and is absent from the result.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from chainvet.core.criteria import CriteriaSet
from chainvet.core.graph import DependencyGraph, Package
from chainvet.core.policy import EMPTY_POLICY, Policy
from chainvet.exceptions import PolicyError

logger = logging.getLogger(__name__)

PackageId = tuple[str, str, str]
RequirementMap = Mapping[PackageId, frozenset[str]]


class RequirementPropagator:
    """Computes the closed required-criteria set of every package in use.

    The propagator is pure: it reads the graph, criteria, and policies and
    returns a frozen mapping. Configuration problems are raised before any
    requirement is computed.

    Args:
        graph: The resolved dependency graph.
        criteria: Validated criteria definitions.
        policies: Policy overrides keyed by first-party package name.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        criteria: CriteriaSet,
        policies: Mapping[str, Policy] | None = None,
    ) -> None:
        self._graph = graph
        self._criteria = criteria
        self._policies = dict(policies or {})

    def validate(self) -> None:
        """Check every policy against the criteria and the graph.

        Raises:
            UnknownCriteriaError: If a policy names an undefined criteria.
            PolicyError: If a policy targets a package that is not
                first-party, or overrides a dependency the package does
                not have.
        """
        for name in sorted(self._policies):
            policy = self._policies[name]
            self._criteria.validate_names(
                policy.referenced_criteria(), f"Policy for {name!r}"
            )
            owners = self._graph.find(name)
            if not owners:
                raise PolicyError(f"Policy for {name!r} names a package not in the graph")
            if not all(p.is_first_party for p in owners):
                raise PolicyError(
                    f"Policy for {name!r} applies to a third-party package; "
                    "policies are only allowed on first-party packages"
                )
            dep_names = {
                self._graph.get(edge.target).name
                for owner in owners
                for edge in self._graph.dependencies_of(owner)
            }
            for dep in sorted(policy.dependency_criteria):
                if dep not in dep_names:
                    raise PolicyError(
                        f"Policy for {name!r} sets dependency-criteria for "
                        f"{dep!r}, which is not one of its dependencies"
                    )

    def policy_for(self, package: Package) -> Policy:
        if package.is_first_party:
            return self._policies.get(package.name, EMPTY_POLICY)
        return EMPTY_POLICY

    def propagate(self) -> RequirementMap:
        """Return ``{package identity: closed required criteria}``.

        Raises:
            ConfigError: On policy problems or a dependency cycle.
        """
        self.validate()
        graph = self._graph
        defaults = self._criteria.defaults()

        roots = graph.roots()
        root_ids = {p.identity for p in roots}
        order = graph.topological_order(graph.reachable(roots))

        contributions: dict[PackageId, set[str]] = {}
        required: dict[PackageId, frozenset[str]] = {}

        for package in order:
            pid = package.identity
            incoming = contributions.get(pid)
            policy = self.policy_for(package)

            if package.is_first_party and policy.criteria is not None:
                own: set[str] | frozenset[str] = policy.criteria
            elif incoming is not None:
                own = incoming
            elif pid in root_ids:
                own = defaults
            else:
                logger.debug("%s is not in use", package.pkgid)
                continue

            resolved = self._criteria.closure_of(own)
            required[pid] = resolved

            for edge in graph.dependencies_of(package):
                if not policy.applies_to_platform(edge.platform, edge.kind):
                    continue
                dep = graph.get(edge.target)
                override = policy.edge_criteria(dep.name, edge.kind)
                contribution = override if override is not None else resolved
                contributions.setdefault(edge.target, set()).update(contribution)

        logger.debug(
            "Propagated requirements to %d of %d packages",
            len(required), graph.package_count,
        )
        return MappingProxyType(required)
