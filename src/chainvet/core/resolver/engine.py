"""Resolution engine: wires the propagator, solver, and adjudicator together.

Pipeline::

    validate criteria names  ->  propagate requirements (frozen)
        ->  adjudicate each package in use (optionally in parallel)
        ->  collect + sort into a Report

Every configuration error is raised before the first verdict is computed.
Per-package work reads only immutable inputs (the graph, the ledger index,
the criteria set, and the frozen requirement map), so it can fan out over a
thread pool; each worker returns its own ``Adjudication`` and a single
collector builds the report.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor

from chainvet.core.criteria import CriteriaSet
from chainvet.core.graph import DependencyGraph, Package
from chainvet.core.ledger import Exemption, LedgerIndex, describe_record
from chainvet.core.policy import Policy
from chainvet.core.resolver.adjudicator import Adjudication, Adjudicator
from chainvet.core.resolver.propagation import RequirementMap, RequirementPropagator
from chainvet.core.resolver.report import RemovableExemption, Report
from chainvet.core.resolver.solver import ReachabilitySolver

logger = logging.getLogger(__name__)


class AuditResolver:
    """Resolves every package in use to a verdict.

    Args:
        graph: The resolved dependency graph.
        index: The merged ledger index (local + imported + exemptions).
        criteria: Validated criteria definitions (local + imported).
        policies: Policy overrides keyed by first-party package name.
        max_workers: Thread count for per-package adjudication. ``None`` or
            1 runs sequentially.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        index: LedgerIndex,
        criteria: CriteriaSet,
        policies: Mapping[str, Policy] | None = None,
        max_workers: int | None = None,
    ) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._graph = graph
        self._index = index
        self._criteria = criteria
        self._policies = dict(policies or {})
        self._max_workers = max_workers

    def validate_ledger(self) -> None:
        """Check that every audit and exemption names defined criteria.

        Raises:
            UnknownCriteriaError: On the first offending entry.
        """
        for record in self._index.iter_records():
            self._criteria.validate_names(record.criteria, describe_record(record))
        for exemption in self._index.iter_exemptions():
            self._criteria.validate_names(
                exemption.criteria,
                f"exemption of {exemption.package}@{exemption.version}",
            )

    def requirements(self) -> RequirementMap:
        """Validate policies and return the frozen requirement map."""
        return RequirementPropagator(self._graph, self._criteria, self._policies).propagate()

    def resolve(self) -> Report:
        """Run the full pipeline and return the report.

        Raises:
            ConfigError: On any configuration problem, before any verdict.
        """
        self.validate_ledger()
        required = self.requirements()

        in_use: list[Package] = [
            p for p in self._graph.packages if p.identity in required
        ]
        adjudicator = Adjudicator(
            self._criteria, self._index, ReachabilitySolver(self._criteria)
        )

        def _one(package: Package) -> Adjudication:
            return adjudicator.adjudicate(package, required[package.identity])

        if self._max_workers and self._max_workers > 1 and len(in_use) > 1:
            logger.debug(
                "Adjudicating %d packages on %d workers",
                len(in_use), self._max_workers,
            )
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                results = list(pool.map(_one, in_use))
        else:
            results = [_one(p) for p in in_use]

        removable: list[RemovableExemption] = []
        for result in results:
            removable.extend(result.removable)
        removable.extend(self._unused_exemptions(in_use, results))

        report = Report((r.record for r in results), removable)
        logger.debug("Resolution summary: %s", report.summary())
        return report

    def _unused_exemptions(
        self, in_use: list[Package], results: list[Adjudication]
    ) -> list[RemovableExemption]:
        """Exemptions neither for an installed version nor anchoring a proof."""
        used = {(p.name, p.version) for p in in_use if not p.is_first_party}
        cited = {
            evidence
            for result in results
            for proof in result.record.proofs
            for evidence in proof.records
            if isinstance(evidence, Exemption)
        }
        return [
            RemovableExemption(e.package, e.version, "unused", e.suggest)
            for e in self._index.iter_exemptions()
            if (e.package, e.version) not in used and e not in cited
        ]


def resolve(
    graph: DependencyGraph,
    index: LedgerIndex,
    criteria: CriteriaSet,
    policies: Mapping[str, Policy] | None = None,
    max_workers: int | None = None,
) -> Report:
    """Convenience wrapper: ``AuditResolver(...).resolve()``."""
    return AuditResolver(graph, index, criteria, policies, max_workers).resolve()
