"""Reachability solver: is the installed version provable under R?

For a package, a target version V, and a closed required criteria set R,
each representative criteria ``c`` of R is checked independently:

1. A full audit of V whose criteria closure contains ``c`` certifies V
   directly.
2. Otherwise a breadth-first search runs over the package's version graph,
   whose edges are delta audits covering ``c``, starting from every version
   holding a full audit covering ``c``. Reaching V certifies it through the
   chain of audits found.
3. Otherwise an exemption of V covering ``c`` (or a delta chain covering
   ``c`` starting at such an exempted version) passes V provisionally.
4. Otherwise ``c`` fails.

Overall: CERTIFIED if every ``c`` resolved by 1 or 2, EXEMPTED if at least
one needed 3, UNCERTIFIABLE if any failed. The version graph may contain
cycles (an audit of a rollback); every search keeps a visited set keyed by
version, so it always terminates.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Iterable

from chainvet.core.criteria import CriteriaSet
from chainvet.core.ledger import DeltaAudit, PackageLedger
from chainvet.core.resolver.models import (
    CriteriaProof,
    Diagnostic,
    Evidence,
    ProofMethod,
    SolverResult,
    Verdict,
)
from chainvet.core.versions import sort_versions, version_key

logger = logging.getLogger(__name__)


class _Search:
    """Result of a multi-source BFS: visited versions and back-pointers."""

    def __init__(self) -> None:
        self.parent: dict[str, tuple[str, Evidence] | None] = {}
        self.anchors: dict[str, Evidence] = {}

    @property
    def reached(self) -> set[str]:
        return set(self.parent)

    def path_to(self, version: str) -> tuple[tuple[str, ...], tuple[Evidence, ...]]:
        """Walk back-pointers from ``version`` to its source."""
        versions = [version]
        records: list[Evidence] = []
        step = self.parent[version]
        while step is not None:
            prev, record = step
            versions.append(prev)
            records.append(record)
            step = self.parent[prev]
        records.append(self.anchors[versions[-1]])
        versions.reverse()
        records.reverse()
        return tuple(versions), tuple(records)


class ReachabilitySolver:
    """Decides provability of package versions from the audit ledger.

    The solver holds no per-run mutable state besides a closure cache over
    the immutable ``CriteriaSet``, so one instance can serve many packages,
    including from multiple worker threads.

    Args:
        criteria: Validated criteria definitions.
    """

    def __init__(self, criteria: CriteriaSet) -> None:
        self._criteria = criteria
        self._closure_cache: dict[frozenset[str], frozenset[str]] = {}

    def _covers(self, provided: frozenset[str], name: str) -> bool:
        closed = self._closure_cache.get(provided)
        if closed is None:
            closed = self._criteria.closure_of(provided)
            self._closure_cache[provided] = closed
        return name in closed

    # -- Public API ---------------------------------------------------------

    def solve(
        self,
        ledger: PackageLedger,
        version: str,
        required: Iterable[str],
        ignore_exemptions: bool = False,
    ) -> SolverResult:
        """Check whether ``version`` of ``ledger.name`` satisfies ``required``.

        Args:
            ledger: The package's slice of the ledger index.
            version: The installed (target) version.
            required: Closed required criteria set.
            ignore_exemptions: Skip step 3, used for exemption hygiene.

        Returns:
            A ``SolverResult``. "No proof" is an ordinary UNCERTIFIABLE result,
            never an exception.
        """
        proofs: list[CriteriaProof] = []
        failed: list[str] = []
        reached_for_failed: set[str] = set()

        for name in self._criteria.representatives(required):
            proof, reached = self._prove(ledger, version, name, ignore_exemptions)
            if proof is None:
                failed.append(name)
                reached_for_failed |= reached
            else:
                proofs.append(proof)

        if failed:
            nearest = self._nearest(reached_for_failed, version)
            if nearest is not None:
                suggestion = f"delta {nearest} -> {version}"
            else:
                suggestion = f"full {version}"
            return SolverResult(
                verdict=Verdict.UNCERTIFIABLE,
                proofs=tuple(proofs),
                diagnostic=Diagnostic(
                    failed_criteria=tuple(failed),
                    nearest_version=nearest,
                    suggested_audit=suggestion,
                ),
            )

        if any(p.method.is_provisional for p in proofs):
            return SolverResult(Verdict.EXEMPTED, tuple(proofs))
        return SolverResult(Verdict.CERTIFIED, tuple(proofs))

    # -- Per-criteria proof -------------------------------------------------

    def _prove(
        self,
        ledger: PackageLedger,
        version: str,
        name: str,
        ignore_exemptions: bool,
    ) -> tuple[CriteriaProof | None, set[str]]:
        """Prove one criteria; also return versions certified by audits."""
        # 1. Direct full audit.
        for audit in ledger.full_audits_for(version):
            if self._covers(audit.criteria, name):
                return (
                    CriteriaProof(name, ProofMethod.FULL_AUDIT, (version,), (audit,)),
                    {version},
                )

        # 2. Delta chain anchored at full audits.
        edges = self._delta_edges(ledger, name)
        sources: list[tuple[str, Evidence]] = []
        for audit in ledger.iter_full_audits():
            if self._covers(audit.criteria, name):
                sources.append((audit.version, audit))
        audited = self._bfs(sources, edges)
        if version in audited.parent:
            path, records = audited.path_to(version)
            return CriteriaProof(name, ProofMethod.DELTA_CHAIN, path, records), audited.reached

        if ignore_exemptions:
            return None, audited.reached

        # 3. Exemption, directly or as the anchor of a delta chain.
        for exemption in ledger.exemptions_for(version):
            if self._covers(exemption.criteria, name):
                return (
                    CriteriaProof(name, ProofMethod.EXEMPTION, (version,), (exemption,)),
                    audited.reached,
                )
        exempt_sources: list[tuple[str, Evidence]] = [
            (e.version, e)
            for e in ledger.iter_exemptions()
            if self._covers(e.criteria, name)
        ]
        exempted = self._bfs(exempt_sources, edges)
        if version in exempted.parent:
            path, records = exempted.path_to(version)
            return (
                CriteriaProof(name, ProofMethod.EXEMPTED_CHAIN, path, records),
                audited.reached,
            )

        # 4. Unsatisfied.
        return None, audited.reached

    def _delta_edges(
        self, ledger: PackageLedger, name: str
    ) -> dict[str, list[tuple[str, DeltaAudit]]]:
        edges: dict[str, list[tuple[str, DeltaAudit]]] = defaultdict(list)
        for delta in ledger.iter_delta_audits():
            if self._covers(delta.criteria, name):
                edges[delta.from_version].append((delta.to_version, delta))
        return edges

    @staticmethod
    def _bfs(
        sources: list[tuple[str, Evidence]],
        edges: dict[str, list[tuple[str, DeltaAudit]]],
    ) -> _Search:
        """Multi-source BFS; the visited set guarantees termination on cycles.

        The anchoring full audit or exemption of each source is kept so that
        a returned path starts with the record that makes its source trusted.
        """
        search = _Search()
        queue: deque[str] = deque()
        for version, record in sources:
            if version not in search.parent:
                search.parent[version] = None
                search.anchors[version] = record
                queue.append(version)
        while queue:
            cur = queue.popleft()
            for nxt, delta in edges.get(cur, ()):
                if nxt not in search.parent:
                    search.parent[nxt] = (cur, delta)
                    queue.append(nxt)
        return search

    @staticmethod
    def _nearest(reached: set[str], version: str) -> str | None:
        """Highest reached version below ``version``, else lowest above it."""
        candidates = [v for v in reached if v != version]
        if not candidates:
            return None
        target = version_key(version)
        below = [v for v in candidates if version_key(v) < target]
        if below:
            return sort_versions(below)[-1]
        return sort_versions(candidates)[0]

    # -- Ledger consistency -------------------------------------------------

    def ledger_warnings(self, ledger: PackageLedger) -> list[str]:
        """Soft warnings about inconsistent ledger entries for one package.

        - Duplicate full audits for the same version and criteria.
        - Delta audits whose source version is never certifiable: it has no
          full audit or exemption and no delta chain leads to it.
        """
        warnings = []
        for version, criteria in ledger.duplicate_full_audits():
            warnings.append(
                f"duplicate full audit of {ledger.name}@{version} for "
                f"{', '.join(sorted(criteria))}"
            )

        anchors: list[tuple[str, Evidence]] = [
            (a.version, a) for a in ledger.iter_full_audits()
        ]
        anchors += [(e.version, e) for e in ledger.iter_exemptions()]
        all_edges: dict[str, list[tuple[str, DeltaAudit]]] = defaultdict(list)
        for delta in ledger.iter_delta_audits():
            all_edges[delta.from_version].append((delta.to_version, delta))
        certifiable = self._bfs(anchors, all_edges).reached

        dangling = sorted(
            {d.from_version for d in ledger.iter_delta_audits()} - certifiable,
            key=version_key,
        )
        for version in dangling:
            warnings.append(
                f"delta audit of {ledger.name} starts from {version}, "
                "which is never certified"
            )
        if warnings:
            logger.warning(
                "Ledger for %s has %d inconsistencies", ledger.name, len(warnings)
            )
        return warnings
