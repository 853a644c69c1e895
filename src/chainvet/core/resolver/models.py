"""Resolver result models: verdicts, per-criteria proofs, and solver output.

These are pure data holders shared by the solver, the adjudicator, and the
report. ``Verdict`` is ordered from strongest to weakest outcome so that the
report can sort and count without re-deriving anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from chainvet.core.ledger import AuditRecord, Exemption


class Verdict(str, Enum):
    """Final per-package classification.

    The four values must never be collapsed: downstream automation keys
    off the difference between a hazard (FORBIDDEN), missing evidence
    (UNCERTIFIABLE), provisional trust (EXEMPTED), and proof (CERTIFIED).
    """

    CERTIFIED = "certified"
    EXEMPTED = "exempted"
    UNCERTIFIABLE = "uncertifiable"
    FORBIDDEN = "forbidden"

    @property
    def is_failure(self) -> bool:
        return self in (Verdict.UNCERTIFIABLE, Verdict.FORBIDDEN)


class ProofMethod(str, Enum):
    """How a single criteria was satisfied for the target version."""

    FIRST_PARTY = "first-party"
    FULL_AUDIT = "full-audit"
    DELTA_CHAIN = "delta-chain"
    EXEMPTION = "exemption"
    EXEMPTED_CHAIN = "exempted-chain"

    @property
    def is_provisional(self) -> bool:
        return self in (ProofMethod.EXEMPTION, ProofMethod.EXEMPTED_CHAIN)


Evidence = Union[AuditRecord, Exemption]


@dataclass(frozen=True)
class CriteriaProof:
    """Evidence that the target version satisfies one criteria.

    Attributes:
        criteria: The criteria proven.
        method: How it was proven.
        path: Versions visited from the trusted baseline to the target,
            inclusive. A single element for direct proofs.
        records: The ledger entries used, in path order.
    """

    criteria: str
    method: ProofMethod
    path: tuple[str, ...] = ()
    records: tuple[Evidence, ...] = ()

    @property
    def provenances(self) -> list[str]:
        """Distinct provenance tags of the audit records used."""
        seen = []
        for record in self.records:
            tag = getattr(record, "provenance", "config")
            if tag not in seen:
                seen.append(tag)
        return seen


@dataclass(frozen=True)
class Diagnostic:
    """Why a package could not be certified, and what would fix it.

    Attributes:
        failed_criteria: Criteria with no proof at all.
        nearest_version: The audited version closest to the target that is
            reachable from a full audit, if any.
        suggested_audit: A human-readable suggestion, e.g. ``"delta 9.0.0 ->
            10.0.0"`` or ``"full 10.0.0"``.
        violation: Description of the violation when the verdict is
            FORBIDDEN.
    """

    failed_criteria: tuple[str, ...] = ()
    nearest_version: str | None = None
    suggested_audit: str | None = None
    violation: str | None = None


@dataclass(frozen=True)
class SolverResult:
    """Outcome of a reachability check for one package version."""

    verdict: Verdict
    proofs: tuple[CriteriaProof, ...] = ()
    diagnostic: Diagnostic | None = None
