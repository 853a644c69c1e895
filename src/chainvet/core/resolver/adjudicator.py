"""Violation precedence and exemption hygiene on top of the solver.

For every package in use the adjudicator:

1. Scans the package's violations first. A violation whose version range
   matches the installed version and whose criteria closure intersects the
   required set forces FORBIDDEN. The solver is not consulted, so no audit
   or exemption can reverse the verdict.
2. Otherwise passes the solver's verdict through.
3. Computes exemption hygiene: an exemption for the installed version is
   *removable* when the version is certified with exemptions ignored. The
   user-declared ``suggest`` hint is reported alongside, never merged in.

First-party packages are trusted as themselves and short-circuit to
CERTIFIED.
"""

from __future__ import annotations

from dataclasses import dataclass

from chainvet.core.criteria import CriteriaSet
from chainvet.core.graph import Package
from chainvet.core.ledger import LedgerIndex, Violation, describe_record
from chainvet.core.resolver.models import (
    CriteriaProof,
    Diagnostic,
    ProofMethod,
    Verdict,
)
from chainvet.core.resolver.report import RemovableExemption, VerdictRecord
from chainvet.core.resolver.solver import ReachabilitySolver


@dataclass(frozen=True)
class Adjudication:
    """The verdict record for one package plus its exemption hygiene."""

    record: VerdictRecord
    removable: tuple[RemovableExemption, ...] = ()


class Adjudicator:
    """Turns solver output into final verdicts.

    Args:
        criteria: Validated criteria definitions.
        index: The merged ledger index.
        solver: Solver to use; one is created from ``criteria`` if omitted.
    """

    def __init__(
        self,
        criteria: CriteriaSet,
        index: LedgerIndex,
        solver: ReachabilitySolver | None = None,
    ) -> None:
        self._criteria = criteria
        self._index = index
        self._solver = solver or ReachabilitySolver(criteria)

    def find_violation(
        self, name: str, version: str, required: frozenset[str]
    ) -> Violation | None:
        """Return the first violation forbidding ``version`` under ``required``."""
        for violation in self._index.for_package(name).violations:
            if not violation.versions.matches(version):
                continue
            if self._criteria.closure_of(violation.criteria) & required:
                return violation
        return None

    def adjudicate(self, package: Package, required: frozenset[str]) -> Adjudication:
        """Produce the final verdict for one package in use."""
        required_sorted = tuple(sorted(required))

        if package.is_first_party:
            proofs = tuple(
                CriteriaProof(name, ProofMethod.FIRST_PARTY, (package.version,))
                for name in self._criteria.representatives(required)
            )
            return Adjudication(
                VerdictRecord(
                    name=package.name,
                    version=package.version,
                    origin=package.origin,
                    is_first_party=True,
                    verdict=Verdict.CERTIFIED,
                    required_criteria=required_sorted,
                    proofs=proofs,
                )
            )

        ledger = self._index.for_package(package.name)
        warnings = tuple(self._solver.ledger_warnings(ledger))

        violation = self.find_violation(package.name, package.version, required)
        if violation is not None:
            return Adjudication(
                VerdictRecord(
                    name=package.name,
                    version=package.version,
                    origin=package.origin,
                    is_first_party=False,
                    verdict=Verdict.FORBIDDEN,
                    required_criteria=required_sorted,
                    diagnostic=Diagnostic(
                        failed_criteria=tuple(
                            sorted(self._criteria.closure_of(violation.criteria) & required)
                        ),
                        violation=describe_record(violation),
                    ),
                    warnings=warnings,
                )
            )

        result = self._solver.solve(ledger, package.version, required)
        record = VerdictRecord(
            name=package.name,
            version=package.version,
            origin=package.origin,
            is_first_party=False,
            verdict=result.verdict,
            required_criteria=required_sorted,
            proofs=result.proofs,
            diagnostic=result.diagnostic,
            warnings=warnings,
        )
        return Adjudication(record, self._removable(package, required, result.verdict))

    def _removable(
        self, package: Package, required: frozenset[str], verdict: Verdict
    ) -> tuple[RemovableExemption, ...]:
        exemptions = self._index.for_package(package.name).exemptions_for(package.version)
        if not exemptions:
            return ()
        if verdict is Verdict.CERTIFIED:
            # Steps 1-2 of the solver never consult exemptions.
            removable = True
        elif verdict is Verdict.EXEMPTED:
            unexempted = self._solver.solve(
                self._index.for_package(package.name),
                package.version,
                required,
                ignore_exemptions=True,
            )
            removable = unexempted.verdict is Verdict.CERTIFIED
        else:
            removable = False
        if not removable:
            return ()
        return tuple(
            RemovableExemption(e.package, e.version, "audited", e.suggest)
            for e in exemptions
        )
