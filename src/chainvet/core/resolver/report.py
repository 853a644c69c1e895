"""Report model: per-package verdict records and the aggregated summary.

The report performs no decision logic. It shapes decisions already made by
the adjudicator into a stable, serializable structure:

- **Records:** one ``VerdictRecord`` per package in use, sorted by
  ``(name, version, origin)``.
- **Summary:** counts per verdict.
- **Recommendations:** audits to perform (UNCERTIFIABLE packages) and
  exemptions that may be removed.

Determinism guarantee: ``to_json()`` sorts records and keys, so two runs over
the same inputs produce byte-identical output.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from chainvet.core.ledger import Exemption, describe_record
from chainvet.core.resolver.models import CriteriaProof, Diagnostic, Verdict
from chainvet.core.versions import version_key


# ---------------------------------------------------------------------------
# Per-package and recommendation records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VerdictRecord:
    """The final verdict for one package in use.

    Attributes:
        name: Package name.
        version: Installed version.
        origin: Package origin.
        is_first_party: Whether the package is first-party.
        verdict: Final classification.
        required_criteria: Closed required criteria, sorted.
        proofs: Evidence per representative criteria.
        diagnostic: Failure details for UNCERTIFIABLE / FORBIDDEN.
        warnings: Soft ledger-inconsistency warnings.
    """

    name: str
    version: str
    origin: str
    is_first_party: bool
    verdict: Verdict
    required_criteria: tuple[str, ...]
    proofs: tuple[CriteriaProof, ...] = ()
    diagnostic: Diagnostic | None = None
    warnings: tuple[str, ...] = ()

    @property
    def sort_key(self) -> tuple:
        return (self.name, version_key(self.version), self.origin)

    @property
    def imported_evidence(self) -> bool:
        """True if any proof relies on a record from an imported ledger."""
        return any(
            tag.startswith("import:")
            for proof in self.proofs
            for tag in proof.provenances
        )

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "origin": self.origin,
            "first_party": self.is_first_party,
            "verdict": self.verdict.value,
            "required_criteria": list(self.required_criteria),
            "evidence": [_proof_to_dict(p) for p in self.proofs],
            "imported_evidence": self.imported_evidence,
        }
        if self.diagnostic is not None:
            entry["diagnostic"] = {
                "failed_criteria": list(self.diagnostic.failed_criteria),
                "nearest_version": self.diagnostic.nearest_version,
                "suggested_audit": self.diagnostic.suggested_audit,
                "violation": self.diagnostic.violation,
            }
        if self.warnings:
            entry["warnings"] = list(self.warnings)
        return entry


def _proof_to_dict(proof: CriteriaProof) -> dict[str, Any]:
    records = []
    for record in proof.records:
        if isinstance(record, Exemption):
            records.append(f"exemption of {record.package}@{record.version}")
        else:
            records.append(describe_record(record))
    return {
        "criteria": proof.criteria,
        "method": proof.method.value,
        "path": list(proof.path),
        "records": records,
    }


@dataclass(frozen=True)
class RemovableExemption:
    """An exemption that is no longer needed.

    Attributes:
        package: Package name.
        version: Exempted version.
        reason: ``"audited"`` when an audit chain now certifies the version,
            ``"unused"`` when the version is not in use at all.
        suggest: The user-declared ``suggest`` hint, reported separately
            from the computed fact.
    """

    package: str
    version: str
    reason: str
    suggest: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "package": self.package,
            "version": self.version,
            "reason": self.reason,
            "suggest": self.suggest,
        }


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


class Report:
    """Aggregated, deterministic outcome of one resolution run.

    Args:
        records: One verdict record per package in use, in any order.
        removable_exemptions: Exemptions eligible for removal, in any order.
    """

    def __init__(
        self,
        records: Iterable[VerdictRecord],
        removable_exemptions: Iterable[RemovableExemption] = (),
    ) -> None:
        self._records = sorted(records, key=lambda r: r.sort_key)
        self._removable = sorted(
            removable_exemptions,
            key=lambda e: (e.package, version_key(e.version), e.reason),
        )

    @property
    def records(self) -> list[VerdictRecord]:
        return list(self._records)

    def get(self, name: str) -> VerdictRecord | None:
        """Return the first record for ``name`` (lowest version), or None."""
        for record in self._records:
            if record.name == name:
                return record
        return None

    def verdicts(self) -> dict[str, Verdict]:
        """Map ``"name@version"`` to verdict, for quick assertions."""
        return {f"{r.name}@{r.version}": r.verdict for r in self._records}

    # -- Summary ------------------------------------------------------------

    def summary(self) -> dict[str, int]:
        """Counts per verdict plus the total, every verdict always present."""
        counts = {v.value: 0 for v in Verdict}
        for record in self._records:
            counts[record.verdict.value] += 1
        counts["total"] = len(self._records)
        return counts

    @property
    def is_success(self) -> bool:
        """True iff no package is UNCERTIFIABLE or FORBIDDEN."""
        return not any(r.verdict.is_failure for r in self._records)

    @property
    def forbidden(self) -> list[VerdictRecord]:
        return [r for r in self._records if r.verdict is Verdict.FORBIDDEN]

    @property
    def needs_audit(self) -> list[VerdictRecord]:
        """Packages needing new audits (UNCERTIFIABLE)."""
        return [r for r in self._records if r.verdict is Verdict.UNCERTIFIABLE]

    @property
    def removable_exemptions(self) -> list[RemovableExemption]:
        return list(self._removable)

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "packages": [r.to_dict() for r in self._records],
            "recommendations": {
                "needs_audit": [
                    {
                        "package": r.name,
                        "version": r.version,
                        "criteria": list(r.diagnostic.failed_criteria)
                        if r.diagnostic else [],
                        "suggested_audit": r.diagnostic.suggested_audit
                        if r.diagnostic else None,
                    }
                    for r in self.needs_audit
                ],
                "removable_exemptions": [e.to_dict() for e in self._removable],
            },
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

