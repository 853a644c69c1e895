"""Per-package read model over the merged audit ledgers.

``LedgerIndex`` normalizes the local ledger, every imported ledger, and the
configured exemptions into one ``PackageLedger`` per package name:

- ``full_audits``:  version -> [FullAudit]
- ``delta_audits``: (from_version, to_version) -> [DeltaAudit]
- ``violations``:   [Violation]   (range predicates, scanned per check)
- ``exemptions``:   version -> [Exemption]

The index performs no resolution logic; it only exposes the records.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from chainvet.core.ledger.models import (
    AuditLedger,
    AuditRecord,
    DeltaAudit,
    Exemption,
    FullAudit,
    Violation,
    unknown_record,
)

logger = logging.getLogger(__name__)


@dataclass
class PackageLedger:
    """All ledger entries recorded for a single package name."""

    name: str
    full_audits: dict[str, list[FullAudit]] = field(
        default_factory=lambda: defaultdict(list)
    )
    delta_audits: dict[tuple[str, str], list[DeltaAudit]] = field(
        default_factory=lambda: defaultdict(list)
    )
    violations: list[Violation] = field(default_factory=list)
    exemptions: dict[str, list[Exemption]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def add(self, record: AuditRecord) -> None:
        if isinstance(record, FullAudit):
            self.full_audits[record.version].append(record)
        elif isinstance(record, DeltaAudit):
            self.delta_audits[(record.from_version, record.to_version)].append(record)
        elif isinstance(record, Violation):
            self.violations.append(record)
        else:
            unknown_record(record)

    def iter_full_audits(self) -> Iterator[FullAudit]:
        for version in sorted(self.full_audits):
            yield from self.full_audits[version]

    def iter_delta_audits(self) -> Iterator[DeltaAudit]:
        for key in sorted(self.delta_audits):
            yield from self.delta_audits[key]

    def iter_exemptions(self) -> Iterator[Exemption]:
        for version in sorted(self.exemptions):
            yield from self.exemptions[version]

    def full_audits_for(self, version: str) -> list[FullAudit]:
        return list(self.full_audits.get(version, ()))

    def exemptions_for(self, version: str) -> list[Exemption]:
        return list(self.exemptions.get(version, ()))

    def versions_mentioned(self) -> set[str]:
        """Every version named by a full or delta audit."""
        versions = set(self.full_audits)
        for src, dst in self.delta_audits:
            versions.add(src)
            versions.add(dst)
        return versions

    def duplicate_full_audits(self) -> list[tuple[str, frozenset[str]]]:
        """Return ``(version, criteria)`` pairs recorded more than once."""
        dupes = []
        for version in sorted(self.full_audits):
            seen: set[frozenset[str]] = set()
            for audit in self.full_audits[version]:
                if audit.criteria in seen:
                    dupes.append((version, audit.criteria))
                seen.add(audit.criteria)
        return dupes


class LedgerIndex:
    """Merged, provenance-tagged view of every ledger for one invocation.

    Args:
        ledgers: The local ledger followed by any imported ledgers.
        exemptions: Exemptions from the configuration document.
    """

    def __init__(
        self,
        ledgers: Iterable[AuditLedger] = (),
        exemptions: Iterable[Exemption] = (),
    ) -> None:
        self._packages: dict[str, PackageLedger] = {}
        record_count = 0
        for ledger in ledgers:
            for record in ledger.records:
                self._ledger(record.package).add(record)
                record_count += 1
        exemption_count = 0
        for exemption in exemptions:
            self._ledger(exemption.package).exemptions[exemption.version].append(
                exemption
            )
            exemption_count += 1
        logger.debug(
            "Indexed %d audit records and %d exemptions for %d packages",
            record_count, exemption_count, len(self._packages),
        )

    def _ledger(self, name: str) -> PackageLedger:
        ledger = self._packages.get(name)
        if ledger is None:
            ledger = PackageLedger(name=name)
            self._packages[name] = ledger
        return ledger

    @property
    def package_names(self) -> list[str]:
        return sorted(self._packages)

    def for_package(self, name: str) -> PackageLedger:
        """Return the ledger slice for ``name`` (empty if nothing recorded)."""
        return self._packages.get(name) or PackageLedger(name=name)

    def iter_exemptions(self) -> Iterator[Exemption]:
        for name in self.package_names:
            yield from self._packages[name].iter_exemptions()

    def iter_records(self) -> Iterator[AuditRecord]:
        for name in self.package_names:
            ledger = self._packages[name]
            yield from ledger.iter_full_audits()
            yield from ledger.iter_delta_audits()
            yield from ledger.violations
