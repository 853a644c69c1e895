"""Audit ledger model: audit records, exemptions, and the per-package index.

All public names are re-exported here so that callers can write
``from chainvet.core.ledger import FullAudit, LedgerIndex``.
"""

from chainvet.core.ledger.index import LedgerIndex, PackageLedger
from chainvet.core.ledger.models import (
    LOCAL_PROVENANCE,
    AuditLedger,
    AuditRecord,
    DeltaAudit,
    Exemption,
    FullAudit,
    Violation,
    describe_record,
    import_provenance,
    unknown_record,
)

__all__ = [
    "LOCAL_PROVENANCE",
    "AuditLedger",
    "AuditRecord",
    "DeltaAudit",
    "Exemption",
    "FullAudit",
    "LedgerIndex",
    "PackageLedger",
    "Violation",
    "describe_record",
    "import_provenance",
    "unknown_record",
]
