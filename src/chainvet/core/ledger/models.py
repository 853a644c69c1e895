"""Audit ledger data models: audit records, exemptions, and provenance.

Audit records come in exactly three variants:

- ``FullAudit``  -- certifies one specific version on its own.
- ``DeltaAudit`` -- certifies the *change* from one version to another. It is
  only meaningful as an edge in the reachability graph, never as a standalone
  certification of either endpoint.
- ``Violation``  -- forbids a version range for a criteria set. A negative
  assertion: its mere presence is the hazard.

``AuditRecord`` is the closed union of these three. Code dispatching over it
must handle every variant and call ``unknown_record`` otherwise, so that a
new variant cannot be silently ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NoReturn, Union

from chainvet.core.criteria import CriteriaEntry
from chainvet.core.versions import VersionConstraint

LOCAL_PROVENANCE = "local"


def import_provenance(import_name: str) -> str:
    """Provenance tag for records merged from an imported ledger."""
    return f"import:{import_name}"


# ---------------------------------------------------------------------------
# Audit record variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FullAudit:
    """A record certifying ``version`` of ``package`` for ``criteria``."""

    package: str
    version: str
    criteria: frozenset[str]
    notes: str | None = None
    who: str | None = None
    provenance: str = LOCAL_PROVENANCE


@dataclass(frozen=True)
class DeltaAudit:
    """A record certifying the change ``from_version -> to_version``."""

    package: str
    from_version: str
    to_version: str
    criteria: frozenset[str]
    notes: str | None = None
    who: str | None = None
    provenance: str = LOCAL_PROVENANCE


@dataclass(frozen=True)
class Violation:
    """A record forbidding every version matching ``versions`` for ``criteria``."""

    package: str
    versions: VersionConstraint
    criteria: frozenset[str]
    notes: str | None = None
    who: str | None = None
    provenance: str = LOCAL_PROVENANCE


AuditRecord = Union[FullAudit, DeltaAudit, Violation]


def unknown_record(record: object) -> NoReturn:
    """Fail loudly on a value outside the ``AuditRecord`` union."""
    raise TypeError(f"Unknown audit record type: {type(record).__name__}")


def describe_record(record: AuditRecord) -> str:
    """Short human-readable form of a record, used in evidence and reports."""
    if isinstance(record, FullAudit):
        return f"full audit of {record.package}@{record.version} ({record.provenance})"
    if isinstance(record, DeltaAudit):
        return (
            f"delta audit of {record.package} {record.from_version} -> "
            f"{record.to_version} ({record.provenance})"
        )
    if isinstance(record, Violation):
        return f"violation of {record.package} {record.versions} ({record.provenance})"
    unknown_record(record)


# ---------------------------------------------------------------------------
# Exemption: provisional, unverified pass for one version
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Exemption:
    """An unaudited version accepted provisionally.

    Attributes:
        package: Package name.
        version: The exempted version.
        criteria: Criteria the exemption vouches for. Loaders fill in the
            default criteria when the document omits it.
        notes: Free-text justification.
        suggest: User hint that tooling may propose removing the entry once
            it is no longer needed. Reported separately from the computed
            "removable" flag.
    """

    package: str
    version: str
    criteria: frozenset[str]
    notes: str | None = None
    suggest: bool = True


# ---------------------------------------------------------------------------
# Ledger documents
# ---------------------------------------------------------------------------


@dataclass
class AuditLedger:
    """The contents of one ledger document (local or imported).

    Attributes:
        criteria: Criteria definitions declared by the document.
        records: Audit records, in document order.
        provenance: Provenance tag applied to every record.
    """

    criteria: list[CriteriaEntry] = field(default_factory=list)
    records: list[AuditRecord] = field(default_factory=list)
    provenance: str = LOCAL_PROVENANCE
