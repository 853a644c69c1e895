"""Parsing of the input documents into immutable engine models.

Documents:

- **Ledger** (``audits.yaml`` and every imported ledger): criteria
  definitions and audit records. The record variant is discriminated by its
  keys: ``version`` (full audit), ``delta: "A -> B"`` (delta audit), or
  ``violation: "<range>"`` (violation).
- **Config** (``config.yaml``): imports, exemptions, and policies.
- **Graph** (JSON from the package manager): packages and dependency edges.

Parsers take already-decoded data (dicts/lists) so they can be reused for
local files, the imports lock, and HTTP responses alike. ``load_document``
decodes a file: ``.json`` with ``json``, everything else with
``yaml.safe_load``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from chainvet.core.criteria import CriteriaEntry
from chainvet.core.graph import DependencyGraph, DependencyKind, Package
from chainvet.core.graph.models import DependencyEdge
from chainvet.core.ledger import (
    LOCAL_PROVENANCE,
    AuditLedger,
    AuditRecord,
    DeltaAudit,
    Exemption,
    FullAudit,
    Violation,
)
from chainvet.core.policy import Policy
from chainvet.core.versions import VersionConstraint
from chainvet.exceptions import DocumentError

logger = logging.getLogger(__name__)

_DELTA_SEPARATOR = "->"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode(text: str, source: str) -> Any:
    """Decode YAML (a superset of JSON) text.

    Raises:
        DocumentError: If the text is not valid YAML.
    """
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentError(f"Invalid YAML in {source}: {exc}") from exc


def load_document(path: Path) -> Any:
    """Read and decode a YAML or JSON document.

    Raises:
        DocumentError: If the file is missing, unreadable, or malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Cannot read {path}: {exc}") from exc
    if path.suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentError(f"Invalid JSON in {path}: {exc}") from exc
    return decode(text, str(path))


def dump_document(data: Any) -> str:
    """Serialize a document as YAML with stable key order."""
    return yaml.safe_dump(data, sort_keys=True, default_flow_style=False)


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DocumentError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def _entries(value: Any, where: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise DocumentError(f"{where} must be a list of mappings")
    return value


def criteria_field(value: Any, where: str) -> frozenset[str]:
    """Accept a single criteria name or a list of names."""
    if isinstance(value, str):
        return frozenset([value])
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return frozenset(value)
    raise DocumentError(f"{where}: criteria must be a string or list of strings")


def _optional_criteria(value: Any, where: str) -> frozenset[str] | None:
    return None if value is None else criteria_field(value, where)


def _version(value: Any, where: str) -> str:
    if isinstance(value, float):
        raise DocumentError(
            f"{where}: version {value!r} was read as a number; quote it as a string"
        )
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise DocumentError(f"{where}: version must be a non-empty string")
    return value.strip()


# ---------------------------------------------------------------------------
# Ledger documents
# ---------------------------------------------------------------------------


def parse_criteria(data: Any, imported: bool = False) -> list[CriteriaEntry]:
    """Parse the ``criteria`` table of a ledger document.

    Imported definitions never join the local default set.
    """
    entries = []
    for name, spec in sorted(_mapping(data, "criteria").items()):
        spec = _mapping(spec, f"criteria {name!r}")
        implies = spec.get("implies")
        entries.append(
            CriteriaEntry(
                name=name,
                implies=frozenset() if implies is None
                else criteria_field(implies, f"criteria {name!r} implies"),
                is_default=bool(spec.get("default", False)) and not imported,
                description=str(spec.get("description", "")),
            )
        )
    return entries


def parse_audit(package: str, entry: dict[str, Any], provenance: str) -> AuditRecord:
    """Parse one audit entry into its record variant."""
    where = f"audit of {package!r}"
    if "criteria" not in entry:
        raise DocumentError(f"{where}: missing 'criteria'")
    criteria = criteria_field(entry["criteria"], where)
    notes = entry.get("notes")
    who = entry.get("who")

    variants = [k for k in ("version", "delta", "violation") if k in entry]
    if len(variants) != 1:
        raise DocumentError(
            f"{where}: exactly one of 'version', 'delta', 'violation' is required"
        )
    kind = variants[0]
    if kind == "version":
        return FullAudit(
            package, _version(entry["version"], where), criteria, notes, who, provenance
        )
    if kind == "delta":
        raw = str(entry["delta"])
        parts = [p.strip() for p in raw.split(_DELTA_SEPARATOR)]
        if len(parts) != 2 or not all(parts):
            raise DocumentError(f"{where}: delta must look like 'A -> B', got {raw!r}")
        return DeltaAudit(package, parts[0], parts[1], criteria, notes, who, provenance)
    try:
        versions = VersionConstraint(str(entry["violation"]))
    except ValueError as exc:
        raise DocumentError(f"{where}: {exc}") from exc
    return Violation(package, versions, criteria, notes, who, provenance)


def parse_ledger(
    data: Any, provenance: str = LOCAL_PROVENANCE, source: str = "audits"
) -> AuditLedger:
    """Parse a whole ledger document (local or imported)."""
    doc = _mapping(data, source)
    records: list[AuditRecord] = []
    for package, entries in sorted(_mapping(doc.get("audits"), f"{source} audits").items()):
        for entry in _entries(entries, f"{source} audits for {package!r}"):
            records.append(parse_audit(package, entry, provenance))
    return AuditLedger(
        criteria=parse_criteria(doc.get("criteria"), imported=provenance != LOCAL_PROVENANCE),
        records=records,
        provenance=provenance,
    )


# ---------------------------------------------------------------------------
# Config document
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportSpec:
    """Where an imported ledger comes from: exactly one of url/path."""

    name: str
    url: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class ExemptionSpec:
    """An exemption as written; ``criteria`` is None when omitted."""

    package: str
    version: str
    criteria: frozenset[str] | None = None
    notes: str | None = None
    suggest: bool = True

    def resolve(self, defaults: frozenset[str]) -> Exemption:
        """Fill in the default criteria once every definition is known."""
        criteria = self.criteria if self.criteria is not None else defaults
        return Exemption(self.package, self.version, criteria, self.notes, self.suggest)


@dataclass
class Config:
    """Parsed ``config.yaml``."""

    imports: list[ImportSpec] = field(default_factory=list)
    exemptions: list[ExemptionSpec] = field(default_factory=list)
    policies: dict[str, Policy] = field(default_factory=dict)

    def resolved_exemptions(self, defaults: frozenset[str]) -> list[Exemption]:
        return [spec.resolve(defaults) for spec in self.exemptions]


def parse_policy(name: str, data: Any) -> Policy:
    where = f"policy for {name!r}"
    spec = _mapping(data, where)
    deps = {
        dep: criteria_field(value, f"{where} dependency-criteria {dep!r}")
        for dep, value in _mapping(spec.get("dependency-criteria"), where).items()
    }
    targets = spec.get("targets")
    bd_targets = spec.get("build-and-dev-targets")
    return Policy(
        criteria=_optional_criteria(spec.get("criteria"), where),
        dependency_criteria=deps,
        build_and_dev_criteria=_optional_criteria(spec.get("build-and-dev-criteria"), where),
        targets=None if targets is None else criteria_field(targets, f"{where} targets"),
        build_and_dev_targets=None if bd_targets is None
        else criteria_field(bd_targets, f"{where} build-and-dev-targets"),
    )


def parse_config(data: Any) -> Config:
    doc = _mapping(data, "config")
    config = Config()

    for name, spec in sorted(_mapping(doc.get("imports"), "imports").items()):
        spec = _mapping(spec, f"import {name!r}")
        url, path = spec.get("url"), spec.get("path")
        if (url is None) == (path is None):
            raise DocumentError(f"import {name!r}: exactly one of 'url' or 'path' is required")
        config.imports.append(ImportSpec(name=name, url=url, path=path))

    for package, entries in sorted(_mapping(doc.get("exemptions"), "exemptions").items()):
        for entry in _entries(entries, f"exemptions for {package!r}"):
            where = f"exemption of {package!r}"
            config.exemptions.append(
                ExemptionSpec(
                    package=package,
                    version=_version(entry.get("version"), where),
                    criteria=_optional_criteria(entry.get("criteria"), where),
                    notes=entry.get("notes"),
                    suggest=bool(entry.get("suggest", True)),
                )
            )

    for name, spec in sorted(_mapping(doc.get("policy"), "policy").items()):
        config.policies[name] = parse_policy(name, spec)
    return config


# ---------------------------------------------------------------------------
# Graph document
# ---------------------------------------------------------------------------


def parse_graph(data: Any) -> DependencyGraph:
    """Parse the dependency graph document.

    Edge endpoints are package ids: ``"name version (origin)"`` or, when
    unambiguous, ``"name version"``.
    """
    doc = _mapping(data, "graph")
    graph = DependencyGraph()
    by_id: dict[str, Package] = {}
    short: dict[str, list[Package]] = {}

    packages = doc.get("packages")
    if not isinstance(packages, list):
        raise DocumentError("graph: 'packages' must be a list")
    for entry in packages:
        entry = _mapping(entry, "graph package")
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise DocumentError("graph package: missing 'name'")
        pkg = Package(
            name=name,
            version=_version(entry.get("version"), f"package {name!r}"),
            origin=str(entry.get("origin") or ""),
            is_first_party=bool(entry.get("first_party", False)),
            is_root=bool(entry.get("root", False)),
        )
        graph.add_package(pkg)
        by_id[pkg.pkgid] = pkg
        short.setdefault(f"{pkg.name} {pkg.version}", []).append(pkg)

    def _lookup(ref: Any) -> Package:
        if not isinstance(ref, str):
            raise DocumentError(f"graph edge: package id must be a string, got {ref!r}")
        if ref in by_id:
            return by_id[ref]
        matches = short.get(ref, [])
        if len(matches) == 1:
            return matches[0]
        if matches:
            raise DocumentError(f"graph edge: ambiguous package id {ref!r}")
        raise DocumentError(f"graph edge: unknown package id {ref!r}")

    for entry in doc.get("edges") or []:
        entry = _mapping(entry, "graph edge")
        try:
            kind = DependencyKind(entry.get("kind") or "normal")
        except ValueError as exc:
            raise DocumentError(f"graph edge: {exc}") from exc
        graph.add_edge(
            DependencyEdge(
                _lookup(entry.get("from")).identity,
                _lookup(entry.get("to")).identity,
                kind,
                entry.get("target"),
            )
        )
    logger.debug("Loaded graph with %d packages", graph.package_count)
    return graph
