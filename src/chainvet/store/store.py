"""The on-disk audit store: config, local ledger, and imports lock.

Layout of a store directory (default ``supply-chain/``)::

    supply-chain/
        audits.yaml         criteria definitions + local audit records
        config.yaml         imports, exemptions, policies (optional)
        imports.lock.yaml   fetched imported ledgers (optional)

``Store.load()`` reads everything once and returns a ``LoadedStore`` holding
the immutable inputs the engine needs. Nothing is re-read during resolution.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from chainvet.core.criteria import CriteriaSet
from chainvet.core.ledger import AuditLedger, LedgerIndex, import_provenance
from chainvet.core.policy import Policy
from chainvet.exceptions import DocumentError
from chainvet.store.documents import (
    Config,
    load_document,
    parse_config,
    parse_ledger,
)

logger = logging.getLogger(__name__)

AUDITS_FILE = "audits.yaml"
CONFIG_FILE = "config.yaml"
IMPORTS_LOCK_FILE = "imports.lock.yaml"
DEFAULT_STORE_DIR = "supply-chain"


@dataclass
class LoadedStore:
    """Everything the engine needs from the store, fully parsed."""

    criteria: CriteriaSet
    index: LedgerIndex
    policies: dict[str, Policy] = field(default_factory=dict)
    config: Config = field(default_factory=Config)


class Store:
    """Access to one store directory.

    Args:
        root: The store directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def audits_path(self) -> Path:
        return self.root / AUDITS_FILE

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE

    @property
    def imports_lock_path(self) -> Path:
        return self.root / IMPORTS_LOCK_FILE

    def load_config(self) -> Config:
        if not self.config_path.exists():
            return Config()
        return parse_config(load_document(self.config_path))

    def _load_imports_lock(self) -> dict[str, Any]:
        if not self.imports_lock_path.exists():
            return {}
        data = load_document(self.imports_lock_path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise DocumentError(f"{self.imports_lock_path} must be a mapping")
        return data

    def load_imported_ledgers(self, config: Config) -> list[AuditLedger]:
        """Parse every configured import from the lock (or from disk for paths).

        Raises:
            DocumentError: If a URL import has not been fetched yet.
        """
        lock = self._load_imports_lock()
        ledgers = []
        for spec in config.imports:
            provenance = import_provenance(spec.name)
            if spec.name in lock:
                data = lock[spec.name]
                source = f"{self.imports_lock_path}:{spec.name}"
            elif spec.path is not None:
                path = (self.root / spec.path).resolve()
                data = load_document(path)
                source = str(path)
            else:
                raise DocumentError(
                    f"Import {spec.name!r} has not been fetched; "
                    "run 'chainvet fetch-imports'"
                )
            ledgers.append(parse_ledger(data, provenance, source))
        for stale in sorted(set(lock) - {s.name for s in config.imports}):
            logger.warning("Ignoring stale import %s in %s", stale, self.imports_lock_path)
        return ledgers

    def load(self) -> LoadedStore:
        """Read and validate the whole store.

        Raises:
            DocumentError: If a document is missing or malformed.
            ConfigError: If criteria definitions are inconsistent.
        """
        if not self.audits_path.exists():
            raise DocumentError(f"No audit ledger found at {self.audits_path}")
        local = parse_ledger(load_document(self.audits_path), source=str(self.audits_path))
        config = self.load_config()
        imported = self.load_imported_ledgers(config)

        criteria = CriteriaSet.combine(
            local.criteria, *(ledger.criteria for ledger in imported)
        )
        if not criteria.defaults():
            logger.warning("No default criteria defined in %s", self.audits_path)

        exemptions = config.resolved_exemptions(criteria.defaults())
        index = LedgerIndex([local, *imported], exemptions)
        logger.debug(
            "Loaded store %s: %d criteria, %d imports, %d exemptions",
            self.root, len(criteria), len(imported), len(exemptions),
        )
        return LoadedStore(
            criteria=criteria,
            index=index,
            policies=dict(config.policies),
            config=config,
        )
