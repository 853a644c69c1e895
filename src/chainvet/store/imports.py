"""Fetching imported ledgers and maintaining the imports lock.

Imported ledgers are fetched once, on demand (``chainvet fetch-imports``),
and cached in ``imports.lock.yaml``. Resolution itself is offline: it reads
the lock, never the network. Signatures are not verified; fetched content
is trusted as already authenticated.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from chainvet.core.ledger import import_provenance
from chainvet.exceptions import DocumentError, ImportFetchError
from chainvet.store.documents import (
    ImportSpec,
    decode,
    dump_document,
    load_document,
    parse_ledger,
)
from chainvet.store.http_client import fetch_text

logger = logging.getLogger(__name__)


async def fetch_import(spec: ImportSpec, base_dir: Path) -> Any:
    """Fetch and decode one imported ledger document.

    ``path`` imports are resolved relative to ``base_dir``. The decoded
    document is validated by parsing it once before being returned.

    Raises:
        ImportFetchError: If the ledger cannot be fetched or is malformed.
    """
    if spec.url is not None:
        text = await fetch_text(spec.url)
        source = spec.url
        try:
            data = decode(text, source)
        except DocumentError as exc:
            raise ImportFetchError(f"Import {spec.name!r}: {exc}") from exc
    else:
        path = (base_dir / spec.path).resolve()
        source = str(path)
        try:
            data = load_document(path)
        except DocumentError as exc:
            raise ImportFetchError(f"Import {spec.name!r}: {exc}") from exc

    try:
        parse_ledger(data, import_provenance(spec.name), source)
    except DocumentError as exc:
        raise ImportFetchError(f"Import {spec.name!r} from {source}: {exc}") from exc
    logger.debug("Fetched import %s from %s", spec.name, source)
    return data


async def fetch_all(specs: list[ImportSpec], base_dir: Path) -> dict[str, Any]:
    """Fetch every import concurrently; any failure fails the whole fetch."""
    docs = await asyncio.gather(*(fetch_import(s, base_dir) for s in specs))
    return {spec.name: doc for spec, doc in zip(specs, docs)}


def write_imports_lock(path: Path, imports: dict[str, Any]) -> None:
    """Write the imports lock with sorted keys for stable diffs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_document(imports), encoding="utf-8")


def refresh_imports(specs: list[ImportSpec], base_dir: Path, lock_path: Path) -> list[str]:
    """Fetch all imports and rewrite the lock. Returns the import names."""
    imports = asyncio.run(fetch_all(specs, base_dir))
    write_imports_lock(lock_path, imports)
    logger.debug("Wrote %d imports to %s", len(imports), lock_path)
    return sorted(imports)
