"""Input documents: the audit store, the dependency graph, and imports.

Public API::

    from chainvet.store import Store, load_graph
    loaded = Store(Path("supply-chain")).load()
    graph = load_graph(Path("graph.json"))
"""

from __future__ import annotations

from pathlib import Path

from chainvet.core.graph import DependencyGraph
from chainvet.store.documents import load_document, parse_graph
from chainvet.store.store import DEFAULT_STORE_DIR, LoadedStore, Store


def load_graph(path: Path) -> DependencyGraph:
    """Read and parse a dependency graph document."""
    return parse_graph(load_document(path))


__all__ = [
    "DEFAULT_STORE_DIR",
    "LoadedStore",
    "Store",
    "load_graph",
]
