"""Resolved dependency graph: packages, edges, and graph walks.

All public names are re-exported here so that callers can write
``from chainvet.core.graph import DependencyGraph, Package``.
"""

from chainvet.core.graph.graph import DependencyGraph
from chainvet.core.graph.models import DependencyEdge, DependencyKind, Package

__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "DependencyKind",
    "Package",
]
