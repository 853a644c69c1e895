"""Resolved dependency graph and the graph walks the resolver needs.

The graph is produced by the package manager's resolution step, so it is
acyclic in practice. The walks here still detect cycles explicitly and use
iterative traversals with visited sets, never recursion proportional to graph
size.
"""

from __future__ import annotations

from collections import defaultdict, deque

from chainvet.core.graph.models import DependencyEdge, DependencyKind, Package
from chainvet.core.versions import version_key
from chainvet.exceptions import DependencyCycleError, DocumentError

PackageId = tuple[str, str, str]


class DependencyGraph:
    """The complete resolved dependency graph for one invocation.

    Nodes are ``Package`` instances keyed by identity; edges are
    ``DependencyEdge`` instances. The graph supports:

    - Adding packages and edges (edges must join known packages)
    - Querying dependencies and consumers of a package
    - Root selection and reachability from roots
    - Topological ordering (consumers before dependencies) with cycle
      detection

    Thread safety: build the graph fully before resolution; it is only read
    afterwards.
    """

    def __init__(self) -> None:
        self._packages: dict[PackageId, Package] = {}
        self._out: dict[PackageId, list[DependencyEdge]] = defaultdict(list)
        self._in: dict[PackageId, list[DependencyEdge]] = defaultdict(list)

    # -- Construction -------------------------------------------------------

    def add_package(self, package: Package) -> None:
        """Add a package node.

        Raises:
            DocumentError: If a package with the same identity already exists.
        """
        if package.identity in self._packages:
            raise DocumentError(f"Duplicate package in graph: {package.pkgid}")
        self._packages[package.identity] = package

    def add_edge(self, edge: DependencyEdge) -> None:
        """Add a dependency edge between two known packages.

        Raises:
            DocumentError: If either endpoint is not in the graph.
        """
        for end in (edge.source, edge.target):
            if end not in self._packages:
                raise DocumentError(
                    f"Dependency edge references unknown package: {' '.join(end)}"
                )
        self._out[edge.source].append(edge)
        self._in[edge.target].append(edge)

    def add_dependency(
        self,
        consumer: Package,
        dependency: Package,
        kind: DependencyKind = DependencyKind.NORMAL,
        platform: str | None = None,
    ) -> None:
        """Convenience wrapper around ``add_edge`` taking packages."""
        self.add_edge(
            DependencyEdge(consumer.identity, dependency.identity, kind, platform)
        )

    # -- Queries ------------------------------------------------------------

    @property
    def packages(self) -> list[Package]:
        """Return all packages sorted by (name, version, origin)."""
        return sorted(
            self._packages.values(),
            key=lambda p: (p.name, version_key(p.version), p.origin),
        )

    @property
    def package_count(self) -> int:
        return len(self._packages)

    def get(self, identity: PackageId) -> Package | None:
        return self._packages.get(identity)

    def find(self, name: str) -> list[Package]:
        """Return every package node with the given name."""
        return [p for p in self.packages if p.name == name]

    def dependencies_of(self, package: Package) -> list[DependencyEdge]:
        """Return outgoing edges of ``package``."""
        return list(self._out.get(package.identity, ()))

    def consumers_of(self, package: Package) -> list[DependencyEdge]:
        """Return incoming edges of ``package``."""
        return list(self._in.get(package.identity, ()))

    def roots(self) -> list[Package]:
        """Return the entry points of the walk.

        Packages explicitly flagged ``is_root`` win. Otherwise every
        first-party package with no first-party consumer is a root.
        """
        flagged = [p for p in self.packages if p.is_root]
        if flagged:
            return flagged
        roots = []
        for pkg in self.packages:
            if not pkg.is_first_party:
                continue
            consumers = [self._packages[e.source] for e in self.consumers_of(pkg)]
            if not any(c.is_first_party for c in consumers):
                roots.append(pkg)
        return roots

    def reachable(self, starts: list[Package]) -> set[PackageId]:
        """BFS over dependency edges from ``starts`` (inclusive)."""
        visited: set[PackageId] = set()
        queue: deque[PackageId] = deque()
        for pkg in starts:
            if pkg.identity not in visited:
                visited.add(pkg.identity)
                queue.append(pkg.identity)
        while queue:
            cur = queue.popleft()
            for edge in self._out.get(cur, ()):
                if edge.target not in visited:
                    visited.add(edge.target)
                    queue.append(edge.target)
        return visited

    def topological_order(self, subset: set[PackageId]) -> list[Package]:
        """Order ``subset`` so every consumer precedes its dependencies.

        Uses Kahn's algorithm restricted to edges inside ``subset``. Ties are
        broken by package sort order so the result is deterministic.

        Raises:
            DependencyCycleError: If the subgraph contains a cycle.
        """
        indegree: dict[PackageId, int] = {pid: 0 for pid in subset}
        for pid in subset:
            for edge in self._out.get(pid, ()):
                if edge.target in subset:
                    indegree[edge.target] += 1

        def _key(pid: PackageId) -> tuple:
            return (pid[0], version_key(pid[1]), pid[2])

        ready = sorted((pid for pid, d in indegree.items() if d == 0), key=_key)
        queue: deque[PackageId] = deque(ready)
        order: list[Package] = []
        while queue:
            cur = queue.popleft()
            order.append(self._packages[cur])
            released = []
            for edge in self._out.get(cur, ()):
                if edge.target not in subset:
                    continue
                indegree[edge.target] -= 1
                if indegree[edge.target] == 0:
                    released.append(edge.target)
            queue.extend(sorted(released, key=_key))

        if len(order) != len(subset):
            remaining = {pid for pid in subset if indegree[pid] > 0}
            cycle = self._find_cycle(remaining)
            raise DependencyCycleError(
                "Dependency cycle detected: "
                + " -> ".join(f"{n}@{v}" for n, v, _ in cycle)
            )
        return order

    def _find_cycle(self, nodes: set[PackageId]) -> list[PackageId]:
        """Extract one cycle from the nodes Kahn's algorithm could not release.

        Every such node still has an unreleased consumer, so walking consumer
        edges backwards must revisit a node.
        """
        seen: dict[PackageId, int] = {}
        path: list[PackageId] = []
        cur = min(nodes)
        while cur not in seen:
            seen[cur] = len(path)
            path.append(cur)
            cur = next(e.source for e in self._in[cur] if e.source in nodes)
        cycle = path[seen[cur]:] + [cur]
        cycle.reverse()
        return cycle
