"""Criteria definitions and implication closure.

A criteria is a named trust property ("safe-to-run", "safe-to-deploy").
Definitions form a directed *implies* relation: certifying a version for
``safe-to-deploy`` also certifies it for everything ``safe-to-deploy``
implies, transitively. Every name trivially implies itself, so listing a
name in its own ``implies`` is redundant and ignored.

The implication graph must be acyclic. A cycle among definitions is a
malformed configuration and blocks resolution entirely; it is detected once,
when the ``CriteriaSet`` is constructed, not per package.

Closure laws (checked in ``tests/properties``):

- Extensive:   R ⊆ closure(R)
- Idempotent:  closure(closure(R)) == closure(R)
- Monotone:    R1 ⊆ R2  =>  closure(R1) ⊆ closure(R2)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from chainvet.exceptions import ConfigError, CriteriaCycleError, UnknownCriteriaError


# ---------------------------------------------------------------------------
# CriteriaEntry: one definition from the ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CriteriaEntry:
    """A single criteria definition.

    Attributes:
        name: Criteria identifier.
        implies: Names of criteria directly implied by this one.
        is_default: Whether the criteria belongs to the default required set.
        description: Human-readable meaning of the criteria.
    """

    name: str
    implies: frozenset[str] = field(default_factory=frozenset)
    is_default: bool = False
    description: str = ""

    def without_self_implication(self) -> CriteriaEntry:
        """Drop a redundant ``implies`` of the entry's own name."""
        if self.name not in self.implies:
            return self
        return replace(self, implies=self.implies - {self.name})


# ---------------------------------------------------------------------------
# CriteriaSet: validated definitions + memoized closure
# ---------------------------------------------------------------------------


class CriteriaSet:
    """A validated, immutable collection of criteria definitions.

    Construction validates the whole implication graph: every implied name
    must be defined and the graph must be acyclic. Closures are memoized per
    name since the same handful of criteria is queried for every package.

    Args:
        entries: The criteria definitions.

    Raises:
        UnknownCriteriaError: If an ``implies`` entry names an undefined
            criteria.
        CriteriaCycleError: If the implication graph contains a cycle.
    """

    def __init__(self, entries: Iterable[CriteriaEntry]) -> None:
        self._entries: dict[str, CriteriaEntry] = {}
        for entry in entries:
            self._entries[entry.name] = entry.without_self_implication()
        self._cache: dict[str, frozenset[str]] = {}
        self._validate()

    # -- Construction helpers -----------------------------------------------

    def _validate(self) -> None:
        for entry in self._entries.values():
            for implied in sorted(entry.implies):
                if implied not in self._entries:
                    raise UnknownCriteriaError(
                        f"Criteria {entry.name!r} implies undefined "
                        f"criteria {implied!r}"
                    )
        cycle = self._find_cycle()
        if cycle:
            raise CriteriaCycleError(cycle)

    def _find_cycle(self) -> list[str]:
        """Iterative DFS coloring over the implication graph."""
        WHITE, GRAY, BLACK = 0, 1, 2
        color = {name: WHITE for name in self._entries}

        for start in sorted(self._entries):
            if color[start] != WHITE:
                continue
            path: list[str] = [start]
            stack = [iter(sorted(self._entries[start].implies))]
            color[start] = GRAY
            while stack:
                nxt = next(stack[-1], None)
                if nxt is None:
                    color[path.pop()] = BLACK
                    stack.pop()
                    continue
                if color[nxt] == GRAY:
                    return path[path.index(nxt):] + [nxt]
                if color[nxt] == WHITE:
                    color[nxt] = GRAY
                    path.append(nxt)
                    stack.append(iter(sorted(self._entries[nxt].implies)))
        return []

    @classmethod
    def combine(cls, *groups: Iterable[CriteriaEntry]) -> CriteriaSet:
        """Build one set from several definition groups (local, imported, ...).

        The first definition of a name wins. Identical redefinitions are
        accepted; redefining a name with a different implication set is a
        configuration error. Validation runs once over the combined graph,
        so a group may imply names defined by a later group.

        Raises:
            ConfigError: On conflicting redefinitions.
        """
        combined: dict[str, CriteriaEntry] = {}
        for group in groups:
            for entry in group:
                entry = entry.without_self_implication()
                existing = combined.get(entry.name)
                if existing is None:
                    combined[entry.name] = entry
                elif existing.implies != entry.implies:
                    raise ConfigError(
                        f"Criteria {entry.name!r} is defined twice with different "
                        f"implications: {sorted(existing.implies)} vs "
                        f"{sorted(entry.implies)}"
                    )
        return cls(combined.values())

    # -- Queries ------------------------------------------------------------

    @property
    def names(self) -> list[str]:
        """Return all defined criteria names, sorted."""
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> CriteriaEntry | None:
        return self._entries.get(name)

    def defaults(self) -> frozenset[str]:
        """Return the names of all default-marked criteria."""
        return frozenset(n for n, e in self._entries.items() if e.is_default)

    def validate_names(self, names: Iterable[str], context: str) -> None:
        """Raise ``UnknownCriteriaError`` if any name is undefined.

        Args:
            names: Criteria names to check.
            context: Where the names came from, for the error message.
        """
        unknown = sorted(n for n in names if n not in self._entries)
        if unknown:
            raise UnknownCriteriaError(
                f"{context} references undefined criteria: {', '.join(unknown)}"
            )

    def closure(self, name: str) -> frozenset[str]:
        """Return ``{name}`` plus everything it transitively implies.

        Raises:
            UnknownCriteriaError: If ``name`` is not defined.
        """
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        if name not in self._entries:
            raise UnknownCriteriaError(f"Undefined criteria: {name!r}")

        result = {name}
        pending = list(self._entries[name].implies)
        while pending:
            cur = pending.pop()
            if cur in result:
                continue
            result.add(cur)
            known = self._cache.get(cur)
            if known is not None:
                result |= known
            else:
                pending.extend(self._entries[cur].implies)

        frozen = frozenset(result)
        self._cache[name] = frozen
        return frozen

    def closure_of(self, names: Iterable[str]) -> frozenset[str]:
        """Pointwise union of ``closure`` over ``names``."""
        result: set[str] = set()
        for name in names:
            result |= self.closure(name)
        return frozenset(result)

    def covers(self, provided: Iterable[str], required: Iterable[str]) -> bool:
        """True iff ``closure(provided)`` contains every name in ``required``."""
        return self.closure_of(provided).issuperset(required)

    def representatives(self, names: Iterable[str]) -> list[str]:
        """Return the members of ``names`` not implied by another member.

        Checking only these is sufficient: any evidence covering a
        representative covers everything it implies.
        """
        members = set(names)
        reps = []
        for name in members:
            if not any(
                other != name and name in self.closure(other) for other in members
            ):
                reps.append(name)
        return sorted(reps)

    def describe(self) -> Mapping[str, frozenset[str]]:
        """Return ``{name: closure(name)}`` for every defined criteria."""
        return {name: self.closure(name) for name in self.names}
