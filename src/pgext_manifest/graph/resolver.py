# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Dependency graph construction and deterministic creation ordering."""

from __future__ import annotations

import heapq
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from graphlib import TopologicalSorter
from types import MappingProxyType

from ..catalog.errors import CycleError
from ..catalog.model_catalog import Catalog
from .cycles import find_cycles

LOGGER = logging.getLogger(__name__)

EXCLUDED_DISABLED = "disabled"
EXCLUDED_NO_CREATION = "no creation step"


@dataclass(frozen=True, slots=True)
class DependencyGraph:
    """Adjacency view of the catalog where each node maps to its dependencies."""

    requires: Mapping[str, tuple[str, ...]]

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> DependencyGraph:
        """Build the graph over every entry, disabled ones included."""

        requires = {entry.name: entry.depends_on for entry in catalog.canonical_entries()}
        return cls(requires=MappingProxyType(requires))

    @property
    def nodes(self) -> tuple[str, ...]:
        return tuple(sorted(self.requires))

    def dependents(self, name: str) -> tuple[str, ...]:
        """Return nodes that depend directly on ``name``, sorted by name."""

        return tuple(node for node in self.nodes if name in self.requires[node])

    def find_cycles(self) -> tuple[tuple[str, ...], ...]:
        """Return every dependency cycle; see :func:`find_cycles`."""

        return find_cycles(self.requires)


@dataclass(frozen=True, slots=True)
class CreationOrder:
    """Deterministic ``CREATE EXTENSION`` order of the enabled, creatable entries.

    ``excluded`` maps each catalog entry left out of the order to the reason it
    was dropped.
    """

    names: tuple[str, ...]
    excluded: Mapping[str, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def position(self, name: str) -> int:
        """Return the zero-based position of ``name``.

        Raises:
            ValueError: If ``name`` is not part of the order.
        """

        return self.names.index(name)

    def restricted_to(self, names: frozenset[str] | set[str]) -> tuple[str, ...]:
        """Return the members of ``names`` in creation order."""

        return tuple(name for name in self.names if name in names)


def resolve(catalog: Catalog) -> CreationOrder:
    """Compute the creation order of ``catalog``.

    Cycle detection runs over every entry, disabled ones included, and reports
    all cyclic nodes at once. The order itself is a Kahn traversal whose ready
    set is a min-heap, so ties are always broken by ascending name and the
    manifest's input order never influences the result.

    Args:
        catalog: Structurally valid catalog.

    Returns:
        CreationOrder: Enabled, creatable entries with dependencies first.

    Raises:
        CycleError: If the ``dependsOn`` relation contains a cycle.
    """

    graph = DependencyGraph.from_catalog(catalog)
    cycles = graph.find_cycles()
    if cycles:
        LOGGER.debug("found %d dependency cycle(s)", len(cycles))
        raise CycleError(cycles)

    excluded = _exclusions(catalog, graph)
    members = tuple(name for name in graph.nodes if name not in excluded)
    member_set = frozenset(members)

    sorter: TopologicalSorter[str] = TopologicalSorter()
    for name in members:
        sorter.add(name, *_effective_dependencies(name, graph, member_set))
    sorter.prepare()

    ready = list(sorter.get_ready())
    heapq.heapify(ready)
    ordered: list[str] = []
    while ready:
        name = heapq.heappop(ready)
        ordered.append(name)
        sorter.done(name)
        for successor in sorter.get_ready():
            heapq.heappush(ready, successor)

    LOGGER.debug("resolved creation order of %d entries (%d excluded)", len(ordered), len(excluded))
    return CreationOrder(names=tuple(ordered), excluded=MappingProxyType(excluded))


def _exclusions(catalog: Catalog, graph: DependencyGraph) -> dict[str, str]:
    """Return the entries left out of the creation order mapped to the reason."""

    blocked: dict[str, str | None] = {}

    def disabled_dependency(name: str) -> str | None:
        if name in blocked:
            return blocked[name]
        result: str | None = None
        for dependency in graph.requires[name]:
            if not catalog.get(dependency).enabled:
                result = dependency
            else:
                result = disabled_dependency(dependency)
            if result is not None:
                break
        blocked[name] = result
        return result

    excluded: dict[str, str] = {}
    for entry in catalog.canonical_entries():
        if not entry.enabled:
            excluded[entry.name] = EXCLUDED_DISABLED
            continue
        culprit = disabled_dependency(entry.name)
        if culprit is not None:
            excluded[entry.name] = f"depends on disabled entry '{culprit}'"
        elif not entry.needs_creation:
            excluded[entry.name] = EXCLUDED_NO_CREATION
    return excluded


def _effective_dependencies(name: str, graph: DependencyGraph, members: frozenset[str]) -> tuple[str, ...]:
    """Return the members ``name`` must follow, walking through excluded nodes."""

    found: set[str] = set()
    visited: set[str] = set()
    pending = list(graph.requires[name])
    while pending:
        dependency = pending.pop()
        if dependency in visited:
            continue
        visited.add(dependency)
        if dependency in members:
            found.add(dependency)
        else:
            pending.extend(graph.requires[dependency])
    return tuple(sorted(found))


__all__ = ["CreationOrder", "DependencyGraph", "EXCLUDED_DISABLED", "EXCLUDED_NO_CREATION", "resolve"]
