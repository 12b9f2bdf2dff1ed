# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Cycle detection over ``dependsOn`` edges."""

from __future__ import annotations

import itertools
from collections import deque
from collections.abc import Mapping, Sequence
from typing import Final

_NEW: Final[int] = 0
_ACTIVE: Final[int] = 1
_DONE: Final[int] = 2

Edges = Mapping[str, Sequence[str]]


def find_cycles(edges: Edges) -> tuple[tuple[str, ...], ...]:
    """Return dependency cycles such that every node on any cycle is reported.

    A depth-first walk records a cycle for each back edge it meets. Nodes that
    sit on a cycle the walk never closes (because the closing node was already
    finished) are picked up from their strongly connected component, so the
    union of the returned cycles is exactly the set of cyclic nodes.

    Args:
        edges: Mapping of node to the nodes it depends on.

    Returns:
        tuple[tuple[str, ...], ...]: Cycles rotated to start at their smallest
        node, sorted, without repeating the start node at the end.
    """

    found: dict[tuple[str, ...], None] = {}
    state: dict[str, int] = {}
    stack: list[str] = []

    def visit(node: str) -> None:
        state[node] = _ACTIVE
        stack.append(node)
        for successor in sorted(edges.get(node, ())):
            successor_state = state.get(successor, _NEW)
            if successor_state == _ACTIVE:
                found.setdefault(_rotate(stack[stack.index(successor) :]))
            elif successor_state == _NEW:
                visit(successor)
        stack.pop()
        state[node] = _DONE

    for node in sorted(edges):
        if state.get(node, _NEW) == _NEW:
            visit(node)

    covered = {node for cycle in found for node in cycle}
    for component in strongly_connected_components(edges):
        if len(component) < 2:
            continue
        members = frozenset(component)
        for node in component:
            if node in covered:
                continue
            cycle = _shortest_cycle_through(node, edges, members)
            found.setdefault(_rotate(cycle))
            covered.update(cycle)
    return tuple(sorted(found))


def strongly_connected_components(edges: Edges) -> tuple[tuple[str, ...], ...]:
    """Return the strongly connected components of ``edges`` (Tarjan).

    Args:
        edges: Mapping of node to the nodes it depends on.

    Returns:
        tuple[tuple[str, ...], ...]: Components with members sorted by name.
    """

    counter = itertools.count()
    index_of: dict[str, int] = {}
    low: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[tuple[str, ...]] = []

    def connect(node: str) -> None:
        index_of[node] = low[node] = next(counter)
        stack.append(node)
        on_stack.add(node)
        for successor in sorted(edges.get(node, ())):
            if successor not in index_of:
                connect(successor)
                low[node] = min(low[node], low[successor])
            elif successor in on_stack:
                low[node] = min(low[node], index_of[successor])
        if low[node] != index_of[node]:
            return
        component: list[str] = []
        while True:
            member = stack.pop()
            on_stack.discard(member)
            component.append(member)
            if member == node:
                break
        components.append(tuple(sorted(component)))

    for node in sorted(edges):
        if node not in index_of:
            connect(node)
    return tuple(components)


def _shortest_cycle_through(node: str, edges: Edges, members: frozenset[str]) -> tuple[str, ...]:
    """Return the shortest cycle from ``node`` back to itself inside ``members``."""

    parents: dict[str, str] = {}
    queue: deque[str] = deque([node])
    while queue:
        current = queue.popleft()
        for successor in sorted(edges.get(current, ())):
            if successor not in members or successor in parents:
                continue
            parents[successor] = current
            if successor == node:
                queue.clear()
                break
            queue.append(successor)
    chain: list[str] = []
    cursor = parents[node]
    while cursor != node:
        chain.append(cursor)
        cursor = parents[cursor]
    return (node, *reversed(chain))


def _rotate(cycle: Sequence[str]) -> tuple[str, ...]:
    """Rotate ``cycle`` so that it starts with its smallest node."""

    start = cycle.index(min(cycle))
    return (*cycle[start:], *cycle[:start])


__all__ = ["find_cycles", "strongly_connected_components"]
