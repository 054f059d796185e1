"""Dependency-aware ordering of declarations.

Graph edges run from a declaration to every declaration referencing its
name within the same set (``B -> A`` means B must precede A). Nodes are
keyed by position, so duplicate names (property getter/setter pairs) are
kept apart, and a declaration referencing its own name adds no edge.
"""

from __future__ import annotations

import heapq
from collections.abc import Sequence
from dataclasses import dataclass, field

from pymove.sort.categories import categorize_function
from pymove.sort.models import Declaration, SortPolicy


@dataclass(frozen=True, slots=True)
class TopologicalOrder:
    """Result of a topological sort.

    When the graph has a cycle, ``items`` is the valid prefix followed by
    every unvisited declaration in input order, and ``cyclic`` names those
    trailing declarations.
    """

    items: list[Declaration]
    cyclic: tuple[str, ...] = field(default=())

    @property
    def has_cycle(self) -> bool:
        return bool(self.cyclic)


def build_edges(declarations: Sequence[Declaration]) -> dict[int, set[int]]:
    """Adjacency by index: ``edges[b]`` holds every index that must follow ``b``."""
    by_name: dict[str, list[int]] = {}
    for i, decl in enumerate(declarations):
        by_name.setdefault(decl.name, []).append(i)

    edges: dict[int, set[int]] = {i: set() for i in range(len(declarations))}
    for i, decl in enumerate(declarations):
        for dep in decl.dependency_names:
            for j in by_name.get(dep, ()):
                if j != i and decl.name != dep:
                    edges[j].add(i)
    return edges


def topological_sort(declarations: Sequence[Declaration]) -> TopologicalOrder:
    """Kahn's algorithm with alphabetical tie-break.

    Among ready declarations the lexicographically smallest name is emitted
    first (input position breaks ties between equal names).
    """
    edges = build_edges(declarations)
    in_degree = [0] * len(declarations)
    for targets in edges.values():
        for t in targets:
            in_degree[t] += 1

    ready = [(d.name, i) for i, d in enumerate(declarations) if in_degree[i] == 0]
    heapq.heapify(ready)

    emitted: list[int] = []
    while ready:
        _name, current = heapq.heappop(ready)
        emitted.append(current)
        for neighbor in sorted(edges[current], key=lambda j: (declarations[j].name, j)):
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                heapq.heappush(ready, (declarations[neighbor].name, neighbor))

    items = [declarations[i] for i in emitted]
    if len(emitted) == len(declarations):
        return TopologicalOrder(items=items)

    visited = set(emitted)
    rest = [d for i, d in enumerate(declarations) if i not in visited]
    return TopologicalOrder(items=items + rest, cyclic=tuple(d.name for d in rest))


def _preserve_rank(policy: SortPolicy, name: str) -> int:
    return policy.preserve_names.index(name)


def sort_functions(
    declarations: Sequence[Declaration], policy: SortPolicy
) -> tuple[list[Declaration], TopologicalOrder | None]:
    """Order methods or functions by policy.

    Preserved names come first in ``preserve_names`` order, not source
    order, so ``__init__`` leads whatever its position in the class.
    Every category in ``policy.category_order`` follows. When dependency sorting is on the
    non-preserved declarations are topologically sorted before bucketing.

    Returns:
        The ordered declarations and, when dependency sort ran, its result.
    """
    if not declarations:
        return [], None

    preserve = set(policy.preserve_names)
    indexed = list(enumerate(declarations))
    preserved = sorted(
        (pair for pair in indexed if pair[1].name in preserve),
        key=lambda pair: (_preserve_rank(policy, pair[1].name), pair[0]),
    )
    to_sort = [d for _i, d in indexed if d.name not in preserve]

    topo: TopologicalOrder | None = None
    if policy.dependency_sort_enabled:
        topo = topological_sort(to_sort)
        to_sort = topo.items

    buckets: dict[str, list[Declaration]] = {c: [] for c in policy.category_order}
    for decl in to_sort:
        buckets.setdefault(categorize_function(decl.name), []).append(decl)

    if policy.sort_within_categories:
        for bucket in buckets.values():
            bucket.sort(key=lambda d: d.name)

    result = [d for _i, d in preserved]
    for bucket in buckets.values():
        result.extend(bucket)
    return result, topo


def sort_module_objects(
    objects: Sequence[Declaration], sortable_categories: Sequence[str]
) -> tuple[list[Declaration], TopologicalOrder | None]:
    """Order module objects, keeping non-sortable ones anchored in place.

    Objects whose category is in ``sortable_categories`` are topologically
    sorted and fill the non-anchored slots in order; dependency order always
    wins over category order. An empty ``sortable_categories`` disables
    module sorting and returns the input unchanged.
    """
    if not objects:
        return [], None
    if not sortable_categories:
        return list(objects), None

    sortable_set = set(sortable_categories)
    anchored: dict[int, Declaration] = {}
    sortable: list[Declaration] = []
    for i, obj in enumerate(objects):
        if obj.category in sortable_set:
            sortable.append(obj)
        else:
            anchored[i] = obj

    topo = topological_sort(sortable)
    pending = iter(topo.items)
    result: list[Declaration] = []
    for i in range(len(objects)):
        if i in anchored:
            result.append(anchored[i])
        else:
            result.append(next(pending))
    result.extend(pending)
    return result, topo
