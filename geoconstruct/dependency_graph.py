"""Dependency graph between geometric entities.

The graph maps every entity to the set of entities whose definitions name it
(its *dependents*).  Edges are added when a definition is inserted and removed
when it is removed, so the graph always mirrors the live symbolic definitions.
Because definitions may only reference entities that already exist, the graph
is acyclic by construction; :meth:`DependencyGraph.recompute_order` still
checks this and fails loudly if the invariant is ever broken.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Set, Tuple

from .errors import DependencyCycleError
from .symbolic import Entity, SymbolicDefinition

logger = logging.getLogger(__name__)


class DependencyGraph:
    def __init__(self) -> None:
        self._dependents: Dict[Entity, Set[Entity]] = {}

    def __contains__(self, entity: object) -> bool:
        return entity in self._dependents

    def __len__(self) -> int:
        return len(self._dependents)

    def add(self, dependency: Entity, dependent: Entity) -> None:
        if dependency == dependent:
            raise DependencyCycleError(f"entity {dependency!r} cannot depend on itself")
        self._dependents.setdefault(dependency, set()).add(dependent)

    def remove(self, entity: Entity) -> None:
        """Drop ``entity``'s own dependent set.

        Edges pointing *to* ``entity`` from its dependencies are left alone;
        those are removed with :meth:`remove_dependent`, once per reference.
        """

        self._dependents.pop(entity, None)

    def remove_dependent(self, dependency: Entity, dependent: Entity) -> None:
        dependents = self._dependents.get(dependency)
        if dependents is None:
            return
        dependents.discard(dependent)
        if not dependents:
            del self._dependents[dependency]

    def dependents(self, entity: Entity) -> Set[Entity]:
        return set(self._dependents.get(entity, ()))

    def edges(self) -> Iterator[Tuple[Entity, Entity]]:
        for dependency, dependents in self._dependents.items():
            for dependent in dependents:
                yield dependency, dependent

    def recompute_order(self, seed: Iterable[Entity]) -> List[Entity]:
        """Return ``seed`` and everything downstream of it, dependencies first.

        Each entity appears once.  Ordering is a topological sort of the
        subgraph reachable from ``seed``; ties keep discovery order.
        """

        discovered: List[Entity] = []
        visited: Set[Entity] = set()
        for entity in seed:
            if entity not in visited:
                visited.add(entity)
                discovered.append(entity)
        seed_count = len(discovered)
        i = 0
        while i < len(discovered):
            for dependent in self._dependents.get(discovered[i], ()):
                if dependent not in visited:
                    visited.add(dependent)
                    discovered.append(dependent)
            i += 1

        indegree: Dict[Entity, int] = {entity: 0 for entity in discovered}
        for entity in discovered:
            for dependent in self._dependents.get(entity, ()):
                indegree[dependent] += 1

        queue: List[Entity] = [entity for entity in discovered if indegree[entity] == 0]
        order: List[Entity] = []
        i = 0
        while i < len(queue):
            entity = queue[i]
            order.append(entity)
            for dependent in self._dependents.get(entity, ()):
                indegree[dependent] -= 1
                if indegree[dependent] == 0:
                    queue.append(dependent)
            i += 1

        if len(order) != len(discovered):
            stuck = [entity for entity in discovered if indegree[entity] > 0]
            raise DependencyCycleError(f"dependency cycle among {stuck!r}")

        logger.debug("recompute_order: %d seed(s) -> %d entities", seed_count, len(order))
        return order


def link_definition(graph: DependencyGraph, entity: Entity, definition: SymbolicDefinition) -> None:
    """Add one edge per entity named by ``definition``."""

    for dependency in definition.dependencies():
        graph.add(dependency, entity)


def unlink_definition(graph: DependencyGraph, entity: Entity, definition: SymbolicDefinition) -> None:
    """Remove ``entity`` from the graph, mirroring :func:`link_definition`."""

    graph.remove(entity)
    for dependency in definition.dependencies():
        graph.remove_dependent(dependency, entity)


__all__ = ["DependencyGraph", "link_definition", "unlink_definition"]
