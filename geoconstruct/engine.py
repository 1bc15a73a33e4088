"""Per-frame orchestration of the dependency graph, solver and spatial index.

The authoring layer submits change requests at any time; they are queued and
applied in emission order by :meth:`Engine.tick`.  Within a tick the
dependency graph is updated first, then one solve pass runs over everything
affected, and finally the spatial index is refreshed for entities whose
resolved geometry changed.  Readers therefore only ever observe the state left
by the last completed tick.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

from .config import EngineConfig, get_engine_config
from .dependency_graph import DependencyGraph, link_definition, unlink_definition
from .errors import CyclicReferenceError, DuplicateEntityError, UnknownEntityError
from .events import EventQueue, GeometryEvent, Inserted, Modified, Removed
from .geometry import AABB, Vector2
from .solver import Geometry, Solver
from .spatial_hash import SpatialHashTable
from .symbolic import Entity, Free, SymbolicDefinition
from .viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Outbound updates produced by one tick."""

    frame: int
    updated: Dict[Entity, Geometry] = field(default_factory=dict)
    invalidated: List[Entity] = field(default_factory=list)
    removed: List[Entity] = field(default_factory=list)
    order: List[Entity] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.updated or self.invalidated or self.removed)


class Engine:
    def __init__(self, viewport: Optional[Viewport] = None, config: Optional[EngineConfig] = None) -> None:
        self.config = config or get_engine_config()
        self.graph = DependencyGraph()
        self.solver = Solver(self.config)
        self.index = SpatialHashTable(self.config)
        self.viewport: Optional[Viewport] = None
        self._queue = EventQueue()
        # definitions as seen by the authoring layer, including queued changes
        self._declared: Dict[Entity, SymbolicDefinition] = {}
        # removed ids that live definitions still name, mapped to those definitions' entities
        self._orphans: Dict[Entity, Set[Entity]] = {}
        self._ids: Iterator[int] = itertools.count()
        self._frame = 0
        if viewport is not None:
            self.set_viewport(viewport)

    # --- change requests ------------------------------------------------

    def new_entity(self) -> int:
        entity = next(self._ids)
        while entity in self._declared:
            entity = next(self._ids)
        return entity

    def submit(self, event: GeometryEvent) -> None:
        if isinstance(event, Inserted):
            if event.entity in self._declared:
                raise DuplicateEntityError(event.entity)
            for dependency in event.definition.dependencies():
                if dependency not in self._declared:
                    raise UnknownEntityError(dependency, referenced_by=event.entity)
            if self._references(event.definition, event.entity):
                raise CyclicReferenceError(event.entity)
            self._declared[event.entity] = event.definition
        elif isinstance(event, Removed):
            if event.entity not in self._declared:
                raise UnknownEntityError(event.entity)
            del self._declared[event.entity]
        elif isinstance(event, Modified):
            definition = self._declared.get(event.entity)
            if definition is None:
                raise UnknownEntityError(event.entity)
            if event.position is not None:
                if not isinstance(definition, Free):
                    raise ValueError(f"entity {event.entity!r} is not a free point")
                self._declared[event.entity] = Free(event.position)
        else:
            raise TypeError(f"unsupported event {event!r}")
        self._queue.push(event)

    def insert(self, entity: Entity, definition: SymbolicDefinition) -> Entity:
        self.submit(Inserted(entity, definition))
        return entity

    def add(self, definition: SymbolicDefinition) -> int:
        """Insert ``definition`` under a freshly allocated entity id."""

        entity = self.new_entity()
        self.insert(entity, definition)
        return entity

    def remove(self, entity: Entity) -> None:
        self.submit(Removed(entity, self._declared.get(entity)))

    def move_free_point(self, entity: Entity, position: Vector2) -> None:
        self.submit(Modified(entity, position))

    @property
    def pending(self) -> int:
        return len(self._queue)

    # --- frame ----------------------------------------------------------

    def tick(self) -> FrameResult:
        events = self._queue.drain()
        result = FrameResult(frame=self._frame)
        self._frame += 1
        if not events:
            return result

        # dict keeps seed order stable
        seeds: Dict[Entity, None] = {}
        for event in events:
            if isinstance(event, Inserted):
                self.solver.set_definition(event.entity, event.definition)
                link_definition(self.graph, event.entity, event.definition)
                seeds[event.entity] = None
                self._relink_orphans(event.entity, seeds)
            elif isinstance(event, Removed):
                self._apply_removal(event.entity, seeds)
                result.removed.append(event.entity)
            elif isinstance(event, Modified):
                if event.position is not None:
                    self.solver.set_definition(event.entity, Free(event.position))
                seeds[event.entity] = None

        report = self.solver.solve(seeds, self.graph)
        result.order = report.order
        result.updated = report.updated
        result.invalidated = report.invalidated

        if self.viewport is not None:
            for entity in report.invalidated:
                self.index.remove_from_all(entity)
            for entity, geometry in report.updated.items():
                self.index.remove_from_all(entity)
                self.index.insert(entity, geometry, self.viewport)

        logger.info(
            "Frame %d: %d event(s), %d updated, %d invalidated, %d removed",
            result.frame,
            len(events),
            len(result.updated),
            len(result.invalidated),
            len(result.removed),
        )
        return result

    def _apply_removal(self, entity: Entity, seeds: Dict[Entity, None]) -> None:
        definition = self.solver.definitions.get(entity)
        dependents = self.graph.dependents(entity)
        if definition is not None:
            unlink_definition(self.graph, entity, definition)
        else:
            self.graph.remove(entity)
        self.solver.discard(entity)
        self.index.remove_from_all(entity)
        seeds.pop(entity, None)
        # dependents now reference a missing entity and resolve as invalid
        for dependent in dependents:
            seeds[dependent] = None
        if dependents:
            self._orphans.setdefault(entity, set()).update(dependents)
        logger.debug("Removed entity %r with %d dependent(s)", entity, len(dependents))

    def _relink_orphans(self, entity: Entity, seeds: Dict[Entity, None]) -> None:
        """Reconnect definitions that kept naming ``entity`` after it was removed."""

        for dependent in self._orphans.pop(entity, ()):
            definition = self.solver.definitions.get(dependent)
            if definition is not None and entity in definition.dependencies():
                self.graph.add(entity, dependent)
                seeds[dependent] = None

    def _references(self, definition: SymbolicDefinition, target: Entity) -> bool:
        """Whether ``definition`` reaches ``target`` through declared definitions."""

        stack = list(definition.dependencies())
        seen: Set[Entity] = set()
        while stack:
            entity = stack.pop()
            if entity == target:
                return True
            if entity in seen:
                continue
            seen.add(entity)
            declared = self._declared.get(entity)
            if declared is not None:
                stack.extend(declared.dependencies())
        return False

    # --- viewport -------------------------------------------------------

    def set_viewport(self, viewport: Viewport) -> None:
        """Switch to ``viewport`` and rebuild the spatial index for it."""

        if self.viewport is None or not self.viewport.same_actual_size(viewport):
            self.index.init_viewport(viewport)
        else:
            self.index.clear()
        self.viewport = viewport
        items = list(self.solver.resolved_items())
        self.index.insert_all(items, viewport)
        logger.info("Viewport changed; re-indexed %d entities", len(items))

    # --- reads ----------------------------------------------------------

    def resolved(self, entity: Entity) -> Optional[Geometry]:
        return self.solver.value(entity)

    def is_valid(self, entity: Entity) -> bool:
        return self.solver.is_valid(entity)

    def definition(self, entity: Entity) -> Optional[SymbolicDefinition]:
        return self.solver.definitions.get(entity)

    def entities_near_point(self, point: Vector2) -> Optional[List[Entity]]:
        """Entities indexed around ``point`` (virtual space); ``None`` off-grid."""

        if self.viewport is None:
            return None
        return self.index.get_neighbor_entities_of_point(point, self.viewport)

    def entities_in_aabb(self, aabb: AABB) -> set:
        return self.index.get_neighbor_entities_of_aabb(aabb)


__all__ = ["Engine", "FrameResult"]
