"""Change requests sent by the authoring layer to the engine."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Union

from .geometry import Vector2
from .symbolic import Entity, SymbolicDefinition


@dataclass(frozen=True)
class Inserted:
    entity: Entity
    definition: SymbolicDefinition


@dataclass(frozen=True)
class Removed:
    entity: Entity
    definition: Optional[SymbolicDefinition] = None


@dataclass(frozen=True)
class Modified:
    """A direct edit of a free point.

    ``position`` carries the new coordinate; without it the entity is simply
    re-resolved.
    """

    entity: Entity
    position: Optional[Vector2] = None


GeometryEvent = Union[Inserted, Removed, Modified]


class EventQueue:
    """FIFO of pending events, drained once per frame."""

    def __init__(self) -> None:
        self._events: Deque[GeometryEvent] = deque()

    def __len__(self) -> int:
        return len(self._events)

    def push(self, event: GeometryEvent) -> None:
        self._events.append(event)

    def drain(self) -> List[GeometryEvent]:
        events = list(self._events)
        self._events.clear()
        return events


__all__ = ["EventQueue", "GeometryEvent", "Inserted", "Modified", "Removed"]
