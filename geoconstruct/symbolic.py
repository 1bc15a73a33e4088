"""Symbolic definitions: how an entity's geometry derives from other entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Hashable, Literal, Tuple, Union

from .geometry import LineKind, Vector2

Entity = Hashable
GeometryFamily = Literal["point", "line", "circle"]


@dataclass(frozen=True)
class _Symbolic:
    family = "point"

    def dependencies(self) -> Tuple[Entity, ...]:
        """Entities named by this definition, in declaration order."""

        return ()


# --- points -----------------------------------------------------------------


def _check_branch(branch: int) -> None:
    if branch not in (0, 1):
        raise ValueError(f"branch selector must be 0 or 1, got {branch!r}")


@dataclass(frozen=True)
class Fixed(_Symbolic):
    position: Vector2


@dataclass(frozen=True)
class Free(_Symbolic):
    """Point the authoring layer may move directly (e.g. by dragging)."""

    position: Vector2


@dataclass(frozen=True)
class MidPoint(_Symbolic):
    a: Entity
    b: Entity

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.a, self.b)


@dataclass(frozen=True)
class OnLine(_Symbolic):
    line: Entity
    t: float

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.line,)


@dataclass(frozen=True)
class LineLineIntersect(_Symbolic):
    line_a: Entity
    line_b: Entity

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.line_a, self.line_b)


@dataclass(frozen=True)
class OnCircle(_Symbolic):
    circle: Entity
    theta: float

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.circle,)


@dataclass(frozen=True)
class CircleLineIntersect(_Symbolic):
    circle: Entity
    line: Entity
    branch: int = 0

    def __post_init__(self) -> None:
        _check_branch(self.branch)

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.circle, self.line)


@dataclass(frozen=True)
class CircleCircleIntersect(_Symbolic):
    circle_a: Entity
    circle_b: Entity
    branch: int = 0

    def __post_init__(self) -> None:
        _check_branch(self.branch)

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.circle_a, self.circle_b)


SymbolicPoint = Union[
    Fixed,
    Free,
    MidPoint,
    OnLine,
    LineLineIntersect,
    OnCircle,
    CircleLineIntersect,
    CircleCircleIntersect,
]


# --- lines ------------------------------------------------------------------


@dataclass(frozen=True)
class _ThroughPoints(_Symbolic):
    family = "line"
    kind: ClassVar[LineKind] = "line"

    a: Entity
    b: Entity

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.a, self.b)


@dataclass(frozen=True)
class Straight(_ThroughPoints):
    kind: ClassVar[LineKind] = "line"


@dataclass(frozen=True)
class Ray(_ThroughPoints):
    kind: ClassVar[LineKind] = "ray"


@dataclass(frozen=True)
class Segment(_ThroughPoints):
    kind: ClassVar[LineKind] = "segment"


@dataclass(frozen=True)
class Parallel(_Symbolic):
    family = "line"

    line: Entity
    point: Entity

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.line, self.point)


@dataclass(frozen=True)
class Perpendicular(_Symbolic):
    family = "line"

    line: Entity
    point: Entity

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.line, self.point)


SymbolicLine = Union[Straight, Ray, Segment, Parallel, Perpendicular]


# --- circles ----------------------------------------------------------------


@dataclass(frozen=True)
class CenterRadius(_Symbolic):
    family = "circle"

    center: Entity
    radius_point: Entity

    def dependencies(self) -> Tuple[Entity, ...]:
        return (self.center, self.radius_point)


SymbolicCircle = CenterRadius

SymbolicDefinition = Union[SymbolicPoint, SymbolicLine, SymbolicCircle]


def family_of(definition: SymbolicDefinition) -> GeometryFamily:
    return definition.family  # type: ignore[return-value]


__all__ = [
    "CenterRadius",
    "CircleCircleIntersect",
    "CircleLineIntersect",
    "Entity",
    "Fixed",
    "Free",
    "GeometryFamily",
    "LineLineIntersect",
    "MidPoint",
    "OnCircle",
    "OnLine",
    "Parallel",
    "Perpendicular",
    "Ray",
    "Segment",
    "Straight",
    "SymbolicCircle",
    "SymbolicDefinition",
    "SymbolicLine",
    "SymbolicPoint",
    "family_of",
]
