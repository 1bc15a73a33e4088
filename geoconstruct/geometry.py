"""Concrete 2-D geometry: vectors, lines, circles and axis aligned boxes.

All shapes are immutable value types.  Intersection primitives return plain
lists of points in a canonical order so callers can apply their own branch
selection on top.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

import numpy as np

_EPS = 1e-9

LineKind = Literal["line", "ray", "segment"]


@dataclass(frozen=True)
class Vector2:
    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    @classmethod
    def zero(cls) -> "Vector2":
        return cls(0.0, 0.0)

    @classmethod
    def from_angle(cls, theta: float) -> "Vector2":
        return cls(math.cos(theta), math.sin(theta))

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vector2":
        return Vector2(-self.x, -self.y)

    def __mul__(self, scale: float) -> "Vector2":
        return Vector2(self.x * scale, self.y * scale)

    __rmul__ = __mul__

    def __truediv__(self, scale: float) -> "Vector2":
        return Vector2(self.x / scale, self.y / scale)

    def __iter__(self):
        yield self.x
        yield self.y

    def dot(self, other: "Vector2") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vector2") -> float:
        return self.x * other.y - self.y * other.x

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Vector2") -> float:
        return (other - self).magnitude()

    def normalized(self) -> "Vector2":
        norm = self.magnitude()
        if norm == 0.0:
            raise ValueError("cannot normalize a zero vector")
        return self / norm

    def is_zero(self, tol: float = _EPS) -> bool:
        return abs(self.x) <= tol and abs(self.y) <= tol

    def rotated90(self) -> "Vector2":
        """Rotate counter-clockwise by a quarter turn."""

        return Vector2(-self.y, self.x)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


Point = Vector2


@dataclass(frozen=True)
class Line:
    """Line through ``origin`` along the unit vector ``direction``.

    ``kind`` selects the drawn extent: an infinite ``"line"``, a ``"ray"``
    starting at ``origin``, or a ``"segment"`` of ``length`` starting at
    ``origin``.
    """

    origin: Vector2
    direction: Vector2
    kind: LineKind = "line"
    length: Optional[float] = None

    def __post_init__(self) -> None:
        if self.kind not in ("line", "ray", "segment"):
            raise ValueError(f"unknown line kind {self.kind!r}")
        if self.kind == "segment":
            if self.length is None or self.length < 0.0:
                raise ValueError("segment requires a non-negative length")
        elif self.length is not None:
            raise ValueError(f"{self.kind} does not take a length")

    @classmethod
    def from_points(
        cls, a: Vector2, b: Vector2, kind: LineKind = "line", *, tol: float = _EPS
    ) -> Optional["Line"]:
        """Return the line from ``a`` towards ``b`` or ``None`` if they coincide."""

        delta = b - a
        norm = delta.magnitude()
        if norm <= tol:
            return None
        length = norm if kind == "segment" else None
        return cls(origin=a, direction=delta / norm, kind=kind, length=length)

    def t_range(self) -> Tuple[float, float]:
        if self.kind == "segment":
            return 0.0, float(self.length)  # type: ignore[arg-type]
        if self.kind == "ray":
            return 0.0, math.inf
        return -math.inf, math.inf

    def point_at(self, t: float) -> Vector2:
        return self.origin + self.direction * t

    def end(self) -> Optional[Vector2]:
        if self.kind != "segment":
            return None
        return self.point_at(float(self.length))  # type: ignore[arg-type]

    def t_of_point(self, p: Vector2) -> float:
        """Parameter of the orthogonal projection of ``p`` onto the carrier."""

        return (p - self.origin).dot(self.direction)

    def closest_point(self, p: Vector2) -> Vector2:
        lo, hi = self.t_range()
        t = min(max(self.t_of_point(p), lo), hi)
        return self.point_at(t)


@dataclass(frozen=True)
class Circle:
    center: Vector2
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "radius", float(self.radius))
        if self.radius < 0.0:
            raise ValueError("circle radius must be non-negative")

    def point_at(self, theta: float) -> Vector2:
        return self.center + Vector2.from_angle(theta) * self.radius

    def closest_point(self, p: Vector2) -> Vector2:
        offset = p - self.center
        if offset.is_zero(0.0):
            return self.center + Vector2(self.radius, 0.0)
        return self.center + offset.normalized() * self.radius


@dataclass(frozen=True)
class AABB:
    """Axis aligned box anchored at its minimum corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def closest_point(self, p: Vector2) -> Vector2:
        return Vector2(min(max(p.x, self.x), self.max_x), min(max(p.y, self.y), self.max_y))

    def furthest_point(self, p: Vector2) -> Vector2:
        fx = self.x if abs(p.x - self.x) >= abs(p.x - self.max_x) else self.max_x
        fy = self.y if abs(p.y - self.y) >= abs(p.y - self.max_y) else self.max_y
        return Vector2(fx, fy)

    def intersects_circle(self, circle: Circle) -> bool:
        return self.closest_point(circle.center).distance_to(circle.center) <= circle.radius


def intersect_lines(a: Line, b: Line, *, tol: float = _EPS) -> Optional[Vector2]:
    """Intersection of the infinite carriers of ``a`` and ``b``.

    Returns ``None`` when the directions are parallel within ``tol``.
    """

    denom = a.direction.cross(b.direction)
    if abs(denom) <= tol:
        return None
    t = (b.origin - a.origin).cross(b.direction) / denom
    return a.point_at(t)


def intersect_line_circle(line: Line, circle: Circle, *, tol: float = _EPS) -> List[Vector2]:
    """Intersections of the carrier of ``line`` with ``circle``, by ascending line parameter."""

    t_center = line.t_of_point(circle.center)
    foot = line.point_at(t_center)
    dist = foot.distance_to(circle.center)
    gap = circle.radius - dist
    if gap < -tol:
        return []
    if abs(gap) <= tol:
        return [foot]
    half_chord = math.sqrt(max(circle.radius * circle.radius - dist * dist, 0.0))
    return [line.point_at(t_center - half_chord), line.point_at(t_center + half_chord)]


def intersect_circles(a: Circle, b: Circle, *, tol: float = _EPS) -> List[Vector2]:
    """Intersections of two circles.

    With two solutions the one to the left of the ``a.center -> b.center``
    direction comes first.  Concentric circles never intersect.
    """

    delta = b.center - a.center
    d = delta.magnitude()
    if d <= tol:
        return []
    if d > a.radius + b.radius + tol:
        return []
    if d < abs(a.radius - b.radius) - tol:
        return []
    along = (a.radius * a.radius - b.radius * b.radius + d * d) / (2.0 * d)
    h_sq = a.radius * a.radius - along * along
    unit = delta / d
    base = a.center + unit * along
    if h_sq <= tol * tol:
        return [base]
    offset = unit.rotated90() * math.sqrt(h_sq)
    return [base + offset, base - offset]


def clip_line_to_aabb(
    line: Line, aabb: AABB, *, tol: float = _EPS
) -> Optional[Tuple[Vector2, Vector2]]:
    """Clip ``line`` (respecting its extent) to ``aabb``.

    Returns the visible piece as ``(start, end)`` ordered along the line
    direction, or ``None`` when nothing of positive length remains.
    """

    t_lo, t_hi = line.t_range()
    for p, q in (
        (-line.direction.x, line.origin.x - aabb.x),
        (line.direction.x, aabb.max_x - line.origin.x),
        (-line.direction.y, line.origin.y - aabb.y),
        (line.direction.y, aabb.max_y - line.origin.y),
    ):
        if abs(p) <= tol:
            if q < 0.0:
                return None
            continue
        r = q / p
        if p < 0.0:
            t_lo = max(t_lo, r)
        else:
            t_hi = min(t_hi, r)
        if t_lo > t_hi:
            return None
    if not (math.isfinite(t_lo) and math.isfinite(t_hi)) or t_hi - t_lo <= tol:
        return None
    return line.point_at(t_lo), line.point_at(t_hi)


__all__ = [
    "AABB",
    "Circle",
    "Line",
    "LineKind",
    "Point",
    "Vector2",
    "clip_line_to_aabb",
    "intersect_circles",
    "intersect_line_circle",
    "intersect_lines",
]
