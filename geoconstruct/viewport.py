"""Virtual (model) space to actual (pixel) space transform."""

from __future__ import annotations

from dataclasses import dataclass

from .geometry import AABB, Circle, Line, Vector2


@dataclass(frozen=True)
class Viewport:
    """Window of virtual space shown on an ``actual_size`` pixel surface.

    Virtual space is y-up and the window is centred on ``center``.  Actual
    space is y-down with its origin at the top-left pixel.  The scale is taken
    from the horizontal axis so circles stay circular.
    """

    center: Vector2
    virtual_size: Vector2
    actual_size: Vector2

    def __post_init__(self) -> None:
        if self.virtual_size.x <= 0.0 or self.virtual_size.y <= 0.0:
            raise ValueError("virtual size must be positive")
        if self.actual_size.x <= 0.0 or self.actual_size.y <= 0.0:
            raise ValueError("actual size must be positive")

    @property
    def actual_width(self) -> float:
        return self.actual_size.x

    @property
    def actual_height(self) -> float:
        return self.actual_size.y

    @property
    def scale(self) -> float:
        return self.actual_size.x / self.virtual_size.x

    def actual_aabb(self) -> AABB:
        return AABB(0.0, 0.0, self.actual_width, self.actual_height)

    def to_actual(self, p: Vector2) -> Vector2:
        return Vector2(
            (p.x - self.center.x) * self.scale + self.actual_width / 2.0,
            (self.center.y - p.y) * self.scale + self.actual_height / 2.0,
        )

    def to_virtual(self, p: Vector2) -> Vector2:
        return Vector2(
            (p.x - self.actual_width / 2.0) / self.scale + self.center.x,
            self.center.y - (p.y - self.actual_height / 2.0) / self.scale,
        )

    def scalar_to_actual(self, value: float) -> float:
        return value * self.scale

    def scalar_to_virtual(self, value: float) -> float:
        return value / self.scale

    def line_to_actual(self, line: Line) -> Line:
        length = None if line.length is None else self.scalar_to_actual(line.length)
        return Line(
            origin=self.to_actual(line.origin),
            direction=Vector2(line.direction.x, -line.direction.y),
            kind=line.kind,
            length=length,
        )

    def circle_to_actual(self, circle: Circle) -> Circle:
        return Circle(center=self.to_actual(circle.center), radius=self.scalar_to_actual(circle.radius))

    def same_actual_size(self, other: "Viewport") -> bool:
        return self.actual_size == other.actual_size
