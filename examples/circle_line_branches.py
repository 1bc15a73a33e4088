"""Example: a line sweeping through a circle keeps its intersection branches apart."""

import math

from geoconstruct import CenterRadius, CircleLineIntersect, Engine, Fixed, Free, Straight, Vector2, Viewport


def main() -> None:
    engine = Engine(Viewport(Vector2(0.0, 0.0), Vector2(6.0, 4.5), Vector2(640.0, 480.0)))

    center = engine.add(Fixed(Vector2(0.0, 0.0)))
    rim = engine.add(Fixed(Vector2(1.5, 0.0)))
    circle = engine.add(CenterRadius(center, rim))
    pivot = engine.add(Fixed(Vector2(-2.5, 0.2)))
    handle = engine.add(Free(Vector2(2.5, 0.2)))
    line = engine.add(Straight(pivot, handle))
    near = engine.add(CircleLineIntersect(circle, line, 0))
    far = engine.add(CircleLineIntersect(circle, line, 1))
    engine.tick()

    for step in range(13):
        angle = step * math.pi / 6.0
        # swing the handle all the way round the pivot, reversing the line direction halfway
        engine.move_free_point(handle, Vector2(-2.5 + 5.0 * math.cos(angle), 0.2 + 5.0 * math.sin(angle)))
        result = engine.tick()
        values = []
        for entity in (near, far):
            point = engine.resolved(entity)
            values.append("-" if point is None else f"({point.x:+.3f}, {point.y:+.3f})")
        print(f"frame {result.frame:2d}  angle {math.degrees(angle):5.1f}  near {values[0]:>18}  far {values[1]:>18}")


if __name__ == "__main__":
    main()
