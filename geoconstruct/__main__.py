import argparse
import logging
from typing import Optional, Sequence

from geoconstruct import (
    CenterRadius,
    CircleCircleIntersect,
    Engine,
    Free,
    MidPoint,
    Perpendicular,
    Segment,
    Vector2,
    Viewport,
)
from geoconstruct.solver import Geometry

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _describe(geometry: Optional[Geometry]) -> str:
    if geometry is None:
        return "invalid"
    if isinstance(geometry, Vector2):
        return f"point ({geometry.x:.3f}, {geometry.y:.3f})"
    if hasattr(geometry, "radius"):
        c = geometry.center
        return f"circle center=({c.x:.3f}, {c.y:.3f}) r={geometry.radius:.3f}"
    o, d = geometry.origin, geometry.direction
    return f"{geometry.kind} origin=({o.x:.3f}, {o.y:.3f}) dir=({d.x:.3f}, {d.y:.3f})"


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Drag a free point through a small construction")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=5,
        help="Number of drag frames to simulate (default: 5)",
    )
    parser.add_argument(
        "--step-size",
        type=float,
        default=0.5,
        help="Horizontal distance the free point moves per frame (default: 0.5)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    viewport = Viewport(Vector2(0.0, 0.0), Vector2(10.0, 7.5), Vector2(800.0, 600.0))
    engine = Engine(viewport)

    a = engine.add(Free(Vector2(-1.0, 0.0)))
    b = engine.add(Free(Vector2(1.0, 0.0)))
    circle_a = engine.add(CenterRadius(a, b))
    circle_b = engine.add(CenterRadius(b, a))
    apex = engine.add(CircleCircleIntersect(circle_a, circle_b))
    base = engine.add(Segment(a, b))
    mid = engine.add(MidPoint(a, b))
    engine.add(Perpendicular(base, mid))

    names = {a: "A", b: "B", circle_a: "circle A", circle_b: "circle B", apex: "apex", base: "AB", mid: "M"}

    result = engine.tick()
    logger.info("Initial frame resolved %d entities", len(result.updated))
    position = Vector2(1.0, 0.0)

    for step in range(args.steps + 1):
        if step:
            position = position + Vector2(args.step_size, 0.0)
            engine.move_free_point(b, position)
            result = engine.tick()
        print(f"frame {result.frame}:")
        for entity in result.order:
            print(f"  {names.get(entity, entity)!s:>9}: {_describe(engine.resolved(entity))}")
        apex_value = engine.resolved(apex)
        if isinstance(apex_value, Vector2):
            near = engine.entities_near_point(apex_value) or []
            labels = sorted(str(names.get(entity, entity)) for entity in near)
            print(f"  near apex: {', '.join(labels)}")


if __name__ == "__main__":
    main()
