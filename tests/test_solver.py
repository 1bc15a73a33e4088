import math

import pytest

from geoconstruct.dependency_graph import DependencyGraph, link_definition
from geoconstruct.errors import ResolutionError
from geoconstruct.geometry import Circle, Line, Vector2
from geoconstruct.solver import Solver, select_branch
from geoconstruct.symbolic import (
    CenterRadius,
    CircleCircleIntersect,
    CircleLineIntersect,
    Fixed,
    Free,
    LineLineIntersect,
    MidPoint,
    OnCircle,
    OnLine,
    Parallel,
    Perpendicular,
    Ray,
    Segment,
    Straight,
    family_of,
)


class Scene:
    def __init__(self):
        self.graph = DependencyGraph()
        self.solver = Solver()

    def define(self, entity, definition):
        self.solver.set_definition(entity, definition)
        link_definition(self.graph, entity, definition)
        return entity

    def solve(self, *seeds):
        return self.solver.solve(seeds, self.graph)

    def move(self, entity, x, y):
        self.solver.set_definition(entity, Free(Vector2(x, y)))
        return self.solve(entity)

    def value(self, entity):
        return self.solver.value(entity)


def _point_close(p, x, y, tol=1e-9):
    assert p is not None
    assert math.isclose(p.x, x, abs_tol=tol) and math.isclose(p.y, y, abs_tol=tol), p


def test_midpoint_resolves_to_average():
    scene = Scene()
    scene.define("A", Fixed(Vector2(0, 0)))
    scene.define("B", Free(Vector2(4, 2)))
    scene.define("M", MidPoint("A", "B"))
    report = scene.solve("A", "B", "M")

    _point_close(scene.value("M"), 2, 1)
    assert set(report.updated) == {"A", "B", "M"}
    assert report.invalidated == []


def test_perpendicular_axes_intersect():
    scene = Scene()
    scene.define("P", Fixed(Vector2(0, 5)))
    scene.define("Q", Fixed(Vector2(1, 5)))
    scene.define("R", Fixed(Vector2(5, 0)))
    scene.define("S", Fixed(Vector2(5, 1)))
    scene.define("L1", Straight("P", "Q"))
    scene.define("L2", Segment("R", "S"))
    scene.define("X", LineLineIntersect("L1", "L2"))
    scene.solve("P", "Q", "R", "S")

    line = scene.value("L1")
    assert isinstance(line, Line)
    assert line.direction == Vector2(1, 0)
    # accepted even though it lies outside the drawn segment R-S
    _point_close(scene.value("X"), 5, 5)


def test_parallel_lines_make_intersection_invalid():
    scene = Scene()
    scene.define("P", Fixed(Vector2(0, 0)))
    scene.define("Q", Fixed(Vector2(1, 0)))
    scene.define("R", Fixed(Vector2(0, 3)))
    scene.define("S", Free(Vector2(2, 3)))
    scene.define("L1", Straight("P", "Q"))
    scene.define("L2", Straight("R", "S"))
    scene.define("X", LineLineIntersect("L1", "L2"))
    scene.define("Y", MidPoint("X", "P"))
    scene.solve("P", "Q", "R", "S")

    assert scene.value("X") is None
    assert not scene.solver.is_valid("X")
    assert scene.value("Y") is None

    scene.move("S", 2, 4)
    _point_close(scene.value("X"), -6, 0)
    _point_close(scene.value("Y"), -3, 0)


def test_on_line_parametrisation():
    scene = Scene()
    scene.define("A", Fixed(Vector2(0, 0)))
    scene.define("B", Fixed(Vector2(4, 0)))
    scene.define("line", Straight("A", "B"))
    scene.define("seg", Segment("A", "B"))
    scene.define("P", OnLine("line", 3.0))
    scene.define("Q", OnLine("seg", 0.25))
    scene.define("R", OnLine("seg", 2.0))
    scene.solve("A", "B")

    _point_close(scene.value("P"), 3, 0)
    _point_close(scene.value("Q"), 1, 0)
    # out of range parameters are allowed
    _point_close(scene.value("R"), 8, 0)


def test_on_circle_and_center_radius():
    scene = Scene()
    scene.define("O", Fixed(Vector2(1, 1)))
    scene.define("A", Free(Vector2(3, 1)))
    scene.define("C", CenterRadius("O", "A"))
    scene.define("P", OnCircle("C", math.pi / 2))
    scene.solve("O", "A")

    circle = scene.value("C")
    assert isinstance(circle, Circle)
    assert circle.radius == pytest.approx(2.0)
    _point_close(scene.value("P"), 1, 3)

    report = scene.move("A", 1, 1)
    assert scene.value("C") is None
    assert scene.value("P") is None
    assert set(report.invalidated) == {"C", "P"}


def test_parallel_and_perpendicular_lines():
    scene = Scene()
    scene.define("A", Fixed(Vector2(0, 0)))
    scene.define("B", Fixed(Vector2(2, 2)))
    scene.define("P", Fixed(Vector2(0, 3)))
    scene.define("ray", Ray("A", "B"))
    scene.define("par", Parallel("ray", "P"))
    scene.define("perp", Perpendicular("ray", "P"))
    scene.solve("A", "B", "P")

    ray = scene.value("ray")
    par = scene.value("par")
    perp = scene.value("perp")
    assert ray.kind == "ray"
    assert par.kind == "line" and perp.kind == "line"
    assert par.origin == Vector2(0, 3)
    assert par.direction == ray.direction
    assert perp.direction.dot(ray.direction) == pytest.approx(0.0)


def test_coincident_defining_points_invalidate_line():
    scene = Scene()
    scene.define("A", Fixed(Vector2(1, 1)))
    scene.define("B", Free(Vector2(1, 1)))
    scene.define("L", Segment("A", "B"))
    scene.define("P", Fixed(Vector2(0, 0)))
    scene.define("perp", Perpendicular("L", "P"))
    scene.solve("A", "B", "P")
    assert scene.value("L") is None
    assert scene.value("perp") is None

    scene.move("B", 2, 1)
    assert scene.value("perp").direction == Vector2(0, 1)


def test_circle_line_intersection_uses_branch_then_continuity():
    scene = Scene()
    scene.define("O", Fixed(Vector2(0, 0)))
    scene.define("R", Fixed(Vector2(1, 0)))
    scene.define("C", CenterRadius("O", "R"))
    scene.define("A", Free(Vector2(-2, 0.5)))
    scene.define("B", Fixed(Vector2(2, 0.5)))
    scene.define("L", Straight("A", "B"))
    scene.define("X0", CircleLineIntersect("C", "L", 0))
    scene.define("X1", CircleLineIntersect("C", "L", 1))
    scene.solve("O", "R", "A", "B")

    half = math.sqrt(1 - 0.25)
    _point_close(scene.value("X0"), -half, 0.5)
    _point_close(scene.value("X1"), half, 0.5)

    # flip the line direction: canonical order flips, continuity keeps the branch
    scene.move("A", 3, 0.5)
    _point_close(scene.value("X0"), -half, 0.5)
    _point_close(scene.value("X1"), half, 0.5)


def test_circle_line_miss_invalidates_and_recovers():
    scene = Scene()
    scene.define("O", Fixed(Vector2(0, 0)))
    scene.define("R", Fixed(Vector2(1, 0)))
    scene.define("C", CenterRadius("O", "R"))
    scene.define("A", Fixed(Vector2(-2, 0)))
    scene.define("B", Free(Vector2(2, 0)))
    scene.define("L", Straight("A", "B"))
    scene.define("X", CircleLineIntersect("C", "L", 1))
    scene.solve("O", "R", "A", "B")
    _point_close(scene.value("X"), 1, 0)

    scene.move("B", 2, 5)
    assert scene.value("X") is None

    scene.move("B", 2, 0)
    _point_close(scene.value("X"), 1, 0)


def test_sibling_branches_separate_after_tangency():
    scene = Scene()
    scene.define("O", Fixed(Vector2(0, 0)))
    scene.define("R", Fixed(Vector2(1, 0)))
    scene.define("C", CenterRadius("O", "R"))
    scene.define("P", Fixed(Vector2(0, 0)))
    scene.define("Q", Fixed(Vector2(1, 0)))
    scene.define("L0", Straight("P", "Q"))
    scene.define("H", Free(Vector2(0, 0.5)))
    scene.define("L", Parallel("L0", "H"))
    scene.define("X0", CircleLineIntersect("C", "L", 0))
    scene.define("X1", CircleLineIntersect("C", "L", 1))
    scene.solve("O", "R", "P", "Q", "H")

    half = math.sqrt(1 - 0.25)
    _point_close(scene.value("X0"), -half, 0.5)
    _point_close(scene.value("X1"), half, 0.5)

    # tangent: both branches collapse onto the single touching point
    scene.move("H", 0, 1)
    _point_close(scene.value("X0"), 0, 1)
    _point_close(scene.value("X1"), 0, 1)

    # back to a secant: both candidates are equally close to (0, 1)
    scene.move("H", 0, 0.8)
    _point_close(scene.value("X0"), -0.6, 0.8)
    _point_close(scene.value("X1"), 0.6, 0.8)


def test_circle_circle_branch_continuity_under_perturbation():
    scene = Scene()
    scene.define("A", Fixed(Vector2(0, 0)))
    scene.define("B", Free(Vector2(2, 0)))
    scene.define("CA", CenterRadius("A", "B"))
    scene.define("CB", CenterRadius("B", "A"))
    scene.define("X", CircleCircleIntersect("CA", "CB", 1))
    scene.solve("A", "B")

    start = scene.value("X")
    _point_close(start, 1, -math.sqrt(3))

    previous = start
    for step in range(1, 40):
        angle = step * 0.05
        # swing B around A so the canonical order of the solutions rotates too
        scene.move("B", 2 * math.cos(angle), 2 * math.sin(angle))
        current = scene.value("X")
        assert current is not None
        assert current.distance_to(previous) < 0.2
        previous = current


def test_circle_circle_without_solutions_is_invalid():
    scene = Scene()
    scene.define("A", Fixed(Vector2(0, 0)))
    scene.define("A2", Fixed(Vector2(1, 0)))
    scene.define("B", Free(Vector2(10, 0)))
    scene.define("B2", Fixed(Vector2(2.5, 0)))
    scene.define("CA", CenterRadius("A", "A2"))
    scene.define("CB", CenterRadius("B", "B2"))
    scene.define("X", CircleCircleIntersect("CA", "CB"))
    scene.solve("A", "A2", "B", "B2")
    assert scene.value("X") is None

    scene.move("B", 1.5, 0)
    assert scene.value("X") is not None


def test_wrong_family_reference_is_invalid():
    scene = Scene()
    scene.define("A", Fixed(Vector2(0, 0)))
    scene.define("B", Fixed(Vector2(1, 0)))
    scene.define("L", Segment("A", "B"))
    scene.define("M", MidPoint("A", "L"))
    scene.solve("A", "B")
    assert scene.value("M") is None


def test_missing_dependency_is_invalid():
    scene = Scene()
    scene.define("A", Fixed(Vector2(0, 0)))
    scene.define("M", MidPoint("A", "ghost"))
    scene.solve("A")
    assert scene.value("M") is None


def test_unchanged_values_are_not_reported():
    scene = Scene()
    scene.define("A", Free(Vector2(0, 0)))
    scene.define("B", Fixed(Vector2(2, 0)))
    scene.define("M", MidPoint("A", "B"))
    scene.solve("A", "B")

    report = scene.move("A", 0, 0)
    assert report.updated == {}
    assert report.order == ["A", "M"]


def test_select_branch_rules():
    candidates = [Vector2(0, 1), Vector2(0, -1)]
    assert select_branch(candidates, 0, None) == Vector2(0, 1)
    assert select_branch(candidates, 1, None) == Vector2(0, -1)
    assert select_branch(candidates[:1], 1, None) == Vector2(0, 1)
    assert select_branch(candidates, 0, Vector2(0.1, -0.8)) == Vector2(0, -1)
    # equidistant candidates: each branch keeps its own side
    sides = [Vector2(-1, 0), Vector2(1, 0)]
    assert select_branch(sides, 0, Vector2(0, 0)) == Vector2(-1, 0)
    assert select_branch(sides, 1, Vector2(0, 0)) == Vector2(1, 0)
    assert select_branch(sides, 1, Vector2(-1e-12, 0), tol=1e-9) == Vector2(1, 0)
    with pytest.raises(ResolutionError):
        select_branch([], 0, None)


def test_branch_selector_is_validated():
    with pytest.raises(ValueError):
        CircleCircleIntersect("a", "b", 2)


def test_definitions_report_their_family():
    assert family_of(MidPoint("a", "b")) == "point"
    assert family_of(Segment("a", "b")) == "line"
    assert family_of(Perpendicular("l", "p")) == "line"
    assert family_of(CenterRadius("o", "a")) == "circle"
    assert Segment("a", "b").kind == "segment"
    assert Segment("a", "b") != Straight("a", "b")


def test_unsupported_definition_is_rejected():
    with pytest.raises(TypeError):
        Solver().set_definition("x", object())
