"""Resolution of symbolic definitions into concrete geometry.

The solver owns the resolved-geometry store.  A pass takes a set of changed
entities, asks the dependency graph for their downstream closure in
dependency order, and re-evaluates each definition against the values
already resolved in the same pass.

Resolution is a pure function of ``(definition, dependency values, previous
value)``.  The previous value only matters for multi-valued intersections,
where the solution nearest to it is kept so that dragging a construction does
not make a point jump between branches.

A definition that cannot be resolved (degenerate input, or a dependency that
is itself invalid or missing) leaves the entity *invalid*: it has no value
until a later pass succeeds again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .config import EngineConfig, get_engine_config
from .dependency_graph import DependencyGraph
from .errors import ResolutionError
from .geometry import (
    Circle,
    Line,
    Vector2,
    intersect_circles,
    intersect_line_circle,
    intersect_lines,
)
from .logging_utils import apply_debug_logging
from .symbolic import (
    CenterRadius,
    CircleCircleIntersect,
    CircleLineIntersect,
    Entity,
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
    SymbolicDefinition,
)

logger = logging.getLogger(__name__)

Geometry = Union[Vector2, Line, Circle]


@dataclass
class ResolvedRecord:
    """Resolved state of one entity.

    ``value`` is ``None`` while the entity is invalid.  ``last_value`` keeps
    the most recent valid value across invalid stretches and drives branch
    continuity.
    """

    value: Optional[Geometry] = None
    last_value: Optional[Geometry] = None

    @property
    def valid(self) -> bool:
        return self.value is not None


@dataclass
class SolveReport:
    order: List[Entity] = field(default_factory=list)
    updated: Dict[Entity, Geometry] = field(default_factory=dict)
    invalidated: List[Entity] = field(default_factory=list)


def select_branch(
    candidates: Sequence[Vector2], branch: int, previous: Optional[Geometry], *, tol: float = 1e-9
) -> Vector2:
    """Pick one of ``candidates``.

    Nearest to ``previous`` when there is one, otherwise the ``branch``-th
    candidate in the order the intersection primitive produced.  When the
    ``branch``-th candidate is as near as the nearest one (within ``tol``) it
    wins, so sibling branches that met at a tangency split apart again.
    """

    if not candidates:
        raise ResolutionError("no intersection")
    own = candidates[min(branch, len(candidates) - 1)]
    if isinstance(previous, Vector2):
        nearest = min(candidates, key=lambda candidate: candidate.distance_to(previous))
        if own.distance_to(previous) <= nearest.distance_to(previous) + tol:
            return own
        return nearest
    return own


class Solver:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or get_engine_config()
        self._definitions: Dict[Entity, SymbolicDefinition] = {}
        self._records: Dict[Entity, ResolvedRecord] = {}
        self._rules: Dict[type, Callable[[SymbolicDefinition, ResolvedRecord], Geometry]] = {
            Fixed: self._resolve_fixed,
            Free: self._resolve_fixed,
            MidPoint: self._resolve_midpoint,
            OnLine: self._resolve_on_line,
            LineLineIntersect: self._resolve_line_line,
            OnCircle: self._resolve_on_circle,
            CircleLineIntersect: self._resolve_circle_line,
            CircleCircleIntersect: self._resolve_circle_circle,
            Straight: self._resolve_through_points,
            Ray: self._resolve_through_points,
            Segment: self._resolve_through_points,
            Parallel: self._resolve_parallel,
            Perpendicular: self._resolve_perpendicular,
            CenterRadius: self._resolve_center_radius,
        }

    # --- definitions ----------------------------------------------------

    @property
    def definitions(self) -> Mapping[Entity, SymbolicDefinition]:
        return self._definitions

    def set_definition(self, entity: Entity, definition: SymbolicDefinition) -> None:
        if type(definition) not in self._rules:
            raise TypeError(f"unsupported definition {definition!r}")
        self._definitions[entity] = definition
        self._records.setdefault(entity, ResolvedRecord())

    def discard(self, entity: Entity) -> None:
        self._definitions.pop(entity, None)
        self._records.pop(entity, None)

    # --- resolved values ------------------------------------------------

    def value(self, entity: Entity) -> Optional[Geometry]:
        record = self._records.get(entity)
        return None if record is None else record.value

    def is_valid(self, entity: Entity) -> bool:
        record = self._records.get(entity)
        return record is not None and record.valid

    def resolved_items(self) -> Iterable[tuple]:
        for entity, record in self._records.items():
            if record.value is not None:
                yield entity, record.value

    # --- solving --------------------------------------------------------

    def solve(self, changed: Iterable[Entity], graph: DependencyGraph) -> SolveReport:
        report = SolveReport(order=graph.recompute_order(changed))
        for entity in report.order:
            definition = self._definitions.get(entity)
            if definition is None:
                continue
            record = self._records.setdefault(entity, ResolvedRecord())
            before = record.value
            try:
                after: Optional[Geometry] = self._rules[type(definition)](definition, record)
            except ResolutionError as exc:
                logger.debug("Entity %r is invalid: %s", entity, exc)
                after = None
            record.value = after
            if after is not None:
                record.last_value = after
                if after != before:
                    report.updated[entity] = after
            elif before is not None:
                report.invalidated.append(entity)

        logger.info(
            "Solve pass over %d entities: %d updated, %d invalidated",
            len(report.order),
            len(report.updated),
            len(report.invalidated),
        )
        return report

    # --- lookups --------------------------------------------------------

    def _lookup(self, entity: Entity, expected: type, label: str):
        record = self._records.get(entity)
        if record is None or record.value is None:
            raise ResolutionError(f"{label} {entity!r} is missing or invalid")
        if not isinstance(record.value, expected):
            raise ResolutionError(f"{entity!r} is not a {label}")
        return record.value

    def _point(self, entity: Entity) -> Vector2:
        return self._lookup(entity, Vector2, "point")

    def _line(self, entity: Entity) -> Line:
        return self._lookup(entity, Line, "line")

    def _circle(self, entity: Entity) -> Circle:
        return self._lookup(entity, Circle, "circle")

    # --- rules ----------------------------------------------------------

    def _resolve_fixed(self, definition, record: ResolvedRecord) -> Vector2:
        return definition.position

    def _resolve_midpoint(self, definition: MidPoint, record: ResolvedRecord) -> Vector2:
        return (self._point(definition.a) + self._point(definition.b)) * 0.5

    def _resolve_on_line(self, definition: OnLine, record: ResolvedRecord) -> Vector2:
        line = self._line(definition.line)
        # segments are parametrised by the fraction of their length
        if line.kind == "segment":
            return line.point_at(definition.t * float(line.length))  # type: ignore[arg-type]
        return line.point_at(definition.t)

    def _resolve_line_line(self, definition: LineLineIntersect, record: ResolvedRecord) -> Vector2:
        point = intersect_lines(
            self._line(definition.line_a), self._line(definition.line_b), tol=self.config.tolerance
        )
        if point is None:
            raise ResolutionError("lines are parallel")
        return point

    def _resolve_on_circle(self, definition: OnCircle, record: ResolvedRecord) -> Vector2:
        return self._circle(definition.circle).point_at(definition.theta)

    def _resolve_circle_line(self, definition: CircleLineIntersect, record: ResolvedRecord) -> Vector2:
        candidates = intersect_line_circle(
            self._line(definition.line), self._circle(definition.circle), tol=self.config.tolerance
        )
        return select_branch(candidates, definition.branch, record.last_value, tol=self.config.tolerance)

    def _resolve_circle_circle(self, definition: CircleCircleIntersect, record: ResolvedRecord) -> Vector2:
        candidates = intersect_circles(
            self._circle(definition.circle_a), self._circle(definition.circle_b), tol=self.config.tolerance
        )
        return select_branch(candidates, definition.branch, record.last_value, tol=self.config.tolerance)

    def _resolve_through_points(self, definition, record: ResolvedRecord) -> Line:
        line = Line.from_points(
            self._point(definition.a), self._point(definition.b), definition.kind, tol=self.config.tolerance
        )
        if line is None:
            raise ResolutionError("defining points coincide")
        return line

    def _resolve_parallel(self, definition: Parallel, record: ResolvedRecord) -> Line:
        reference = self._line(definition.line)
        return Line(origin=self._point(definition.point), direction=reference.direction)

    def _resolve_perpendicular(self, definition: Perpendicular, record: ResolvedRecord) -> Line:
        reference = self._line(definition.line)
        return Line(origin=self._point(definition.point), direction=reference.direction.rotated90())

    def _resolve_center_radius(self, definition: CenterRadius, record: ResolvedRecord) -> Circle:
        center = self._point(definition.center)
        radius = center.distance_to(self._point(definition.radius_point))
        if radius <= self.config.tolerance:
            raise ResolutionError("zero radius")
        return Circle(center=center, radius=radius)


apply_debug_logging(globals(), logger=logger)


__all__ = ["Geometry", "ResolvedRecord", "SolveReport", "Solver", "select_branch"]
