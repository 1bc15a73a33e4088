from .config import EngineConfig, get_engine_config, set_engine_config
from .dependency_graph import DependencyGraph, link_definition, unlink_definition
from .engine import Engine, FrameResult
from .errors import (
    CyclicReferenceError,
    DependencyCycleError,
    DuplicateEntityError,
    GeometryError,
    ResolutionError,
    SpatialIndexError,
    UnknownEntityError,
)
from .events import EventQueue, Inserted, Modified, Removed
from .geometry import (
    AABB,
    Circle,
    Line,
    Point,
    Vector2,
    clip_line_to_aabb,
    intersect_circles,
    intersect_line_circle,
    intersect_lines,
)
from .solver import ResolvedRecord, SolveReport, Solver, select_branch
from .spatial_hash import SpatialHashTable
from .symbolic import (
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
)
from .viewport import Viewport

__all__ = [
    'AABB',
    'CenterRadius',
    'Circle',
    'CircleCircleIntersect',
    'CircleLineIntersect',
    'CyclicReferenceError',
    'DependencyCycleError',
    'DependencyGraph',
    'DuplicateEntityError',
    'Engine',
    'EngineConfig',
    'EventQueue',
    'Fixed',
    'FrameResult',
    'Free',
    'GeometryError',
    'Inserted',
    'Line',
    'LineLineIntersect',
    'MidPoint',
    'Modified',
    'OnCircle',
    'OnLine',
    'Parallel',
    'Perpendicular',
    'Point',
    'Ray',
    'Removed',
    'ResolutionError',
    'ResolvedRecord',
    'Segment',
    'SolveReport',
    'Solver',
    'SpatialHashTable',
    'SpatialIndexError',
    'Straight',
    'UnknownEntityError',
    'Vector2',
    'Viewport',
    'clip_line_to_aabb',
    'get_engine_config',
    'intersect_circles',
    'intersect_line_circle',
    'intersect_lines',
    'link_definition',
    'select_branch',
    'set_engine_config',
    'unlink_definition',
]
