"""Uniform grid over actual (pixel) space for proximity queries.

Tiles are squares of ``tile_size`` pixels laid out row-major from the
top-left corner of the viewport.  Every tile holds the entities whose drawn
shape touches it, so hit-testing only has to look at a handful of tiles.
"""

from __future__ import annotations

import logging
import math
from typing import Hashable, Iterable, List, Optional, Set, Tuple

import numpy as np

from .config import EngineConfig, get_engine_config
from .errors import SpatialIndexError
from .geometry import AABB, Circle, Line, Vector2, clip_line_to_aabb
from .viewport import Viewport

logger = logging.getLogger(__name__)

Tile = int


class SpatialHashTable:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or get_engine_config()
        self.tile_size = float(self.config.tile_size)
        self.x_tiles = 0
        self.y_tiles = 0
        self._table: List[Set[Hashable]] = []

    def __len__(self) -> int:
        return len(self._table)

    def init_viewport(self, viewport: Viewport) -> None:
        """Resize the grid to ``viewport`` and drop every entry."""

        self.x_tiles = int(math.ceil(viewport.actual_width / self.tile_size))
        self.y_tiles = int(math.ceil(viewport.actual_height / self.tile_size))
        self._table = [set() for _ in range(self.x_tiles * self.y_tiles)]
        logger.info("Spatial hash resized to %dx%d tiles", self.x_tiles, self.y_tiles)

    def clear(self) -> None:
        for cell in self._table:
            cell.clear()

    def tile(self, index: Tile) -> frozenset:
        return frozenset(self._table[index])

    def tiles_of(self, entity: Hashable) -> List[Tile]:
        return [index for index, cell in enumerate(self._table) if entity in cell]

    # --- insertion ------------------------------------------------------

    def insert(self, entity: Hashable, geometry, viewport: Viewport) -> None:
        if isinstance(geometry, Vector2):
            self.insert_point(entity, geometry, viewport)
        elif isinstance(geometry, Line):
            self.insert_line(entity, geometry, viewport)
        elif isinstance(geometry, Circle):
            self.insert_circle(entity, geometry, viewport)
        else:
            raise TypeError(f"cannot index {geometry!r}")

    def insert_point(self, entity: Hashable, point: Vector2, viewport: Viewport) -> None:
        tile = self._cell(viewport.to_actual(point))
        if tile is not None:
            self._table[tile].add(entity)

    def insert_line(self, entity: Hashable, line: Line, viewport: Viewport) -> None:
        actual = viewport.line_to_actual(line)
        clipped = clip_line_to_aabb(actual, viewport.actual_aabb(), tol=self.config.tolerance)
        if clipped is None:
            return

        # walk left to right
        p1, p2 = clipped
        if p1.x > p2.x:
            p1, p2 = p2, p1
        length = p1.distance_to(p2)
        nudge = (p2 - p1) * (min(self.config.clip_nudge, length / 4.0) / length)
        p1, p2 = p1 + nudge, p2 - nudge

        x0, y0 = self._unlimited_cell(p1)
        x1, y1 = self._unlimited_cell(p2)

        if x0 == x1:
            if 0 <= x0 < self.x_tiles:
                for y in range(max(min(y0, y1), 0), min(max(y0, y1), self.y_tiles - 1) + 1):
                    self._table[self._index(x0, y)].add(entity)
            return

        if y0 == y1:
            if 0 <= y0 < self.y_tiles:
                for x in range(max(x0, 0), min(x1, self.x_tiles - 1) + 1):
                    self._table[self._index(x, y0)].add(entity)
            return

        size = self.tile_size
        eps = self.config.tolerance * size
        step = 1 if p2.y > p1.y else -1
        dx_per_dy = (p2.x - p1.x) / (p2.y - p1.y)
        x_tile, y_tile = x0, y0
        while True:
            if y_tile == y1:
                row_end = next_start = x1
            else:
                boundary = (y_tile + 1) * size if step > 0 else y_tile * size
                exit_x = p1.x + (boundary - p1.y) * dx_per_dy
                # a crossing exactly on a tile corner belongs to the column it enters next
                row_end = min(max(math.floor((exit_x - eps) / size), x_tile), x1)
                next_start = min(max(math.floor((exit_x + eps) / size), x_tile), x1)
            for x in range(x_tile, row_end + 1):
                self._table[self._index(x, y_tile)].add(entity)
            if y_tile == y1:
                break
            x_tile = next_start
            y_tile += step

    def insert_circle(self, entity: Hashable, circle: Circle, viewport: Viewport) -> None:
        actual = viewport.circle_to_actual(circle)
        if not viewport.actual_aabb().intersects_circle(actual):
            return
        r = actual.radius
        left, top = self._unlimited_cell(actual.center - Vector2(r, r))
        right, bottom = self._unlimited_cell(actual.center + Vector2(r, r))
        left, top = max(left, 0), max(top, 0)
        right, bottom = min(right, self.x_tiles - 1), min(bottom, self.y_tiles - 1)
        if left > right or top > bottom:
            return

        gx, gy = np.meshgrid(np.arange(left, right + 1), np.arange(top, bottom + 1))
        # (rows, cols, 2) tile corners; clamp the centre into each tile
        lower = np.stack([gx, gy], axis=-1) * self.tile_size
        center = actual.center.as_array()
        closest = np.clip(center, lower, lower + self.tile_size)
        hit = np.linalg.norm(closest - center, axis=-1) <= r
        for x, y in zip(gx[hit].tolist(), gy[hit].tolist()):
            self._table[self._index(x, y)].add(entity)

    def remove_from_all(self, entity: Hashable) -> None:
        for cell in self._table:
            cell.discard(entity)

    # --- queries --------------------------------------------------------

    def get_neighbor_entities_of_point(self, point: Vector2, viewport: Viewport) -> Optional[List[Hashable]]:
        """Entities in the 3x3 block of tiles around ``point`` (virtual space).

        ``None`` when the point falls outside the grid.
        """

        center = self._cell(viewport.to_actual(point))
        if center is None:
            return None
        cx, cy = center % self.x_tiles, center // self.x_tiles
        found: dict = {}
        for y in range(max(cy - 1, 0), min(cy + 1, self.y_tiles - 1) + 1):
            for x in range(max(cx - 1, 0), min(cx + 1, self.x_tiles - 1) + 1):
                for entity in self._table[self._index(x, y)]:
                    found.setdefault(entity, None)
        return list(found)

    def get_neighbor_entities_of_aabb(self, aabb: AABB) -> Set[Hashable]:
        """Entities in every tile overlapped by ``aabb`` (actual space)."""

        x_min, y_min = self._unlimited_cell(Vector2(aabb.x, aabb.y))
        x_max, y_max = self._unlimited_cell(Vector2(aabb.max_x, aabb.max_y))
        result: Set[Hashable] = set()
        for y in range(max(y_min, 0), min(y_max, self.y_tiles - 1) + 1):
            for x in range(max(x_min, 0), min(x_max, self.x_tiles - 1) + 1):
                result.update(self._table[self._index(x, y)])
        return result

    # --- grid arithmetic ------------------------------------------------

    def _unlimited_cell(self, p: Vector2) -> Tuple[int, int]:
        return math.floor(p.x / self.tile_size), math.floor(p.y / self.tile_size)

    def _cell(self, p: Vector2) -> Optional[Tile]:
        """Tile holding ``p`` (actual space), or ``None`` outside the grid."""

        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            return None
        x, y = self._unlimited_cell(p)
        if 0 <= x < self.x_tiles and 0 <= y < self.y_tiles:
            return self._index(x, y)
        return None

    def _index(self, x: int, y: int) -> Tile:
        if not (0 <= x < self.x_tiles and 0 <= y < self.y_tiles):
            raise SpatialIndexError(
                f"tile ({x}, {y}) outside {self.x_tiles}x{self.y_tiles} grid"
            )
        return y * self.x_tiles + x

    def insert_all(self, items: Iterable[Tuple[Hashable, object]], viewport: Viewport) -> None:
        for entity, geometry in items:
            self.insert(entity, geometry, viewport)


__all__ = ["SpatialHashTable", "Tile"]
