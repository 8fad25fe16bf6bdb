# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""OccupancyGrid -- static terrain map for wingman navigation.

Architecture
------------
The AIRMASH world spans 32768 x 16384 world units, centred on the origin
(+X = east, +Y = south, as the game server reports positions).  The grid
divides it into 512 x 256 cells of 64 world units.  A cell is either free
air or blocked by a mountain.

The grid is built once per process from the compiled-in mountain
footprints in ``airspace.terrain_data`` and is never mutated afterwards,
so any number of concurrent wingman loops can read it without locking.

Coordinate transform:
  world -> grid: shift by half the world extent, divide by cell size,
                 floor, clamp into [0, width-1] x [0, height-1]
  grid -> world: centre of the cell

Anything outside the grid counts as occupied, so search and line-of-sight
never leave the map.
"""

from __future__ import annotations

import functools
import math
from typing import Iterable, NamedTuple, Optional, Sequence

import numpy as np
from loguru import logger

GRID_WIDTH = 512
GRID_HEIGHT = 256
CELL_SIZE = 64.0

# Row-major scan of the 3x3 neighbourhood, centre excluded
_NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (dx, dy)
    for dy in (-1, 0, 1)
    for dx in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
)

Polygon = Sequence[tuple[float, float]]


class GridPosition(NamedTuple):
    """Integer cell coordinates in an occupancy grid."""

    x: int
    y: int


class OccupancyGrid:
    """Immutable boolean terrain grid with world <-> grid transforms.

    ``blocked[y][x]`` is True where the cell is impassable.  The array is
    copied and write-protected on construction.

    Usage:
        grid = default_grid()
        cell = grid.world_to_grid(x, y)
        if not grid.is_occupied(cell):
            ...
    """

    def __init__(self, blocked: np.ndarray, cell_size: float = CELL_SIZE) -> None:
        arr = np.array(blocked, dtype=bool)
        if arr.ndim != 2 or arr.size == 0:
            raise ValueError(f"occupancy grid must be a non-empty 2D array, got shape {arr.shape}")
        arr.setflags(write=False)
        self._blocked = arr
        self.height, self.width = arr.shape
        self.cell_size = float(cell_size)
        self._half_x = self.width * self.cell_size / 2.0
        self._half_y = self.height * self.cell_size / 2.0
        # Plain nested lists: per-cell lookups in A* are much cheaper than numpy indexing
        self._rows: list[list[bool]] = arr.tolist()

    # -- Construction ----------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Iterable[str], cell_size: float = CELL_SIZE) -> OccupancyGrid:
        """Build a grid from text rows: ``#`` is blocked, anything else is free.

        Rows are listed top to bottom (y = 0 first).  All rows must have the
        same length.
        """
        rows = list(rows)
        widths = {len(r) for r in rows}
        if len(widths) != 1:
            raise ValueError("all rows must have the same width")
        blocked = np.array([[ch == "#" for ch in row] for row in rows], dtype=bool)
        return cls(blocked, cell_size=cell_size)

    @classmethod
    def from_polygons(
        cls,
        polygons: Iterable[Polygon],
        width: int = GRID_WIDTH,
        height: int = GRID_HEIGHT,
        cell_size: float = CELL_SIZE,
    ) -> OccupancyGrid:
        """Rasterise world-space polygons into a grid.

        A cell is blocked when its centre falls inside any polygon.
        """
        blocked = np.zeros((height, width), dtype=bool)
        half_x = width * cell_size / 2.0
        half_y = height * cell_size / 2.0

        for polygon in polygons:
            if len(polygon) < 3:
                continue
            xs = [p[0] for p in polygon]
            ys = [p[1] for p in polygon]

            # Only test cells inside the polygon's bounding box
            col_start = max(0, int(math.floor((min(xs) + half_x) / cell_size)))
            col_end = min(width - 1, int(math.floor((max(xs) + half_x) / cell_size)))
            row_start = max(0, int(math.floor((min(ys) + half_y) / cell_size)))
            row_end = min(height - 1, int(math.floor((max(ys) + half_y) / cell_size)))
            if col_start > col_end or row_start > row_end:
                continue

            cols = np.arange(col_start, col_end + 1)
            rows = np.arange(row_start, row_end + 1)
            cx = cols * cell_size + cell_size / 2.0 - half_x
            cy = rows * cell_size + cell_size / 2.0 - half_y
            px, py = np.meshgrid(cx, cy)
            inside = _points_in_polygon(px, py, polygon)
            blocked[row_start:row_end + 1, col_start:col_end + 1] |= inside

        return cls(blocked, cell_size=cell_size)

    # -- Queries ---------------------------------------------------------------

    @property
    def blocked(self) -> np.ndarray:
        """Read-only view of the blocked mask, indexed ``[y, x]``."""
        return self._blocked

    @property
    def blocked_count(self) -> int:
        return int(self._blocked.sum())

    def in_bounds(self, cell: tuple[int, int]) -> bool:
        return 0 <= cell[0] < self.width and 0 <= cell[1] < self.height

    def is_occupied(self, cell: tuple[int, int]) -> bool:
        """True if the cell is outside the grid or blocked by terrain."""
        x, y = cell
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return True
        return self._rows[y][x]

    def neighbors(self, cell: tuple[int, int]) -> list[GridPosition]:
        """Unoccupied cells among the 8 surrounding ``cell``.

        Scanned row by row from the top-left, so the order is stable.
        """
        x, y = cell
        result: list[GridPosition] = []
        for dx, dy in _NEIGHBOR_OFFSETS:
            pos = GridPosition(x + dx, y + dy)
            if not self.is_occupied(pos):
                result.append(pos)
        return result

    def free_neighbor(self, cell: tuple[int, int]) -> Optional[GridPosition]:
        """First unoccupied neighbour of ``cell``, or None if walled in."""
        free = self.neighbors(cell)
        return free[0] if free else None

    # -- Coordinate conversion -------------------------------------------------

    def world_to_grid(self, x: float, y: float) -> GridPosition:
        """Convert a world position to the cell containing it.

        Positions off the map are clamped to the nearest edge cell.
        """
        col = _clamp_index((x + self._half_x) / self.cell_size, self.width)
        row = _clamp_index((y + self._half_y) / self.cell_size, self.height)
        return GridPosition(col, row)

    def grid_to_world(self, cell: tuple[int, int]) -> tuple[float, float]:
        """World coordinates of the centre of ``cell``."""
        x = cell[0] * self.cell_size + self.cell_size / 2.0 - self._half_x
        y = cell[1] * self.cell_size + self.cell_size / 2.0 - self._half_y
        return (x, y)

    def __repr__(self) -> str:
        return (
            f"OccupancyGrid({self.width}x{self.height}, cell_size={self.cell_size:g}, "
            f"blocked={self.blocked_count})"
        )


@functools.lru_cache(maxsize=1)
def default_grid() -> OccupancyGrid:
    """The process-wide AIRMASH terrain grid, built on first use."""
    from airspace.terrain_data import MOUNTAINS

    grid = OccupancyGrid.from_polygons(MOUNTAINS)
    logger.info(
        f"Terrain grid loaded: {grid.width}x{grid.height} cells, "
        f"{grid.blocked_count} blocked from {len(MOUNTAINS)} mountains"
    )
    return grid


# ---------------------------------------------------------------------------
# Internal geometry helpers
# ---------------------------------------------------------------------------

def _clamp_index(value: float, size: int) -> int:
    """Floor ``value`` and clamp it into [0, size-1]."""
    if math.isnan(value) or value < 0.0:
        return 0
    if value >= size:
        return size - 1
    return int(value)


def _points_in_polygon(px: np.ndarray, py: np.ndarray, polygon: Polygon) -> np.ndarray:
    """Vectorised ray-casting point-in-polygon test.

    Casts a ray from every point in the +X direction and counts how many
    polygon edges it crosses.  Odd = inside, even = outside.
    """
    inside = np.zeros(px.shape, dtype=bool)
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if yi != yj:
            crosses = (yi > py) != (yj > py)
            x_hit = (xj - xi) * (py - yi) / (yj - yi) + xi
            inside ^= crosses & (px < x_hit)
        j = i
    return inside
