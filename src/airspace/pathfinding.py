# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Line-of-sight and A* search over an OccupancyGrid.

Line of sight walks the cells of a Bresenham line and reports the first
occupied one.  A* moves in 8 directions at a uniform cost of 1 per step and
is guided by the Manhattan distance to the goal.

The Manhattan heuristic overestimates diagonal moves, so paths are valid
but not guaranteed shortest.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Optional

from airspace.terrain import GridPosition, OccupancyGrid


def manhattan(a: tuple[int, int], b: tuple[int, int]) -> int:
    """Manhattan distance between two cells."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def bresenham(a: tuple[int, int], b: tuple[int, int]) -> list[GridPosition]:
    """Bresenham's line algorithm.  Returns the cells from ``a`` to ``b``.

    Both endpoints are included.  Handles all octants (steep, shallow,
    negative directions).
    """
    x0, y0 = a
    x1, y1 = b
    cells: list[GridPosition] = []
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    while True:
        cells.append(GridPosition(x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy

    return cells


def line_cells(a: tuple[int, int], b: tuple[int, int]) -> list[GridPosition]:
    """Cells on the line between ``a`` and ``b``, ordered from ``a``.

    The line is always rasterised from the lower endpoint so that
    ``line_cells(a, b)`` is exactly ``line_cells(b, a)`` reversed.
    """
    if tuple(a) <= tuple(b):
        return bresenham(a, b)
    cells = bresenham(b, a)
    cells.reverse()
    return cells


def obstacle_between(
    grid: OccupancyGrid, a: tuple[int, int], b: tuple[int, int]
) -> Optional[GridPosition]:
    """First occupied cell on the line from ``a`` to ``b``, or None if clear."""
    for cell in line_cells(a, b):
        if grid.is_occupied(cell):
            return cell
    return None


def astar(
    grid: OccupancyGrid, start: tuple[int, int], goal: tuple[int, int]
) -> Optional[list[GridPosition]]:
    """A* from ``start`` to ``goal`` over unoccupied cells.

    Returns the path including both endpoints, or None if ``goal`` cannot be
    reached.  ``start`` itself may be occupied; every other cell on the path
    is free.
    """
    start = GridPosition(*start)
    goal = GridPosition(*goal)
    if start == goal:
        return [start]

    # Heap entries: (estimated total, -cost so far, insertion order, cell).
    # Among equal estimates the deeper node is expanded first.
    counter = itertools.count()
    open_heap: list[tuple[int, int, int, GridPosition]] = [
        (manhattan(start, goal), 0, next(counter), start)
    ]
    costs: dict[GridPosition, int] = {start: 0}
    parents: dict[GridPosition, Optional[GridPosition]] = {start: None}

    while open_heap:
        _, neg_cost, _, cell = heapq.heappop(open_heap)
        cost = -neg_cost
        if cell == goal:
            return _reconstruct(parents, cell)
        if cost > costs[cell]:
            continue  # stale entry, a cheaper route was found since

        next_cost = cost + 1
        for nb in grid.neighbors(cell):
            if next_cost < costs.get(nb, next_cost + 1):
                costs[nb] = next_cost
                parents[nb] = cell
                heapq.heappush(
                    open_heap,
                    (next_cost + manhattan(nb, goal), -next_cost, next(counter), nb),
                )

    return None


def _reconstruct(
    parents: dict[GridPosition, Optional[GridPosition]], cell: GridPosition
) -> list[GridPosition]:
    path: list[GridPosition] = []
    node: Optional[GridPosition] = cell
    while node is not None:
        path.append(node)
        node = parents[node]
    path.reverse()
    return path
