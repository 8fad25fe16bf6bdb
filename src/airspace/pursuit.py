# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Pursuit planning -- where a wingman aims and whether it fires this tick.

A wingman flies straight at its target while the sky between them is
clear.  When a mountain gets in the way it holds fire, and if the mountain
is close it follows an A* path around it by aiming at the next cell of the
path.  Mountains far ahead are ignored until the wingman gets nearer, which
keeps the search cheap.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from airspace.pathfinding import astar, manhattan, obstacle_between
from airspace.terrain import GridPosition, OccupancyGrid

# Fire only when the target is this close (world units)
FIRE_RANGE = 500.0

# Obstacles at least this many cells away (Manhattan) do not trigger A*
PATHFIND_RADIUS = 16


@dataclass(frozen=True)
class PursuitPlan:
    """Control decision for one pursuit tick.

    Attributes:
        aim: World position to point at.
        fire: True to hold the fire key down.
        obstacle: First blocked cell between wingman and target, if any.
        path: A* path that produced ``aim``, when one was used.
    """

    aim: tuple[float, float]
    fire: bool
    obstacle: Optional[GridPosition] = None
    path: Optional[list[GridPosition]] = None


def plan_pursuit(
    grid: OccupancyGrid,
    own: tuple[float, float],
    target: tuple[float, float],
) -> PursuitPlan:
    """Plan one tick of pursuit from ``own`` towards ``target``.

    Both positions are world coordinates; neither is modified.
    """
    aim = (float(target[0]), float(target[1]))
    fire = math.hypot(target[0] - own[0], target[1] - own[1]) < FIRE_RANGE

    src = grid.world_to_grid(own[0], own[1])
    dst = grid.world_to_grid(target[0], target[1])

    # A* would flood the whole map looking for an occupied goal
    if grid.is_occupied(dst):
        free = grid.free_neighbor(dst)
        if free is None:
            return PursuitPlan(aim=aim, fire=fire)
        dst = free

    obstacle = obstacle_between(grid, src, dst)
    if obstacle is None:
        return PursuitPlan(aim=aim, fire=fire)

    if manhattan(src, obstacle) >= PATHFIND_RADIUS:
        return PursuitPlan(aim=aim, fire=False, obstacle=obstacle)

    path = astar(grid, src, dst)
    if path is not None and len(path) > 1:
        aim = grid.grid_to_world(path[1])
    return PursuitPlan(aim=aim, fire=False, obstacle=obstacle, path=path)
