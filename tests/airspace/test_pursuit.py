# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Tests for per-tick pursuit planning: fire gating and path override."""

import pytest

from airspace.pathfinding import manhattan
from airspace.pursuit import FIRE_RANGE, PATHFIND_RADIUS, plan_pursuit
from airspace.terrain import OccupancyGrid


def _walled_grid(width: int, wall_col: int, height: int = 9) -> OccupancyGrid:
    """Wall down ``wall_col`` with a single gap in the bottom row."""
    rows = []
    for y in range(height):
        row = ["."] * width
        if y < height - 1:
            row[wall_col] = "#"
        rows.append("".join(row))
    return OccupancyGrid.from_rows(rows)


OPEN = OccupancyGrid.from_rows(["." * 40] * 9)
NEAR_WALL = _walled_grid(width=40, wall_col=20)
FAR_WALL = _walled_grid(width=60, wall_col=45)


class TestFireGating:

    @pytest.mark.unit
    def test_fires_when_close_and_clear(self):
        own = OPEN.grid_to_world((10, 4))
        target = (own[0] + 300.0, own[1])
        plan = plan_pursuit(OPEN, own, target)
        assert plan.fire is True
        assert plan.aim == target
        assert plan.obstacle is None
        assert plan.path is None

    @pytest.mark.unit
    def test_holds_fire_when_far(self):
        own = OPEN.grid_to_world((5, 4))
        target = OPEN.grid_to_world((30, 4))
        plan = plan_pursuit(OPEN, own, target)
        assert plan.fire is False
        assert plan.aim == target

    @pytest.mark.unit
    def test_fire_range_is_strict(self):
        own = (0.0, 0.0)
        plan = plan_pursuit(OPEN, own, (FIRE_RANGE, 0.0))
        assert plan.fire is False
        plan = plan_pursuit(OPEN, own, (FIRE_RANGE - 1.0, 0.0))
        assert plan.fire is True

    @pytest.mark.unit
    def test_positions_not_modified(self):
        own = [10.0, 20.0]
        target = [30.0, 40.0]
        plan_pursuit(OPEN, own, target)
        assert own == [10.0, 20.0]
        assert target == [30.0, 40.0]


class TestObstacles:

    @pytest.mark.unit
    def test_near_obstacle_runs_astar_and_aims_at_second_cell(self):
        src, dst = (17, 1), (23, 1)
        own = NEAR_WALL.grid_to_world(src)
        target = NEAR_WALL.grid_to_world(dst)
        plan = plan_pursuit(NEAR_WALL, own, target)

        assert plan.obstacle == (20, 1)
        assert manhattan(src, plan.obstacle) < PATHFIND_RADIUS
        assert plan.fire is False
        assert plan.path is not None
        assert plan.path[0] == src
        assert plan.path[-1] == dst
        assert plan.aim == NEAR_WALL.grid_to_world(plan.path[1])

    @pytest.mark.unit
    def test_blocked_target_in_range_does_not_fire(self):
        own = NEAR_WALL.grid_to_world((19, 1))
        target = NEAR_WALL.grid_to_world((21, 1))
        plan = plan_pursuit(NEAR_WALL, own, target)
        assert plan.obstacle is not None
        assert plan.fire is False

    @pytest.mark.unit
    def test_far_obstacle_skips_astar(self):
        src, dst = (10, 1), (55, 1)
        own = FAR_WALL.grid_to_world(src)
        target = FAR_WALL.grid_to_world(dst)
        plan = plan_pursuit(FAR_WALL, own, target)

        assert plan.obstacle == (45, 1)
        assert manhattan(src, plan.obstacle) >= PATHFIND_RADIUS
        assert plan.path is None
        assert plan.aim == target
        assert plan.fire is False

    @pytest.mark.unit
    def test_occupied_target_cell_uses_free_neighbour(self):
        # Target hovers over the wall; its first free neighbour is (19, 0)
        src = (10, 0)
        own = NEAR_WALL.grid_to_world(src)
        target = NEAR_WALL.grid_to_world((20, 1))
        plan = plan_pursuit(NEAR_WALL, own, target)
        assert plan.obstacle is None
        assert plan.aim == target

    @pytest.mark.unit
    def test_enclosed_target_skips_pathfinding(self):
        grid = OccupancyGrid.from_rows([
            "..........",
            "......###.",
            "......###.",
            "......###.",
            "..........",
        ])
        own = grid.grid_to_world((0, 2))
        target = grid.grid_to_world((7, 2))
        plan = plan_pursuit(grid, own, target)
        assert plan.obstacle is None
        assert plan.path is None
        assert plan.aim == target

    @pytest.mark.unit
    def test_unreachable_target_keeps_raw_aim(self):
        grid = OccupancyGrid.from_rows([
            "....#....",
            "....#....",
            "....#....",
        ])
        own = grid.grid_to_world((2, 1))
        target = grid.grid_to_world((6, 1))
        plan = plan_pursuit(grid, own, target)
        assert plan.obstacle == (4, 1)
        assert plan.path is None
        assert plan.aim == target
        assert plan.fire is False
