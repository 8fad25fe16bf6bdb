# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Airspace — spatial engine and game link contract for Ground Control.

This package contains the occupancy grid, line-of-sight and A* search used
by wingmen to fly around mountains, the per-tick pursuit planner, and the
GameLink interface every game server backend implements.

The ground controller itself (command handling, fleets, wingmen) lives in
the ``tower`` package and uses these subsystems to operate.
"""

__version__ = "0.1.0"
