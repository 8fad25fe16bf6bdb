# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Compiled-in mountain footprints for the AIRMASH map.

Each entry is a closed polygon of (x, y) world coordinates tracing the
outline of one mountain range.  Outlines are coarse: at 64-unit grid
resolution anything finer than a cell is lost anyway.

Rasterised into the occupancy grid by ``airspace.terrain.default_grid``.
"""

from __future__ import annotations

MOUNTAINS: tuple[tuple[tuple[float, float], ...], ...] = (
    # Far west coast
    ((-15800.0, -6900.0), (-14600.0, -7300.0), (-13900.0, -6500.0),
     (-14300.0, -5600.0), (-15500.0, -5400.0)),
    ((-15300.0, -1800.0), (-14100.0, -2600.0), (-13000.0, -1900.0),
     (-13200.0, -700.0), (-14600.0, -300.0)),
    ((-15900.0, 3100.0), (-14700.0, 2500.0), (-13600.0, 3300.0),
     (-14000.0, 4700.0), (-15400.0, 4900.0)),
    # Western highlands
    ((-12400.0, -5200.0), (-10800.0, -5900.0), (-9700.0, -5100.0),
     (-10100.0, -3900.0), (-11800.0, -3700.0)),
    ((-11600.0, 1000.0), (-10300.0, 200.0), (-9100.0, 800.0),
     (-9300.0, 2300.0), (-10900.0, 2600.0)),
    ((-12900.0, 6000.0), (-11200.0, 5400.0), (-10100.0, 6300.0),
     (-10800.0, 7600.0), (-12500.0, 7500.0)),
    # Central west ridge
    ((-8300.0, -7600.0), (-7000.0, -7900.0), (-6200.0, -6800.0),
     (-6900.0, -5800.0), (-8100.0, -6100.0)),
    ((-7700.0, -2300.0), (-6500.0, -3200.0), (-5300.0, -2500.0),
     (-5400.0, -1100.0), (-6900.0, -800.0)),
    ((-8200.0, 3600.0), (-6600.0, 3000.0), (-5800.0, 4100.0),
     (-6400.0, 5300.0), (-7900.0, 5100.0)),
    # Central massif
    ((-3900.0, -5900.0), (-2600.0, -6600.0), (-1500.0, -5800.0),
     (-1800.0, -4600.0), (-3300.0, -4300.0)),
    ((-3400.0, 600.0), (-1900.0, -200.0), (-500.0, 500.0),
     (-800.0, 2000.0), (-2600.0, 2300.0)),
    ((-2500.0, 5600.0), (-1100.0, 5000.0), (200.0, 5800.0),
     (-200.0, 7100.0), (-1900.0, 7200.0)),
    ((1300.0, -3300.0), (2700.0, -4000.0), (3900.0, -3100.0),
     (3500.0, -1900.0), (1900.0, -1700.0)),
    ((1800.0, 2600.0), (3300.0, 1900.0), (4500.0, 2800.0),
     (4000.0, 4100.0), (2400.0, 4200.0)),
    # Central east ridge
    ((5600.0, -7100.0), (7100.0, -7700.0), (8200.0, -6800.0),
     (7600.0, -5600.0), (6000.0, -5700.0)),
    ((6300.0, -1600.0), (7600.0, -2300.0), (8900.0, -1500.0),
     (8600.0, -200.0), (6900.0, 100.0)),
    ((5900.0, 4600.0), (7400.0, 3900.0), (8500.0, 4900.0),
     (8000.0, 6300.0), (6300.0, 6200.0)),
    # Eastern highlands
    ((10200.0, -4800.0), (11800.0, -5500.0), (12900.0, -4500.0),
     (12300.0, -3300.0), (10700.0, -3400.0)),
    ((10500.0, 700.0), (12000.0, 0.0), (13200.0, 900.0),
     (12700.0, 2300.0), (11000.0, 2400.0)),
    ((10900.0, 5900.0), (12400.0, 5200.0), (13500.0, 6100.0),
     (13000.0, 7500.0), (11300.0, 7400.0)),
    # Far east coast
    ((14200.0, -7500.0), (15700.0, -7900.0), (16200.0, -6700.0),
     (15600.0, -5700.0), (14500.0, -6000.0)),
    ((14400.0, -1400.0), (15800.0, -2100.0), (16300.0, -800.0),
     (15900.0, 600.0), (14600.0, 300.0)),
    ((14300.0, 3900.0), (15700.0, 3300.0), (16300.0, 4600.0),
     (15800.0, 5900.0), (14500.0, 5500.0)),
)
