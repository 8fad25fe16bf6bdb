# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Root conftest — isolate process-wide registries between tests."""

import pytest

from airspace import link as link_module
from airspace.sim_link import SimArena


@pytest.fixture(autouse=True)
def _isolate_registries():
    """Fresh simulated arenas and link backends for every test."""
    SimArena.reset_all()
    backends = dict(link_module._backends)
    yield
    SimArena.reset_all()
    link_module._backends.clear()
    link_module._backends.update(backends)
