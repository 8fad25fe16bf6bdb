# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Ground Control — chat-commanded wingman dispatcher for AIRMASH.

One FleetManager per game server spectates the game, listens to public
chat and spawns or calls off Wingman bots that chase a player around the
map.  Start it with the ``ground-control`` command (see ``tower.main``).
"""

__version__ = "0.1.0"
