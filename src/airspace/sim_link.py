# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""In-process simulated arena for running Ground Control without a server.

Provides SimArena, a tiny stand-in for a game server, and SimLink, the
GameLink backend for ``sim://`` URLs.  Every SimLink connected to the same
URL shares one arena.  Uses in-process message passing (no sockets).

The arena understands just enough to exercise the controller and its
wingmen: players join, leave, chat and move; aircraft holding thrust fly
towards wherever they last pointed.  Links record everything they send in
``actions`` so tests can assert on it.
"""

from __future__ import annotations

import asyncio
import math
from typing import ClassVar, Optional

from loguru import logger

from airspace.link import (
    ChatPublic,
    Key,
    LinkEvent,
    LoginRequest,
    Player,
    PlayerJoin,
    PlayerLeave,
    ProtocolError,
    World,
    WorldUpdate,
)
from airspace.terrain import OccupancyGrid

# Flight speed of a thrusting aircraft, world units per second
_FLIGHT_SPEED = 330.0

# Reported round-trip latency, ms
_DEFAULT_PING = 20

# Queue sentinel: the session is gone
_CLOSED = object()


class SimArena:
    """A simulated game server shared by all links to one URL.

    Usage:
        arena = SimArena.named("sim://local")
        pid = arena.add_player("alice", 100.0, 200.0)
        arena.say(pid, "--gc-wings 2")
    """

    _arenas: ClassVar[dict[str, SimArena]] = {}

    def __init__(self, url: str, grid: Optional[OccupancyGrid] = None) -> None:
        self.url = url
        self.grid = grid
        self.ping = _DEFAULT_PING
        self.players: dict[int, Player] = {}
        self.chat_log: list[tuple[str, str]] = []  # (speaker name, text)
        self._links: dict[int, SimLink] = {}
        self._next_id = 1
        self._accepting = True

    @classmethod
    def named(cls, url: str) -> SimArena:
        """Process-wide arena for ``url``, created on first use."""
        arena = cls._arenas.get(url)
        if arena is None:
            arena = cls(url)
            cls._arenas[url] = arena
        return arena

    @classmethod
    def reset_all(cls) -> None:
        """Forget every arena (test isolation)."""
        cls._arenas.clear()

    @property
    def links(self) -> list[SimLink]:
        return list(self._links.values())

    # -- Players ---------------------------------------------------------------

    def add_player(self, name: str, x: float = 0.0, y: float = 0.0) -> int:
        """Add a player with no link (a human, as far as the links know)."""
        player = Player(id=self._allocate_id(), name=self._unique_name(name), x=x, y=y)
        self.players[player.id] = player
        self._broadcast(PlayerJoin(player_id=player.id, name=player.name))
        return player.id

    def move_player(self, player_id: int, x: float, y: float) -> None:
        player = self.players[player_id]
        self.players[player_id] = Player(id=player.id, name=player.name, x=x, y=y)
        self._broadcast(WorldUpdate())

    def remove_player(self, player_id: int) -> None:
        if self.players.pop(player_id, None) is None:
            return
        self._links.pop(player_id, None)
        self._broadcast(PlayerLeave(player_id=player_id))

    def say(self, player_id: int, text: str) -> None:
        """Public chat from a player."""
        player = self.players.get(player_id)
        if player is None:
            raise LookupError(f"no player {player_id} in {self.url}")
        self.chat_log.append((player.name, text))
        self._broadcast(ChatPublic(player_id=player_id, text=text))

    def player_named(self, name: str) -> Optional[Player]:
        for player in self.players.values():
            if player.name == name:
                return player
        return None

    # -- Simulation ------------------------------------------------------------

    def step(self, dt: float) -> None:
        """Advance flight by ``dt`` seconds and notify every link."""
        for pid, link in list(self._links.items()):
            player = self.players.get(pid)
            if player is None or Key.UP not in link.keys or link.aim is None:
                continue
            dx = link.aim[0] - player.x
            dy = link.aim[1] - player.y
            dist = math.hypot(dx, dy)
            if dist < 1e-6:
                continue
            travel = min(dist, _FLIGHT_SPEED * dt)
            nx = player.x + dx / dist * travel
            ny = player.y + dy / dist * travel
            if self.grid is not None and self.grid.is_occupied(self.grid.world_to_grid(nx, ny)):
                continue
            self.players[pid] = Player(id=pid, name=player.name, x=nx, y=ny)
        self._broadcast(WorldUpdate())

    async def run(self, interval: float = 0.1) -> None:
        """Step the arena forever at a fixed interval."""
        logger.info(f"Simulated arena {self.url} running ({interval * 1000:.0f} ms ticks)")
        while True:
            await asyncio.sleep(interval)
            self.step(interval)

    def shutdown(self) -> None:
        """Drop every session, as if the server went away."""
        self._accepting = False
        for link in list(self._links.values()):
            link._deliver(_CLOSED)
        self._links.clear()

    # -- Internal --------------------------------------------------------------

    def _join(self, name: str, link: SimLink) -> int:
        if not self._accepting:
            raise ProtocolError(f"{self.url} is not accepting logins")
        player = Player(id=self._allocate_id(), name=self._unique_name(name))
        self.players[player.id] = player
        self._links[player.id] = link
        self._broadcast(PlayerJoin(player_id=player.id, name=player.name))
        return player.id

    def _allocate_id(self) -> int:
        pid = self._next_id
        self._next_id += 1
        return pid

    def _unique_name(self, name: str) -> str:
        taken = {p.name for p in self.players.values()}
        if name not in taken:
            return name
        n = 2
        while f"{name}#{n}" in taken:
            n += 1
        return f"{name}#{n}"

    def _broadcast(self, event: LinkEvent) -> None:
        for link in list(self._links.values()):
            link._deliver(event)


class SimLink:
    """GameLink backend talking to a SimArena."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.world = World()
        self.arena: Optional[SimArena] = None
        self.actions: list[tuple] = []
        self.keys: set[Key] = set()
        self.aim: Optional[tuple[float, float]] = None
        self._queue: Optional[asyncio.Queue] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def connect(self) -> None:
        arena = SimArena.named(self.url)
        if not arena._accepting:
            raise ProtocolError(f"connection refused by {self.url}")
        self.arena = arena
        self._queue = asyncio.Queue()
        logger.debug(f"SimLink connected to {self.url}")

    async def login(self, request: LoginRequest) -> None:
        arena = self._require_arena()
        self.world.me = arena._join(request.name, self)
        self._sync()
        self.actions.append(("login", request.name))

    async def next_event(self) -> LinkEvent:
        if self._closed or self._queue is None:
            raise ProtocolError("link is closed")
        event = await self._queue.get()
        if event is _CLOSED:
            self._closed = True
            raise ProtocolError(f"connection to {self.url} lost")
        return event

    async def chat(self, text: str) -> None:
        arena = self._require_arena()
        self.actions.append(("chat", text))
        arena.say(self.world.get_me().id, text)

    async def command(self, com: str, data: str) -> None:
        self._require_arena()
        self.actions.append(("command", com, data))

    async def press_key(self, key: Key) -> None:
        self._require_arena()
        self.keys.add(key)
        self.actions.append(("press", key))

    async def release_key(self, key: Key) -> None:
        self._require_arena()
        self.keys.discard(key)
        self.actions.append(("release", key))

    async def point_at(self, position: tuple[float, float]) -> None:
        self._require_arena()
        self.aim = (float(position[0]), float(position[1]))
        self.actions.append(("point", self.aim))

    async def wait(self, seconds: float) -> None:
        self._require_arena()
        await asyncio.sleep(seconds)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.arena is not None and self.world.me is not None:
            self.arena.remove_player(self.world.me)
        if self._queue is not None:
            self._queue.put_nowait(_CLOSED)

    # -- Internal --------------------------------------------------------------

    def _require_arena(self) -> SimArena:
        if self._closed or self.arena is None:
            raise ProtocolError("link is not connected")
        return self.arena

    def _sync(self) -> None:
        """Copy the arena's players and latency into this link's world."""
        if self.arena is None:
            return
        self.world.players = dict(self.arena.players)
        self.world.ping = self.arena.ping

    def _deliver(self, event: object) -> None:
        if self._closed or self._queue is None:
            return
        if event is not _CLOSED:
            self._sync()
        self._queue.put_nowait(event)
