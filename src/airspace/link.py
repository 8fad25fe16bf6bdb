# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""GameLink — the contract between Ground Control and a game server session.

A GameLink is one logged-in player session on one game server.  Ground
Control owns one for itself per server and every wingman owns its own.
The wire protocol behind a link is the backend's business; the rest of the
code only sees this interface, the World snapshot and the event types
defined here.

Backends are chosen by URL scheme.  ``sim`` (the in-process arena in
``airspace.sim_link``) is built in; others are discovered from installed
``airspace.links`` entry points, e.g. in a backend's pyproject::

    [project.entry-points."airspace.links"]
    wss = "airmash_link:AirmashLink"

A factory takes the server URL and returns an unconnected link.
"""

from __future__ import annotations

import enum
import importlib
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Callable, Optional, Protocol, Union, runtime_checkable
from urllib.parse import urlsplit

from loguru import logger

ENTRY_POINT_GROUP = "airspace.links"

_BUILTIN_BACKENDS: dict[str, str] = {
    "sim": "airspace.sim_link:SimLink",
}


class ProtocolError(Exception):
    """A link failed to connect, send or receive."""


class Key(enum.IntEnum):
    """Player control keys, numbered as on the AIRMASH wire."""

    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4
    FIRE = 5
    SPECIAL = 6


@dataclass(frozen=True)
class LoginRequest:
    """Login parameters sent when a session starts."""

    name: str
    flag: str = "UN"
    session: str = "none"
    horizon_x: int = 3000
    horizon_y: int = 3000
    protocol: int = 5


@dataclass(frozen=True)
class Player:
    """A player as last reported by the server."""

    id: int
    name: str
    x: float = 0.0
    y: float = 0.0

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


class World:
    """A link's view of the game: players, own id and latency.

    Consumers only read it.  Backends replace Player entries as updates
    arrive (``upsert`` / ``remove``); Player objects are immutable, so a
    position read from the world is a copy that never changes under you.
    """

    def __init__(self) -> None:
        self.players: dict[int, Player] = {}
        self.me: Optional[int] = None
        self.ping: int = 0  # round-trip latency, ms

    def get(self, player_id: int) -> Optional[Player]:
        return self.players.get(player_id)

    def by_name(self, name: str) -> Optional[Player]:
        for player in self.players.values():
            if player.name == name:
                return player
        return None

    @property
    def names(self) -> dict[str, int]:
        return {p.name: pid for pid, p in self.players.items()}

    def get_me(self) -> Player:
        """Own player.  Raises LookupError before login completes."""
        if self.me is None or self.me not in self.players:
            raise LookupError("not logged in")
        return self.players[self.me]

    def upsert(self, player: Player) -> None:
        self.players[player.id] = player

    def remove(self, player_id: int) -> Optional[Player]:
        return self.players.pop(player_id, None)


# -- Events -------------------------------------------------------------------

@dataclass(frozen=True)
class ChatPublic:
    """A public chat line from ``player_id``."""

    player_id: int
    text: str


@dataclass(frozen=True)
class PlayerJoin:
    player_id: int
    name: str


@dataclass(frozen=True)
class PlayerLeave:
    player_id: int


@dataclass(frozen=True)
class WorldUpdate:
    """The world snapshot changed (positions, latency, ...)."""


LinkEvent = Union[ChatPublic, PlayerJoin, PlayerLeave, WorldUpdate]


@runtime_checkable
class GameLink(Protocol):
    """Interface every game server backend must satisfy.

    All methods that talk to the server raise ProtocolError on failure.
    """

    url: str
    world: World

    async def connect(self) -> None:
        """Open the session."""
        ...

    async def login(self, request: LoginRequest) -> None:
        """Log in and wait until the server confirms it."""
        ...

    async def next_event(self) -> LinkEvent:
        """Wait for the next inbound event; the world is updated first."""
        ...

    async def chat(self, text: str) -> None:
        ...

    async def command(self, com: str, data: str) -> None:
        """Send a server command such as ``spectate``."""
        ...

    async def press_key(self, key: Key) -> None:
        ...

    async def release_key(self, key: Key) -> None:
        ...

    async def point_at(self, position: tuple[float, float]) -> None:
        """Turn the player's aircraft towards a world position."""
        ...

    async def wait(self, seconds: float) -> None:
        """Sleep while keeping the session alive."""
        ...

    async def close(self) -> None:
        ...


LinkFactory = Callable[[str], GameLink]

_backends: dict[str, LinkFactory] = {}


def register_link(scheme: str, factory: LinkFactory) -> None:
    """Register a link factory for a URL scheme, replacing any previous one."""
    _backends[scheme.lower()] = factory
    logger.debug(f"Game link backend registered for '{scheme}://'")


def _load_factory(scheme: str) -> Optional[LinkFactory]:
    """Find the factory for a scheme: registered, built in, then entry points."""
    factory = _backends.get(scheme)
    if factory is not None:
        return factory

    target = _BUILTIN_BACKENDS.get(scheme)
    if target is not None:
        module_name, _, attr = target.partition(":")
        factory = getattr(importlib.import_module(module_name), attr)
    else:
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name == scheme:
                factory = ep.load()
                break

    if factory is not None:
        register_link(scheme, factory)
    return factory


async def open_link(url: str) -> GameLink:
    """Create a link for ``url`` and connect it.

    Raises:
        ProtocolError: no backend for the scheme, or the connection failed.
    """
    scheme = urlsplit(url).scheme.lower()
    factory = _load_factory(scheme)
    if factory is None:
        raise ProtocolError(f"no game link backend for scheme '{scheme}' ({url})")

    link = factory(url)
    try:
        await link.connect()
    except OSError as e:
        raise ProtocolError(f"connection to {url} failed: {e}") from e
    return link
