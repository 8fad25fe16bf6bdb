# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Wingman — an autonomous bot that chases and shoots one player.

Each wingman is its own asyncio task with its own game session.  It logs
in under its target's name, finds the target and then, on every world
update, points at the target (or at the next cell of a path around a
mountain) and fires when close enough.

Lifecycle::

    CONNECTING -> LOGGING_IN -> ACQUIRING -> PURSUING -> TERMINATED

Any failure along the way ends the wingman; nothing is retried.  Once
spawned, the only way to stop a wingman from outside is its ShutdownFlag,
which it checks after every event.
"""

from __future__ import annotations

import enum
import threading
import time
from typing import Awaitable, Callable, Optional

from loguru import logger

from airspace.link import GameLink, Key, LoginRequest, Player, ProtocolError, World, open_link
from airspace.pursuit import plan_pursuit
from airspace.terrain import OccupancyGrid, default_grid

# Re-press thrust at least this often (seconds)
THRUST_INTERVAL = 0.5

# Bounds on the pause between pursuit ticks (ms)
MIN_TICK_MS = 10
MAX_TICK_MS = 1000


class ShutdownFlag:
    """One-way cancellation signal shared by ground control and a wingman.

    Starts clear and can only ever be set.  Setting it again is a no-op.
    Backed by threading.Event, so reads and the single write are atomic.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"ShutdownFlag(set={self.is_set()})"


class WingmanState(enum.Enum):
    CONNECTING = "connecting"
    LOGGING_IN = "logging_in"
    ACQUIRING = "acquiring"
    PURSUING = "pursuing"
    TERMINATED = "terminated"


def tick_delay(ping_ms: float) -> float:
    """Pause between pursuit ticks: twice the ping, clamped, in seconds."""
    ms = min(max(2 * ping_ms, MIN_TICK_MS), MAX_TICK_MS)
    return ms / 1000.0


class Wingman:
    """One wingman bound to a server and a target player name.

    We track the target by name, not id: player ids differ between
    sessions, so the id is looked up again in our own session.
    """

    def __init__(
        self,
        url: str,
        target: str,
        shutdown: ShutdownFlag,
        grid: Optional[OccupancyGrid] = None,
        link_factory: Callable[[str], Awaitable[GameLink]] = open_link,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.target = target
        self.shutdown = shutdown
        self.grid = grid if grid is not None else default_grid()
        self.state = WingmanState.CONNECTING
        self.ticks = 0
        self._link_factory = link_factory
        self._clock = clock

    async def run(self) -> None:
        """Run the wingman until it terminates.  Never raises."""
        try:
            await self._run()
        except Exception as e:
            logger.opt(exception=e).error(f"Wingman on {self.target} crashed: {e}")
        finally:
            self.state = WingmanState.TERMINATED
            logger.debug(f"Shutting down wingman on {self.target} ({self.ticks} ticks)")

    async def _run(self) -> None:
        self.state = WingmanState.CONNECTING
        try:
            link = await self._link_factory(self.url)
        except ProtocolError as e:
            logger.error(f"Wingman connection to {self.url} failed: {e}")
            return

        pursuing = False
        try:
            self.state = WingmanState.LOGGING_IN
            try:
                await link.login(LoginRequest(name=self.target))
            except ProtocolError as e:
                logger.error(f"Wingman login on {self.url} failed: {e}")
                return

            self.state = WingmanState.ACQUIRING
            target = _find_target(link.world, self.target)
            if target is None:
                logger.error(f"No player with name {self.target} in game")
                return

            self.state = WingmanState.PURSUING
            pursuing = True
            logger.info(f"Wingman pursuing {self.target} (id {target.id}) on {self.url}")
            try:
                await self._pursue(link, target.id)
            except ProtocolError as e:
                logger.warning(f"Wingman on {self.target} lost its link: {e}")
        finally:
            await self._stand_down(link, pursuing)

    async def _pursue(self, link: GameLink, target_id: int) -> None:
        await link.press_key(Key.UP)
        last_thrust = self._clock()

        while True:
            await link.next_event()

            if self.shutdown.is_set():
                logger.debug(f"Wingman on {self.target} called off")
                break

            world = link.world
            target = world.get(target_id)
            if target is None:
                logger.info(f"Target {self.target} left the game")
                break
            me = world.get(world.me) if world.me is not None else None
            if me is None:
                logger.warning(f"Wingman on {self.target} is no longer in the world")
                break

            now = self._clock()
            if now - last_thrust >= THRUST_INTERVAL:
                await link.press_key(Key.UP)
                last_thrust = now

            plan = plan_pursuit(self.grid, me.position, target.position)
            await link.point_at(plan.aim)
            if plan.fire:
                await link.press_key(Key.FIRE)
            else:
                await link.release_key(Key.FIRE)

            self.ticks += 1
            await link.wait(tick_delay(world.ping))

    async def _stand_down(self, link: GameLink, pursuing: bool) -> None:
        """Let go of the controls and close the session, best effort."""
        if pursuing:
            for key in (Key.UP, Key.FIRE):
                try:
                    await link.release_key(key)
                except ProtocolError as e:
                    logger.warning(f"Wingman on {self.target} could not release {key.name}: {e}")
        try:
            await link.close()
        except ProtocolError as e:
            logger.warning(f"Wingman on {self.target} could not close its link: {e}")


def _find_target(world: World, name: str) -> Optional[Player]:
    """The player called ``name`` other than ourselves."""
    for player in world.players.values():
        if player.name == name and player.id != world.me:
            return player
    return None
