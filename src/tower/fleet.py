# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""FleetManager — ground control for one game server.

There is one FleetManager per connected server.  It spectates the game
through its own link, reads public chat and manages the wingmen assigned
to each player:

  1. A chat line is run through ``tower.commands.interpret`` together with
     the player's current wingman count.
  2. Bad commands get their error text as a chat reply.
  3. SetWings spawns that many Wingman tasks, each with a fresh
     ShutdownFlag; the flags are stored under the player's id.
  4. ClearWings (or the player leaving) drops the entry and sets every
     flag.  The wingmen notice on their next event; we never wait for them.
  5. Reply lines go out one chat message at a time with a fixed pause
     after each, to stay under the server's flood limit.

Losing our own link ends ``run()``.  Every other send failure is logged
and ignored.
"""

from __future__ import annotations

from typing import Callable, Coroutine, Optional

from loguru import logger

from airspace.link import ChatPublic, GameLink, LinkEvent, PlayerJoin, PlayerLeave, ProtocolError
from tower.commands import HELP, ClearWings, CommandError, SetWings, interpret
from tower.supervisor import TaskSupervisor
from tower.wingman import ShutdownFlag, Wingman

WingmanFactory = Callable[[str, str, ShutdownFlag], Coroutine]


def spawn_wingman(url: str, target: str, shutdown: ShutdownFlag) -> Coroutine:
    """Default factory: a Wingman run coroutine."""
    return Wingman(url, target, shutdown).run()


class FleetManager:
    """Handles commands and wingmen for one server."""

    def __init__(
        self,
        url: str,
        link: GameLink,
        max_wingmen: int = 5,
        announce: bool = True,
        chat_pacing: float = 1.0,
        supervisor: Optional[TaskSupervisor] = None,
        wingman_factory: WingmanFactory = spawn_wingman,
    ) -> None:
        self.url = url
        self.link = link
        self.max_wingmen = max_wingmen
        self.announce = announce
        self.chat_pacing = chat_pacing
        self.supervisor = supervisor if supervisor is not None else TaskSupervisor(f"wingmen@{url}")
        self._wingman_factory = wingman_factory
        # Target player id -> one flag per wingman chasing them
        self._fleets: dict[int, list[ShutdownFlag]] = {}
        self._spawned = 0
        self._called_off = 0

    # --- Properties ---

    @property
    def fleets(self) -> dict[int, list[ShutdownFlag]]:
        return {pid: list(flags) for pid, flags in self._fleets.items()}

    def wingmen_for(self, player_id: int) -> int:
        return len(self._fleets.get(player_id, ()))

    @property
    def stats(self) -> dict:
        return {
            "url": self.url,
            "fleets": len(self._fleets),
            "wingmen": sum(len(f) for f in self._fleets.values()),
            "spawned": self._spawned,
            "called_off": self._called_off,
            "tasks": self.supervisor.stats,
        }

    # --- Event loop ---

    async def run(self) -> None:
        """Handle events until our own link fails."""
        logger.info(f"Ground control standing by on {self.url}")
        try:
            while True:
                try:
                    event = await self.link.next_event()
                except ProtocolError as e:
                    logger.error(f"Error awaiting next event from {self.url}: {e}")
                    return
                await self.handle_event(event)
        finally:
            # Nobody is left to call these wingmen off
            for player_id in list(self._fleets):
                self._clear_wingmen(player_id)
            logger.info(f"Ground control on {self.url} stopped: {self.stats}")

    async def handle_event(self, event: LinkEvent) -> None:
        if isinstance(event, ChatPublic):
            await self._handle_message(event.player_id, event.text)
        elif isinstance(event, PlayerLeave):
            self._clear_wingmen(event.player_id)
        elif isinstance(event, PlayerJoin) and self.announce:
            await self._chat(
                f"Ground Control, standing by for {event.name}! Use {HELP} for help."
            )

    # --- Internal ---

    async def _handle_message(self, player_id: int, text: str) -> None:
        world = self.link.world
        if player_id == world.me:
            return  # our own replies echoed back

        player = world.get(player_id)
        if player is None:
            logger.warning(f"Chat from unknown player ID {player_id} ignored")
            return

        wings = self.wingmen_for(player_id)
        try:
            response = interpret(text, player.name, wings, self.max_wingmen)
        except CommandError as err:
            logger.info(f"Rejected command from {player.name}: {err}")
            await self._chat(str(err))
            return
        if response is None:
            return

        if isinstance(response.action, SetWings):
            self._spawn_wingmen(player_id, player.name, response.action.count)
        elif isinstance(response.action, ClearWings):
            self._clear_wingmen(player_id)

        for line in response.lines:
            await self._chat(line)
            await self._pause()

    def _spawn_wingmen(self, player_id: int, name: str, count: int) -> None:
        flags: list[ShutdownFlag] = []
        for i in range(count):
            flag = ShutdownFlag()
            self.supervisor.spawn(
                self._wingman_factory(self.url, name, flag),
                name=f"wingman:{name}:{i}",
            )
            flags.append(flag)
        self._fleets[player_id] = flags
        self._spawned += count
        logger.info(f"Spawned {count} wingmen on {name} ({self.url})")

    def _clear_wingmen(self, player_id: int) -> None:
        flags = self._fleets.pop(player_id, None)
        if not flags:
            return
        for flag in flags:
            flag.set()
        self._called_off += len(flags)
        logger.debug(f"Calling off {len(flags)} wings from player {player_id}")

    async def _chat(self, text: str) -> None:
        try:
            await self.link.chat(text)
        except ProtocolError as e:
            logger.warning(f"Chat on {self.url} failed: {e}")

    async def _pause(self) -> None:
        try:
            await self.link.wait(self.chat_pacing)
        except ProtocolError as e:
            logger.warning(f"Wait on {self.url} failed: {e}")
