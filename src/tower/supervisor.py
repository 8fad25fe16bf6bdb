# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""TaskSupervisor — fire-and-forget asyncio tasks with bookkeeping.

Wingmen are started and never joined: ground control flips their shutdown
flag and moves on.  The supervisor keeps a strong reference to every
running task (so the event loop does not garbage-collect it), logs the
ones that crash and counts them for the stats line.  It never waits.
"""

from __future__ import annotations

import asyncio
from typing import Coroutine

from loguru import logger


class TaskSupervisor:
    """Tracks spawned tasks until they finish."""

    def __init__(self, name: str = "supervisor") -> None:
        self._name = name
        self._tasks: set[asyncio.Task] = set()
        self._spawned = 0
        self._finished = 0
        self._crashed = 0

    @property
    def active(self) -> int:
        return len(self._tasks)

    @property
    def tasks(self) -> set[asyncio.Task]:
        return set(self._tasks)

    @property
    def stats(self) -> dict:
        return {
            "name": self._name,
            "active": len(self._tasks),
            "spawned": self._spawned,
            "finished": self._finished,
            "crashed": self._crashed,
        }

    def spawn(self, coro: Coroutine, name: str | None = None) -> asyncio.Task:
        """Schedule ``coro`` on the running loop and return its task."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        self._spawned += 1
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        self._finished += 1
        if task.cancelled():
            logger.debug(f"{self._name}: task {task.get_name()} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self._crashed += 1
            logger.opt(exception=exc).error(
                f"{self._name}: task {task.get_name()} crashed: {exc}"
            )
