# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Command-line entry point for Ground Control.

Usage:
    ground-control wss://us.airmash.online/ffa2 wss://eu.airmash.online/ffa2
    ground-control --max-wingmen 3 --no-announce sim://local

For every server URL: connect, log in as the controller, switch to
spectator mode and hand the session to a FleetManager.  Servers that fail
to come up are logged and skipped.  The process runs until every
FleetManager has stopped.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from typing import Optional, Sequence
from urllib.parse import urlsplit

from loguru import logger

from airspace.link import LoginRequest, ProtocolError, open_link
from airspace.sim_link import SimArena
from tower import __version__, config
from tower.config import Settings
from tower.fleet import FleetManager
from tower.supervisor import TaskSupervisor


@dataclass(frozen=True)
class ServerArgs:
    """Everything needed to start ground control on one server."""

    url: str
    max_wingmen: int
    announce: bool
    ctrl_name: str


def _url(value: str) -> str:
    parts = urlsplit(value)
    if not parts.scheme or not parts.netloc:
        raise argparse.ArgumentTypeError(f"invalid server URL: '{value}'")
    return value


def _wingmen(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid wingmen count: '{value}'") from None
    if not 1 <= count <= 255:
        raise argparse.ArgumentTypeError(f"wingmen count must be 1-255, got {count}")
    return count


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ground-control",
        description="AIRMASH Ground Control: client for dispatching bots",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "servers", nargs="+", type=_url,
        help="The AIRMASH websocket servers to interface",
    )
    parser.add_argument(
        "--max-wingmen", type=_wingmen, default=settings.max_wingmen,
        help="The maximum number of wingmen per player (default: %(default)s)",
    )
    parser.add_argument(
        "--no-announce", action="store_true", default=not settings.announce,
        help="When a new player joins, do not announce yourself",
    )
    parser.add_argument(
        "--name", default=settings.ctrl_name,
        help="Ground controller's name (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level", default=settings.log_level,
        choices=["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log verbosity (default: %(default)s)",
    )
    return parser


def parse_args(
    argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None
) -> tuple[list[ServerArgs], str]:
    """Parse the command line into per-server arguments and a log level.

    Exits with status 2 on malformed arguments.
    """
    settings = settings if settings is not None else config.settings
    args = build_parser(settings).parse_args(argv)
    servers = [
        ServerArgs(
            url=url,
            max_wingmen=args.max_wingmen,
            announce=not args.no_announce,
            ctrl_name=args.name,
        )
        for url in args.servers
    ]
    return servers, args.log_level


def configure_logging(level: str) -> None:
    """Replace loguru's default sink with one stderr sink at ``level``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
               "<cyan>{name}</cyan> - <level>{message}</level>",
    )


async def start_server(
    arg: ServerArgs, settings: Settings, supervisor: TaskSupervisor
) -> Optional[FleetManager]:
    """Bring ground control up on one server, or None if that fails."""
    try:
        link = await open_link(arg.url)
    except ProtocolError as e:
        logger.error(f"Client connection error: {e}")
        return None

    try:
        await link.login(LoginRequest(name=arg.ctrl_name))
        # Force ground control to spectate
        await link.command("spectate", "-3")
    except ProtocolError as e:
        logger.error(f"Ground control login on {arg.url} failed: {e}")
        await link.close()
        return None

    logger.info(f"Starting ground control on server {arg.url}")
    return FleetManager(
        arg.url,
        link,
        max_wingmen=arg.max_wingmen,
        announce=arg.announce,
        chat_pacing=settings.chat_pacing_ms / 1000.0,
        supervisor=supervisor,
    )


async def run_servers(servers: Sequence[ServerArgs], settings: Settings) -> int:
    """Run ground control on every server; returns the process exit code."""
    arenas: list[asyncio.Task] = []
    fleets: list[asyncio.Task] = []

    for arg in servers:
        if urlsplit(arg.url).scheme == "sim":
            arena = SimArena.named(arg.url)
            arenas.append(asyncio.create_task(arena.run(settings.sim_tick_ms / 1000.0)))

        supervisor = TaskSupervisor(f"wingmen@{arg.url}")
        fleet = await start_server(arg, settings, supervisor)
        if fleet is not None:
            fleets.append(asyncio.create_task(fleet.run(), name=f"fleet:{arg.url}"))

    try:
        if not fleets:
            logger.error("Ground control could not start on any server")
            return 1
        await asyncio.gather(*fleets)
        return 0
    finally:
        for task in arenas:
            task.cancel()


def main(argv: Optional[Sequence[str]] = None) -> None:
    settings = config.settings
    servers, log_level = parse_args(argv, settings)
    configure_logging(log_level)

    try:
        code = asyncio.run(run_servers(servers, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
