# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Ground control chat commands and responses.

Players talk to ground control in public chat.  Anything starting with
``--gc`` is addressed to us; everything else is ignored.  ``interpret``
validates a command against the player's current fleet and either returns
a Response (reply lines plus an optional fleet action) or raises a
CommandError whose text is sent back to the player.

The interpreter keeps no state.  The caller tracks how many wingmen each
player has and passes the count in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from tower import __version__

# Prefix for all commands
PREFIX = "--gc"
# User asks for help
HELP = "--gc-help"
# User requests wingmen
WINGS = "--gc-wings"
# User calls off their wingmen
CALL_OFF = "--gc-call-off"
# Version of this program
VERSION = "--gc-version"

_HELP_TEXT: tuple[tuple[str, str], ...] = (
    (WINGS, "request X attacking wingmen"),
    (CALL_OFF, "remove any requested wingmen"),
    (VERSION, "program version"),
)


class CommandError(Exception):
    """A command addressed to ground control that cannot be carried out.

    ``str(err)`` is the reply sent to the player.
    """

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class UnknownCommand(CommandError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"unknown command: '{self.message}'"


class NoWings(CommandError):
    def __init__(self, user: str) -> None:
        super().__init__(user)
        self.user = user

    def __str__(self) -> str:
        return f"no wings assigned to {self.user}"


class TooManyWings(CommandError):
    def __init__(self, user: str, max_wings: int) -> None:
        super().__init__(user, max_wings)
        self.user = user
        self.max_wings = max_wings

    def __str__(self) -> str:
        return f"too many wings attacking {self.user} (max {self.max_wings} wings)"


class AlreadyWinged(CommandError):
    def __init__(self, user: str, wings: int) -> None:
        super().__init__(user, wings)
        self.user = user
        self.wings = wings

    def __str__(self) -> str:
        return f"{self.user} already has {self.wings} wings; use {CALL_OFF} to remove"


@dataclass(frozen=True)
class SetWings:
    """Assign ``count`` wingmen to the player."""

    count: int


@dataclass(frozen=True)
class ClearWings:
    """Remove all of the player's wingmen."""


Action = Union[SetWings, ClearWings]


@dataclass
class Response:
    """Reply for a valid command.

    ``lines`` are sent one chat message each, in order, so no single
    message grows past the server's length limit.
    """

    lines: list[str] = field(default_factory=list)
    action: Optional[Action] = None


def help_lines() -> list[str]:
    return [f"{cmd}: {text}" for cmd, text in _HELP_TEXT]


def version_lines() -> list[str]:
    return [f"AIRMASH Ground Control, version {__version__}"]


def interpret(message: str, user: str, wings: int, max_wings: int) -> Optional[Response]:
    """Turn a chat message into a ground control response.

    Args:
        message: What the player literally typed.
        user: The player's name.
        wings: Wingmen currently assigned to the player.
        max_wings: Most wingmen a player may request.

    Returns:
        None if the message is not addressed to ground control, else the
        Response to act on.

    Raises:
        CommandError: the message is a ground control command that is
            unknown or not allowed right now.
    """
    if not message.startswith(PREFIX):
        return None

    if message == HELP:
        return Response(lines=help_lines())
    if message == VERSION:
        return Response(lines=version_lines())
    if message.startswith(WINGS):
        return _request_wings(message, user, wings, max_wings)
    if message == CALL_OFF:
        if wings == 0:
            raise NoWings(user)
        return Response(
            lines=[f"Calling off all wings from {user}"],
            action=ClearWings(),
        )
    raise UnknownCommand(message)


def _request_wings(message: str, user: str, wings: int, max_wings: int) -> Response:
    if wings > 0:
        raise AlreadyWinged(user, wings)

    words = message.split()
    count = _parse_count(words[1]) if len(words) > 1 else None
    if count is None or count == 0:
        raise UnknownCommand(message)
    if count > max_wings:
        raise TooManyWings(user, max_wings)
    return Response(
        lines=[f"OK {user}, {count} wings are coming!"],
        action=SetWings(count),
    )


def _parse_count(word: str) -> Optional[int]:
    """Parse a plain non-negative decimal integer, or None."""
    if not word.isascii() or not word.isdigit():
        return None
    return int(word)
