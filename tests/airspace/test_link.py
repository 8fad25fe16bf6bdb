# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Tests for the GameLink contract: World snapshot and backend lookup."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from airspace.link import (
    ENTRY_POINT_GROUP,
    GameLink,
    Key,
    LoginRequest,
    Player,
    ProtocolError,
    World,
    open_link,
    register_link,
)
from airspace.sim_link import SimLink


def _run(coro):
    """Run an async coroutine synchronously."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.mark.unit
class TestWorld:

    def test_empty(self):
        world = World()
        assert world.players == {}
        assert world.me is None
        assert world.ping == 0

    def test_lookup_by_id_and_name(self):
        world = World()
        world.upsert(Player(id=3, name="alice", x=1.0, y=2.0))
        world.upsert(Player(id=7, name="bob"))
        assert world.get(3).position == (1.0, 2.0)
        assert world.by_name("bob").id == 7
        assert world.by_name("carol") is None
        assert world.names == {"alice": 3, "bob": 7}

    def test_upsert_replaces(self):
        world = World()
        world.upsert(Player(id=3, name="alice", x=1.0))
        before = world.get(3)
        world.upsert(Player(id=3, name="alice", x=5.0))
        assert world.get(3).x == 5.0
        # Earlier snapshots are untouched
        assert before.x == 1.0

    def test_remove(self):
        world = World()
        world.upsert(Player(id=3, name="alice"))
        assert world.remove(3).name == "alice"
        assert world.remove(3) is None

    def test_get_me_before_login(self):
        with pytest.raises(LookupError):
            World().get_me()

    def test_get_me(self):
        world = World()
        world.upsert(Player(id=1, name="me"))
        world.me = 1
        assert world.get_me().name == "me"


@pytest.mark.unit
class TestLoginRequest:

    def test_defaults(self):
        req = LoginRequest(name="GROUND-CTRL")
        assert req.flag == "UN"
        assert req.session == "none"
        assert (req.horizon_x, req.horizon_y) == (3000, 3000)
        assert req.protocol == 5

    def test_key_codes(self):
        assert Key.UP == 1
        assert Key.FIRE == 5


@pytest.mark.unit
class TestOpenLink:

    def test_builtin_sim_backend(self):
        link = _run(open_link("sim://local"))
        assert isinstance(link, SimLink)
        assert isinstance(link, GameLink)

    def test_unknown_scheme(self):
        with patch("airspace.link.entry_points", return_value=[]):
            with pytest.raises(ProtocolError, match="no game link backend"):
                _run(open_link("gopher://example.com/ffa"))

    def test_registered_backend_connected(self):
        link = MagicMock()
        link.connect = AsyncMock()
        factory = MagicMock(return_value=link)
        register_link("test", factory)

        result = _run(open_link("test://server/ffa1"))

        assert result is link
        factory.assert_called_once_with("test://server/ffa1")
        link.connect.assert_awaited_once()

    def test_scheme_is_case_insensitive(self):
        link = MagicMock()
        link.connect = AsyncMock()
        register_link("TEST", MagicMock(return_value=link))
        assert _run(open_link("Test://server")) is link

    def test_entry_point_backend(self):
        link = MagicMock()
        link.connect = AsyncMock()
        factory = MagicMock(return_value=link)
        ep = MagicMock()
        ep.name = "wss"
        ep.load.return_value = factory

        with patch("airspace.link.entry_points", return_value=[ep]) as eps:
            result = _run(open_link("wss://eu.airmash.online/ffa2"))

        eps.assert_called_once_with(group=ENTRY_POINT_GROUP)
        assert result is link
        # Cached after the first lookup
        with patch("airspace.link.entry_points", return_value=[]):
            assert _run(open_link("wss://us.airmash.online/ffa2")) is link

    def test_os_error_becomes_protocol_error(self):
        link = MagicMock()
        link.connect = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        register_link("test", MagicMock(return_value=link))
        with pytest.raises(ProtocolError, match="refused"):
            _run(open_link("test://server"))
