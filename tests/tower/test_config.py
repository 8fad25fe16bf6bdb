# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Tests for Settings defaults and environment overrides."""

import pytest
from pydantic import ValidationError

from tower.config import Settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No GROUND_CTRL_* variables and no .env file in the working directory."""
    for name in ("MAX_WINGMEN", "ANNOUNCE", "CTRL_NAME", "CHAT_PACING_MS", "LOG_LEVEL", "SIM_TICK_MS"):
        monkeypatch.delenv(f"GROUND_CTRL_{name}", raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.mark.unit
class TestSettings:

    def test_defaults(self, clean_env):
        s = Settings()
        assert s.max_wingmen == 5
        assert s.announce is True
        assert s.ctrl_name == "GROUND-CTRL"
        assert s.chat_pacing_ms == 1000
        assert s.log_level == "INFO"
        assert s.sim_tick_ms == 100

    def test_env_overrides(self, clean_env):
        clean_env.setenv("GROUND_CTRL_MAX_WINGMEN", "3")
        clean_env.setenv("GROUND_CTRL_ANNOUNCE", "false")
        clean_env.setenv("GROUND_CTRL_CTRL_NAME", "TOWER")
        s = Settings()
        assert s.max_wingmen == 3
        assert s.announce is False
        assert s.ctrl_name == "TOWER"

    def test_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("GROUND_CTRL_CHAT_PACING_MS=250\n")
        assert Settings().chat_pacing_ms == 250

    @pytest.mark.parametrize("name, value", [
        ("MAX_WINGMEN", "0"),
        ("MAX_WINGMEN", "256"),
        ("CTRL_NAME", ""),
        ("CHAT_PACING_MS", "-1"),
        ("SIM_TICK_MS", "0"),
    ])
    def test_invalid_values_rejected(self, clean_env, name, value):
        clean_env.setenv(f"GROUND_CTRL_{name}", value)
        with pytest.raises(ValidationError):
            Settings()
