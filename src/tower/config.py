# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Ground Control settings.

Values come from the environment (``GROUND_CTRL_*``) or a ``.env`` file;
command-line arguments override them in ``tower.main``.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the controller and its wingmen."""

    model_config = SettingsConfigDict(
        env_prefix="GROUND_CTRL_",
        env_file=".env",
        extra="ignore",
    )

    # Most wingmen a single player may request
    max_wingmen: int = Field(default=5, ge=1, le=255)
    # Greet joining players with a pointer to --gc-help
    announce: bool = True
    # Name ground control logs in with
    ctrl_name: str = Field(default="GROUND-CTRL", min_length=1)
    # Pause after each chat line, keeps us under the server's flood limit
    chat_pacing_ms: int = Field(default=1000, ge=0)
    log_level: str = "INFO"
    # Step interval of simulated arenas (sim:// servers)
    sim_tick_ms: int = Field(default=100, ge=1)


settings = Settings()
