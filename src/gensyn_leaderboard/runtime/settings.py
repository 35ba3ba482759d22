"""Configuration helpers for leaderboard runtime wiring."""

from __future__ import annotations

import logging
from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gensyn_leaderboard.clients import PROXY
from gensyn_leaderboard.config.settings import (
    DashboardApiSettings,
    FirestoreSettings,
    ObservabilitySettings,
)


class Settings(BaseSettings):
    """Leaderboard service configuration resolved from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # --- Server ---
    listen_host: str = Field(default="0.0.0.0", alias="LEADERBOARD_HOST")  # noqa: S104
    port: int = Field(default=9002, alias="LEADERBOARD_PORT")
    app_url: str = Field(default=PROXY.app_url, alias="LEADERBOARD_APP_URL")

    # --- Behavior ---
    refresh_cooldown_hours: float = Field(default=6.0, alias="REFRESH_COOLDOWN_HOURS", ge=0)
    is_admin: bool = Field(default=False, alias="LEADERBOARD_IS_ADMIN")

    # --- Component settings ---
    dashboard: DashboardApiSettings = Field(default_factory=DashboardApiSettings)
    firestore: FirestoreSettings = Field(default_factory=FirestoreSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def refresh_cooldown(self) -> timedelta:
        return timedelta(hours=self.refresh_cooldown_hours)

    # --- Loader ---
    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("gensyn_leaderboard.settings")
        logger.info("leaderboard settings loaded: %r", instance)
        return instance


__all__ = ["Settings"]
