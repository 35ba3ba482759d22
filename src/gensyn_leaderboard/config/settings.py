"""Component settings resolved from the environment."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from gensyn_leaderboard.clients import DASHBOARD

_ENV_CONFIG = SettingsConfigDict(
    env_prefix="",
    extra="ignore",
    case_sensitive=False,
    frozen=True,
    env_file=".env",
    env_file_encoding="utf-8",
)


class DashboardApiSettings(BaseSettings):
    """Location of the upstream peer dashboard."""

    model_config = _ENV_CONFIG

    base_url: str = Field(default=DASHBOARD.base_url, alias="DASHBOARD_API_BASE_URL")
    timeout_seconds: float = Field(default=DASHBOARD.timeout_seconds, alias="DASHBOARD_TIMEOUT_SECONDS", gt=0)


class FirestoreSettings(BaseSettings):
    """Document store selection and Firestore connectivity."""

    model_config = _ENV_CONFIG

    backend: Literal["firestore", "memory"] = Field(default="firestore", alias="PEER_STORE_BACKEND")
    project_id: str | None = Field(default=None, alias="FIRESTORE_PROJECT_ID")
    database: str | None = Field(default=None, alias="FIRESTORE_DATABASE")
    collection: str = Field(default="leaderboardPeers", alias="LEADERBOARD_COLLECTION")
    service_account_b64: SecretStr | None = Field(
        default=None,
        alias="GCP_SERVICE_ACCOUNT_CREDENTIAL_BASE64",
    )

    @property
    def service_account_b64_value(self) -> str:
        if self.service_account_b64 is None:
            return ""
        return self.service_account_b64.get_secret_value()


class ObservabilitySettings(BaseSettings):
    """Flags controlling logging/export behavior."""

    model_config = _ENV_CONFIG

    enable_cloud_logging: bool = Field(default=False, alias="ENABLE_CLOUD_LOGGING")
    gcp_project_id: str | None = Field(default=None, alias="GCP_PROJECT_ID")


__all__ = ["DashboardApiSettings", "FirestoreSettings", "ObservabilitySettings"]
