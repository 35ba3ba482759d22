from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from gensyn_leaderboard.runtime.settings import Settings

_ENV_VARS = (
    "LEADERBOARD_HOST",
    "LEADERBOARD_PORT",
    "LEADERBOARD_APP_URL",
    "REFRESH_COOLDOWN_HOURS",
    "LEADERBOARD_IS_ADMIN",
    "DASHBOARD_API_BASE_URL",
    "DASHBOARD_TIMEOUT_SECONDS",
    "PEER_STORE_BACKEND",
    "FIRESTORE_PROJECT_ID",
    "LEADERBOARD_COLLECTION",
    "GCP_SERVICE_ACCOUNT_CREDENTIAL_BASE64",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings()

    assert settings.port == 9002
    assert settings.app_url == "http://localhost:9002"
    assert settings.refresh_cooldown == timedelta(hours=6)
    assert settings.is_admin is False
    assert settings.dashboard.base_url == "https://dashboard.gensyn.ai/api/v1/peer"
    assert settings.dashboard.timeout_seconds == 10.0
    assert settings.firestore.backend == "firestore"
    assert settings.firestore.collection == "leaderboardPeers"
    assert settings.firestore.service_account_b64_value == ""


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEADERBOARD_PORT", "8080")
    monkeypatch.setenv("REFRESH_COOLDOWN_HOURS", "0.5")
    monkeypatch.setenv("LEADERBOARD_IS_ADMIN", "true")
    monkeypatch.setenv("DASHBOARD_API_BASE_URL", "https://dashboard.test/peer")
    monkeypatch.setenv("PEER_STORE_BACKEND", "memory")
    monkeypatch.setenv("GCP_SERVICE_ACCOUNT_CREDENTIAL_BASE64", "c2VjcmV0")

    settings = Settings.load()

    assert settings.port == 8080
    assert settings.refresh_cooldown == timedelta(minutes=30)
    assert settings.is_admin is True
    assert settings.dashboard.base_url == "https://dashboard.test/peer"
    assert settings.firestore.backend == "memory"
    assert settings.firestore.service_account_b64_value == "c2VjcmV0"
    assert "c2VjcmV0" not in repr(settings)


def test_unknown_store_backend_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PEER_STORE_BACKEND", "sqlite")

    with pytest.raises(ValidationError):
        Settings()


def test_non_positive_timeout_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DASHBOARD_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValidationError):
        Settings()
