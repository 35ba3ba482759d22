from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from gensyn_leaderboard.app import create_app
from gensyn_leaderboard.infrastructure.proxy_client import ProxyPeerClient
from gensyn_leaderboard.infrastructure.state.memory_store import InMemoryPeerStore
from gensyn_leaderboard.runtime.bootstrap import build_runtime, close_runtime_resources
from gensyn_leaderboard.runtime.settings import Settings
from tests.fixtures.fakes import FakeClock, FakePeerSource, snapshot

pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def memory_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Settings:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PEER_STORE_BACKEND", "memory")
    monkeypatch.setenv("LEADERBOARD_APP_URL", "http://leaderboard.test")
    monkeypatch.setenv("REFRESH_COOLDOWN_HOURS", "2")
    return Settings()


async def test_build_runtime_with_memory_backend(memory_settings: Settings) -> None:
    runtime = build_runtime(memory_settings)

    assert isinstance(runtime.store, InMemoryPeerStore)
    assert isinstance(runtime.peer_source, ProxyPeerClient)
    assert runtime.peer_source.url == "http://leaderboard.test/api/gensyn/peer"
    assert runtime.refresh_service.cooldown.total_seconds() == 2 * 60 * 60
    assert runtime.leaderboard_deps_provider().store is runtime.store
    assert runtime.proxy_deps_provider().dashboard is runtime.dashboard

    await close_runtime_resources(runtime)


async def test_empty_store_override_is_kept(memory_settings: Settings) -> None:
    store = InMemoryPeerStore()

    runtime = build_runtime(memory_settings, store=store, peer_source=FakePeerSource())

    assert runtime.store is store
    await close_runtime_resources(runtime)


async def test_view_from_runtime_shares_store(memory_settings: Settings) -> None:
    source = FakePeerSource({"wdkfd": snapshot()})
    runtime = build_runtime(memory_settings, peer_source=source, clock=FakeClock())
    view = runtime.create_view()

    notification = await view.add_peer("wdkfd")

    assert notification.title == "Peer Added/Updated"
    assert len(await runtime.store.list_all()) == 1
    await close_runtime_resources(runtime)


def test_app_serves_health_and_leaderboard(memory_settings: Settings) -> None:
    source = FakePeerSource({"wdkfd": snapshot()})
    runtime = build_runtime(memory_settings, peer_source=source, clock=FakeClock())

    with TestClient(create_app(runtime)) as client:
        assert client.get("/healthz").json() == {"status": "ok"}
        added = client.post("/api/peers", json={"queryName": "wdkfd", "gpu": "RTX 4090"})
        listed = client.get("/api/peers", params={"sort": "reward"})

    assert added.status_code == 200
    assert [peer["gpu"] for peer in listed.json()["peers"]] == ["RTX 4090"]
