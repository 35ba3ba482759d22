"""Runtime wiring for the leaderboard service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from google.cloud import firestore

from gensyn_leaderboard.application.leaderboard import LeaderboardView
from gensyn_leaderboard.application.peer_refresh import PeerRefreshService
from gensyn_leaderboard.application.ports.peer_source import PeerSourcePort
from gensyn_leaderboard.application.ports.peer_store import PeerStorePort
from gensyn_leaderboard.gcp.credentials import DATASTORE_SCOPE, credentials_from_b64
from gensyn_leaderboard.infrastructure.dashboard.client import DashboardClient
from gensyn_leaderboard.infrastructure.http.routes import LeaderboardRouteDeps, ProxyRouteDeps
from gensyn_leaderboard.infrastructure.proxy_client import ProxyPeerClient
from gensyn_leaderboard.infrastructure.state.firestore_store import FirestorePeerStore
from gensyn_leaderboard.infrastructure.state.memory_store import InMemoryPeerStore
from gensyn_leaderboard.runtime.settings import Settings

logger = logging.getLogger("gensyn_leaderboard.runtime")


@runtime_checkable
class _SupportsAclose(Protocol):
    async def aclose(self) -> None:
        ...


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Aggregated process-wide components for the leaderboard service."""

    settings: Settings
    dashboard: DashboardClient
    peer_source: PeerSourcePort
    store: PeerStorePort
    refresh_service: PeerRefreshService
    proxy_deps_provider: Callable[[], ProxyRouteDeps]
    leaderboard_deps_provider: Callable[[], LeaderboardRouteDeps]

    def create_view(self) -> LeaderboardView:
        return LeaderboardView(service=self.refresh_service, store=self.store)


def build_runtime(
    settings: Settings | None = None,
    *,
    store: PeerStorePort | None = None,
    peer_source: PeerSourcePort | None = None,
    dashboard: DashboardClient | None = None,
    clock: Callable[[], datetime] | None = None,
) -> RuntimeContext:
    """Construct the shared components once; overrides are for embedding and tests."""
    resolved = settings or Settings.load()
    logger.info(
        "building leaderboard runtime",
        extra={
            "data": {
                "store_backend": resolved.firestore.backend,
                "dashboard_base_url": resolved.dashboard.base_url,
                "app_url": resolved.app_url,
                "cooldown_hours": resolved.refresh_cooldown_hours,
                "is_admin": resolved.is_admin,
            }
        },
    )

    resolved_dashboard = dashboard or DashboardClient(
        resolved.dashboard.base_url,
        timeout=resolved.dashboard.timeout_seconds,
    )
    resolved_source = ProxyPeerClient(resolved.app_url) if peer_source is None else peer_source
    resolved_store = _create_store(resolved) if store is None else store
    refresh_service = PeerRefreshService(
        source=resolved_source,
        store=resolved_store,
        clock=clock or _clock,
        cooldown=resolved.refresh_cooldown,
    )

    proxy_deps = ProxyRouteDeps(dashboard=resolved_dashboard)
    leaderboard_deps = LeaderboardRouteDeps(service=refresh_service, store=resolved_store)

    return RuntimeContext(
        settings=resolved,
        dashboard=resolved_dashboard,
        peer_source=resolved_source,
        store=resolved_store,
        refresh_service=refresh_service,
        proxy_deps_provider=lambda: proxy_deps,
        leaderboard_deps_provider=lambda: leaderboard_deps,
    )


def _create_store(settings: Settings) -> PeerStorePort:
    firestore_settings = settings.firestore
    if firestore_settings.backend == "memory":
        logger.warning("using in-memory peer store; records are lost on restart")
        return InMemoryPeerStore()

    credentials = credentials_from_b64(
        firestore_settings.service_account_b64_value,
        source="GCP_SERVICE_ACCOUNT_CREDENTIAL_BASE64",
        scopes=(DATASTORE_SCOPE,),
    )
    client = firestore.AsyncClient(
        project=firestore_settings.project_id,
        credentials=credentials,
        database=firestore_settings.database,
    )
    logger.info(
        "configured firestore peer store",
        extra={
            "data": {
                "project": firestore_settings.project_id,
                "database": firestore_settings.database,
                "collection": firestore_settings.collection,
                "service_account_b64_present": credentials is not None,
            }
        },
    )
    return FirestorePeerStore(client, collection=firestore_settings.collection)


async def close_runtime_resources(runtime: RuntimeContext) -> None:
    """Close shared HTTP and store clients."""

    async def _aclose(obj: object) -> None:
        if isinstance(obj, _SupportsAclose):
            await obj.aclose()

    await _aclose(runtime.peer_source)
    await _aclose(runtime.dashboard)
    await _aclose(runtime.store)


def _clock() -> datetime:
    return datetime.now(UTC)


__all__ = ["RuntimeContext", "build_runtime", "close_runtime_resources"]
