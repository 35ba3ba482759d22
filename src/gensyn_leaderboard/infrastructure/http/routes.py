"""HTTP route definitions for the leaderboard API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Body, Depends, FastAPI, Query
from fastapi.responses import JSONResponse

from gensyn_leaderboard.application.leaderboard import SortConfig, SortDirection, SortKey, sort_peers
from gensyn_leaderboard.application.peer_refresh import PeerRefreshService
from gensyn_leaderboard.application.ports.peer_source import PeerSourcePort
from gensyn_leaderboard.application.ports.peer_store import PeerStorePort
from gensyn_leaderboard.clients import PROXY
from gensyn_leaderboard.domain.cooldown import CooldownActive
from gensyn_leaderboard.errors import LeaderboardError
from gensyn_leaderboard.infrastructure.dashboard.schema import dump_peer_payload
from gensyn_leaderboard.infrastructure.http.errors import error_response
from gensyn_leaderboard.infrastructure.http.schemas import (
    AddPeerRequest,
    BulkRefreshRequest,
    BulkRefreshResponse,
    CooldownResponse,
    ErrorEnvelope,
    LeaderboardResponse,
    PeerModel,
)

logger = logging.getLogger("gensyn_leaderboard.http")

MISSING_NAME_MESSAGE = "Peer name query parameter is required"
PROXY_FAILURE_MESSAGE = "An unexpected error occurred while trying to fetch peer data via the proxy."


@dataclass(frozen=True)
class ProxyRouteDeps:
    dashboard: PeerSourcePort


@dataclass(frozen=True)
class LeaderboardRouteDeps:
    service: PeerRefreshService
    store: PeerStorePort


def add_proxy_routes(app: FastAPI, dependency_provider: Callable[[], ProxyRouteDeps]) -> None:
    def get_dependencies() -> ProxyRouteDeps:
        return dependency_provider()

    @app.get(
        PROXY.peer_path,
        responses={
            400: {"model": ErrorEnvelope},
            502: {"model": ErrorEnvelope},
            503: {"model": ErrorEnvelope},
        },
        description="Look up a peer on the Gensyn dashboard and return its validated stats.",
    )
    async def proxy_peer(
        name: str | None = Query(default=None),
        deps: ProxyRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> JSONResponse:
        peer_name = (name or "").strip()
        if not peer_name:
            return error_response(MISSING_NAME_MESSAGE, 400)
        try:
            snapshot = await deps.dashboard.fetch_peer(peer_name)
        except LeaderboardError:
            raise
        except Exception as exc:
            logger.exception(
                "proxy lookup failed unexpectedly",
                extra={"data": {"name": peer_name}},
            )
            raise LeaderboardError(PROXY_FAILURE_MESSAGE) from exc
        return JSONResponse(dump_peer_payload(snapshot))


def add_leaderboard_routes(
    app: FastAPI,
    dependency_provider: Callable[[], LeaderboardRouteDeps],
) -> None:
    def get_dependencies() -> LeaderboardRouteDeps:
        return dependency_provider()

    @app.get(
        "/api/peers",
        response_model=LeaderboardResponse,
        description="List stored peers, optionally sorted by reward or score.",
    )
    async def list_peers(
        sort: SortKey | None = Query(default=None),
        direction: SortDirection = Query(default=SortDirection.DESCENDING),
        deps: LeaderboardRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> LeaderboardResponse:
        records = list(await deps.store.list_all())
        config = SortConfig(key=sort, direction=direction) if sort is not None else None
        ordered = sort_peers(records, config)
        return LeaderboardResponse(peers=[PeerModel.from_record(record) for record in ordered])

    @app.post(
        "/api/peers",
        response_model=PeerModel,
        description="Fetch a peer by alias and add it to, or update it on, the leaderboard.",
    )
    async def add_peer(
        payload: AddPeerRequest,
        deps: LeaderboardRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> PeerModel:
        record = await deps.service.add_or_update(payload.query_name, payload.gpu)
        return PeerModel.from_record(record)

    @app.post(
        "/api/peers/refresh",
        response_model=BulkRefreshResponse,
        description="Refresh every stored peer; failures are reported per peer.",
    )
    async def refresh_all(
        payload: BulkRefreshRequest | None = Body(default=None),  # noqa: B008
        deps: LeaderboardRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> BulkRefreshResponse:
        bypass = payload.bypass_cooldown if payload is not None else False
        records = await deps.store.list_all()
        report = await deps.service.refresh_many(records, bypass_cooldown=bypass)
        return BulkRefreshResponse.from_report(report)

    @app.post(
        "/api/peers/{record_id}/refresh",
        response_model=PeerModel,
        responses={429: {"model": CooldownResponse}},
        description="Refresh one stored peer unless it is inside the cooldown window.",
    )
    async def refresh_peer(
        record_id: str,
        deps: LeaderboardRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> PeerModel | JSONResponse:
        outcome = await deps.service.refresh_by_id(record_id)
        if isinstance(outcome, CooldownActive):
            body = CooldownResponse.from_result(outcome).model_dump(by_alias=True)
            return JSONResponse(body, status_code=429)
        return PeerModel.from_record(outcome)


__all__ = [
    "LeaderboardRouteDeps",
    "MISSING_NAME_MESSAGE",
    "PROXY_FAILURE_MESSAGE",
    "ProxyRouteDeps",
    "add_leaderboard_routes",
    "add_proxy_routes",
]
