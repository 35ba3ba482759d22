"""HTTP client for the Gensyn dashboard peer API."""

from __future__ import annotations

import logging

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind

from gensyn_leaderboard.clients import DASHBOARD
from gensyn_leaderboard.domain.peer import PeerSnapshot
from gensyn_leaderboard.errors import (
    UpstreamMalformedError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from gensyn_leaderboard.infrastructure.dashboard.schema import parse_peer_payload

logger = logging.getLogger("gensyn_leaderboard.dashboard")

UNREACHABLE_MESSAGE = (
    "The server could not connect to the Gensyn API. "
    "The API might be down or there's a network issue."
)


class DashboardClient:
    """Looks up peer statistics on the dashboard, normalizing every failure."""

    def __init__(
        self,
        base_url: str = DASHBOARD.base_url,
        *,
        timeout: float = DASHBOARD.timeout_seconds,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("dashboard base_url must not be empty")
        self._base_url = base_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_peer(self, name: str) -> PeerSnapshot:
        tracer = trace.get_tracer("gensyn_leaderboard.dashboard")
        with tracer.start_as_current_span(
            "dashboard.fetch_peer",
            kind=SpanKind.CLIENT,
            attributes={"http.method": "GET", "peer.query_name": name},
        ) as span:
            snapshot = await self._fetch(name)
            span.set_attribute("peer.id", snapshot.peer_id)
            return snapshot

    async def _fetch(self, name: str) -> PeerSnapshot:
        try:
            response = await self._client.get(self._base_url, params={"name": name})
        except httpx.TransportError as exc:
            logger.error(
                "dashboard unreachable",
                extra={"data": {"name": name, "error": repr(exc)}},
            )
            raise UpstreamUnavailableError(UNREACHABLE_MESSAGE) from exc

        if not response.is_success:
            message = _rejection_message(response, name)
            logger.warning(
                "dashboard rejected peer lookup",
                extra={"data": {"name": name, "status_code": response.status_code, "message": message}},
            )
            raise UpstreamRejectedError(message, status_code=response.status_code)

        malformed = f'Incomplete or malformed data received from Gensyn API for peer "{name}".'
        try:
            return parse_peer_payload(response.json())
        except ValueError as exc:
            logger.error(
                "dashboard returned malformed peer data",
                extra={"data": {"name": name, "body": response.text[:512]}},
            )
            raise UpstreamMalformedError(malformed) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> DashboardClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _rejection_message(response: httpx.Response, name: str) -> str:
    """Prefer the upstream's own message, then its reason phrase."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    if response.reason_phrase:
        return f"Gensyn API Error: {response.reason_phrase}"
    return (
        f'Failed to fetch data from Gensyn API for peer "{name}". '
        f"Status: {response.status_code}"
    )


__all__ = ["DashboardClient", "UNREACHABLE_MESSAGE"]
