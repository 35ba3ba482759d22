"""Client for the leaderboard's own peer proxy endpoint."""

from __future__ import annotations

import logging

import httpx

from gensyn_leaderboard.application.ports.peer_source import PeerSourcePort
from gensyn_leaderboard.clients import PROXY
from gensyn_leaderboard.domain.peer import PeerSnapshot
from gensyn_leaderboard.errors import (
    UpstreamMalformedError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from gensyn_leaderboard.infrastructure.dashboard.schema import parse_peer_payload

logger = logging.getLogger("gensyn_leaderboard.proxy_client")


def proxy_peer_url(app_url: str | None) -> str:
    """Absolute proxy URL for server-side callers, relative path otherwise."""
    if not app_url:
        return PROXY.peer_path
    return f"{app_url.rstrip('/')}{PROXY.peer_path}"


class ProxyPeerClient(PeerSourcePort):
    """PeerSourcePort backed by the proxy endpoint, re-validating its output."""

    def __init__(
        self,
        app_url: str | None = PROXY.app_url,
        *,
        timeout: float = PROXY.timeout_seconds,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = proxy_peer_url(app_url)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    async def fetch_peer(self, name: str) -> PeerSnapshot:
        try:
            response = await self._client.get(self._url, params={"name": name})
        except httpx.TransportError as exc:
            raise UpstreamUnavailableError(
                f'Could not reach the peer proxy while fetching "{name}".'
            ) from exc

        if not response.is_success:
            message = _envelope_message(response, name)
            logger.info(
                "proxy returned an error envelope",
                extra={"data": {"name": name, "status_code": response.status_code, "message": message}},
            )
            raise UpstreamRejectedError(message, status_code=response.status_code)

        try:
            return parse_peer_payload(response.json())
        except ValueError as exc:
            raise UpstreamMalformedError(
                f'Incomplete or malformed data received for peer "{name}" from our API proxy.'
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _envelope_message(response: httpx.Response, name: str) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    if response.reason_phrase:
        return f"Error: {response.reason_phrase}"
    return f'Failed to fetch data for peer "{name}". Status: {response.status_code}'


__all__ = ["ProxyPeerClient", "proxy_peer_url"]
