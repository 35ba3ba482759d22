"""Port describing access to the shared leaderboard store."""

from __future__ import annotations

from typing import Protocol

from gensyn_leaderboard.domain.peer import PeerRecord


class PeerStorePort(Protocol):
    """Abstract document store holding one record per peer_id."""

    async def upsert_by_peer_id(self, record: PeerRecord) -> PeerRecord:
        """Insert or update the record keyed by its peer_id; return it with its id."""

    async def save(self, record: PeerRecord) -> PeerRecord:
        """Overwrite the entry identified by record.id; its peer_id may change."""

    async def find_by_peer_id(self, peer_id: str) -> PeerRecord | None:
        """Return the record stored for peer_id."""

    async def get(self, record_id: str) -> PeerRecord | None:
        """Return the record identified by its storage id."""

    async def list_all(self) -> tuple[PeerRecord, ...]:
        """Return every stored record."""


__all__ = ["PeerStorePort"]
