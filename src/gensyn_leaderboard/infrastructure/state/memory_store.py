"""In-memory peer store."""

from __future__ import annotations

from uuid import uuid4

from gensyn_leaderboard.application.ports.peer_store import PeerStorePort
from gensyn_leaderboard.domain.peer import PeerRecord
from gensyn_leaderboard.errors import PeerNotFoundError


class InMemoryPeerStore(PeerStorePort):
    """Keeps records in insertion order, indexed by storage id and peer_id."""

    def __init__(self) -> None:
        self._records: dict[str, PeerRecord] = {}
        self._ids_by_peer: dict[str, str] = {}

    async def upsert_by_peer_id(self, record: PeerRecord) -> PeerRecord:
        record_id = self._ids_by_peer.get(record.peer_id)
        if record_id is None:
            record_id = uuid4().hex
            self._ids_by_peer[record.peer_id] = record_id
        stored = record.with_id(record_id)
        self._records[record_id] = stored
        return stored

    async def save(self, record: PeerRecord) -> PeerRecord:
        record_id = record.id
        previous = self._records.get(record_id) if record_id else None
        if record_id is None or previous is None:
            raise PeerNotFoundError(f"Peer with ID {record_id} not found.")
        if previous.peer_id != record.peer_id:
            self._ids_by_peer.pop(previous.peer_id, None)
            self._ids_by_peer[record.peer_id] = record_id
        self._records[record_id] = record
        return record

    async def find_by_peer_id(self, peer_id: str) -> PeerRecord | None:
        record_id = self._ids_by_peer.get(peer_id)
        return self._records.get(record_id) if record_id is not None else None

    async def get(self, record_id: str) -> PeerRecord | None:
        return self._records.get(record_id)

    async def list_all(self) -> tuple[PeerRecord, ...]:
        return tuple(self._records.values())

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["InMemoryPeerStore"]
