"""Firestore-backed peer store."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from gensyn_leaderboard.application.ports.peer_store import PeerStorePort
from gensyn_leaderboard.domain.peer import PeerRecord

logger = logging.getLogger("gensyn_leaderboard.store")

DEFAULT_COLLECTION = "leaderboardPeers"


def record_to_document(record: PeerRecord) -> dict[str, Any]:
    return {
        "peerId": record.peer_id,
        "peerName": record.peer_name,
        "reward": record.reward,
        "score": record.score,
        "online": record.online,
        "queryName": record.query_name,
        "gpu": record.gpu,
        "lastRefreshed": record.last_refreshed,
    }


def record_from_document(document_id: str, data: Mapping[str, Any]) -> PeerRecord:
    """Rebuild a record from stored fields; documents written before GPU labels default to ''."""
    return PeerRecord(
        id=document_id,
        peer_id=str(data["peerId"]),
        peer_name=str(data["peerName"]),
        reward=data["reward"],
        score=data["score"],
        online=bool(data["online"]),
        query_name=str(data.get("queryName") or ""),
        gpu=str(data.get("gpu") or ""),
        last_refreshed=int(data.get("lastRefreshed") or 0),
    )


class FirestorePeerStore(PeerStorePort):
    """Stores one document per peer_id in a Firestore collection.

    The lookup-then-write in ``upsert_by_peer_id`` is not transactional; two
    concurrent writers for the same peer_id can race.
    """

    def __init__(
        self,
        client: firestore.AsyncClient,
        *,
        collection: str = DEFAULT_COLLECTION,
        owns_client: bool = True,
    ) -> None:
        if not collection.strip():
            raise ValueError("collection must not be empty")
        self._client = client
        self._collection_name = collection
        self._owns_client = owns_client

    @property
    def _collection(self) -> Any:
        return self._client.collection(self._collection_name)

    async def upsert_by_peer_id(self, record: PeerRecord) -> PeerRecord:
        document = record_to_document(record)
        existing = await self._find_snapshot(record.peer_id)
        if existing is not None:
            await self._collection.document(existing.id).update(document)
            logger.debug(
                "updated peer document",
                extra={"data": {"peer_id": record.peer_id, "document_id": existing.id}},
            )
            return record.with_id(existing.id)

        _, reference = await self._collection.add(document)
        logger.debug(
            "created peer document",
            extra={"data": {"peer_id": record.peer_id, "document_id": reference.id}},
        )
        return record.with_id(reference.id)

    async def save(self, record: PeerRecord) -> PeerRecord:
        if not record.id:
            raise ValueError("record must carry a document id to be saved")
        await self._collection.document(record.id).update(record_to_document(record))
        logger.debug(
            "updated peer document in place",
            extra={"data": {"peer_id": record.peer_id, "document_id": record.id}},
        )
        return record

    async def find_by_peer_id(self, peer_id: str) -> PeerRecord | None:
        snapshot = await self._find_snapshot(peer_id)
        if snapshot is None:
            return None
        return record_from_document(snapshot.id, snapshot.to_dict() or {})

    async def get(self, record_id: str) -> PeerRecord | None:
        snapshot = await self._collection.document(record_id).get()
        if not snapshot.exists:
            return None
        return record_from_document(snapshot.id, snapshot.to_dict() or {})

    async def list_all(self) -> tuple[PeerRecord, ...]:
        records: list[PeerRecord] = []
        async for snapshot in self._collection.stream():
            records.append(record_from_document(snapshot.id, snapshot.to_dict() or {}))
        return tuple(records)

    async def aclose(self) -> None:
        if not self._owns_client:
            return
        closing = self._client.close()
        if inspect.isawaitable(closing):
            await closing

    async def _find_snapshot(self, peer_id: str) -> Any | None:
        query = self._collection.where(filter=FieldFilter("peerId", "==", peer_id)).limit(1)
        snapshots = await query.get()
        return snapshots[0] if snapshots else None


__all__ = [
    "DEFAULT_COLLECTION",
    "FirestorePeerStore",
    "record_from_document",
    "record_to_document",
]
