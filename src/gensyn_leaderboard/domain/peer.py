"""Peer snapshot and leaderboard record models."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime


def to_epoch_millis(moment: datetime) -> int:
    """Return the epoch-millisecond timestamp for an aware datetime."""
    return int(moment.timestamp() * 1000)


@dataclass(frozen=True, slots=True)
class PeerSnapshot:
    """Peer statistics as reported by the dashboard API."""

    peer_id: str
    peer_name: str
    reward: float
    score: float
    online: bool

    def __post_init__(self) -> None:
        if not math.isfinite(self.reward):
            raise ValueError("reward must be finite")
        if not math.isfinite(self.score):
            raise ValueError("score must be finite")


@dataclass(frozen=True, slots=True)
class PeerRecord:
    """Leaderboard entry persisted in the shared store.

    ``gpu`` and ``query_name`` are owned locally; every other stat comes from
    the dashboard and is overwritten on each successful merge.
    """

    peer_id: str
    peer_name: str
    reward: float
    score: float
    online: bool
    query_name: str
    last_refreshed: int
    gpu: str = ""
    id: str | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.reward):
            raise ValueError("reward must be finite")
        if not math.isfinite(self.score):
            raise ValueError("score must be finite")
        if self.last_refreshed < 0:
            raise ValueError("last_refreshed must be non-negative")

    @classmethod
    def create(
        cls,
        snapshot: PeerSnapshot,
        *,
        query_name: str,
        refreshed_at: int,
        gpu: str | None = None,
    ) -> PeerRecord:
        """Build a new, not yet stored, record from a fresh snapshot."""
        return cls(
            peer_id=snapshot.peer_id,
            peer_name=snapshot.peer_name,
            reward=snapshot.reward,
            score=snapshot.score,
            online=snapshot.online,
            query_name=query_name,
            gpu=(gpu or "").strip(),
            last_refreshed=refreshed_at,
        )

    @property
    def lookup_name(self) -> str:
        """Alias used to re-query the dashboard for this peer."""
        return self.query_name.strip() or self.peer_name

    def merge_snapshot(
        self,
        snapshot: PeerSnapshot,
        *,
        refreshed_at: int,
        query_name: str | None = None,
        gpu: str | None = None,
    ) -> PeerRecord:
        """Return the record with fresh dashboard stats applied.

        A blank ``gpu`` keeps the stored label; ``query_name`` replaces the
        alias only when supplied.
        """
        new_gpu = (gpu or "").strip()
        return replace(
            self,
            peer_id=snapshot.peer_id,
            peer_name=snapshot.peer_name,
            reward=snapshot.reward,
            score=snapshot.score,
            online=snapshot.online,
            query_name=self.query_name if query_name is None else query_name,
            gpu=new_gpu or self.gpu,
            last_refreshed=refreshed_at,
        )

    def with_id(self, record_id: str) -> PeerRecord:
        if not record_id.strip():
            raise ValueError("record id must not be empty")
        return replace(self, id=record_id)


__all__ = ["PeerRecord", "PeerSnapshot", "to_epoch_millis"]
