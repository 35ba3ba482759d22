"""Pydantic schemas for the leaderboard HTTP API (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gensyn_leaderboard.application.peer_refresh import BulkRefreshReport
from gensyn_leaderboard.domain.cooldown import CooldownActive
from gensyn_leaderboard.domain.peer import PeerRecord


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PeerModel(_CamelModel):
    id: str | None
    peer_id: str
    peer_name: str
    reward: int | float
    score: int | float
    online: bool
    query_name: str
    gpu: str
    last_refreshed: int

    @classmethod
    def from_record(cls, record: PeerRecord) -> PeerModel:
        return cls(
            id=record.id,
            peer_id=record.peer_id,
            peer_name=record.peer_name,
            reward=record.reward,
            score=record.score,
            online=record.online,
            query_name=record.query_name,
            gpu=record.gpu,
            last_refreshed=record.last_refreshed,
        )


class LeaderboardResponse(_CamelModel):
    peers: list[PeerModel]


class AddPeerRequest(_CamelModel):
    query_name: str
    gpu: str | None = None


class BulkRefreshRequest(_CamelModel):
    bypass_cooldown: bool = False


class RefreshFailureModel(_CamelModel):
    query_name: str
    message: str


class BulkRefreshResponse(_CamelModel):
    attempted: int
    succeeded: int
    failures: list[RefreshFailureModel]
    peers: list[PeerModel]

    @classmethod
    def from_report(cls, report: BulkRefreshReport) -> BulkRefreshResponse:
        return cls(
            attempted=report.attempted,
            succeeded=report.succeeded,
            failures=[
                RefreshFailureModel(query_name=failure.query_name, message=failure.message)
                for failure in report.failures
            ],
            peers=[PeerModel.from_record(record) for record in report.records],
        )


class CooldownResponse(_CamelModel):
    message: str
    remaining: str
    remaining_seconds: int

    @classmethod
    def from_result(cls, result: CooldownActive) -> CooldownResponse:
        return cls(
            message=result.message,
            remaining=result.describe(),
            remaining_seconds=int(result.remaining.total_seconds()),
        )


class ErrorEnvelope(BaseModel):
    message: str


__all__ = [
    "AddPeerRequest",
    "BulkRefreshRequest",
    "BulkRefreshResponse",
    "CooldownResponse",
    "ErrorEnvelope",
    "LeaderboardResponse",
    "PeerModel",
    "RefreshFailureModel",
]
