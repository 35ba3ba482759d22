"""Shape validation for peer payloads crossing a trust boundary."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, TypeAdapter, field_validator

from gensyn_leaderboard.domain.peer import PeerSnapshot

# Integers stay integers so the proxy echoes upstream numbers unchanged.
FiniteNumber = StrictInt | Annotated[float, Field(strict=True, allow_inf_nan=False)]


class PeerPayload(BaseModel):
    """Wire shape shared by the dashboard API and the proxy endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    peer_id: StrictStr = Field(alias="peerId")
    peer_name: StrictStr = Field(alias="peerName")
    reward: FiniteNumber
    score: FiniteNumber
    online: StrictBool

    @field_validator("reward", "score", mode="before")
    @classmethod
    def _reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("booleans are not numeric stats")
        return value

    def to_snapshot(self) -> PeerSnapshot:
        return PeerSnapshot(
            peer_id=self.peer_id,
            peer_name=self.peer_name,
            reward=self.reward,
            score=self.score,
            online=self.online,
        )


_PEER_PAYLOAD_ADAPTER = TypeAdapter(PeerPayload)


def parse_peer_payload(payload: object) -> PeerSnapshot:
    """Validate an untyped JSON payload into a PeerSnapshot.

    Raises pydantic.ValidationError (a ValueError) on any deviation.
    """
    return _PEER_PAYLOAD_ADAPTER.validate_python(payload).to_snapshot()


def dump_peer_payload(snapshot: PeerSnapshot) -> dict[str, object]:
    return {
        "peerId": snapshot.peer_id,
        "peerName": snapshot.peer_name,
        "reward": snapshot.reward,
        "score": snapshot.score,
        "online": snapshot.online,
    }


__all__ = ["PeerPayload", "dump_peer_payload", "parse_peer_payload"]
