from __future__ import annotations

import math
from datetime import UTC, datetime

import pytest

from gensyn_leaderboard.domain.peer import PeerRecord, PeerSnapshot, to_epoch_millis


def _record(**overrides: object) -> PeerRecord:
    fields: dict[str, object] = {
        "id": "doc-1",
        "peer_id": "p1",
        "peer_name": "wdkfd",
        "reward": 100,
        "score": 50,
        "online": True,
        "query_name": "wdkfd",
        "gpu": "RTX 4090",
        "last_refreshed": 1_000,
    }
    fields.update(overrides)
    return PeerRecord(**fields)  # type: ignore[arg-type]


def test_create_strips_gpu_and_defaults_to_empty() -> None:
    snap = PeerSnapshot(peer_id="p1", peer_name="wdkfd", reward=1, score=2, online=False)

    assert PeerRecord.create(snap, query_name="alias", refreshed_at=5, gpu="  A100 ").gpu == "A100"
    assert PeerRecord.create(snap, query_name="alias", refreshed_at=5).gpu == ""


def test_merge_snapshot_keeps_local_fields() -> None:
    fresh = PeerSnapshot(peer_id="p1", peer_name="renamed", reward=-3.5, score=0, online=False)

    merged = _record().merge_snapshot(fresh, refreshed_at=2_000)

    assert merged.peer_name == "renamed"
    assert merged.reward == -3.5
    assert merged.online is False
    assert merged.gpu == "RTX 4090"
    assert merged.query_name == "wdkfd"
    assert merged.id == "doc-1"
    assert merged.last_refreshed == 2_000


def test_merge_snapshot_overwrites_gpu_only_when_non_empty() -> None:
    fresh = PeerSnapshot(peer_id="p1", peer_name="wdkfd", reward=1, score=1, online=True)

    assert _record().merge_snapshot(fresh, refreshed_at=1, gpu="  ").gpu == "RTX 4090"
    assert _record().merge_snapshot(fresh, refreshed_at=1, gpu="H100").gpu == "H100"


def test_lookup_name_falls_back_to_peer_name() -> None:
    assert _record(query_name="").lookup_name == "wdkfd"
    assert _record(query_name="alias").lookup_name == "alias"


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_stats_rejected(value: float) -> None:
    with pytest.raises(ValueError, match="finite"):
        PeerSnapshot(peer_id="p1", peer_name="x", reward=value, score=0, online=True)
    with pytest.raises(ValueError, match="finite"):
        _record(score=value)


def test_to_epoch_millis() -> None:
    assert to_epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)) == 1_000
