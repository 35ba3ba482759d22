"""Port describing where fresh peer statistics come from."""

from __future__ import annotations

from typing import Protocol

from gensyn_leaderboard.domain.peer import PeerSnapshot


class PeerSourcePort(Protocol):
    """Look up a peer's live statistics by query alias."""

    async def fetch_peer(self, name: str) -> PeerSnapshot:
        """Return the snapshot for name or raise a LeaderboardError."""


__all__ = ["PeerSourcePort"]
