"""Leaderboard working set: sorting and user action dispatch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from gensyn_leaderboard.application.peer_refresh import PeerRefreshService, merge_working_set
from gensyn_leaderboard.application.ports.peer_store import PeerStorePort
from gensyn_leaderboard.domain.cooldown import CooldownActive
from gensyn_leaderboard.domain.peer import PeerRecord

logger = logging.getLogger("gensyn_leaderboard.leaderboard")


class SortKey(StrEnum):
    REWARD = "reward"
    SCORE = "score"


class SortDirection(StrEnum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class NotificationVariant(StrEnum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True, slots=True)
class SortConfig:
    key: SortKey
    direction: SortDirection = SortDirection.DESCENDING


@dataclass(frozen=True, slots=True)
class Notification:
    """User-facing message produced at an action boundary."""

    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant is NotificationVariant.DESTRUCTIVE


def next_sort_config(current: SortConfig | None, key: SortKey) -> SortConfig:
    """Toggle direction for the same key; a new key starts descending."""
    if (
        current is not None
        and current.key is key
        and current.direction is SortDirection.DESCENDING
    ):
        return SortConfig(key=key, direction=SortDirection.ASCENDING)
    return SortConfig(key=key, direction=SortDirection.DESCENDING)


def sort_peers(peers: list[PeerRecord], config: SortConfig | None) -> list[PeerRecord]:
    """Sort by the configured metric, ties broken by ascending peer name."""
    if config is None:
        return list(peers)
    sign = 1 if config.direction is SortDirection.ASCENDING else -1
    field_name = config.key.value
    return sorted(peers, key=lambda peer: (sign * getattr(peer, field_name), peer.peer_name))


class LeaderboardView:
    """Holds the displayed peers and turns actions into notifications."""

    def __init__(self, *, service: PeerRefreshService, store: PeerStorePort) -> None:
        self._service = service
        self._store = store
        self._peers: list[PeerRecord] = []
        self._sort: SortConfig | None = None
        self._refreshing: str | None = None
        self._refreshing_all = False

    @property
    def peers(self) -> list[PeerRecord]:
        return list(self._peers)

    @property
    def sort_config(self) -> SortConfig | None:
        return self._sort

    @property
    def refreshing(self) -> str | None:
        return self._refreshing

    @property
    def refreshing_all(self) -> bool:
        return self._refreshing_all

    def request_sort(self, key: SortKey) -> SortConfig:
        self._sort = next_sort_config(self._sort, key)
        return self._sort

    def sorted_peers(self) -> list[PeerRecord]:
        return sort_peers(self._peers, self._sort)

    async def load(self) -> Notification | None:
        try:
            self._peers = list(await self._store.list_all())
        except Exception as exc:
            logger.exception("failed to load leaderboard peers")
            return Notification(
                title="Error Loading Leaderboard",
                description=_describe(exc, "Could not fetch leaderboard data from the database."),
                variant=NotificationVariant.DESTRUCTIVE,
            )
        return None

    async def add_peer(self, query_name: str, gpu: str | None = None) -> Notification:
        try:
            record = await self._service.add_or_update(query_name, gpu)
        except Exception as exc:
            logger.exception("add peer failed", extra={"data": {"query_name": query_name}})
            return Notification(
                title="Error",
                description=_describe(exc, f"Could not add or update {query_name}."),
                variant=NotificationVariant.DESTRUCTIVE,
            )
        self._replace(record)
        return Notification(
            title="Peer Added/Updated",
            description=f"{record.peer_name}'s data has been added/updated on the leaderboard.",
        )

    async def refresh_peer(self, record_id: str) -> Notification:
        peer = self._find(record_id)
        self._refreshing = record_id
        try:
            if peer is None:
                outcome = await self._service.refresh_by_id(record_id)
            else:
                outcome = await self._service.refresh_one(peer)
        except Exception as exc:
            name = peer.peer_name if peer is not None else record_id
            logger.exception("refresh peer failed", extra={"data": {"record_id": record_id}})
            return Notification(
                title="Refresh Error",
                description=_describe(exc, f"Could not refresh data for {name}."),
                variant=NotificationVariant.DESTRUCTIVE,
            )
        finally:
            self._refreshing = None

        if isinstance(outcome, CooldownActive):
            return Notification(title="Refresh Cooldown", description=outcome.message)
        self._replace(outcome)
        return Notification(
            title="Peer Refreshed",
            description=f"{outcome.peer_name}'s data has been updated.",
        )

    async def refresh_all(self, *, bypass_cooldown: bool = False) -> list[Notification]:
        if not self._peers:
            return [Notification(title="No Peers", description="There are no peers to refresh.")]

        self._refreshing_all = True
        try:
            report = await self._service.refresh_many(self._peers, bypass_cooldown=bypass_cooldown)
        finally:
            self._refreshing_all = False

        notifications = [
            Notification(
                title=f"Refresh Error for {failure.query_name}",
                description=failure.message,
                variant=NotificationVariant.DESTRUCTIVE,
            )
            for failure in report.failures
        ]
        self._peers = merge_working_set(self._peers, report.records)
        notifications.append(
            Notification(
                title="Refresh All Complete",
                description=(
                    f"Successfully updated {report.succeeded} of {report.attempted} peers."
                ),
            )
        )
        return notifications

    def _find(self, record_id: str) -> PeerRecord | None:
        return next((peer for peer in self._peers if peer.id == record_id), None)

    def _replace(self, record: PeerRecord) -> None:
        for index, peer in enumerate(self._peers):
            if peer.id == record.id:
                self._peers[index] = record
                return
        self._peers.append(record)


def _describe(exc: Exception, fallback: str) -> str:
    message = getattr(exc, "message", None) or str(exc)
    return message or fallback


__all__ = [
    "LeaderboardView",
    "Notification",
    "NotificationVariant",
    "SortConfig",
    "SortDirection",
    "SortKey",
    "next_sort_config",
    "sort_peers",
]
