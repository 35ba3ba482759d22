"""Use cases for adding, refreshing, and bulk-refreshing leaderboard peers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from opentelemetry import trace

from gensyn_leaderboard.application.ports.peer_source import PeerSourcePort
from gensyn_leaderboard.application.ports.peer_store import PeerStorePort
from gensyn_leaderboard.domain.cooldown import DEFAULT_COOLDOWN, CooldownActive, remaining_cooldown
from gensyn_leaderboard.domain.peer import PeerRecord, to_epoch_millis
from gensyn_leaderboard.errors import InvalidQueryError, PeerNotFoundError

logger = logging.getLogger("gensyn_leaderboard.refresh")


@dataclass(frozen=True, slots=True)
class RefreshFailure:
    query_name: str
    message: str


@dataclass(frozen=True, slots=True)
class BulkRefreshReport:
    """Outcome of a bulk refresh; successes are listed in completion order."""

    attempted: int
    records: tuple[PeerRecord, ...] = ()
    failures: tuple[RefreshFailure, ...] = field(default_factory=tuple)
    bypass_cooldown: bool = False

    @property
    def succeeded(self) -> int:
        return len(self.records)


class PeerRefreshService:
    """Reconciles dashboard data with stored leaderboard records."""

    def __init__(
        self,
        *,
        source: PeerSourcePort,
        store: PeerStorePort,
        clock: Callable[[], datetime] | None = None,
        cooldown: timedelta = DEFAULT_COOLDOWN,
    ) -> None:
        self._source = source
        self._store = store
        self._clock = clock or _utc_now
        self._cooldown = cooldown

    @property
    def cooldown(self) -> timedelta:
        return self._cooldown

    async def add_or_update(self, query_name: str, gpu: str | None = None) -> PeerRecord:
        """Fetch a peer by alias and insert or merge it into the store."""
        alias = (query_name or "").strip()
        if not alias:
            raise InvalidQueryError("Peer identifier cannot be empty.")

        snapshot = await self._source.fetch_peer(alias)
        refreshed_at = self._now_millis()
        existing = await self._store.find_by_peer_id(snapshot.peer_id)
        if existing is None:
            record = PeerRecord.create(snapshot, query_name=alias, refreshed_at=refreshed_at, gpu=gpu)
        else:
            record = existing.merge_snapshot(
                snapshot,
                refreshed_at=refreshed_at,
                query_name=alias,
                gpu=gpu,
            )
        stored = await self._store.upsert_by_peer_id(record)
        logger.info(
            "peer added or updated",
            extra={
                "data": {
                    "query_name": alias,
                    "peer_id": stored.peer_id,
                    "record_id": stored.id,
                    "created": existing is None,
                }
            },
        )
        return stored

    async def refresh_one(self, record: PeerRecord) -> PeerRecord | CooldownActive:
        """Refresh a single record unless it is still inside the cooldown window."""
        remaining = remaining_cooldown(record.last_refreshed, self._now_millis(), self._cooldown)
        if remaining is not None:
            logger.info(
                "peer refresh skipped during cooldown",
                extra={
                    "data": {
                        "record_id": record.id,
                        "remaining_s": int(remaining.total_seconds()),
                    }
                },
            )
            return CooldownActive(peer_name=record.peer_name, remaining=remaining)

        stored = await self._load(record.id)
        return await self._refresh(stored)

    async def refresh_by_id(self, record_id: str) -> PeerRecord | CooldownActive:
        return await self.refresh_one(await self._load(record_id))

    async def refresh_many(
        self,
        records: Sequence[PeerRecord],
        *,
        bypass_cooldown: bool = False,
    ) -> BulkRefreshReport:
        """Refresh every record concurrently, isolating failures per item.

        The per-record cooldown gate is never applied here; ``bypass_cooldown``
        is carried through to the report for the caller.
        """
        if not records:
            return BulkRefreshReport(attempted=0, bypass_cooldown=bypass_cooldown)

        tasks = [asyncio.create_task(self._refresh_isolated(record)) for record in records]
        refreshed: list[PeerRecord] = []
        failures: list[RefreshFailure] = []
        for next_done in asyncio.as_completed(tasks):
            outcome = await next_done
            if isinstance(outcome, RefreshFailure):
                failures.append(outcome)
            else:
                refreshed.append(outcome)

        report = BulkRefreshReport(
            attempted=len(records),
            records=tuple(refreshed),
            failures=tuple(failures),
            bypass_cooldown=bypass_cooldown,
        )
        logger.info(
            "bulk refresh complete",
            extra={
                "data": {
                    "attempted": report.attempted,
                    "succeeded": report.succeeded,
                    "failed": [failure.query_name for failure in report.failures],
                    "bypass_cooldown": bypass_cooldown,
                }
            },
        )
        return report

    async def _refresh_isolated(self, record: PeerRecord) -> PeerRecord | RefreshFailure:
        try:
            stored = await self._load(record.id) if record.id else record
            return await self._refresh(stored)
        except Exception as exc:
            logger.warning(
                "peer refresh failed",
                extra={"data": {"query_name": record.lookup_name, "error": str(exc)}},
            )
            return RefreshFailure(query_name=record.lookup_name, message=_failure_message(exc))

    async def _refresh(self, stored: PeerRecord) -> PeerRecord:
        tracer = trace.get_tracer("gensyn_leaderboard.refresh")
        with tracer.start_as_current_span(
            "peer.refresh",
            attributes={"peer.query_name": stored.lookup_name, "peer.record_id": stored.id or ""},
        ):
            snapshot = await self._source.fetch_peer(stored.lookup_name)
            updated = stored.merge_snapshot(snapshot, refreshed_at=self._now_millis())
            if stored.id:
                # Stored entries are rewritten in place even if the dashboard reports a new peer_id.
                return await self._store.save(updated)
            return await self._store.upsert_by_peer_id(updated)

    async def _load(self, record_id: str | None) -> PeerRecord:
        if not record_id:
            raise PeerNotFoundError("Peer record has no storage id.")
        stored = await self._store.get(record_id)
        if stored is None:
            raise PeerNotFoundError(f"Peer with ID {record_id} not found.")
        return stored

    def _now_millis(self) -> int:
        return to_epoch_millis(self._clock())


def merge_working_set(
    current: Iterable[PeerRecord],
    updates: Iterable[PeerRecord],
) -> list[PeerRecord]:
    """Overlay refreshed records on a working set keyed by peer_id.

    Later updates win; entries keep the position they were first seen in.
    """
    merged: dict[str, PeerRecord] = {record.peer_id: record for record in current}
    for record in updates:
        merged[record.peer_id] = record
    return list(merged.values())


def _failure_message(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or "Unknown error"


def _utc_now() -> datetime:
    return datetime.now(UTC)


__all__ = [
    "BulkRefreshReport",
    "PeerRefreshService",
    "RefreshFailure",
    "merge_working_set",
]
