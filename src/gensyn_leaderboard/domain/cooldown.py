"""Refresh cooldown arithmetic."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

DEFAULT_COOLDOWN = timedelta(hours=6)

_HOUR_MS = 60 * 60 * 1000
_MINUTE_MS = 60 * 1000


def remaining_cooldown(
    last_refreshed: int | None,
    now: int,
    window: timedelta = DEFAULT_COOLDOWN,
) -> timedelta | None:
    """Return the time left before a refresh is allowed, or None when allowed.

    Timestamps are epoch milliseconds. A record that was never refreshed is
    never cooling down.
    """
    if not last_refreshed:
        return None
    window_ms = int(window.total_seconds() * 1000)
    elapsed = now - last_refreshed
    if elapsed >= window_ms:
        return None
    return timedelta(milliseconds=window_ms - elapsed)


def describe_remaining(remaining: timedelta) -> str:
    """Render a wait duration as whole hours/minutes, e.g. ``5h 3m``."""
    remaining_ms = int(remaining.total_seconds() * 1000)
    if remaining_ms < _MINUTE_MS:
        return "a few moments"
    hours, rest_ms = divmod(remaining_ms, _HOUR_MS)
    minutes = math.ceil(rest_ms / _MINUTE_MS)
    if minutes == 60:
        hours, minutes = hours + 1, 0
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours == 0:
        parts.append(f"{minutes}m")
    return " ".join(parts)


@dataclass(frozen=True, slots=True)
class CooldownActive:
    """Informational result returned instead of refreshing a recent record."""

    peer_name: str
    remaining: timedelta

    def describe(self) -> str:
        return describe_remaining(self.remaining)

    @property
    def message(self) -> str:
        return (
            f"Peer {self.peer_name} was refreshed recently. "
            f"Please try again in approx. {self.describe()}."
        )


__all__ = ["DEFAULT_COOLDOWN", "CooldownActive", "describe_remaining", "remaining_cooldown"]
