from __future__ import annotations

from datetime import timedelta

import pytest

from gensyn_leaderboard.domain.cooldown import CooldownActive, describe_remaining, remaining_cooldown

HOUR_MS = 60 * 60 * 1000
T0 = 1_700_000_000_000


def test_never_refreshed_is_not_cooling() -> None:
    assert remaining_cooldown(0, T0) is None
    assert remaining_cooldown(None, T0) is None


def test_remaining_inside_window() -> None:
    remaining = remaining_cooldown(T0, T0 + HOUR_MS, timedelta(hours=6))

    assert remaining == timedelta(hours=5)


def test_window_boundary_allows_refresh() -> None:
    assert remaining_cooldown(T0, T0 + 6 * HOUR_MS, timedelta(hours=6)) is None
    assert remaining_cooldown(T0, T0 + 6 * HOUR_MS - 1, timedelta(hours=6)) == timedelta(milliseconds=1)


@pytest.mark.parametrize(
    ("remaining", "expected"),
    [
        pytest.param(timedelta(hours=5), "5h", id="whole_hours"),
        pytest.param(timedelta(hours=5, minutes=2, seconds=10), "5h 3m", id="minutes_round_up"),
        pytest.param(timedelta(minutes=42), "42m", id="minutes_only"),
        pytest.param(timedelta(seconds=61), "2m", id="just_over_a_minute"),
        pytest.param(timedelta(minutes=59, seconds=30), "1h", id="carry_into_hour"),
        pytest.param(timedelta(seconds=30), "a few moments", id="under_a_minute"),
    ],
)
def test_describe_remaining(remaining: timedelta, expected: str) -> None:
    assert describe_remaining(remaining) == expected


def test_cooldown_message_names_peer() -> None:
    result = CooldownActive(peer_name="wdkfd", remaining=timedelta(hours=5))

    assert result.message == "Peer wdkfd was refreshed recently. Please try again in approx. 5h."
