"""Domain-specific exceptions shared across leaderboard components."""

from __future__ import annotations


class LeaderboardError(Exception):
    """Base class for failures surfaced to API callers as a message envelope."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidQueryError(LeaderboardError, ValueError):
    """Raised when a peer name is missing or empty."""

    status_code = 400


class UpstreamUnavailableError(LeaderboardError):
    """Raised when the dashboard API cannot be reached at the network level."""

    status_code = 503


class UpstreamMalformedError(LeaderboardError):
    """Raised when a peer payload does not match the expected shape."""

    status_code = 502


class UpstreamRejectedError(LeaderboardError):
    """Raised when the upstream answers with a non-success status of its own."""


class PeerNotFoundError(LeaderboardError, LookupError):
    """Raised when a refresh targets a record absent from storage."""

    status_code = 404


__all__ = [
    "InvalidQueryError",
    "LeaderboardError",
    "PeerNotFoundError",
    "UpstreamMalformedError",
    "UpstreamRejectedError",
    "UpstreamUnavailableError",
]
