"""Render leaderboard errors as the uniform ``{message}`` envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gensyn_leaderboard.errors import LeaderboardError

logger = logging.getLogger("gensyn_leaderboard.http")


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


async def leaderboard_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, LeaderboardError):  # pragma: no cover - registered for LeaderboardError only
        raise exc
    if exc.status_code >= 500:
        logger.warning(
            "request failed with upstream error",
            extra={"data": {"path": request.url.path, "status_code": exc.status_code, "message": exc.message}},
        )
    return error_response(exc.message, exc.status_code)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LeaderboardError, leaderboard_error_handler)


__all__ = ["error_response", "install_error_handlers", "leaderboard_error_handler"]
