"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gensyn_leaderboard.infrastructure.http.errors import install_error_handlers
from gensyn_leaderboard.infrastructure.http.middleware import request_logging_middleware
from gensyn_leaderboard.infrastructure.http.routes import add_leaderboard_routes, add_proxy_routes
from gensyn_leaderboard.observability.logging import shutdown_logging
from gensyn_leaderboard.runtime.bootstrap import RuntimeContext, close_runtime_resources

logger = logging.getLogger("gensyn_leaderboard")


def create_app(runtime: RuntimeContext) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        del app
        logger.info("gensyn-leaderboard starting up")
        yield
        logger.info("gensyn-leaderboard shutting down")
        await close_runtime_resources(runtime)
        shutdown_logging()

    app = FastAPI(title="Gensyn Leaderboard API", version="0.1.0", lifespan=lifespan)
    app.middleware("http")(request_logging_middleware)
    install_error_handlers(app)

    add_proxy_routes(app, runtime.proxy_deps_provider)
    add_leaderboard_routes(app, runtime.leaderboard_deps_provider)

    @app.get("/healthz", tags=["health"], description="Service health check.")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


__all__ = ["create_app"]
