"""Entrypoint for running the leaderboard API service under uvicorn."""

from __future__ import annotations

from gensyn_leaderboard.app import create_app
from gensyn_leaderboard.observability.logging import configure_logging, init_logging
from gensyn_leaderboard.observability.tracing import configure_tracing
from gensyn_leaderboard.runtime.bootstrap import build_runtime
from gensyn_leaderboard.runtime.settings import Settings

init_logging()
configure_tracing(service_name="gensyn-leaderboard")
_settings = Settings.load()
if _settings.observability.enable_cloud_logging:
    gcp_project = _settings.observability.gcp_project_id or _settings.firestore.project_id
    if gcp_project is None:
        raise RuntimeError("Cloud logging enabled but no GCP project configured")
    configure_logging(
        cloud_logging_enabled=True,
        gcp_project=gcp_project,
        cloud_log_labels={"service": "gensyn-leaderboard"},
    )

_runtime = build_runtime(_settings)
app = create_app(_runtime)


def main() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=_runtime.settings.listen_host,
        port=_runtime.settings.port,
        # logging already setup
        log_config=None,
    )


__all__ = ["app", "main"]
