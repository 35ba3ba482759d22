from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from gensyn_leaderboard.infrastructure.http.middleware import request_logging_middleware


def test_request_logging_middleware_logs_and_echoes_request_id(caplog) -> None:
    app = FastAPI()
    app.middleware("http")(request_logging_middleware)

    @app.get("/api/peers")
    async def peers() -> dict[str, list[str]]:
        return {"peers": []}

    target_logger = logging.getLogger("gensyn_leaderboard.http")
    original_propagate = target_logger.propagate
    target_logger.propagate = False
    target_logger.addHandler(caplog.handler)
    target_logger.setLevel(logging.INFO)
    caplog.set_level(logging.INFO)

    try:
        client = TestClient(app)
        response = client.get(
            "/api/peers",
            params=[("sort", "reward"), ("direction", "ascending")],
            headers={"x-request-id": "req-123"},
        )
    finally:
        target_logger.removeHandler(caplog.handler)
        target_logger.propagate = original_propagate

    assert response.status_code == 200
    assert response.headers["x-request-id"] == "req-123"

    records = [record for record in caplog.records if record.name == "gensyn_leaderboard.http"]
    received = next(record for record in records if record.msg == "request_received")
    completed = next(record for record in records if record.msg == "request_completed")

    assert received.data["method"] == "GET"
    assert received.data["path"] == "/api/peers"
    assert received.data["query_params"] == [("sort", "reward"), ("direction", "ascending")]
    assert completed.data["request_id"] == "req-123"
    assert completed.data["status_code"] == 200
    assert completed.data["duration_ms"] >= 0
