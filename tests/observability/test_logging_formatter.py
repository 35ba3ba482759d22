import json
import logging
import sys
from dataclasses import dataclass

import pytest

from gensyn_leaderboard.observability.logging import ExtrasFormatter, OtelContextLogFilter, build_log_config


def _record(msg: str, *, level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="gensyn_leaderboard.refresh",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


@dataclass
class _Failure:
    query_name: str
    message: str


def test_formatter_emits_json_payload_in_cloud_run(monkeypatch) -> None:
    monkeypatch.setenv("K_SERVICE", "gensyn-leaderboard")
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    record = _record("bulk refresh complete")
    record.data = {
        "attempted": 3,
        "failed": ("b",),
        "failure": _Failure(query_name="b", message="down"),
        "raw": b"hello",
    }

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "bulk refresh complete"
    assert payload["severity"] == "INFO"
    assert payload["logger"] == "gensyn_leaderboard.refresh"
    assert payload["data"]["attempted"] == 3
    assert payload["data"]["failed"] == ["b"]
    assert payload["data"]["failure"] == {"query_name": "b", "message": "down"}
    assert payload["data"]["raw"] == "<bytes len=5>"
    assert payload["timestamp"].endswith("Z")


def test_formatter_emits_exception_payload_in_kubernetes(monkeypatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    try:
        raise ValueError("boom")
    except ValueError:
        exc_info = sys.exc_info()

    record = _record("peer refresh failed", level=logging.ERROR, exc_info=exc_info)
    record.data = {"query_name": "wdkfd"}

    payload = json.loads(formatter.format(record))

    assert payload["severity"] == "ERROR"
    assert payload["data"]["query_name"] == "wdkfd"
    assert "ValueError: boom" in payload["exception"]


def test_formatter_appends_data_outside_managed_runtimes(monkeypatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    record = _record("peer added or updated")
    record.data = {"peer_id": "p1"}

    rendered = formatter.format(record)

    assert rendered == 'INFO gensyn_leaderboard.refresh: peer added or updated | data={"peer_id":"p1"}'


def test_otel_filter_without_active_span_leaves_record_untouched() -> None:
    record = _record("no span")

    assert OtelContextLogFilter().filter(record) is True
    assert "otel" not in record.__dict__


def test_build_log_config_defaults_to_console_only(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = build_log_config()

    assert config["root"] == {"level": "DEBUG", "handlers": ["console"]}
    assert config["loggers"]["httpx"]["level"] == "WARNING"
    assert "cloud_logging" not in config["handlers"]


def test_build_log_config_requires_project_for_cloud_logging() -> None:
    with pytest.raises(RuntimeError, match="GCP project required"):
        build_log_config(cloud_logging_enabled=True)
