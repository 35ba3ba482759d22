"""Logging setup: console formatter with structured extras, optional Cloud Logging."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from logging.config import dictConfig
from typing import Any

from google.cloud import logging as gcp_logging
from google.cloud.logging_v2.handlers.handlers import CloudLoggingHandler
from opentelemetry import trace

_PACKAGE_LOGGER = "gensyn_leaderboard"
_CLOUD_HANDLER = "cloud_logging"


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


def _should_emit_json_payload() -> bool:
    # Cloud Run and Kubernetes parse JSON log lines into structured payloads.
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _sanitize_for_json(value: Any, depth: int = 8) -> Any:
    """Return a JSON-serializable copy; unknown objects become strings."""
    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        return _sanitize_for_json(asdict(value), depth - 1)
    if isinstance(value, Mapping):
        return {str(key): _sanitize_for_json(item, depth - 1) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_sanitize_for_json(item, depth - 1) for item in value]
    return str(value)


class ExtrasFormatter(logging.Formatter):
    """Append structured `data` payloads when present."""

    def format(self, record: logging.LogRecord) -> str:
        data = record.__dict__.get("data")
        if _should_emit_json_payload():
            return json.dumps(self._payload(record, data), sort_keys=True, separators=(",", ":"))

        formatted = super().format(record)
        if data:
            encoded = json.dumps(_sanitize_for_json(data), sort_keys=True, separators=(",", ":"))
            return f"{formatted} | data={encoded}"
        return formatted

    def _payload(self, record: logging.LogRecord, data: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": record.getMessage(),
            "severity": record.levelname,
            "logger": record.name,
            "timestamp": (
                f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
                f".{int(record.msecs):03d}Z"
            ),
        }
        if data:
            payload["data"] = _sanitize_for_json(data)
        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
        trace_fields = record.__dict__.get("otel")
        if trace_fields:
            payload["otel"] = trace_fields
        return payload


class OtelContextLogFilter(logging.Filter):
    """Attach the active OpenTelemetry trace/span ids to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.__dict__["otel"] = {
                "trace_id": f"{span_context.trace_id:032x}",
                "span_id": f"{span_context.span_id:016x}",
            }
        return True


def build_log_config(
    *,
    root_level_env: str = "LOG_LEVEL",
    root_default: str = "INFO",
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_name: str = "gensyn-leaderboard",
    cloud_log_labels: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": "ext://sys.stdout",
            "filters": ["otel_context"],
        }
    }
    handler_names = ["console"]
    if cloud_logging_enabled:
        if not gcp_project:
            raise RuntimeError("GCP project required when cloud logging is enabled")
        handlers[_CLOUD_HANDLER] = _cloud_logging_handler(gcp_project, cloud_log_name, cloud_log_labels)
        handler_names.append(_CLOUD_HANDLER)

    def quiet(env_var: str, default: str) -> dict[str, Any]:
        return {"level": _level(env_var, default), "handlers": list(handler_names), "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "filters": {"otel_context": {"()": OtelContextLogFilter}},
        "handlers": handlers,
        "root": {"level": _level(root_level_env, root_default), "handlers": list(handler_names)},
        "loggers": {
            "uvicorn": quiet("UVICORN_LOG_LEVEL", "INFO"),
            "uvicorn.error": quiet("UVICORN_LOG_LEVEL", "INFO"),
            "uvicorn.access": quiet("UVICORN_ACCESS_LOG_LEVEL", "WARNING"),
            "httpx": quiet("HTTPX_LOG_LEVEL", "WARNING"),
            "httpcore": quiet("HTTPX_LOG_LEVEL", "WARNING"),
            "google": quiet("GOOGLE_LOG_LEVEL", "WARNING"),
        },
    }


def _cloud_logging_handler(
    project: str,
    log_name: str,
    labels: Mapping[str, str] | None,
) -> dict[str, Any]:
    from google.cloud.logging_v2.resource import Resource

    from gensyn_leaderboard.gcp.credentials import credentials_from_b64

    credentials = credentials_from_b64(
        os.getenv("GCP_SERVICE_ACCOUNT_CREDENTIAL_BASE64"),
        source="GCP_SERVICE_ACCOUNT_CREDENTIAL_BASE64",
    )
    client: gcp_logging.Client = gcp_logging.Client(  # type: ignore[no-untyped-call]
        project=project,
        credentials=credentials,
    )
    return {
        "level": "INFO",
        "class": "google.cloud.logging_v2.handlers.handlers.CloudLoggingHandler",
        "client": client,
        "name": log_name,
        "resource": Resource("global", {"project_id": project}),
        "labels": dict(labels or {}),
        "formatter": "console",
    }


def init_logging() -> None:
    """Bootstrap console logging without cloud handlers."""
    configure_logging()


def configure_logging(
    *,
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_labels: Mapping[str, str] | None = None,
) -> None:
    """Apply the logging config and let package loggers follow the root level."""
    dictConfig(
        build_log_config(
            cloud_logging_enabled=cloud_logging_enabled,
            gcp_project=gcp_project,
            cloud_log_labels=cloud_log_labels,
        )
    )
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
    logging.getLogger("gensyn_leaderboard.observability").debug(
        "configured logging",
        extra={"data": {"cloud_logging_enabled": cloud_logging_enabled, "gcp_project": gcp_project}},
    )


def shutdown_logging() -> None:
    """Flush/close CloudLoggingHandler instances proactively."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, CloudLoggingHandler):
            handler.flush()  # type: ignore[no-untyped-call]
            handler.close()  # type: ignore[no-untyped-call]


__all__ = [
    "ExtrasFormatter",
    "OtelContextLogFilter",
    "build_log_config",
    "configure_logging",
    "init_logging",
    "shutdown_logging",
]
