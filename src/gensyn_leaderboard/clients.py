"""Shared client defaults (base URLs, timeouts) for external services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DashboardDefaults:
    base_url: str = "https://dashboard.gensyn.ai/api/v1/peer"
    timeout_seconds: float = 10.0


@dataclass(frozen=True, slots=True)
class ProxyDefaults:
    app_url: str = "http://localhost:9002"
    peer_path: str = "/api/gensyn/peer"
    timeout_seconds: float = 30.0


# Instances
DASHBOARD = DashboardDefaults()
PROXY = ProxyDefaults()

__all__ = [
    "DASHBOARD",
    "PROXY",
    "DashboardDefaults",
    "ProxyDefaults",
]
