"""Configuración del cliente dashboard.

Configuración via env vars:
- DASHBOARD_API_BASE_URL (default: http://localhost:8000)
- DASHBOARD_POLL_INTERVAL_SECONDS (default: 3)
- DASHBOARD_WATCHDOG_INTERVAL_SECONDS (default: 2)
- DASHBOARD_DISCONNECT_TIMEOUT_SECONDS (default: 10)
- DASHBOARD_HISTORY_LIMIT (default: 20)
- DASHBOARD_REQUEST_TIMEOUT_SECONDS (default: 2.5)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from common.config import load_env_file


@dataclass(frozen=True)
class DashboardConfig:
    api_base_url: str = "http://localhost:8000"
    poll_interval_seconds: float = 3.0
    # Más corto que el poll y desacoplado: un poll colgado no cuelga la detección
    watchdog_interval_seconds: float = 2.0
    disconnect_timeout_seconds: float = 10.0
    history_limit: int = 20
    request_timeout_seconds: float = 2.5

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        load_env_file()
        return cls(
            api_base_url=os.getenv("DASHBOARD_API_BASE_URL", "http://localhost:8000"),
            poll_interval_seconds=float(os.getenv("DASHBOARD_POLL_INTERVAL_SECONDS", "3")),
            watchdog_interval_seconds=float(os.getenv("DASHBOARD_WATCHDOG_INTERVAL_SECONDS", "2")),
            disconnect_timeout_seconds=float(os.getenv("DASHBOARD_DISCONNECT_TIMEOUT_SECONDS", "10")),
            history_limit=int(os.getenv("DASHBOARD_HISTORY_LIMIT", "20")),
            request_timeout_seconds=float(os.getenv("DASHBOARD_REQUEST_TIMEOUT_SECONDS", "2.5")),
        )
