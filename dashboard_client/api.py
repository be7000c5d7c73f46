"""Cliente HTTP del dashboard contra la API de sensores.

Cualquier error de transporte, status no-2xx o body mal formado se
reporta como TransportFailure; el reconciliador lo trata igual que un
veredicto STALE.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from common.liveness import LivenessState

logger = logging.getLogger(__name__)


class TransportFailure(Exception):
    """Fallo observado por el cliente entre dashboard y backend."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


@dataclass(frozen=True)
class LatestResult:
    """Respuesta de /api/readings/latest interpretada."""

    state: LivenessState
    data: Optional[Dict[str, Any]] = None
    last_update: Optional[str] = None
    age_seconds: Optional[float] = None


class SensorApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 2.5,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout_seconds
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request_json(self, operation: str, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportFailure(operation, type(exc).__name__) from exc

        if not resp.is_success:
            raise TransportFailure(operation, f"HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportFailure(operation, "malformed body") from exc

        if not isinstance(body, dict) or not isinstance(body.get("success"), bool):
            raise TransportFailure(operation, "malformed body")
        return body

    async def fetch_latest(self) -> LatestResult:
        body = await self._request_json("fetch_latest", "GET", "/api/readings/latest")
        data = body.get("data")

        if body["success"]:
            if data is None:
                return LatestResult(state=LivenessState.UNKNOWN)
            if not isinstance(data, dict):
                raise TransportFailure("fetch_latest", "malformed body")
            return LatestResult(state=LivenessState.FRESH, data=data)

        age = body.get("age_seconds")
        return LatestResult(
            state=LivenessState.STALE,
            last_update=body.get("last_update"),
            age_seconds=float(age) if isinstance(age, (int, float)) else None,
        )

    async def fetch_history(self, limit: int) -> List[Dict[str, Any]]:
        body = await self._request_json(
            "fetch_history", "GET", "/api/readings/history", params={"limit": limit}
        )
        data = body.get("data")
        if not body["success"] or not isinstance(data, list):
            raise TransportFailure("fetch_history", "malformed body")
        # Ya viene ascendente por contrato; no se reordena aquí.
        return data

    async def send_command(self, actuator: str, value: bool) -> bool:
        """Envía el comando; True solo si el gate lo aceptó."""
        body = await self._request_json(
            f"command({actuator})",
            "POST",
            f"/api/actuators/{actuator}/control",
            json={f"{actuator}_on": bool(value)},
        )
        return body["success"] is True
