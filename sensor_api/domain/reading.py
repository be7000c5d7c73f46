"""Modelo de dominio para lecturas del nodo sensor."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from .fields import METRIC_FIELDS

MetricValue = Optional[Union[float, int]]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _opt_bool(value: Any) -> Optional[bool]:
    return None if value is None else bool(value)


@dataclass(frozen=True)
class Reading:
    """Lectura inmutable del ledger.

    ``captured_at`` lo asigna el ledger al insertar (reloj del servidor),
    nunca el dispositivo.
    """

    id: int
    captured_at: datetime
    metrics: Mapping[str, MetricValue] = field(default_factory=dict)
    motion_detected: Optional[bool] = None
    relay_echo: Optional[bool] = None
    led_echo: Optional[bool] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Reading":
        metrics: Dict[str, MetricValue] = {}
        for spec in METRIC_FIELDS:
            raw = row.get(spec.name)
            if raw is None:
                metrics[spec.name] = None
            elif spec.kind == "int":
                metrics[spec.name] = int(raw)
            else:
                metrics[spec.name] = float(raw)

        return cls(
            id=int(row["id"]),
            captured_at=_as_utc(row["captured_at"]),
            metrics=metrics,
            motion_detected=_opt_bool(row.get("motion_detected")),
            relay_echo=_opt_bool(row.get("relay_on")),
            led_echo=_opt_bool(row.get("led_on")),
        )

    def metric(self, name: str) -> MetricValue:
        return self.metrics.get(name)

    def to_api_dict(self) -> Dict[str, Any]:
        """Formato plano de la API (nombres de campo del payload de ingesta)."""
        data: Dict[str, Any] = {
            "id": self.id,
            "timestamp": self.captured_at.isoformat(),
        }
        for spec in METRIC_FIELDS:
            data[spec.name] = self.metrics.get(spec.name)
        data["motion_detected"] = self.motion_detected
        data["relay_on"] = self.relay_echo
        data["led_on"] = self.led_echo
        return data
