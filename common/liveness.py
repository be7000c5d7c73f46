"""Evaluador de liveness del nodo sensor.

Un único algoritmo, dos bases de tiempo:

- Servidor: ``evaluate()`` con datetimes UTC (``captured_at`` asignado por el
  ledger) evaluado en el momento de servir la lectura, nunca cacheado.
- Dashboard: ``classify_age()`` con segundos monotónicos desde la última
  recepción exitosa, evaluado en cada tick del watchdog.

El límite es inclusivo para FRESH: una edad igual al umbral sigue siendo FRESH.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

DEFAULT_STALENESS_THRESHOLD_SECONDS = 10.0


class LivenessState(str, Enum):
    """Veredicto de liveness."""

    FRESH = "fresh"
    STALE = "stale"
    UNKNOWN = "unknown"  # nunca hubo lectura


@dataclass(frozen=True)
class LivenessVerdict:
    state: LivenessState
    age_seconds: Optional[float]
    last_reading: Optional[Any] = None

    @property
    def is_fresh(self) -> bool:
        return self.state == LivenessState.FRESH

    @property
    def is_stale(self) -> bool:
        return self.state == LivenessState.STALE


def classify_age(
    age_seconds: Optional[float],
    threshold_seconds: float = DEFAULT_STALENESS_THRESHOLD_SECONDS,
) -> LivenessState:
    if age_seconds is None:
        return LivenessState.UNKNOWN
    if age_seconds > threshold_seconds:
        return LivenessState.STALE
    return LivenessState.FRESH


def _as_utc(value: datetime) -> datetime:
    # SQLite/MySQL devuelven datetimes naive; el ledger siempre escribe UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def evaluate(
    last_reading: Optional[Any],
    now: datetime,
    threshold_seconds: float = DEFAULT_STALENESS_THRESHOLD_SECONDS,
) -> LivenessVerdict:
    """Clasifica el dispositivo a partir de la lectura más reciente.

    Args:
        last_reading: objeto con atributo ``captured_at`` o None si el ledger está vacío
        now: instante de la evaluación (reloj del servidor)
        threshold_seconds: edad máxima tolerada

    Returns:
        LivenessVerdict con estado, edad en segundos y la lectura evaluada
    """
    if last_reading is None:
        return LivenessVerdict(state=LivenessState.UNKNOWN, age_seconds=None)

    age = (_as_utc(now) - _as_utc(last_reading.captured_at)).total_seconds()
    return LivenessVerdict(
        state=classify_age(age, threshold_seconds),
        age_seconds=age,
        last_reading=last_reading,
    )
