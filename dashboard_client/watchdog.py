"""Watchdog de desconexión del lado cliente.

Re-deriva la liveness con su propio reloj (monotónico) a partir de la
última recepción exitosa en el cliente, no del veredicto del servidor:
así una caída de red/API entre dashboard y backend también se detecta
como desconexión, no solo el silencio del sensor.

Transiciones:
- UNKNOWN -> FRESH: primera recepción exitosa con lectura
- FRESH -> STALE: tick con elapsed > timeout, o fetch STALE/fallido
- STALE -> FRESH: siguiente recepción exitosa
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from common.liveness import DEFAULT_STALENESS_THRESHOLD_SECONDS, LivenessState, classify_age

logger = logging.getLogger(__name__)


class LivenessWatchdog:
    def __init__(
        self,
        timeout_seconds: float = DEFAULT_STALENESS_THRESHOLD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._timeout = float(timeout_seconds)
        self._clock = clock
        self._state = LivenessState.UNKNOWN
        self._last_receipt: Optional[float] = None

    @property
    def state(self) -> LivenessState:
        return self._state

    @property
    def last_receipt(self) -> Optional[float]:
        return self._last_receipt

    def elapsed(self) -> Optional[float]:
        if self._last_receipt is None:
            return None
        return self._clock() - self._last_receipt

    def record_receipt(self) -> bool:
        """Registra una lectura recibida. True si transicionó a FRESH."""
        self._last_receipt = self._clock()
        if self._state == LivenessState.FRESH:
            return False
        logger.info("[WATCHDOG] %s -> FRESH", self._state.name)
        self._state = LivenessState.FRESH
        return True

    def mark_stale(self, reason: str) -> bool:
        """Fuerza STALE (fetch fallido o veredicto STALE). True si transicionó."""
        if self._state == LivenessState.STALE:
            return False
        logger.warning("[WATCHDOG] %s -> STALE reason=%s", self._state.name, reason)
        self._state = LivenessState.STALE
        return True

    def tick(self) -> bool:
        """Evalúa el tiempo desde la última recepción. True si transicionó a STALE.

        Sin ninguna recepción previa no hay nada que vigilar (sigue UNKNOWN).
        """
        elapsed = self.elapsed()
        if elapsed is None:
            return False
        if classify_age(elapsed, self._timeout) != LivenessState.STALE:
            return False
        return self.mark_stale(f"no data for {elapsed:.1f}s")
