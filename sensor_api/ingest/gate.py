"""Gate de ingesta: valida, normaliza y agrega una lectura al ledger."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from ..domain.reading import Reading
from ..ledger.repository import TelemetryLedger
from .payload import normalize_payload

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IngestionGate:
    """Punto de entrada de lecturas del nodo sensor.

    - El timestamp lo asigna el servidor (reloj autoritativo).
    - Los flags del actuador se guardan tal como el nodo los reporta (echo).
    - Un fallo de almacenamiento se propaga sin retry: el nodo reintenta
      en su próximo ciclo.
    """

    def __init__(self, ledger: TelemetryLedger, clock: Clock = utc_now) -> None:
        self._ledger = ledger
        self._clock = clock

    def ingest(self, data: Mapping[str, Any]) -> Reading:
        values = normalize_payload(data)
        reading = self._ledger.append(values, captured_at=self._clock())
        logger.info(
            "[INGEST] Lectura guardada id=%s fields=%d relay=%s led=%s",
            reading.id,
            len(values),
            reading.relay_echo,
            reading.led_echo,
        )
        return reading
