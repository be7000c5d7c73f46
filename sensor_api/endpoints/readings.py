"""Endpoints de consulta: última lectura (con liveness) e histórico."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from common.config import Settings
from common.liveness import evaluate

from ..dependencies import get_app_settings, get_clock, get_ledger
from ..ingest.gate import Clock
from ..ledger import TelemetryLedger
from ..queries import fetch_history, normalize_history_window
from ..schemas import (
    HistoryResponse,
    LatestEmptyResponse,
    LatestFreshResponse,
    LatestStaleResponse,
    ReadingOut,
)

router = APIRouter(tags=["readings"])
logger = logging.getLogger(__name__)


@router.get("/api/readings/latest", response_model=None)
def get_latest_reading(
    ledger: TelemetryLedger = Depends(get_ledger),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
):
    """Última lectura evaluada contra el umbral de staleness.

    La edad se calcula en el momento del request (no se cachea):
    - sin lecturas: ``success:true, data:null``
    - edad > umbral: ``success:false`` con ``last_update`` y ``age_seconds`` (HTTP 200)
    - en otro caso: ``success:true`` con la lectura completa
    """
    reading = ledger.latest()
    verdict = evaluate(reading, clock(), settings.staleness_threshold_seconds)

    if reading is None:
        return LatestEmptyResponse()

    if verdict.is_stale:
        logger.debug(
            "[LIVENESS] Lectura obsoleta id=%s age=%.3fs threshold=%.1fs",
            reading.id,
            verdict.age_seconds,
            settings.staleness_threshold_seconds,
        )
        return LatestStaleResponse(
            last_update=reading.captured_at.isoformat(),
            age_seconds=round(verdict.age_seconds, 3),
        )

    return LatestFreshResponse(data=ReadingOut.from_reading(reading))


@router.get("/api/readings/history", response_model=HistoryResponse)
def get_reading_history(
    hours: Optional[str] = Query(None, description="Ventana en horas (default 24, min 1)"),
    limit: Optional[str] = Query(None, description="Máximo de filas (default 500, max 1000)"),
    ledger: TelemetryLedger = Depends(get_ledger),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
):
    """Histórico dentro de la ventana, en orden cronológico ascendente."""
    window = normalize_history_window(hours, limit, settings)
    readings = fetch_history(ledger, window, clock())

    return HistoryResponse(
        count=len(readings),
        hours=window.hours,
        limit=window.limit,
        data=[ReadingOut.from_reading(r) for r in readings],
    )
