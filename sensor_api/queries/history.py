"""Ventana de histórico: normalización de parámetros y consulta.

Contrato canónico: el histórico se entrega SIEMPRE ascendente por tiempo.
El orden se fija aquí y ningún llamador debe invertirlo.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List

from common.config import Settings

from ..domain.reading import Reading
from ..ingest.payload import coerce_int
from ..ledger.repository import TelemetryLedger


@dataclass(frozen=True)
class HistoryWindow:
    hours: int
    limit: int


def normalize_history_window(hours: Any, limit: Any, settings: Settings) -> HistoryWindow:
    """Normaliza ``hours``/``limit`` crudos del query string.

    - hours ausente, no numérico o < 1 -> default (24)
    - hours > máximo -> máximo (8760, un año)
    - limit ausente -> default (500); no numérico o < 1 -> fallback (100)
    - limit > máximo -> máximo (1000)
    """
    h = coerce_int(hours) if hours is not None else settings.history_default_hours
    if h is None or h < 1:
        h = settings.history_default_hours
    if h > settings.history_max_hours:
        h = settings.history_max_hours

    lim = coerce_int(limit) if limit is not None else settings.history_default_limit
    if lim is None or lim < 1:
        lim = settings.history_fallback_limit
    if lim > settings.history_max_limit:
        lim = settings.history_max_limit

    return HistoryWindow(hours=h, limit=lim)


def fetch_history(ledger: TelemetryLedger, window: HistoryWindow, now: datetime) -> List[Reading]:
    since = now - timedelta(hours=window.hours)
    return ledger.history(since=since, limit=window.limit)
