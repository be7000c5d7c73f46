"""Dependencias FastAPI compartidas por los endpoints.

Se resuelven por request (sesión propia, sin estado mutable compartido
entre requests salvo el propio store). Los tests las sustituyen vía
``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from common.config import Settings, get_settings
from common.db import get_db

from .control import (
    ControlCommandGate,
    ControlStateStore,
    FileControlStateStore,
    InMemoryControlStateStore,
    SqlControlStateStore,
)
from .ingest import IngestionGate, utc_now
from .ingest.gate import Clock
from .ledger import TelemetryLedger

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return get_settings()


def get_app_settings() -> Settings:
    return _cached_settings()


def get_clock() -> Clock:
    return utc_now


@lru_cache(maxsize=1)
def _memory_store() -> InMemoryControlStateStore:
    # Debe sobrevivir entre requests: una instancia por proceso.
    return InMemoryControlStateStore()


def get_ledger(db: Session = Depends(get_db)) -> TelemetryLedger:
    return TelemetryLedger(db)


def get_ingestion_gate(
    ledger: TelemetryLedger = Depends(get_ledger),
    clock: Clock = Depends(get_clock),
) -> IngestionGate:
    return IngestionGate(ledger, clock=clock)


def get_control_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> ControlStateStore:
    backend = settings.control_store_backend
    if backend == "file":
        return FileControlStateStore(settings.control_state_dir)
    if backend == "memory":
        return _memory_store()
    if backend != "db":
        logger.warning("[CONTROL] CONTROL_STORE_BACKEND=%s desconocido, usando db", backend)
    return SqlControlStateStore(db)


def get_control_gate(store: ControlStateStore = Depends(get_control_store)) -> ControlCommandGate:
    return ControlCommandGate(store)
