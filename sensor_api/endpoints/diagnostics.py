"""Diagnostics endpoint: estado de BD, ledger y store de control.

Nunca lanza: ante fallo de BD responde ``success:false`` con el error.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from common.config import Settings

from ..control import ControlStateStore
from ..dependencies import get_app_settings, get_control_store, get_ledger
from ..errors import StorageUnavailable
from ..ledger import READING_SCHEMA_VERSION, TelemetryLedger

router = APIRouter(tags=["diagnostics"])
logger = logging.getLogger(__name__)


@router.get("/api/diagnostics")
def get_diagnostics(
    ledger: TelemetryLedger = Depends(get_ledger),
    store: ControlStateStore = Depends(get_control_store),
    settings: Settings = Depends(get_app_settings),
):
    """Reporte de conectividad.

    Example response:
    ```json
    {
        "success": true,
        "readings_table_exists": true,
        "readings_count": 3600,
        "schema_version": 1,
        "control_store_backend": "db",
        "staleness_threshold_seconds": 10.0
    }
    ```
    """
    try:
        table_exists = ledger.table_exists()
        count = ledger.count() if table_exists else 0
    except StorageUnavailable as e:
        logger.warning("[DIAG] BD no disponible: %s", e.message)
        return {"success": False, "error": e.message}

    return {
        "success": True,
        "readings_table_exists": table_exists,
        "readings_count": count,
        "schema_version": READING_SCHEMA_VERSION,
        "control_store_backend": store.backend_name,
        "staleness_threshold_seconds": settings.staleness_threshold_seconds,
    }
