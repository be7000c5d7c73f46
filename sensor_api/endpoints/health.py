"""Probes de liveness/readiness del proceso (no del nodo sensor)."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_ledger
from ..errors import StorageUnavailable
from ..ledger import TelemetryLedger

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe: ok mientras el proceso responda."""
    return {"status": "ok"}


@router.get("/ready")
def ready(ledger: TelemetryLedger = Depends(get_ledger)):
    """Readiness probe: la BD responde y la tabla de lecturas existe."""
    try:
        if ledger.table_exists():
            return {"status": "ready"}
        reason = "schema missing"
    except StorageUnavailable as e:
        reason = e.message
    return JSONResponse(status_code=503, content={"status": "not ready", "reason": reason})
