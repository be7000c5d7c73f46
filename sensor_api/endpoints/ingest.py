"""Endpoint de ingesta de lecturas del nodo sensor."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from ..dependencies import get_ingestion_gate
from ..ingest import IngestionGate, decode_body
from ..schemas import IngestResult

router = APIRouter(tags=["ingest"])
logger = logging.getLogger(__name__)


async def read_payload(request: Request) -> Dict[str, Any]:
    """Body JSON o form-encoded como dict plano (vacío si no hay nada legible)."""
    return decode_body(await request.body())


@router.post("/api/readings", response_model=IngestResult)
def ingest_reading(
    payload: Dict[str, Any] = Depends(read_payload),
    gate: IngestionGate = Depends(get_ingestion_gate),
):
    """Agrega una lectura al ledger.

    Campos numéricos mal formados se guardan como NULL. Solo se rechaza
    (400) un payload vacío o sin campos reconocidos. Un fallo de BD
    responde 500 sin retry: el nodo reintenta en su siguiente ciclo.
    """
    reading = gate.ingest(payload)
    return IngestResult(id=reading.id, timestamp=reading.captured_at.isoformat())
