from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.config import get_settings
from common.db import get_engine

from .endpoints import (
    actuators_router,
    diagnostics_router,
    health_router,
    ingest_router,
    readings_router,
)
from .errors import SensorApiError, StorageUnavailable
from .ledger import ensure_schema

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.getenv("SENSOR_API_AUTO_CREATE_SCHEMA", "1").strip() == "1":
        try:
            ensure_schema(get_engine())
        except Exception:
            # La API arranca igual; /ready y /api/diagnostics reportan el problema
            logger.exception("[DB] No se pudo asegurar el esquema al arrancar")
    yield


app = FastAPI(title="ESP32 Sensor Service", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_allow_origins),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


@app.exception_handler(SensorApiError)
async def sensor_api_error_handler(request: Request, exc: SensorApiError):
    message = exc.message
    if isinstance(exc, StorageUnavailable):
        logger.error("[API] %s %s -> %s", request.method, request.url.path, exc.message)
        if get_settings().debug_errors and exc.cause is not None:
            message = f"{message}: {exc.cause}"
    return _error(exc.status_code, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # 404/405 de FastAPI con el mismo sobre {success, error}
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return _error(400, f"Invalid request: {loc} {first.get('msg', '')}".strip())


app.include_router(health_router)
app.include_router(ingest_router)
app.include_router(readings_router)
app.include_router(actuators_router)
app.include_router(diagnostics_router)
