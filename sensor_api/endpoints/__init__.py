"""Módulo de endpoints HTTP.

Contiene todos los endpoints de la API organizados por función.
"""

from .actuators import router as actuators_router
from .diagnostics import router as diagnostics_router
from .health import router as health_router
from .ingest import router as ingest_router
from .readings import router as readings_router

__all__ = [
    "actuators_router",
    "diagnostics_router",
    "health_router",
    "ingest_router",
    "readings_router",
]
