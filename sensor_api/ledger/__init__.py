"""Ledger de telemetría: esquema versionado y repositorio append-only."""

from .repository import TelemetryLedger
from .schema import (
    READING_SCHEMA_VERSION,
    control_flags,
    ensure_schema,
    metadata,
    sensor_readings,
)

__all__ = [
    "TelemetryLedger",
    "READING_SCHEMA_VERSION",
    "control_flags",
    "ensure_schema",
    "metadata",
    "sensor_readings",
]
