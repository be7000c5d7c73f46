"""Campos reconocidos de una lectura.

Fuente única para el parser de ingesta, las columnas del ledger y la
serialización de la API.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class FieldSpec:
    """Campo reconocido del payload / columna del ledger."""

    name: str
    kind: str  # "float" | "int" | "bool"


# Canales numéricos (pueden faltar en cualquier ciclo: NULL != 0)
METRIC_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("temperature", "float"),
    FieldSpec("humidity", "float"),
    FieldSpec("mq135_raw", "int"),
    FieldSpec("mq135_voltage", "float"),
    FieldSpec("co2_ppm", "float"),
    FieldSpec("nh4_ppm", "float"),
    FieldSpec("alcohol_ppm", "float"),
    FieldSpec("co_ppm", "float"),
    FieldSpec("acetone_ppm", "float"),
    FieldSpec("soil_raw", "int"),
    FieldSpec("soil_percent", "int"),
)

MOTION_FIELD = FieldSpec("motion_detected", "bool")

# Estado que el nodo reporta haber aplicado realmente (echo)
ECHO_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("relay_on", "bool"),
    FieldSpec("led_on", "bool"),
)

READING_FIELDS: Tuple[FieldSpec, ...] = METRIC_FIELDS + (MOTION_FIELD,) + ECHO_FIELDS
READING_FIELD_NAMES: Tuple[str, ...] = tuple(f.name for f in READING_FIELDS)
