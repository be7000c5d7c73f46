"""Esquema explícito y versionado de las filas del ledger.

La misma lista de campos alimenta el INSERT de ingesta y el SELECT de
consulta, así que no hay binding posicional que pueda desalinearse.
Si se agrega/quita un canal, se incrementa READING_SCHEMA_VERSION.
"""

from __future__ import annotations

import logging

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    select,
)
from sqlalchemy.engine import Engine

from ..domain.fields import READING_FIELD_NAMES, READING_FIELDS

logger = logging.getLogger(__name__)

READING_SCHEMA_VERSION = 1

_COLUMN_TYPES = {"float": Float, "int": Integer, "bool": Boolean}

metadata = MetaData()

sensor_readings = Table(
    "sensor_readings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("captured_at", DateTime(timezone=True), nullable=False, index=True),
    *(Column(f.name, _COLUMN_TYPES[f.kind], nullable=True) for f in READING_FIELDS),
)

control_flags = Table(
    "control_flags",
    metadata,
    Column("name", String(32), primary_key=True),
    Column("value", Boolean, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

schema_meta = Table(
    "schema_meta",
    metadata,
    Column("name", String(64), primary_key=True),
    Column("version", Integer, nullable=False),
)


def reading_columns():
    """Columnas del SELECT de lecturas, en el mismo orden que READING_FIELDS."""
    return [sensor_readings.c.id, sensor_readings.c.captured_at] + [
        sensor_readings.c[name] for name in READING_FIELD_NAMES
    ]


def ensure_schema(engine: Engine) -> None:
    """Crea tablas si no existen y registra la versión del esquema.

    Seguro de llamar varias veces.
    """
    metadata.create_all(engine)

    with engine.begin() as conn:
        row = conn.execute(
            select(schema_meta.c.version).where(schema_meta.c.name == sensor_readings.name)
        ).fetchone()
        if row is None:
            conn.execute(
                schema_meta.insert().values(
                    name=sensor_readings.name, version=READING_SCHEMA_VERSION
                )
            )
            logger.info("[LEDGER] Esquema creado version=%d", READING_SCHEMA_VERSION)
        elif int(row.version) != READING_SCHEMA_VERSION:
            logger.warning(
                "[LEDGER] Versión de esquema distinta: bd=%s código=%d (migración pendiente)",
                row.version,
                READING_SCHEMA_VERSION,
            )
