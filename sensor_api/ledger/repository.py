"""Repositorio del ledger de telemetría (append-only).

Desde este servicio las lecturas solo se insertan y se consultan:
no hay UPDATE ni DELETE.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.fields import READING_FIELD_NAMES
from ..domain.reading import Reading
from ..errors import StorageUnavailable
from .schema import reading_columns, sensor_readings

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TelemetryLedger:
    """Ledger de lecturas sobre una sesión SQLAlchemy."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def append(self, values: Mapping[str, Any], captured_at: datetime) -> Reading:
        """Inserta una lectura y devuelve la fila creada.

        ``captured_at`` nunca retrocede respecto a la última fila: si el reloj
        del servidor salta hacia atrás se reutiliza el timestamp anterior, así
        ``id`` y ``captured_at`` crecen juntos.

        Raises:
            StorageUnavailable: si falla la escritura (sin retry)
        """
        captured_at = _as_utc(captured_at)
        row = {name: values.get(name) for name in READING_FIELD_NAMES}

        try:
            last_ts = self._db.execute(select(func.max(sensor_readings.c.captured_at))).scalar()
            if last_ts is not None and _as_utc(last_ts) > captured_at:
                logger.warning(
                    "[LEDGER] Reloj retrocedió: last=%s now=%s, se conserva last",
                    _as_utc(last_ts).isoformat(),
                    captured_at.isoformat(),
                )
                captured_at = _as_utc(last_ts)

            result = self._db.execute(
                sensor_readings.insert().values(captured_at=captured_at, **row)
            )
            new_id = int(result.inserted_primary_key[0])
            self._db.commit()
        except SQLAlchemyError as e:
            logger.exception("[LEDGER] Error insertando lectura err=%s", type(e).__name__)
            self._db.rollback()
            raise StorageUnavailable("append", e) from e

        return Reading.from_row({"id": new_id, "captured_at": captured_at, **row})

    def latest(self) -> Optional[Reading]:
        """Lectura más reciente o None si el ledger está vacío."""
        stmt = (
            select(*reading_columns())
            .order_by(sensor_readings.c.captured_at.desc(), sensor_readings.c.id.desc())
            .limit(1)
        )
        try:
            row = self._db.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            logger.exception("[LEDGER] Error consultando última lectura err=%s", type(e).__name__)
            raise StorageUnavailable("latest", e) from e

        if row is None:
            return None
        return Reading.from_row(row)

    def history(self, since: datetime, limit: int) -> List[Reading]:
        """Lecturas con captured_at >= since, las ``limit`` más recientes.

        Siempre en orden cronológico ascendente.
        """
        stmt = (
            select(*reading_columns())
            .where(sensor_readings.c.captured_at >= _as_utc(since))
            .order_by(sensor_readings.c.captured_at.desc(), sensor_readings.c.id.desc())
            .limit(int(limit))
        )
        try:
            rows = self._db.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            logger.exception("[LEDGER] Error consultando histórico err=%s", type(e).__name__)
            raise StorageUnavailable("history", e) from e

        readings = [Reading.from_row(r) for r in rows]
        readings.reverse()
        return readings

    def count(self) -> int:
        try:
            return int(self._db.execute(select(func.count()).select_from(sensor_readings)).scalar() or 0)
        except SQLAlchemyError as e:
            logger.exception("[LEDGER] Error contando lecturas err=%s", type(e).__name__)
            raise StorageUnavailable("count", e) from e

    def table_exists(self) -> bool:
        try:
            return inspect(self._db.get_bind()).has_table(sensor_readings.name)
        except SQLAlchemyError as e:
            logger.exception("[LEDGER] Error inspeccionando esquema err=%s", type(e).__name__)
            raise StorageUnavailable("inspect", e) from e
