"""Control-State Store: registros last-write-wins independientes por actuador.

Cada flag se reemplaza de forma atómica e independiente. No hay
compare-and-swap ni versionado: con escritores concurrentes el resultado
es consistente con *algún* orden total de escrituras.

Backends:
- SqlControlStateStore: una fila por flag (tabla control_flags).
- FileControlStateStore: un archivo por flag ("1"/"0").
- InMemoryControlStateStore: dict + Lock (tests / modo dev).
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StorageUnavailable
from ..ledger.schema import control_flags

logger = logging.getLogger(__name__)

DEFAULT_FLAG_VALUE = False

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class ControlFlag:
    """Estado actual de un actuador.

    ``updated_at`` es None si el flag nunca se escribió (valor por defecto).
    Solo para auditoría: la lógica de liveness no lo usa.
    """

    name: str
    value: bool
    updated_at: Optional[datetime] = None


class ControlStateStore(ABC):
    """Contrato del almacén de flags."""

    backend_name = "abstract"

    @abstractmethod
    def get_flag(self, name: str) -> ControlFlag:
        """Valor actual o DEFAULT_FLAG_VALUE; nunca falla por "not found"."""

    @abstractmethod
    def set_flag(self, name: str, value: bool) -> ControlFlag:
        """Sobrescritura incondicional.

        Raises:
            StorageUnavailable: el llamador no debe asumir que el flag cambió
        """


class InMemoryControlStateStore(ControlStateStore):
    backend_name = "memory"

    def __init__(self, clock: Clock = _utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._flags: Dict[str, Tuple[bool, datetime]] = {}

    def get_flag(self, name: str) -> ControlFlag:
        with self._lock:
            entry = self._flags.get(name)
        if entry is None:
            return ControlFlag(name=name, value=DEFAULT_FLAG_VALUE)
        return ControlFlag(name=name, value=entry[0], updated_at=entry[1])

    def set_flag(self, name: str, value: bool) -> ControlFlag:
        now = self._clock()
        with self._lock:
            self._flags[name] = (bool(value), now)
        return ControlFlag(name=name, value=bool(value), updated_at=now)


class FileControlStateStore(ControlStateStore):
    """Un archivo de texto por flag: ``<dir>/<name>_state.txt`` con "1" o "0".

    La escritura va a un archivo temporal y se publica con os.replace,
    así un lector nunca ve un archivo a medio escribir.
    """

    backend_name = "file"

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    def _path(self, name: str) -> Path:
        return self._dir / f"{name}_state.txt"

    def get_flag(self, name: str) -> ControlFlag:
        path = self._path(name)
        try:
            content = path.read_text(encoding="utf-8").strip()
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except FileNotFoundError:
            return ControlFlag(name=name, value=DEFAULT_FLAG_VALUE)
        except OSError as e:
            logger.exception("[CONTROL] Error leyendo flag=%s path=%s", name, path)
            raise StorageUnavailable(f"get_flag({name})", e) from e

        return ControlFlag(name=name, value=(content == "1"), updated_at=mtime)

    def set_flag(self, name: str, value: bool) -> ControlFlag:
        path = self._path(name)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self._dir), prefix=f".{name}_", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write("1" if value else "0")
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except OSError as e:
            logger.exception("[CONTROL] Error escribiendo flag=%s path=%s", name, path)
            raise StorageUnavailable(f"set_flag({name})", e) from e

        return ControlFlag(name=name, value=bool(value), updated_at=mtime)


class SqlControlStateStore(ControlStateStore):
    """Una fila por flag en ``control_flags``."""

    backend_name = "db"

    def __init__(self, db: Session, clock: Clock = _utc_now) -> None:
        self._db = db
        self._clock = clock

    def get_flag(self, name: str) -> ControlFlag:
        try:
            row = self._db.execute(
                select(control_flags.c.value, control_flags.c.updated_at).where(
                    control_flags.c.name == name
                )
            ).fetchone()
        except SQLAlchemyError as e:
            logger.exception("[CONTROL] Error leyendo flag=%s err=%s", name, type(e).__name__)
            raise StorageUnavailable(f"get_flag({name})", e) from e

        if row is None:
            return ControlFlag(name=name, value=DEFAULT_FLAG_VALUE)
        return ControlFlag(name=name, value=bool(row.value), updated_at=_as_utc(row.updated_at))

    def _upsert(self, name: str, value: bool, now: datetime) -> None:
        result = self._db.execute(
            update(control_flags)
            .where(control_flags.c.name == name)
            .values(value=value, updated_at=now)
        )
        if result.rowcount == 0:
            self._db.execute(control_flags.insert().values(name=name, value=value, updated_at=now))

    def set_flag(self, name: str, value: bool) -> ControlFlag:
        now = self._clock()
        value = bool(value)
        try:
            try:
                self._upsert(name, value, now)
                self._db.commit()
            except IntegrityError:
                # Otro escritor creó la fila entre el UPDATE y el INSERT
                self._db.rollback()
                self._upsert(name, value, now)
                self._db.commit()
        except SQLAlchemyError as e:
            logger.exception("[CONTROL] Error escribiendo flag=%s err=%s", name, type(e).__name__)
            self._db.rollback()
            raise StorageUnavailable(f"set_flag({name})", e) from e

        return ControlFlag(name=name, value=value, updated_at=now)
