"""Control Command Gate: normaliza comandos del dashboard y escribe el flag."""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from ..errors import UnknownActuator, ValidationError
from ..ingest.payload import coerce_bool
from .store import ControlFlag, ControlStateStore

logger = logging.getLogger(__name__)

ACTUATORS: Tuple[str, ...] = ("relay", "led")


def param_name(actuator: str) -> str:
    """Nombre del parámetro de comando/respuesta: relay -> relay_on."""
    return f"{actuator}_on"


def parse_command_value(raw: Any, *, param: str) -> bool:
    """Convierte true/"1"/"on"/1... a booleano estricto.

    Valores JSON que no son texto (listas, objetos) se evalúan por truthiness.
    Un string fuera del vocabulario on/off (ej. "abc") se rechaza: desde
    query string o form todo llega como texto y un typo no debe encender
    el actuador.

    Raises:
        ValidationError: parámetro ausente o string no interpretable
    """
    if raw is None:
        raise ValidationError(f"{param} not provided")
    value = coerce_bool(raw)
    if value is None and not isinstance(raw, str):
        value = bool(raw)
    if value is None:
        raise ValidationError(f"{param} must be a boolean, got {raw!r}")
    return value


class ControlCommandGate:
    """Frente del Control-State Store.

    Idempotente por flag: repetir el mismo comando deja el mismo estado.
    Aceptar el comando solo confirma que el store lo guardó; el estado real
    del actuador se observa en el echo de la próxima lectura del nodo.
    """

    def __init__(self, store: ControlStateStore) -> None:
        self._store = store

    @staticmethod
    def _check_actuator(name: str) -> str:
        name = (name or "").strip().lower()
        if name not in ACTUATORS:
            raise UnknownActuator(name)
        return name

    def get(self, name: str) -> ControlFlag:
        return self._store.get_flag(self._check_actuator(name))

    def command(self, name: str, params: Dict[str, Any]) -> ControlFlag:
        name = self._check_actuator(name)
        param = param_name(name)
        value = parse_command_value(params.get(param), param=param)

        flag = self._store.set_flag(name, value)
        logger.info(
            "[CONTROL] Comando aceptado actuator=%s value=%s backend=%s",
            name,
            flag.value,
            self._store.backend_name,
        )
        return flag

    def snapshot(self) -> Dict[str, ControlFlag]:
        # Sin atomicidad entre flags: cada uno se lee por separado.
        return {name: self._store.get_flag(name) for name in ACTUATORS}
