"""Taxonomía de errores de la API de sensores.

- ValidationError: payload o parámetro inválido (400). No se reintenta.
- UnknownActuator: nombre de actuador fuera de relay/led (404).
- StorageUnavailable: fallo de conexión/consulta (500). Sin retry ni buffering.

Los datos obsoletos (stale) NO son un error: se devuelven como
``success:false`` en la lectura "latest" con HTTP 200.
"""

from __future__ import annotations


class SensorApiError(Exception):
    """Error base con código HTTP asociado."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(SensorApiError):
    status_code = 400


class UnknownActuator(SensorApiError):
    status_code = 404

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown actuator '{name}'")


class StorageUnavailable(SensorApiError):
    """El almacenamiento no respondió; el llamador no debe asumir el cambio."""

    status_code = 500

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        detail = f"Storage unavailable during {operation}"
        if cause is not None:
            detail = f"{detail}: {type(cause).__name__}"
        super().__init__(detail)
