"""Parsing y normalización permisiva del payload de ingesta.

El nodo sensor nunca debe quedar bloqueado por un error de esquema:
un campo numérico mal formado se convierte en NULL en vez de rechazar
todo el payload. Solo se rechaza un payload vacío o sin campos reconocidos.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl

from ..domain.fields import READING_FIELDS, FieldSpec
from ..errors import ValidationError

logger = logging.getLogger(__name__)

TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})

# Rango de las columnas INTEGER del ledger (signed 32-bit)
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


def decode_body(body: bytes) -> Dict[str, Any]:
    """Decodifica JSON; si no es un objeto JSON, intenta form-encoded."""
    if not body:
        return {}

    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        data = None

    if isinstance(data, dict):
        return data

    try:
        return dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))
    except UnicodeDecodeError:
        return {}


def coerce_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    try:
        result = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def coerce_int(value: Any) -> Optional[int]:
    # "12.7" -> 12, igual que el firmware reporta ADC truncado
    result = coerce_float(value)
    if result is None or not INT_MIN <= result <= INT_MAX:
        return None
    return int(result)


def coerce_bool(value: Any) -> Optional[bool]:
    """Booleano estricto o None si el valor no es interpretable."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value != 0
    if isinstance(value, str):
        v = value.strip().lower()
        if v in TRUE_STRINGS:
            return True
        if v in FALSE_STRINGS:
            return False
    return None


_COERCERS = {"float": coerce_float, "int": coerce_int, "bool": coerce_bool}


def coerce_field(spec: FieldSpec, value: Any) -> Any:
    return _COERCERS[spec.kind](value)


def normalize_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Normaliza el payload a los campos reconocidos del ledger.

    Returns:
        dict con los campos reconocidos presentes (valor coercionado o None)

    Raises:
        ValidationError: payload vacío o sin ningún campo reconocido
    """
    if not data:
        raise ValidationError("No data received")

    normalized: Dict[str, Any] = {}
    for spec in READING_FIELDS:
        if spec.name not in data:
            continue
        raw = data[spec.name]
        value = coerce_field(spec, raw)
        if value is None and raw is not None:
            logger.debug("[INGEST] Campo mal formado %s=%r -> NULL", spec.name, raw)
        normalized[spec.name] = value

    if not normalized:
        raise ValidationError("No recognized fields in payload")

    unknown = [k for k in data.keys() if k not in normalized]
    if unknown:
        logger.debug("[INGEST] Campos ignorados: %s", ", ".join(sorted(map(str, unknown))))

    return normalized
