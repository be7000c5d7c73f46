"""Ingesta de lecturas del nodo sensor."""

from .gate import IngestionGate, utc_now
from .payload import coerce_bool, decode_body, normalize_payload

__all__ = [
    "IngestionGate",
    "utc_now",
    "coerce_bool",
    "decode_body",
    "normalize_payload",
]
