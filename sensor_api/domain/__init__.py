from .fields import (
    ECHO_FIELDS,
    METRIC_FIELDS,
    MOTION_FIELD,
    READING_FIELDS,
    READING_FIELD_NAMES,
    FieldSpec,
)
from .reading import Reading

__all__ = [
    "ECHO_FIELDS",
    "METRIC_FIELDS",
    "MOTION_FIELD",
    "READING_FIELDS",
    "READING_FIELD_NAMES",
    "FieldSpec",
    "Reading",
]
