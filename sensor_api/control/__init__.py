"""Estado de control de actuadores (relay, LED)."""

from .gate import ACTUATORS, ControlCommandGate, param_name, parse_command_value
from .store import (
    DEFAULT_FLAG_VALUE,
    ControlFlag,
    ControlStateStore,
    FileControlStateStore,
    InMemoryControlStateStore,
    SqlControlStateStore,
)

__all__ = [
    "ACTUATORS",
    "ControlCommandGate",
    "param_name",
    "parse_command_value",
    "DEFAULT_FLAG_VALUE",
    "ControlFlag",
    "ControlStateStore",
    "FileControlStateStore",
    "InMemoryControlStateStore",
    "SqlControlStateStore",
]
