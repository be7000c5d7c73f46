"""Endpoints de actuadores: lectura de flags (nodo) y comandos (dashboard)."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from ..control import ControlCommandGate, ControlFlag, param_name
from ..dependencies import get_clock, get_control_gate
from ..ingest.gate import Clock
from .ingest import read_payload

router = APIRouter(tags=["actuators"])

_LABELS = {"relay": "Relay", "led": "LED"}


def _flag_body(flag: ControlFlag) -> Dict[str, Any]:
    return {
        param_name(flag.name): flag.value,
        "updated_at": flag.updated_at.isoformat() if flag.updated_at else None,
    }


@router.get("/api/actuators")
def get_all_actuators(gate: ControlCommandGate = Depends(get_control_gate)):
    """Estado de todos los flags en un solo request (poll del nodo)."""
    body: Dict[str, Any] = {"success": True}
    for name, flag in gate.snapshot().items():
        body[param_name(name)] = flag.value
    return body


@router.get("/api/actuators/{name}")
def get_actuator(
    name: str,
    gate: ControlCommandGate = Depends(get_control_gate),
    clock: Clock = Depends(get_clock),
):
    flag = gate.get(name)
    return {"success": True, **_flag_body(flag), "timestamp": clock().isoformat()}


def _command_response(flag: ControlFlag, clock: Clock) -> Dict[str, Any]:
    return {
        "success": True,
        "message": f"{_LABELS.get(flag.name, flag.name)} control command received",
        **_flag_body(flag),
        "timestamp": clock().isoformat(),
    }


@router.post("/api/actuators/{name}/control")
def command_actuator_post(
    name: str,
    payload: Dict[str, Any] = Depends(read_payload),
    gate: ControlCommandGate = Depends(get_control_gate),
    clock: Clock = Depends(get_clock),
):
    """Comando vía body JSON/form: ``{"relay_on": true}``.

    Acepta true/false, 1/0 y "on"/"off"/"yes"/"no"; otros valores JSON no
    textuales se evalúan por truthiness. Un string no reconocido responde 400.
    """
    return _command_response(gate.command(name, payload), clock)


@router.get("/api/actuators/{name}/control")
def command_actuator_get(
    name: str,
    request: Request,
    gate: ControlCommandGate = Depends(get_control_gate),
    clock: Clock = Depends(get_clock),
):
    """Comando vía query string: ``?relay_on=1``."""
    return _command_response(gate.command(name, dict(request.query_params)), clock)
