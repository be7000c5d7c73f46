"""CLI del dashboard: corre el loop de reconciliación y loguea cada cambio."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace

from .api import SensorApiClient
from .config import DashboardConfig
from .reconciler import ReconciliationLoop
from .view import DashboardView

logger = logging.getLogger(__name__)


def _log_view(view: DashboardView) -> None:
    snap = view.snapshot()
    values = " ".join(f"{k}={v}" for k, v in snap["values"].items() if v is not None)
    logger.info(
        "[VIEW] connected=%s relay=%s led=%s motion=%s %s",
        snap["connected"],
        snap["relay"],
        snap["led"],
        snap["motion"],
        values or "(sin valores)",
    )


async def _run(cfg: DashboardConfig, command: str | None) -> None:
    api = SensorApiClient(cfg.api_base_url, timeout_seconds=cfg.request_timeout_seconds)
    loop = ReconciliationLoop(api, cfg, on_update=_log_view)
    try:
        if command:
            actuator, _, value = command.partition("=")
            ok = await loop.send_command(actuator, value.strip().lower() in ("1", "on", "true"))
            logger.info("Comando %s -> %s", command, "aceptado" if ok else "rechazado")
            return
        await loop.run()
    finally:
        await api.aclose()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    p = argparse.ArgumentParser(description="ESP32 sensor dashboard (headless)")
    p.add_argument("--api-base-url", default=None)
    p.add_argument("--poll-seconds", type=float, default=None)
    p.add_argument("--watchdog-seconds", type=float, default=None)
    p.add_argument("--timeout-seconds", type=float, default=None, help="disconnect timeout")
    p.add_argument("--command", default=None, help="enviar un comando y salir, ej: relay=on")
    args = p.parse_args()

    cfg = DashboardConfig.from_env()
    overrides = {
        "api_base_url": args.api_base_url,
        "poll_interval_seconds": args.poll_seconds,
        "watchdog_interval_seconds": args.watchdog_seconds,
        "disconnect_timeout_seconds": args.timeout_seconds,
    }
    cfg = replace(cfg, **{k: v for k, v in overrides.items() if v is not None})

    logger.info("Dashboard started api=%s", cfg.api_base_url)
    try:
        asyncio.run(_run(cfg, args.command))
    except KeyboardInterrupt:
        logger.info("Dashboard detenido")


if __name__ == "__main__":
    main()
