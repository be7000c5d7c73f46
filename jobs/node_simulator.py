"""Simulador de nodo sensor para ejercitar la API de punta a punta.

Cada ciclo:
1. POST /api/readings con una lectura sintética que reporta (echo) el
   estado de relay/LED aplicado en el ciclo anterior.
2. GET /api/actuators y aplica los flags recibidos.

El echo siempre corresponde a lo que el nodo efectivamente aplicó, no a lo
último que se comandó; así el dashboard puede distinguir ambos.
"""

from __future__ import annotations

import argparse
import logging
import os
import random
import time
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

SOIL_ADC_MAX = 4095


class SensorNodeSimulator:
    def __init__(self, client: httpx.Client, *, rng: Optional[random.Random] = None) -> None:
        self._client = client
        self._rng = rng or random.Random()
        self.relay_on = False
        self.led_on = False

    def sample(self) -> Dict[str, Any]:
        rng = self._rng
        mq135_raw = rng.randint(300, 1200)
        soil_raw = rng.randint(1200, 3800)
        return {
            "temperature": round(rng.uniform(18.0, 32.0), 1),
            "humidity": round(rng.uniform(30.0, 80.0), 1),
            "mq135_raw": mq135_raw,
            "mq135_voltage": round(mq135_raw * 3.3 / SOIL_ADC_MAX, 3),
            "co2_ppm": round(rng.uniform(400.0, 1200.0), 1),
            "nh4_ppm": round(rng.uniform(0.0, 5.0), 2),
            "alcohol_ppm": round(rng.uniform(0.0, 2.0), 2),
            "co_ppm": round(rng.uniform(0.0, 10.0), 2),
            "acetone_ppm": round(rng.uniform(0.0, 1.0), 2),
            "soil_raw": soil_raw,
            "soil_percent": round((SOIL_ADC_MAX - soil_raw) / SOIL_ADC_MAX * 100),
            "motion_detected": rng.random() < 0.2,
            "relay_on": self.relay_on,
            "led_on": self.led_on,
        }

    def post_reading(self) -> Optional[int]:
        resp = self._client.post("/api/readings", json=self.sample())
        resp.raise_for_status()
        body = resp.json()
        logger.info("[NODE] Lectura enviada id=%s", body.get("id"))
        return body.get("id")

    def pull_flags(self) -> None:
        resp = self._client.get("/api/actuators")
        resp.raise_for_status()
        body = resp.json()
        relay, led = bool(body.get("relay_on")), bool(body.get("led_on"))
        if (relay, led) != (self.relay_on, self.led_on):
            logger.info("[NODE] Aplicando flags relay=%s led=%s", relay, led)
        self.relay_on, self.led_on = relay, led

    def run_cycle(self) -> None:
        self.post_reading()
        self.pull_flags()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    p = argparse.ArgumentParser(description="ESP32 sensor node simulator")
    p.add_argument("--api-base-url", default=os.getenv("DASHBOARD_API_BASE_URL", "http://localhost:8000"))
    p.add_argument("--interval-seconds", type=float, default=2.0)
    p.add_argument("--once", action="store_true", help="run a single cycle and exit")
    args = p.parse_args()

    with httpx.Client(base_url=args.api_base_url, timeout=5.0) as client:
        node = SensorNodeSimulator(client)
        logger.info("Node simulator started api=%s", args.api_base_url)
        while True:
            try:
                node.run_cycle()
                if args.once:
                    return
            except httpx.HTTPError as e:
                logger.error("[NODE] Error en ciclo: %s", e)
                if args.once:
                    raise
            time.sleep(args.interval_seconds)


if __name__ == "__main__":
    main()
