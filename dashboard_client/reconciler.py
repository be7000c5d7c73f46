"""Loop de reconciliación del dashboard.

Dos timers independientes sobre un único event loop:

- poll timer: cada ``poll_interval_seconds`` lanza un fetch de latest +
  histórico sin esperar al anterior (un poll colgado no bloquea al siguiente;
  no hay cancelación, el request viejo se resuelve cuando sea).
- watchdog timer: cada ``watchdog_interval_seconds`` re-evalúa el tiempo
  desde la última recepción exitosa.

Cada fetch lleva un número de secuencia monotónico. Una respuesta que llega
después de otra más nueva se descarta, así un request lento nunca pisa el
resultado de uno posterior.

Los comandos de actuador son optimistas: el toggle cambia al instante y
solo se revierte si el gate responde con fallo.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Set

from common.liveness import LivenessState

from .api import LatestResult, SensorApiClient, TransportFailure
from .config import DashboardConfig
from .view import DashboardView
from .watchdog import LivenessWatchdog

logger = logging.getLogger(__name__)

UpdateListener = Callable[[DashboardView], None]


class ReconciliationLoop:
    def __init__(
        self,
        api: SensorApiClient,
        config: DashboardConfig,
        *,
        view: Optional[DashboardView] = None,
        watchdog: Optional[LivenessWatchdog] = None,
        on_update: Optional[UpdateListener] = None,
    ) -> None:
        self._api = api
        self._config = config
        self.view = view or DashboardView()
        self.watchdog = watchdog or LivenessWatchdog(config.disconnect_timeout_seconds)
        self._on_update = on_update

        self._issued_seq = 0
        self._applied_latest_seq = 0
        self._applied_history_seq = 0

        self._pending_commands: Dict[str, int] = defaultdict(int)
        self._inflight: Set[asyncio.Task] = set()
        self._timers: List[asyncio.Task] = []

        self.discarded_completions = 0

    # ------------------------------------------------------------------
    # Fetch + aplicación ordenada
    # ------------------------------------------------------------------

    def next_sequence(self) -> int:
        self._issued_seq += 1
        return self._issued_seq

    async def poll_once(self) -> None:
        seq = self.next_sequence()
        await asyncio.gather(self._refresh_latest(seq), self._refresh_history(seq))

    async def _refresh_latest(self, seq: int) -> None:
        try:
            result = await self._api.fetch_latest()
        except TransportFailure as e:
            logger.error("[DASHBOARD] Error fetching latest seq=%d: %s", seq, e)
            self.apply_latest(seq, None, failure=e)
            return
        self.apply_latest(seq, result)

    async def _refresh_history(self, seq: int) -> None:
        try:
            rows = await self._api.fetch_history(self._config.history_limit)
        except TransportFailure as e:
            # El histórico solo alimenta el gráfico; no afecta la liveness.
            logger.warning("[DASHBOARD] History fetch error seq=%d: %s", seq, e)
            return
        self.apply_history(seq, rows)

    def apply_latest(
        self,
        seq: int,
        result: Optional[LatestResult],
        failure: Optional[Exception] = None,
    ) -> bool:
        """Aplica la respuesta del fetch ``seq``. False si se descartó por vieja."""
        if seq <= self._applied_latest_seq:
            self.discarded_completions += 1
            logger.debug(
                "[DASHBOARD] Descartada respuesta vieja seq=%d applied=%d",
                seq,
                self._applied_latest_seq,
            )
            return False
        self._applied_latest_seq = seq

        if failure is not None or result is None:
            self._go_stale(f"fetch failed: {failure}")
        elif result.state == LivenessState.FRESH:
            self._go_fresh(result.data or {})
        elif result.state == LivenessState.UNKNOWN:
            # Sin lecturas en el servidor: nada que mostrar
            self.view.clear_all_values()
            self.view.set_connected(False)
            if self.watchdog.state != LivenessState.UNKNOWN:
                self.watchdog.mark_stale("server has no readings")
        else:
            self._go_stale(f"server reports stale data age={result.age_seconds}s")

        self._notify()
        return True

    def apply_history(self, seq: int, rows: List[Dict[str, Any]]) -> bool:
        if seq <= self._applied_history_seq:
            self.discarded_completions += 1
            return False
        self._applied_history_seq = seq
        self.view.set_history(rows)
        self._notify()
        return True

    def _go_fresh(self, data: Dict[str, Any]) -> None:
        locked = {name for name, n in self._pending_commands.items() if n > 0}
        self.view.apply_reading(data, locked_toggles=locked)
        self.watchdog.record_receipt()
        if self.view.set_connected(True):
            logger.info("[DASHBOARD] Connected")

    def _go_stale(self, reason: str) -> None:
        # Todos los valores se borran juntos en la misma llamada
        self.view.clear_all_values()
        self.watchdog.mark_stale(reason)
        if self.view.set_connected(False):
            logger.warning("[DASHBOARD] Disconnected: %s", reason)

    # ------------------------------------------------------------------
    # Watchdog
    # ------------------------------------------------------------------

    def watchdog_tick(self) -> bool:
        """Un tick del watchdog. True si disparó la transición a STALE."""
        if not self.watchdog.tick():
            return False
        self.view.clear_all_values()
        if self.view.set_connected(False):
            logger.warning("[DASHBOARD] Device disconnected - no data received")
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Comandos
    # ------------------------------------------------------------------

    async def send_command(self, actuator: str, value: bool) -> bool:
        previous = self.view.toggles.get(actuator, False)
        self.view.set_toggle(actuator, value)
        self._pending_commands[actuator] += 1
        self._notify()

        try:
            accepted = await self._api.send_command(actuator, value)
        except TransportFailure as e:
            logger.error("[DASHBOARD] Command error actuator=%s: %s", actuator, e)
            accepted = False
        finally:
            self._pending_commands[actuator] -= 1

        if not accepted:
            logger.warning(
                "[DASHBOARD] Command rejected actuator=%s value=%s, reverting", actuator, value
            )
            self.view.set_toggle(actuator, previous)
            self._notify()
        return accepted

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _poll_timer(self) -> None:
        while True:
            self._spawn(self.poll_once())
            await asyncio.sleep(self._config.poll_interval_seconds)

    async def _watchdog_timer(self) -> None:
        while True:
            await asyncio.sleep(self._config.watchdog_interval_seconds)
            try:
                self.watchdog_tick()
            except Exception:
                logger.exception("[WATCHDOG] Error en tick")

    def start(self) -> None:
        if self._timers:
            return
        self.view.clear_all_values()
        self._timers = [
            asyncio.create_task(self._poll_timer()),
            asyncio.create_task(self._watchdog_timer()),
        ]
        logger.info(
            "[DASHBOARD] Started poll=%.1fs watchdog=%.1fs timeout=%.1fs",
            self._config.poll_interval_seconds,
            self._config.watchdog_interval_seconds,
            self._config.disconnect_timeout_seconds,
        )

    async def stop(self) -> None:
        """Detiene los timers. Los requests en vuelo no se abortan."""
        for task in self._timers:
            task.cancel()
        await asyncio.gather(*self._timers, return_exceptions=True)
        self._timers = []

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        self.start()
        try:
            if stop_event is None:
                await asyncio.gather(*self._timers)
            else:
                await stop_event.wait()
        finally:
            await self.stop()

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def _notify(self) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(self.view)
        except Exception:
            logger.exception("[DASHBOARD] Error en listener de actualización")
