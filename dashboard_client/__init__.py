"""Cliente dashboard: polling, watchdog de desconexión y comandos de actuadores."""

from .api import LatestResult, SensorApiClient, TransportFailure
from .config import DashboardConfig
from .reconciler import ReconciliationLoop
from .view import DashboardView, SoilUnit, TemperatureUnit
from .watchdog import LivenessWatchdog

__all__ = [
    "DashboardConfig",
    "DashboardView",
    "LatestResult",
    "LivenessWatchdog",
    "ReconciliationLoop",
    "SensorApiClient",
    "SoilUnit",
    "TemperatureUnit",
    "TransportFailure",
]
