"""Estado observable del dashboard.

Lo que el usuario "ve": valores formateados, estado de conexión,
indicadores de actuadores y posición de los toggles. No hace I/O.

Regla: cuando el dashboard deja de estar conectado, todos los valores
se borran juntos; un dato viejo nunca se presenta como actual.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, Dict, List, Mapping, Optional

from .units import celsius_to_fahrenheit, soil_raw_to_percent

ACTUATORS = ("relay", "led")

# (campo de la API, decimales)
DECIMAL_METRICS = (
    ("humidity", 1),
    ("co2_ppm", 0),
    ("co_ppm", 2),
    ("nh4_ppm", 2),
    ("alcohol_ppm", 2),
    ("acetone_ppm", 2),
    ("mq135_voltage", 2),
)

DISPLAY_KEYS = (
    "temperature",
    "soil_moisture",
    "mq135_raw",
    *(name for name, _ in DECIMAL_METRICS),
)

TREND_METRICS = ("co2_ppm", "co_ppm", "nh4_ppm")


class TemperatureUnit(str, Enum):
    CELSIUS = "C"
    FAHRENHEIT = "F"


class SoilUnit(str, Enum):
    PERCENT = "percent"
    RAW = "raw"


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _format(value: Any, decimals: int) -> Optional[str]:
    number = _to_float(value)
    if number is None:
        return None
    return f"{number:.{decimals}f}"


def _on_off(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return "ON" if value else "OFF"


@dataclass
class DashboardView:
    connected: bool = False
    temp_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    soil_unit: SoilUnit = SoilUnit.PERCENT

    values: Dict[str, Optional[str]] = field(default_factory=lambda: {k: None for k in DISPLAY_KEYS})
    motion_label: Optional[str] = None
    last_update: str = "No data"

    # Indicador = lo que el nodo dice que está haciendo (echo de la lectura)
    indicators: Dict[str, Optional[bool]] = field(default_factory=lambda: {a: None for a in ACTUATORS})
    # Toggle = control del usuario (optimista)
    toggles: Dict[str, bool] = field(default_factory=lambda: {a: False for a in ACTUATORS})

    history: List[Dict[str, Any]] = field(default_factory=list)

    # Crudos cacheados para conversión de unidades
    _celsius: Optional[float] = None
    _soil_raw: Optional[int] = None
    _soil_percent: Optional[int] = None

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def apply_reading(self, data: Mapping[str, Any], locked_toggles: Collection[str] = ()) -> None:
        """Muestra una lectura fresca.

        ``locked_toggles``: actuadores con un comando en vuelo; su toggle no
        se sincroniza con el echo hasta que el comando se resuelva.
        """
        self._celsius = _to_float(data.get("temperature"))
        soil_raw = _to_float(data.get("soil_raw"))
        self._soil_raw = int(soil_raw) if soil_raw is not None else None
        soil_percent = _to_float(data.get("soil_percent"))
        self._soil_percent = int(soil_percent) if soil_percent is not None else None

        self._render_temperature()
        self._render_soil()

        for name, decimals in DECIMAL_METRICS:
            self.values[name] = _format(data.get(name), decimals)
        self.values["mq135_raw"] = _format(data.get("mq135_raw"), 0)

        motion = data.get("motion_detected")
        self.motion_label = None if motion is None else ("Motion Detected!" if motion else "No Motion")

        timestamp = data.get("timestamp")
        self.last_update = f"Last Update: {timestamp}" if timestamp else "No data"

        for actuator in ACTUATORS:
            echoed = data.get(f"{actuator}_on")
            echoed = None if echoed is None else bool(echoed)
            self.indicators[actuator] = echoed
            if echoed is not None and actuator not in locked_toggles:
                self.toggles[actuator] = echoed

    def clear_all_values(self) -> None:
        for key in self.values:
            self.values[key] = None
        self.motion_label = None
        for actuator in ACTUATORS:
            self.indicators[actuator] = None
        self.last_update = "No data"
        self._celsius = None
        self._soil_raw = None
        self._soil_percent = None

    def set_connected(self, connected: bool) -> bool:
        """Actualiza el estado de conexión. Devuelve True si cambió."""
        if connected == self.connected:
            return False
        self.connected = connected
        return True

    # ------------------------------------------------------------------
    # Unidades
    # ------------------------------------------------------------------

    def toggle_temperature_unit(self) -> TemperatureUnit:
        self.temp_unit = (
            TemperatureUnit.FAHRENHEIT
            if self.temp_unit == TemperatureUnit.CELSIUS
            else TemperatureUnit.CELSIUS
        )
        self._render_temperature()
        return self.temp_unit

    def toggle_soil_unit(self) -> SoilUnit:
        self.soil_unit = SoilUnit.RAW if self.soil_unit == SoilUnit.PERCENT else SoilUnit.PERCENT
        self._render_soil()
        return self.soil_unit

    @property
    def temperature_unit_label(self) -> str:
        return "°F" if self.temp_unit == TemperatureUnit.FAHRENHEIT else "°C"

    @property
    def soil_unit_label(self) -> str:
        return "ADC" if self.soil_unit == SoilUnit.RAW else "%"

    def _render_temperature(self) -> None:
        if self._celsius is None:
            self.values["temperature"] = None
            return
        value = self._celsius
        if self.temp_unit == TemperatureUnit.FAHRENHEIT:
            value = celsius_to_fahrenheit(value)
        self.values["temperature"] = f"{value:.1f}"

    def _render_soil(self) -> None:
        if self.soil_unit == SoilUnit.RAW:
            self.values["soil_moisture"] = None if self._soil_raw is None else str(self._soil_raw)
            return
        if self._soil_raw is not None:
            self.values["soil_moisture"] = str(soil_raw_to_percent(self._soil_raw))
        elif self._soil_percent is not None:
            self.values["soil_moisture"] = str(self._soil_percent)
        else:
            self.values["soil_moisture"] = None

    # ------------------------------------------------------------------
    # Actuadores e histórico
    # ------------------------------------------------------------------

    def set_toggle(self, actuator: str, value: bool) -> None:
        self.toggles[actuator] = bool(value)

    def indicator_label(self, actuator: str) -> Optional[str]:
        return _on_off(self.indicators.get(actuator))

    def set_history(self, rows: List[Dict[str, Any]]) -> None:
        self.history = list(rows)

    def trend_series(self) -> Dict[str, List[Any]]:
        series: Dict[str, List[Any]] = {"timestamp": [r.get("timestamp") for r in self.history]}
        for metric in TREND_METRICS:
            series[metric] = [r.get(metric) for r in self.history]
        return series

    def snapshot(self) -> Dict[str, Any]:
        return {
            "connected": self.connected,
            "values": dict(self.values),
            "temperature_unit": self.temperature_unit_label,
            "soil_unit": self.soil_unit_label,
            "motion": self.motion_label,
            "relay": self.indicator_label("relay"),
            "led": self.indicator_label("led"),
            "toggles": dict(self.toggles),
            "last_update": self.last_update,
        }
