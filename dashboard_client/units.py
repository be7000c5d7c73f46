"""Conversiones de unidades para redisplay sin volver a pedir datos."""

from __future__ import annotations

SOIL_ADC_MAX = 4095  # ADC de 12 bits del nodo


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def soil_raw_to_percent(raw: int, adc_max: int = SOIL_ADC_MAX) -> int:
    """Humedad de suelo: ADC alto = seco, ADC bajo = húmedo."""
    return round((adc_max - raw) / adc_max * 100)
