"""Módulo de queries de lectura del ledger."""

from .history import HistoryWindow, fetch_history, normalize_history_window

__all__ = [
    "HistoryWindow",
    "fetch_history",
    "normalize_history_window",
]
