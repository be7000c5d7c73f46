"""Tests del evaluador de liveness (servidor y cliente comparten el algoritmo).

Ejecutar:
    pytest tests/test_liveness.py -v
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from common.liveness import LivenessState, classify_age, evaluate

T = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _reading_at(ts: datetime):
    return SimpleNamespace(captured_at=ts)


# =============================================================================
# TESTS: CLASIFICACIÓN POR EDAD
# =============================================================================

class TestClassifyAge:
    """Límite inclusivo para FRESH."""

    @pytest.mark.parametrize(
        "age,expected",
        [
            (0.0, LivenessState.FRESH),
            (9.999, LivenessState.FRESH),
            (10.0, LivenessState.FRESH),
            (10.001, LivenessState.STALE),
            (3600.0, LivenessState.STALE),
        ],
    )
    def test_boundary(self, age, expected):
        assert classify_age(age, 10.0) == expected

    def test_none_is_unknown(self):
        assert classify_age(None) == LivenessState.UNKNOWN

    def test_custom_threshold(self):
        assert classify_age(4.0, threshold_seconds=3.0) == LivenessState.STALE


# =============================================================================
# TESTS: EVALUACIÓN SOBRE LECTURAS
# =============================================================================

class TestEvaluate:
    """Edad calculada contra el reloj del servidor."""

    def test_empty_ledger_is_unknown(self):
        verdict = evaluate(None, T)
        assert verdict.state == LivenessState.UNKNOWN
        assert verdict.age_seconds is None

    def test_exactly_threshold_is_fresh(self):
        verdict = evaluate(_reading_at(T), T + timedelta(seconds=10))
        assert verdict.is_fresh
        assert verdict.age_seconds == pytest.approx(10.0)

    def test_just_over_threshold_is_stale(self):
        verdict = evaluate(_reading_at(T), T + timedelta(seconds=10, milliseconds=1))
        assert verdict.is_stale

    def test_naive_timestamps_treated_as_utc(self):
        naive = T.replace(tzinfo=None)
        verdict = evaluate(_reading_at(naive), T + timedelta(seconds=5))
        assert verdict.is_fresh
        assert verdict.age_seconds == pytest.approx(5.0)

    def test_verdict_keeps_reading(self):
        reading = _reading_at(T)
        assert evaluate(reading, T).last_reading is reading
