"""Fixtures compartidas: BD SQLite en memoria, reloj controlable y TestClient."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from common.config import Settings
from common.db import get_db
from sensor_api.dependencies import get_app_settings, get_clock
from sensor_api.ledger import TelemetryLedger, ensure_schema
from sensor_api.main import app

T0 = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Reloj UTC que solo avanza cuando el test lo pide."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class FakeMonotonic:
    """Reloj monotónico para el watchdog del dashboard."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def make_settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite://",
        staleness_threshold_seconds=10.0,
        history_default_hours=24,
        history_max_hours=8760,
        history_default_limit=500,
        history_fallback_limit=100,
        history_max_limit=1000,
        control_store_backend="db",
        control_state_dir="./control_state",
        cors_allow_origins=("*",),
        debug_errors=False,
    )
    values.update(overrides)
    return Settings(**values)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    ensure_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db_session(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ledger(db_session) -> TelemetryLedger:
    return TelemetryLedger(db_session)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(session_factory, clock, settings) -> Iterator[TestClient]:
    """TestClient contra la app real con BD en memoria y reloj controlado."""

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_app_settings] = lambda: settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
