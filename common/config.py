from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env en la raíz del repo; las variables reales del entorno siempre ganan.
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


def load_env_file() -> None:
    env_file = os.getenv("SENSOR_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)


@dataclass(frozen=True)
class Settings:
    database_url: str

    staleness_threshold_seconds: float

    history_default_hours: int
    history_max_hours: int
    history_default_limit: int
    history_fallback_limit: int
    history_max_limit: int

    control_store_backend: str
    control_state_dir: str

    cors_allow_origins: tuple[str, ...]
    debug_errors: bool


def get_settings() -> Settings:
    load_env_file()

    database_url = os.getenv("DATABASE_URL", "sqlite:///./esp32_sensors.db")

    # Umbral compartido con el watchdog del dashboard (ver DashboardConfig).
    staleness_threshold_seconds = float(os.getenv("STALENESS_THRESHOLD_SECONDS", "10"))

    history_default_hours = int(os.getenv("HISTORY_DEFAULT_HOURS", "24"))
    history_max_hours = int(os.getenv("HISTORY_MAX_HOURS", "8760"))
    history_default_limit = int(os.getenv("HISTORY_DEFAULT_LIMIT", "500"))
    history_fallback_limit = int(os.getenv("HISTORY_FALLBACK_LIMIT", "100"))
    history_max_limit = int(os.getenv("HISTORY_MAX_LIMIT", "1000"))

    # Valores posibles: db | file | memory
    control_store_backend = os.getenv("CONTROL_STORE_BACKEND", "db").strip().lower()
    control_state_dir = os.getenv("CONTROL_STATE_DIR", "./control_state")

    origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
    cors_allow_origins = tuple(o.strip() for o in origins.split(",") if o.strip())

    debug_errors = os.getenv("INGEST_DEBUG_ERRORS", "").strip() == "1"

    return Settings(
        database_url=database_url,
        staleness_threshold_seconds=staleness_threshold_seconds,
        history_default_hours=history_default_hours,
        history_max_hours=history_max_hours,
        history_default_limit=history_default_limit,
        history_fallback_limit=history_fallback_limit,
        history_max_limit=history_max_limit,
        control_store_backend=control_store_backend,
        control_state_dir=control_state_dir,
        cors_allow_origins=cors_allow_origins or ("*",),
        debug_errors=debug_errors,
    )
