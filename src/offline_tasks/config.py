# src/offline_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Everything local lives under data_dir (gitignored).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "OTASKS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool
    notifications_enabled: bool

    # ---- Remote store ----
    remote_base_url: str
    remote_timeout_seconds: float

    # ---- Identity (supplied externally; no login UX here) ----
    user_id: str | None
    auth_token: str | None

    # ---- Connectivity probe ----
    start_online: bool
    probe_host: str
    probe_port: int
    probe_interval_seconds: float
    probe_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    background_sync_path: Path

    @staticmethod
    def from_env() -> "Settings":
        load_dotenv(override=False)

        app_name = _env(_k("APP_NAME"), "offline-tasks") or "offline-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        notifications_enabled = _env_bool(_k("NOTIFICATIONS_ENABLED"), False)

        remote_base_url = _env(_k("REMOTE_BASE_URL"), "http://127.0.0.1:8080/api").rstrip("/")
        remote_timeout_seconds = _env_float(_k("REMOTE_TIMEOUT_SECONDS"), 10.0)

        user_id = (_first_env(_k("USER_ID"), default="") or "").strip() or None
        auth_token = (_first_env(_k("AUTH_TOKEN"), default="") or "").strip() or None

        start_online = _env_bool(_k("START_ONLINE"), False)
        probe_host = _env(_k("PROBE_HOST"), "1.1.1.1")
        probe_port = _env_int(_k("PROBE_PORT"), 53)
        probe_interval_seconds = _env_float(_k("PROBE_INTERVAL_SECONDS"), 15.0)
        probe_timeout_seconds = _env_float(_k("PROBE_TIMEOUT_SECONDS"), 3.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/offline-tasks"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        background_sync_path = _env_path(
            _k("BACKGROUND_SYNC_PATH"), data_dir / "background_sync.json"
        )

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            notifications_enabled=notifications_enabled,
            remote_base_url=remote_base_url,
            remote_timeout_seconds=remote_timeout_seconds,
            user_id=user_id,
            auth_token=auth_token,
            start_online=start_online,
            probe_host=probe_host,
            probe_port=probe_port,
            probe_interval_seconds=probe_interval_seconds,
            probe_timeout_seconds=probe_timeout_seconds,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            background_sync_path=background_sync_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
