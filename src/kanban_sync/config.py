# src/kanban_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Environment variables:
- KANBAN_API_BASE_URL: backend base URL (fallback: API_BASE_URL; default http://localhost:8080)
- KANBAN_HTTP_TIMEOUT_SECONDS: per-request timeout (default 10)
- KANBAN_APP_NAME: display name (default kanban)
- KANBAN_LOG_LEVEL: console log level (default INFO)
- KANBAN_DATA_DIR: local directory for the log file (default .local/kanban)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "KANBAN"

DEFAULT_API_BASE_URL = "http://localhost:8080"


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

    # ---- Backend ----
    api_base_url: str
    http_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "kanban").strip() or "kanban"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        api_base_url = (
            _first_env(_k("API_BASE_URL"), "API_BASE_URL", default=DEFAULT_API_BASE_URL)
            or DEFAULT_API_BASE_URL
        ).strip().rstrip("/")
        # non-positive timeouts make no sense for a request/response transport
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)
        if http_timeout_seconds <= 0:
            http_timeout_seconds = 10.0

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/kanban"))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_base_url=api_base_url,
            http_timeout_seconds=http_timeout_seconds,
            data_dir=data_dir,
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process settings, read once on first use (after loading a local .env)."""
    global _settings
    if _settings is None:
        load_dotenv(override=False)
        _settings = Settings.from_env()
    return _settings
