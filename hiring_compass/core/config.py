from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    api_auth_token: str | None
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    rate_limit_enabled: bool
    global_rate_limit: str
    analyze_rate_limit: str
    max_resume_text_chars: int
    min_resume_text_chars: int
    max_upload_bytes: int
    analyze_timeout_s: float
    market_pulse_enabled: bool
    serpapi_api_key: str | None
    market_pulse_timeout_s: float
    market_pulse_request_timeout_s: float
    history_backend: str
    history_db_path: str
    history_max_items: int
    analysis_ai_enabled: bool
    openai_api_key: str | None
    openai_base_url: str | None
    ai_model: str
    ai_timeout_s: float


settings = Settings(
    api_auth_token=_get_env("API_AUTH_TOKEN"),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    global_rate_limit=_get_env("GLOBAL_RATE_LIMIT", "300/15minutes") or "300/15minutes",
    analyze_rate_limit=_get_env("ANALYZE_RATE_LIMIT", "40/15minutes") or "40/15minutes",
    max_resume_text_chars=_get_env_int("MAX_RESUME_TEXT_CHARS", 50000),
    min_resume_text_chars=_get_env_int("MIN_RESUME_TEXT_CHARS", 50),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024),
    analyze_timeout_s=_get_env_float("ANALYZE_TIMEOUT_S", 25.0),
    market_pulse_enabled=_get_env_bool("MARKET_PULSE_ENABLED", False),
    serpapi_api_key=_get_env("SERPAPI_API_KEY"),
    market_pulse_timeout_s=_get_env_float("MARKET_PULSE_TIMEOUT_S", 8.0),
    market_pulse_request_timeout_s=_get_env_float("MARKET_PULSE_REQUEST_TIMEOUT_S", 8.0),
    history_backend=(_get_env("HISTORY_BACKEND", "memory") or "memory").strip().lower(),
    history_db_path=_get_env("HISTORY_DB_PATH", "data/history.db") or "data/history.db",
    history_max_items=_get_env_int("HISTORY_MAX_ITEMS", 50),
    analysis_ai_enabled=_get_env_bool("ANALYSIS_AI_ENABLED", False),
    openai_api_key=_get_env("OPENAI_API_KEY"),
    openai_base_url=_get_env("OPENAI_BASE_URL"),
    ai_model=_get_env("AI_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
    ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 20.0),
)

if settings.history_backend not in {"memory", "sqlite"}:
    raise RuntimeError("HISTORY_BACKEND must be either 'memory' or 'sqlite'.")
