# backend/api/guestbook/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

log = logging.getLogger(__name__)

DEFAULT_APPROVAL_TOKEN_SECRET = "default-secret-key-change-in-production"
DEFAULT_TOKEN_MAX_AGE_MS = 604_800_000  # 7 days
DEFAULT_RETENTION_DAYS = 7


def _load_env_once() -> None:
    """
    Loads .env from:
      1) ENV_PATH if provided
      2) backend/api/.env (project default)
      3) current working directory .env (fallback)
    """
    env_path = os.getenv("ENV_PATH")
    if env_path:
        p = Path(env_path)
        if p.exists():
            load_dotenv(p, override=False)
            return

    # this file is backend/api/guestbook/config.py
    backend_api_dir = Path(__file__).resolve().parents[1]
    p2 = backend_api_dir / ".env"
    if p2.exists():
        load_dotenv(p2, override=False)
        return

    p3 = Path.cwd() / ".env"
    if p3.exists():
        load_dotenv(p3, override=False)


def env_search_paths() -> list[str]:
    backend_api_dir = Path(__file__).resolve().parents[1]
    return [
        f"ENV_PATH={os.getenv('ENV_PATH')}",
        str(backend_api_dir / ".env"),
        str(Path.cwd() / ".env"),
    ]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    database_url: str | None
    approval_token_secret: str
    approval_token_max_age_ms: int
    cleanup_retention_days: int
    cleanup_interval_seconds: int
    supabase_url: str
    supabase_service_role_key: str
    storage_bucket: str
    storage_limit_mb: int
    admin_api_key: str
    app_url: str
    log_level: str

    @property
    def uses_default_secret(self) -> bool:
        return self.approval_token_secret == DEFAULT_APPROVAL_TOKEN_SECRET


def load_settings() -> Settings:
    _load_env_once()
    return Settings(
        database_url=os.getenv("DATABASE_URL") or os.getenv("DB_URL"),
        approval_token_secret=os.getenv("APPROVAL_TOKEN_SECRET") or DEFAULT_APPROVAL_TOKEN_SECRET,
        approval_token_max_age_ms=_int_env("APPROVAL_TOKEN_MAX_AGE_MS", DEFAULT_TOKEN_MAX_AGE_MS),
        cleanup_retention_days=_int_env("CLEANUP_RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
        cleanup_interval_seconds=_int_env("CLEANUP_INTERVAL_SECONDS", 86400),
        supabase_url=os.getenv("SUPABASE_URL", ""),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
        storage_bucket=os.getenv("STORAGE_BUCKET", "content-media"),
        storage_limit_mb=_int_env("STORAGE_LIMIT_MB", 500),
        admin_api_key=os.getenv("ADMIN_API_KEY", ""),
        app_url=os.getenv("APP_URL", "http://localhost:8000").rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = load_settings()
    if settings.uses_default_secret:
        log.warning("APPROVAL_TOKEN_SECRET is not set; using the insecure default key")
    return settings


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
