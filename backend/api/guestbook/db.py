# backend/api/guestbook/db.py
from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from guestbook.config import env_search_paths, get_settings


_engine: Engine | None = None


def get_engine() -> Engine:
    global _engine

    if _engine is not None:
        return _engine

    db_url = get_settings().database_url
    if not db_url:
        raise RuntimeError(
            "DATABASE_URL is not set. Ensure it exists in backend/api/.env or set ENV_PATH.\n"
            f"Tried: {', '.join(env_search_paths())}"
        )

    _engine = create_engine(db_url, pool_pre_ping=True, future=True)
    return _engine


def db_ping(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
