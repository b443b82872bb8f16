from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from guestbook.config import Settings
from guestbook.errors import BlobStoreError, RepositoryError
from guestbook.models import ContentRecord
from guestbook.repo import ContentRepository

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

CONTENT_DDL = """
CREATE TABLE content (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    text_content TEXT,
    media_url TEXT,
    thumbnail_url TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    approved_at TIMESTAMP,
    created_at TIMESTAMP NOT NULL
)
"""


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    with eng.begin() as conn:
        conn.execute(text(CONTENT_DDL))
    yield eng
    eng.dispose()


@pytest.fixture
def repository(engine):
    return ContentRepository(engine)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        approval_token_secret="test-secret",
        approval_token_max_age_ms=604_800_000,
        cleanup_retention_days=7,
        cleanup_interval_seconds=60,
        supabase_url="https://example.supabase.co",
        supabase_service_role_key="service-role",
        storage_bucket="content-media",
        storage_limit_mb=500,
        admin_api_key="test-admin-key",
        app_url="https://guestbook.example",
        log_level="DEBUG",
    )


def make_record(content_id: str, media_url: str | None = None, days_old: int = 10) -> ContentRecord:
    return ContentRecord(
        id=content_id,
        user_id="user-1",
        type="image" if media_url else "text",
        status="rejected",
        created_at=NOW - timedelta(days=days_old),
        media_url=media_url,
    )


class FakeRepository:
    """In-memory stand-in recording every call the reaper makes."""

    def __init__(self, records=None, fail_find=False, fail_delete=False, fail_count=False):
        self.records = list(records or [])
        self.fail_find = fail_find
        self.fail_delete = fail_delete
        self.fail_count = fail_count
        self.find_calls = []
        self.delete_calls = []

    def find_by_status_older_than(self, status, cutoff):
        self.find_calls.append((status, cutoff))
        if self.fail_find:
            raise RepositoryError("connection refused")
        return [r for r in self.records if r.status == status and r.created_at < cutoff]

    def delete_by_ids(self, ids):
        self.delete_calls.append(list(ids))
        if self.fail_delete:
            raise RepositoryError("permission denied for table content")
        before = len(self.records)
        self.records = [r for r in self.records if r.id not in ids]
        return before - len(self.records)

    def count_by_status(self, status):
        if self.fail_count:
            raise RepositoryError("timeout")
        return sum(1 for r in self.records if r.status == status)

    def count_by_status_older_than(self, status, cutoff):
        if self.fail_count:
            raise RepositoryError("timeout")
        return sum(1 for r in self.records if r.status == status and r.created_at < cutoff)


class FakeBlobStore:
    def __init__(self, failing_keys=(), raising=None):
        self.failing_keys = set(failing_keys)
        self.raising = dict(raising or {})
        self.removed = []
        self.remove_calls = []

    def remove_by_key(self, key):
        self.remove_calls.append(key)
        if key in self.raising:
            raise self.raising[key]
        if key in self.failing_keys:
            raise BlobStoreError(f"content-media/{key}: Object not found")
        self.removed.append(key)
