from __future__ import annotations

import hmac
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from guestbook.config import Settings, get_settings
from guestbook.db import get_engine
from guestbook.reaper import RejectedContentReaper
from guestbook.repo import ContentRepository
from guestbook.storage import SupabaseBlobStore
from guestbook.storage_monitor import StorageMonitor
from guestbook.tokens import ApprovalTokenCodec


def get_repository() -> ContentRepository:
    return ContentRepository(get_engine())


@lru_cache(maxsize=1)
def _blob_store() -> SupabaseBlobStore:
    return SupabaseBlobStore.from_settings(get_settings())


def get_blob_store() -> SupabaseBlobStore:
    return _blob_store()


def get_token_codec(settings: Settings = Depends(get_settings)) -> ApprovalTokenCodec:
    return ApprovalTokenCodec(
        settings.approval_token_secret,
        max_age_ms=settings.approval_token_max_age_ms,
    )


def get_reaper(
    repository: ContentRepository = Depends(get_repository),
    blob_store: SupabaseBlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
) -> RejectedContentReaper:
    return RejectedContentReaper(repository, blob_store, retention_days=settings.cleanup_retention_days)


def get_storage_monitor(
    blob_store: SupabaseBlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
) -> StorageMonitor:
    return StorageMonitor(blob_store, limit_mb=settings.storage_limit_mb)


def require_admin(
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Admin endpoints share one key sent in "X-Admin-Key".
    """
    if not settings.admin_api_key:
        raise HTTPException(status_code=503, detail="Admin API is not configured")
    if not x_admin_key or not hmac.compare_digest(
        x_admin_key.encode("utf-8"), settings.admin_api_key.encode("utf-8")
    ):
        raise HTTPException(status_code=401, detail="Invalid admin key")
