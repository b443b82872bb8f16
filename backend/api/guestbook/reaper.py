"""
Retention policy for rejected submissions.

Rejected rows older than the retention window are removed together with
their stored media. Per-file storage failures are collected and do not stop
the run; a failure to select rows or to delete them aborts the run with a
cleaned count of zero. Stored files removed before a failed row delete are
not restored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from guestbook.config import DEFAULT_RETENTION_DAYS
from guestbook.errors import BlobStoreError, RepositoryError
from guestbook.models import CleanupResult, ContentRecord, RejectedStats
from guestbook.workflow import REJECTED

log = logging.getLogger(__name__)


class ContentStore(Protocol):
    def find_by_status_older_than(self, status: str, cutoff: datetime) -> list[ContentRecord]: ...

    def delete_by_ids(self, ids: list[str]) -> int: ...

    def count_by_status(self, status: str) -> int: ...

    def count_by_status_older_than(self, status: str, cutoff: datetime) -> int: ...


class BlobStore(Protocol):
    def remove_by_key(self, key: str) -> None: ...


def storage_key(media_url: str) -> str:
    """Last path segment of a media URL."""
    return media_url.split("/")[-1]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RejectedContentReaper:
    def __init__(
        self,
        repository: ContentStore,
        blob_store: BlobStore,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.repository = repository
        self.blob_store = blob_store
        self.retention_days = retention_days
        self._clock = clock or _utcnow

    def cutoff(self, retention_days: Optional[int] = None) -> datetime:
        days = self.retention_days if retention_days is None else retention_days
        return self._clock() - timedelta(days=days)

    def cleanup(self, retention_days: Optional[int] = None) -> CleanupResult:
        errors: list[str] = []
        try:
            return self._cleanup(self.cutoff(retention_days), errors)
        except Exception as e:
            log.exception("Unexpected error during cleanup")
            errors.append(f"Unexpected error during cleanup: {e}")
            return CleanupResult(cleaned_count=0, errors=errors)

    def _cleanup(self, cutoff: datetime, errors: list[str]) -> CleanupResult:
        try:
            records = self.repository.find_by_status_older_than(REJECTED, cutoff)
        except RepositoryError as e:
            message = f"Failed to fetch rejected content: {e}"
            log.error(message)
            return CleanupResult(cleaned_count=0, errors=[message])

        if not records:
            log.info("No rejected content older than %s", cutoff.isoformat())
            return CleanupResult(cleaned_count=0, errors=[])

        for record in records:
            if not record.media_url:
                continue
            key = storage_key(record.media_url)
            if not key:
                log.warning("No storage key in media_url for content %s: %r", record.id, record.media_url)
                continue
            try:
                self.blob_store.remove_by_key(key)
            except BlobStoreError as e:
                errors.append(f"Failed to delete file {key}: {e}")
            except Exception as e:
                errors.append(f"Error processing file for content {record.id}: {e}")

        try:
            self.repository.delete_by_ids([r.id for r in records])
        except RepositoryError as e:
            errors.append(f"Failed to delete database records: {e}")
            for message in errors:
                log.warning(message)
            return CleanupResult(cleaned_count=0, errors=errors)

        for message in errors:
            log.warning(message)
        log.info(
            "Cleaned %d rejected content records older than %s (%d errors)",
            len(records),
            cutoff.isoformat(),
            len(errors),
        )
        return CleanupResult(cleaned_count=len(records), errors=errors)

    def stats(self, retention_days_for_old: Optional[int] = None) -> Optional[RejectedStats]:
        try:
            total = self.repository.count_by_status(REJECTED)
            old = self.repository.count_by_status_older_than(REJECTED, self.cutoff(retention_days_for_old))
        except RepositoryError as e:
            log.error("Failed to get rejected content stats: %s", e)
            return None

        return RejectedStats(total_rejected=total, old_rejected=old)
