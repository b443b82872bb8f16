from __future__ import annotations

import logging
from typing import Optional

from guestbook.errors import BlobStoreError
from guestbook.models import StorageStats, StoredFile
from guestbook.storage import SupabaseBlobStore

log = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024
LIST_LIMIT = 1000
TOP_N = 10


class StorageMonitor:
    """Usage report for the media bucket against its quota."""

    def __init__(self, blob_store: SupabaseBlobStore, limit_mb: int = 500) -> None:
        self.blob_store = blob_store
        self.limit_mb = limit_mb

    def get_stats(self) -> Optional[StorageStats]:
        try:
            files = self.blob_store.list_files(limit=LIST_LIMIT)
        except BlobStoreError as e:
            log.error("Failed to list storage files: %s", e)
            return None

        total_bytes = 0
        images = 0
        videos = 0
        entries: list[StoredFile] = []

        for f in files:
            metadata = f.get("metadata") or {}
            size = int(metadata.get("size") or 0)
            mimetype = metadata.get("mimetype") or ""

            total_bytes += size
            if mimetype.startswith("image/"):
                images += 1
            elif mimetype.startswith("video/"):
                videos += 1

            entries.append(
                StoredFile(
                    name=f.get("name", ""),
                    size=size,
                    size_mb=size / BYTES_PER_MB,
                    type=mimetype or "unknown",
                )
            )

        entries.sort(key=lambda e: e.size, reverse=True)

        total_mb = total_bytes / BYTES_PER_MB
        percentage_used = (total_mb / self.limit_mb) * 100 if self.limit_mb else 0.0

        return StorageStats(
            total_bytes=total_bytes,
            total_mb=round(total_mb, 2),
            limit_mb=self.limit_mb,
            percentage_used=round(percentage_used, 2),
            file_count=len(files),
            files_by_type={"images": images, "videos": videos},
            largest_files=entries[:TOP_N],
        )
