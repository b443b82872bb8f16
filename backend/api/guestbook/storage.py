from __future__ import annotations

import logging
from typing import Any, Dict, List

from supabase import Client, create_client

from guestbook.config import Settings
from guestbook.errors import BlobStoreError

log = logging.getLogger(__name__)


class SupabaseBlobStore:
    """
    One storage bucket in the hosted backend (uploaded photos and videos).
    """

    def __init__(self, client: Client, bucket: str = "content-media") -> None:
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseBlobStore":
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set for storage access")
        client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        return cls(client, settings.storage_bucket)

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def remove_by_key(self, key: str) -> None:
        if not key:
            raise BlobStoreError("storage key must be a non-empty string")
        try:
            self._bucket().remove([key])
        except Exception as e:
            raise BlobStoreError(f"{self.bucket}/{key}: {e}") from e
        log.info("Removed stored file", extra={"bucket": self.bucket, "key": key})

    def list_files(self, limit: int = 1000) -> List[Dict[str, Any]]:
        try:
            files = self._bucket().list(
                "",
                {
                    "limit": limit,
                    "sortBy": {"column": "created_at", "order": "desc"},
                },
            )
        except Exception as e:
            raise BlobStoreError(f"{self.bucket}: {e}") from e
        return list(files or [])
