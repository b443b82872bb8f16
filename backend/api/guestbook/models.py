from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

@dataclass(frozen=True)
class ContentRecord:
    id: str
    user_id: str
    type: str
    status: str
    created_at: datetime
    media_url: Optional[str] = None
    text_content: Optional[str] = None
    approved_at: Optional[datetime] = None

@dataclass(frozen=True)
class CleanupResult:
    cleaned_count: int
    errors: list[str] = field(default_factory=list)

@dataclass(frozen=True)
class RejectedStats:
    total_rejected: int
    old_rejected: int

@dataclass(frozen=True)
class StoredFile:
    name: str
    size: int
    size_mb: float
    type: str

@dataclass(frozen=True)
class StorageStats:
    total_bytes: int
    total_mb: float
    limit_mb: int
    percentage_used: float
    file_count: int
    files_by_type: dict[str, int]
    largest_files: list[StoredFile]
