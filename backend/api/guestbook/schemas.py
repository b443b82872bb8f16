from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ApprovalLinkOut(BaseModel):
    content_id: str
    token: str
    url: str


class CleanupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cleaned_count: int = Field(..., ge=0)
    errors: List[str]


class RejectedStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_rejected: int = Field(..., ge=0)
    old_rejected: int = Field(..., ge=0)


class StoredFileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    size: int
    size_mb: float
    type: str


class StorageStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_bytes: int
    total_mb: float
    limit_mb: int
    percentage_used: float
    file_count: int
    files_by_type: Dict[str, int]
    largest_files: List[StoredFileOut]
