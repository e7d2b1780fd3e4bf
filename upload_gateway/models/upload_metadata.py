# upload_gateway/models/upload_metadata.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class UploadStatus(str, Enum):
    INITIATED = "Initiated"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    FAILED = "Failed"


@dataclass(frozen=True)
class UploadMetadata:
    upload_id: str
    file_name: str
    content_type: str
    created_at: datetime
    status: UploadStatus
    location: Optional[str] = None  # alleen gezet bij Completed

    @classmethod
    def initiated(cls, upload_id: str, file_name: str, content_type: str) -> "UploadMetadata":
        return cls(
            upload_id=upload_id,
            file_name=file_name,
            content_type=content_type,
            created_at=datetime.now(timezone.utc),
            status=UploadStatus.INITIATED,
        )


@dataclass(frozen=True)
class PartETag:
    part_number: int
    etag: str


@dataclass(frozen=True)
class MultipartUploadInfo:
    upload_id: str
    file_name: str
