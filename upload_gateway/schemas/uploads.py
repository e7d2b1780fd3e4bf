# upload_gateway/schemas/uploads.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from upload_gateway.models import PartETag, UploadMetadata, UploadStatus


class _CamelModel(BaseModel):
    # JSON is camelCase (fileName, uploadId, eTag), Python blijft snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === Requests ===
class PresignedUrlIn(_CamelModel):
    file_name: str
    content_type: str
    expiration_minutes: Optional[int] = None


class InitiateMultipartIn(_CamelModel):
    file_name: str
    content_type: str


class MultipartPartUrlIn(_CamelModel):
    file_name: str
    upload_id: str
    part_number: int
    expiration_minutes: Optional[int] = None


class PartETagIn(_CamelModel):
    part_number: int
    e_tag: str

    def to_domain(self) -> PartETag:
        return PartETag(part_number=self.part_number, etag=self.e_tag)


class CompleteMultipartIn(_CamelModel):
    file_name: str
    upload_id: str
    parts: List[PartETagIn]


# === Responses ===
class UrlOut(BaseModel):
    url: str


class MultipartInitiatedOut(_CamelModel):
    upload_id: str
    file_name: str


class LocationOut(BaseModel):
    location: str


class UploadMetadataOut(_CamelModel):
    upload_id: str
    file_name: str
    content_type: str
    created_at: datetime
    status: UploadStatus
    location: Optional[str] = None

    @classmethod
    def from_domain(cls, m: UploadMetadata) -> "UploadMetadataOut":
        return cls(
            upload_id=m.upload_id,
            file_name=m.file_name,
            content_type=m.content_type,
            created_at=m.created_at,
            status=m.status,
            location=m.location,
        )
