# upload_gateway/core/errors.py
"""
Domain errors for the upload gateway.

Each kind is its own exception class with structured context fields. The
``kind`` tag lets the API layer map an error to a response without an
isinstance ladder over a shared base class.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_REQUEST = "invalid_request"
    UPLOAD_NOT_FOUND = "upload_not_found"
    PRESIGN_FAILED = "presign_failed"
    MULTIPART_FAILED = "multipart_failed"
    UNEXPECTED = "unexpected"


class InvalidRequest(Exception):
    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        self.message = message or f"'{field}' is required"
        super().__init__(self.message)


class UploadNotFound(Exception):
    kind = ErrorKind.UPLOAD_NOT_FOUND

    def __init__(self, upload_id: str):
        self.upload_id = upload_id
        self.message = f"Upload with ID '{upload_id}' was not found"
        super().__init__(self.message)


class PresignedUrlGenerationFailed(Exception):
    kind = ErrorKind.PRESIGN_FAILED

    def __init__(self, file_name: str):
        self.file_name = file_name
        self.message = f"Failed to generate presigned URL for file '{file_name}'"
        super().__init__(self.message)


class MultipartUploadFailed(Exception):
    kind = ErrorKind.MULTIPART_FAILED

    def __init__(
        self,
        message: str,
        phase: str,
        file_name: Optional[str] = None,
        upload_id: Optional[str] = None,
        part_number: Optional[int] = None,
    ):
        self.message = message
        self.phase = phase  # initiate | part-url | complete
        self.file_name = file_name
        self.upload_id = upload_id
        self.part_number = part_number
        super().__init__(message)


DOMAIN_ERRORS = (
    InvalidRequest,
    UploadNotFound,
    PresignedUrlGenerationFailed,
    MultipartUploadFailed,
)
