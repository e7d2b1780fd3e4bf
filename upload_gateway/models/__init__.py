# Models package for the upload gateway

from .upload_metadata import MultipartUploadInfo, PartETag, UploadMetadata, UploadStatus

__all__ = [
    "MultipartUploadInfo",
    "PartETag",
    "UploadMetadata",
    "UploadStatus",
]
