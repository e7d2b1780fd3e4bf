# upload_gateway/services/multipart.py
from __future__ import annotations

from typing import Optional, Sequence

from upload_gateway.core.errors import (
    InvalidRequest,
    MultipartUploadFailed,
    PresignedUrlGenerationFailed,
)
from upload_gateway.core.logging_config import logger
from upload_gateway.models import MultipartUploadInfo, PartETag
from upload_gateway.observability.metrics import multipart_counter, presign_counter
from upload_gateway.services.signer import S3Signer

MIN_EXPIRATION_MINUTES = 1
MAX_EXPIRATION_MINUTES = 10080  # 7 dagen, maximum voor SigV4
MIN_PART_NUMBER = 1
MAX_PART_NUMBER = 10000


def _require(value: Optional[str], field: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidRequest(field, f"'{field}' must not be empty")
    return value


def _expiry_seconds(minutes: Optional[int], default: int) -> int:
    if minutes is None:
        minutes = default
    if not MIN_EXPIRATION_MINUTES <= minutes <= MAX_EXPIRATION_MINUTES:
        raise InvalidRequest(
            "expirationMinutes",
            f"Expiration minutes must be between {MIN_EXPIRATION_MINUTES} and "
            f"{MAX_EXPIRATION_MINUTES} (7 days)",
        )
    return minutes * 60


def _check_part_number(part_number: int) -> None:
    if not MIN_PART_NUMBER <= part_number <= MAX_PART_NUMBER:
        raise InvalidRequest(
            "partNumber",
            f"Part number must be between {MIN_PART_NUMBER} and {MAX_PART_NUMBER}",
        )


class UploadOrchestrator:
    """
    Drives presigned uploads and the multipart workflow against the signer.

    Every input is validated before the signer is called. Signer failures are
    wrapped in a domain error and re-raised, never retried.
    """

    def __init__(self, signer: S3Signer, default_expiration_minutes: int = 60):
        self.signer = signer
        self.default_expiration_minutes = default_expiration_minutes

    # ------------------------------------------------------------------
    # Single-shot presign
    # ------------------------------------------------------------------
    def presign_upload(
        self,
        file_name: str,
        content_type: str,
        expiration_minutes: Optional[int] = None,
    ) -> str:
        _require(file_name, "fileName")
        _require(content_type, "contentType")
        expires_in = _expiry_seconds(expiration_minutes, self.default_expiration_minutes)

        logger.debug(
            "presign_upload",
            file_name=file_name,
            content_type=content_type,
            expires_in=expires_in,
        )
        return self._presign(
            "upload",
            file_name,
            verb="PUT",
            expires_in=expires_in,
            content_type=content_type,
        )

    def presign_download(self, file_name: str, expiration_minutes: Optional[int] = None) -> str:
        _require(file_name, "fileName")
        expires_in = _expiry_seconds(expiration_minutes, self.default_expiration_minutes)

        basename = file_name.rsplit("/", 1)[-1].replace('"', "")
        return self._presign(
            "download",
            file_name,
            verb="GET",
            expires_in=expires_in,
            content_disposition=f'attachment; filename="{basename}"',
        )

    def presign_view(self, file_name: str, expiration_minutes: Optional[int] = None) -> str:
        _require(file_name, "fileName")
        expires_in = _expiry_seconds(expiration_minutes, self.default_expiration_minutes)

        return self._presign(
            "view",
            file_name,
            verb="GET",
            expires_in=expires_in,
            content_disposition="inline",
        )

    def _presign(self, operation: str, file_name: str, **sign_kwargs) -> str:
        try:
            url = self.signer.sign(file_name, **sign_kwargs)
        except Exception as e:
            presign_counter.labels(operation=operation, result="error").inc()
            logger.error(
                "presign_failed",
                operation=operation,
                file_name=file_name,
                error=str(e),
                exc_info=True,
            )
            raise PresignedUrlGenerationFailed(file_name) from e

        presign_counter.labels(operation=operation, result="success").inc()
        return url

    # ------------------------------------------------------------------
    # Multipart
    # ------------------------------------------------------------------
    def initiate_multipart(self, file_name: str, content_type: str) -> MultipartUploadInfo:
        _require(file_name, "fileName")
        _require(content_type, "contentType")

        logger.info("multipart_initiate", file_name=file_name, content_type=content_type)
        try:
            upload_id = self.signer.initiate_multipart(file_name, content_type)
        except Exception as e:
            multipart_counter.labels(phase="initiate", result="error").inc()
            logger.error("multipart_initiate_failed", file_name=file_name, error=str(e), exc_info=True)
            raise MultipartUploadFailed(
                f"Failed to initiate multipart upload for file '{file_name}'",
                phase="initiate",
                file_name=file_name,
            ) from e

        multipart_counter.labels(phase="initiate", result="success").inc()
        logger.info("multipart_initiated", file_name=file_name, upload_id=upload_id)
        return MultipartUploadInfo(upload_id=upload_id, file_name=file_name)

    def part_upload_url(
        self,
        file_name: str,
        upload_id: str,
        part_number: int,
        expiration_minutes: Optional[int] = None,
    ) -> str:
        _require(file_name, "fileName")
        _require(upload_id, "uploadId")
        _check_part_number(part_number)
        expires_in = _expiry_seconds(expiration_minutes, self.default_expiration_minutes)

        logger.debug("multipart_part_url", upload_id=upload_id, part_number=part_number)
        try:
            url = self.signer.sign(
                file_name,
                verb="PUT",
                expires_in=expires_in,
                upload_id=upload_id,
                part_number=part_number,
            )
        except Exception as e:
            multipart_counter.labels(phase="part-url", result="error").inc()
            logger.error(
                "multipart_part_url_failed",
                upload_id=upload_id,
                part_number=part_number,
                error=str(e),
                exc_info=True,
            )
            raise MultipartUploadFailed(
                f"Failed to generate presigned URL for part {part_number}",
                phase="part-url",
                file_name=file_name,
                upload_id=upload_id,
                part_number=part_number,
            ) from e

        multipart_counter.labels(phase="part-url", result="success").inc()
        return url

    def complete_multipart(self, file_name: str, upload_id: str, parts: Sequence[PartETag]) -> str:
        _require(file_name, "fileName")
        _require(upload_id, "uploadId")
        if not parts:
            raise InvalidRequest("parts", "Parts list cannot be empty")
        for p in parts:
            _check_part_number(p.part_number)
            _require(p.etag, "eTag")

        # de store wil de parts oplopend op part_number
        ordered = sorted(parts, key=lambda p: p.part_number)

        logger.info("multipart_complete", upload_id=upload_id, parts_count=len(ordered))
        try:
            location = self.signer.complete_multipart(file_name, upload_id, ordered)
        except Exception as e:
            multipart_counter.labels(phase="complete", result="error").inc()
            logger.error("multipart_complete_failed", upload_id=upload_id, error=str(e), exc_info=True)
            raise MultipartUploadFailed(
                "Failed to complete multipart upload",
                phase="complete",
                file_name=file_name,
                upload_id=upload_id,
            ) from e

        multipart_counter.labels(phase="complete", result="success").inc()
        logger.info("multipart_completed", upload_id=upload_id, location=location)
        return location
