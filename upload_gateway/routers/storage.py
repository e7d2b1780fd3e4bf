# upload_gateway/routers/storage.py
from __future__ import annotations

from contextlib import suppress
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from upload_gateway.core.errors import MultipartUploadFailed, UploadNotFound
from upload_gateway.core.logging_config import logger
from upload_gateway.dependencies import get_orchestrator, get_tracker
from upload_gateway.models import UploadMetadata, UploadStatus
from upload_gateway.schemas.uploads import (
    CompleteMultipartIn,
    InitiateMultipartIn,
    LocationOut,
    MultipartInitiatedOut,
    MultipartPartUrlIn,
    PresignedUrlIn,
    UploadMetadataOut,
    UrlOut,
)
from upload_gateway.services.multipart import UploadOrchestrator
from upload_gateway.services.upload_tracker import UploadTracker

router = APIRouter(tags=["storage"])

_OPEN_STATUSES = (UploadStatus.INITIATED, UploadStatus.IN_PROGRESS)


# ----------------------------------------------------
# Presigned single-shot upload
# ----------------------------------------------------
@router.post("/upload/presigned-url", response_model=UrlOut)
def get_presigned_upload_url(
    body: PresignedUrlIn,
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
) -> UrlOut:
    url = orchestrator.presign_upload(body.file_name, body.content_type, body.expiration_minutes)
    return UrlOut(url=url)


# ----------------------------------------------------
# Multipart
# ----------------------------------------------------
@router.post("/upload/multipart/initiate", response_model=MultipartInitiatedOut)
def initiate_multipart_upload(
    body: InitiateMultipartIn,
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
    tracker: UploadTracker = Depends(get_tracker),
) -> MultipartInitiatedOut:
    info = orchestrator.initiate_multipart(body.file_name, body.content_type)

    tracker.track(UploadMetadata.initiated(info.upload_id, info.file_name, body.content_type))

    return MultipartInitiatedOut(upload_id=info.upload_id, file_name=info.file_name)


@router.post("/upload/multipart/part-url", response_model=UrlOut)
def get_multipart_part_url(
    body: MultipartPartUrlIn,
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
    tracker: UploadTracker = Depends(get_tracker),
) -> UrlOut:
    url = orchestrator.part_upload_url(
        body.file_name,
        body.upload_id,
        body.part_number,
        body.expiration_minutes,
    )

    # eerste part-URL: Initiated -> InProgress (uploads van buiten de tracker negeren we)
    with suppress(UploadNotFound):
        tracker.update(
            body.upload_id,
            only_from=(UploadStatus.INITIATED,),
            status=UploadStatus.IN_PROGRESS,
        )

    return UrlOut(url=url)


@router.post("/upload/multipart/complete", response_model=LocationOut)
def complete_multipart_upload(
    body: CompleteMultipartIn,
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
    tracker: UploadTracker = Depends(get_tracker),
) -> LocationOut:
    try:
        location = orchestrator.complete_multipart(
            body.file_name,
            body.upload_id,
            [p.to_domain() for p in body.parts],
        )
    except MultipartUploadFailed:
        with suppress(UploadNotFound):
            tracker.update(
                body.upload_id,
                only_from=_OPEN_STATUSES,
                status=UploadStatus.FAILED,
                location=None,
            )
        raise

    tracker.update(body.upload_id, status=UploadStatus.COMPLETED, location=location)

    return LocationOut(location=location)


# ----------------------------------------------------
# Tracked uploads
# ----------------------------------------------------
@router.get("/uploads", response_model=List[UploadMetadataOut])
def get_all_uploads(tracker: UploadTracker = Depends(get_tracker)) -> List[UploadMetadataOut]:
    return [UploadMetadataOut.from_domain(m) for m in tracker.list_all()]


@router.get("/uploads/{upload_id}", response_model=UploadMetadataOut)
def get_upload(upload_id: str, tracker: UploadTracker = Depends(get_tracker)) -> UploadMetadataOut:
    return UploadMetadataOut.from_domain(tracker.get(upload_id))


@router.delete("/uploads/{upload_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_upload(upload_id: str, tracker: UploadTracker = Depends(get_tracker)) -> Response:
    removed = tracker.remove(upload_id)
    logger.info("upload_remove", upload_id=upload_id, removed=removed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------------------------------------------
# Presigned GET
# ----------------------------------------------------
@router.get("/download/presigned-url", response_model=UrlOut)
def get_presigned_download_url(
    file_name: str = Query(..., alias="fileName"),
    expiration_minutes: Optional[int] = Query(None, alias="expirationMinutes"),
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
) -> UrlOut:
    return UrlOut(url=orchestrator.presign_download(file_name, expiration_minutes))


@router.get("/view/presigned-url", response_model=UrlOut)
def get_presigned_view_url(
    file_name: str = Query(..., alias="fileName"),
    expiration_minutes: Optional[int] = Query(None, alias="expirationMinutes"),
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
) -> UrlOut:
    return UrlOut(url=orchestrator.presign_view(file_name, expiration_minutes))
