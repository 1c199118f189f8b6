import logging
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse

from eventsnap.config import AppSettings, get_app_settings
from eventsnap.dependencies import get_event_service, get_public_gallery, get_storage, get_upload_intake
from eventsnap.models.photo import PhotoStatus
from eventsnap.s3_service import MediaStorage
from eventsnap.schemas.photo import (
    DownloadResponse,
    GalleryPageResponse,
    PublicPhotoResponse,
    UploadFileResult,
    UploadResponse,
    public_photo_response,
)
from eventsnap.schemas.public import PublicEventResponse, public_event_response
from eventsnap.services.events import EventService
from eventsnap.services.gallery import PublicGallery
from eventsnap.services.upload_intake import IncomingFile, UploaderMeta, UploadIntake, UploadOutcome

logger = logging.getLogger(__name__)

DOWNLOAD_URL_TTL = 3600

router = APIRouter(prefix="/public", tags=["public"])

page_settings = get_app_settings()


def _upload_message(outcome: UploadOutcome) -> str:
    uploaded = len(outcome.uploaded)
    if not uploaded:
        return "No photos were uploaded"
    message = f"Successfully uploaded {uploaded} photo(s)"
    if any(photo.status == PhotoStatus.PENDING for photo in outcome.uploaded):
        message += "; they will appear in the gallery once approved"
    if outcome.failed:
        message += f", {len(outcome.failed)} failed"
    return message


def _upload_response(outcome: UploadOutcome) -> UploadResponse:
    results = []
    for result in outcome.results:
        if result.photo is not None:
            results.append(UploadFileResult(filename=result.filename, success=True, photo_id=str(result.photo.id), status=result.photo.status.value))
        else:
            results.append(UploadFileResult(filename=result.filename, success=False, code=result.error.code.value, error=result.error.message))
    return UploadResponse(
        public_event_id=outcome.event.public_event_id,
        uploaded=len(outcome.uploaded),
        failed=len(outcome.failed),
        results=results,
        message=_upload_message(outcome),
    )


@router.get("/events/{public_event_id}", response_model=PublicEventResponse)
def get_public_event(
    public_event_id: str,
    service: EventService = Depends(get_event_service),
    settings: AppSettings = Depends(get_app_settings),
):
    return public_event_response(service.get_public_event(public_event_id), settings.public_base_url)


@router.post("/events/{public_event_id}/photos", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_photos(
    public_event_id: str,
    files: Annotated[list[UploadFile] | None, File()] = None,
    uploader_name: Annotated[str | None, Form()] = None,
    uploader_email: Annotated[str | None, Form()] = None,
    caption: Annotated[str | None, Form()] = None,
    intake: UploadIntake = Depends(get_upload_intake),
):
    """Guest upload; each file gets its own result so one bad file does not sink the batch."""
    incoming = [IncomingFile(filename=upload.filename or "unknown", content_type=upload.content_type, data=await upload.read()) for upload in files or []]
    meta = UploaderMeta(display_name=uploader_name, email=uploader_email, caption=caption)
    outcome = await intake.submit(public_event_id, incoming, meta)

    response = _upload_response(outcome)
    if not outcome.uploaded:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=response.model_dump())
    return response


@router.get("/events/{public_event_id}/gallery", response_model=GalleryPageResponse)
def get_gallery(
    public_event_id: str,
    sort_by: Literal["uploaded_at", "view_count", "download_count"] = Query("uploaded_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    size: int = Query(page_settings.gallery_page_size, ge=1, le=page_settings.max_page_size),
    gallery: PublicGallery = Depends(get_public_gallery),
    storage: MediaStorage = Depends(get_storage),
):
    event, photos, total = gallery.page(public_event_id, sort_by=sort_by, order=order, page=page, size=size)
    return GalleryPageResponse(
        public_event_id=event.public_event_id,
        title=event.title,
        photos=[public_photo_response(photo, storage) for photo in photos],
        total=total,
        page=page,
        size=size,
    )


@router.get("/photos/{photo_id}", response_model=PublicPhotoResponse)
def view_photo(
    photo_id: UUID,
    gallery: PublicGallery = Depends(get_public_gallery),
    storage: MediaStorage = Depends(get_storage),
):
    return public_photo_response(gallery.view(photo_id), storage)


@router.get("/photos/{photo_id}/download", response_model=DownloadResponse)
def download_photo(
    photo_id: UUID,
    gallery: PublicGallery = Depends(get_public_gallery),
    storage: MediaStorage = Depends(get_storage),
):
    photo = gallery.download(photo_id)
    url = storage.generate_presigned_url(photo.media_ref, expires_in=DOWNLOAD_URL_TTL)
    return DownloadResponse(url=url, filename=photo.original_file_name, expires_in=DOWNLOAD_URL_TTL)
