from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from eventsnap.models.photo import Photo
from eventsnap.s3_service import MediaStorage


class ModeratorPhotoResponse(BaseModel):
    id: str
    event_id: str
    original_file_name: str
    mime_type: str
    byte_size: int
    width: int | None = None
    height: int | None = None
    uploader_display_name: str
    uploader_email: str | None = Field(None, description="Only shown to the event's own organizer or host")
    caption: str
    status: str
    view_count: int
    download_count: int
    uploaded_at: datetime
    url: str | None = None
    thumbnail_url: str | None = None


class PhotoListResponse(BaseModel):
    photos: list[ModeratorPhotoResponse]
    total: int
    page: int
    size: int


class PhotoStatusUpdateRequest(BaseModel):
    status: str = Field(..., description="approved, rejected or pending")


class BulkPhotoRequest(BaseModel):
    photo_ids: list[UUID] = Field(..., min_length=1)
    operation: Literal["update_status", "delete"]
    status: str | None = None

    @model_validator(mode="after")
    def validate_payload(self):
        if self.operation == "update_status" and self.status is None:
            raise ValueError("status is required for update_status")
        return self


class BulkPhotoResponse(BaseModel):
    operation: str
    affected: int


class PublicPhotoResponse(BaseModel):
    id: str
    uploader_display_name: str
    caption: str
    width: int | None = None
    height: int | None = None
    view_count: int
    download_count: int
    uploaded_at: datetime
    url: str | None = None
    thumbnail_url: str | None = None


class GalleryPageResponse(BaseModel):
    public_event_id: str
    title: str
    photos: list[PublicPhotoResponse]
    total: int
    page: int
    size: int


class UploadFileResult(BaseModel):
    filename: str
    success: bool
    photo_id: str | None = None
    status: str | None = None
    code: str | None = None
    error: str | None = None


class UploadResponse(BaseModel):
    public_event_id: str
    uploaded: int
    failed: int
    results: list[UploadFileResult]
    message: str


class DownloadResponse(BaseModel):
    url: str
    filename: str
    expires_in: int


def _presigned_urls(photo: Photo, storage: MediaStorage | None) -> tuple[str | None, str | None]:
    if storage is None:
        return None, None
    url = storage.generate_presigned_url(photo.media_ref)
    thumbnail_url = storage.generate_presigned_url(photo.thumbnail_ref) if photo.thumbnail_ref else url
    return url, thumbnail_url


def moderator_photo_response(photo: Photo, storage: MediaStorage | None = None, show_email: bool = False) -> ModeratorPhotoResponse:
    url, thumbnail_url = _presigned_urls(photo, storage)
    return ModeratorPhotoResponse(
        id=str(photo.id),
        event_id=str(photo.event_id),
        original_file_name=photo.original_file_name,
        mime_type=photo.mime_type,
        byte_size=photo.byte_size,
        width=photo.width,
        height=photo.height,
        uploader_display_name=photo.uploader_display_name,
        uploader_email=photo.uploader_email if show_email else None,
        caption=photo.caption or "",
        status=photo.status.value,
        view_count=photo.view_count,
        download_count=photo.download_count,
        uploaded_at=photo.uploaded_at,
        url=url,
        thumbnail_url=thumbnail_url,
    )


def public_photo_response(photo: Photo, storage: MediaStorage | None = None) -> PublicPhotoResponse:
    url, thumbnail_url = _presigned_urls(photo, storage)
    return PublicPhotoResponse(
        id=str(photo.id),
        uploader_display_name=photo.uploader_display_name,
        caption=photo.caption or "",
        width=photo.width,
        height=photo.height,
        view_count=photo.view_count,
        download_count=photo.download_count,
        uploaded_at=photo.uploaded_at,
        url=url,
        thumbnail_url=thumbnail_url,
    )
