import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from eventsnap.auth_utils import get_principal
from eventsnap.config import get_app_settings
from eventsnap.dependencies import get_event_service, get_moderation_engine, get_storage
from eventsnap.s3_service import MediaStorage
from eventsnap.schemas.photo import (
    BulkPhotoRequest,
    BulkPhotoResponse,
    ModeratorPhotoResponse,
    PhotoListResponse,
    PhotoStatusUpdateRequest,
    moderator_photo_response,
)
from eventsnap.services.access import Principal, can_see_uploader_pii
from eventsnap.services.events import EventService
from eventsnap.services.moderation import ModerationEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["photos"])

page_settings = get_app_settings()


@router.get("/events/{ref}/photos", response_model=PhotoListResponse)
def list_event_photos(
    ref: str,
    status_filter: str | None = Query(None, alias="status"),
    sort_by: Literal["uploaded_at", "view_count", "download_count", "original_file_name", "status"] = Query("uploaded_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    size: int = Query(page_settings.default_page_size, ge=1, le=page_settings.max_page_size),
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
    storage: MediaStorage = Depends(get_storage),
):
    """Moderator view of an event's photos, every status included unless filtered."""
    event, photos, total = service.list_event_photos(principal, ref, status=status_filter, sort_by=sort_by, order=order, page=page, size=size)
    show_email = can_see_uploader_pii(principal, event)
    return PhotoListResponse(
        photos=[moderator_photo_response(photo, storage, show_email=show_email) for photo in photos],
        total=total,
        page=page,
        size=size,
    )


@router.patch("/photos/{photo_id}/status", response_model=ModeratorPhotoResponse)
def update_photo_status(
    photo_id: UUID,
    request: PhotoStatusUpdateRequest,
    engine: ModerationEngine = Depends(get_moderation_engine),
    principal: Principal = Depends(get_principal),
    storage: MediaStorage = Depends(get_storage),
):
    photo = engine.set_status(principal, photo_id, request.status)
    event = engine.events.get_by_id(photo.event_id)
    return moderator_photo_response(photo, storage, show_email=event is not None and can_see_uploader_pii(principal, event))


@router.post("/photos/bulk", response_model=BulkPhotoResponse)
async def bulk_photo_action(
    request: BulkPhotoRequest,
    engine: ModerationEngine = Depends(get_moderation_engine),
    principal: Principal = Depends(get_principal),
):
    if request.operation == "delete":
        affected = await engine.bulk_delete(principal, request.photo_ids)
    else:
        affected = engine.bulk_set_status(principal, request.photo_ids, request.status)
    logger.info(f"Bulk {request.operation} affected {affected} photos")
    return BulkPhotoResponse(operation=request.operation, affected=affected)


@router.delete("/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_photo(
    photo_id: UUID,
    engine: ModerationEngine = Depends(get_moderation_engine),
    principal: Principal = Depends(get_principal),
):
    await engine.delete_photo(principal, photo_id)
