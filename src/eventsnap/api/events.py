import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from eventsnap.auth_utils import get_principal
from eventsnap.config import AppSettings, get_app_settings
from eventsnap.dependencies import get_event_service, get_storage
from eventsnap.s3_service import MediaStorage
from eventsnap.schemas.event import (
    EventCreatedResponse,
    EventCreateRequest,
    EventListResponse,
    EventResponse,
    EventStatsDetailResponse,
    EventUpdateRequest,
    HostedEventCreatedResponse,
    HostedEventCreateRequest,
    QRCodeResponse,
    event_response,
    stats_response,
)
from eventsnap.schemas.photo import moderator_photo_response
from eventsnap.services.access import Principal, can_see_uploader_pii
from eventsnap.services.events import EventService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])

page_settings = get_app_settings()


@router.post("/events", response_model=EventCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    request: EventCreateRequest,
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
    settings: AppSettings = Depends(get_app_settings),
):
    created = service.create_event(principal, request)
    return EventCreatedResponse(event=event_response(created.event, settings.public_base_url), qr_pending=created.qr_pending)


@router.post("/host/events", response_model=HostedEventCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_hosted_event(
    request: HostedEventCreateRequest,
    service: EventService = Depends(get_event_service),
    settings: AppSettings = Depends(get_app_settings),
):
    """Self-service event creation; credentials are e-mailed to the host."""
    created = await service.create_hosted_event(request)
    return HostedEventCreatedResponse(
        event=event_response(created.event, settings.public_base_url),
        qr_pending=created.qr_pending,
        email_sent=created.email_sent,
    )


@router.get("/events", response_model=EventListResponse)
def list_events(
    search: str | None = Query(None, max_length=100),
    active: bool | None = Query(None),
    sort_by: Literal["date", "title", "photos", "created"] = Query("date"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    size: int = Query(page_settings.default_page_size, ge=1, le=page_settings.max_page_size),
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
    settings: AppSettings = Depends(get_app_settings),
):
    events, total = service.list_events(principal, search=search, active=active, sort_by=sort_by, order=order, page=page, size=size)
    return EventListResponse(events=[event_response(event, settings.public_base_url) for event in events], total=total, page=page, size=size)


@router.get("/events/{ref}", response_model=EventResponse)
def get_event(
    ref: str,
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
    settings: AppSettings = Depends(get_app_settings),
):
    return event_response(service.get_event(principal, ref), settings.public_base_url)


@router.patch("/events/{ref}", response_model=EventResponse)
def update_event(
    ref: str,
    request: EventUpdateRequest,
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
    settings: AppSettings = Depends(get_app_settings),
):
    return event_response(service.update_event(principal, ref, request), settings.public_base_url)


@router.delete("/events/{ref}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    ref: str,
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
):
    await service.delete_event(principal, ref)


@router.post("/events/{ref}/qr", response_model=QRCodeResponse)
def regenerate_qr(
    ref: str,
    format: Literal["base64", "svg"] = Query("base64"),
    width: int | None = Query(None, ge=100, le=2000),
    error_correction: Literal["L", "M", "Q", "H"] | None = Query(None),
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
):
    event, image = service.regenerate_qr(principal, ref, fmt=format, width=width, error_correction=error_correction)
    return QRCodeResponse(public_event_id=event.public_event_id, format=format, qr_code=image, upload_url=service.upload_url(event))


@router.get("/events/{ref}/stats", response_model=EventStatsDetailResponse)
def get_event_stats(
    ref: str,
    service: EventService = Depends(get_event_service),
    principal: Principal = Depends(get_principal),
    storage: MediaStorage = Depends(get_storage),
):
    event, stats, recent = service.event_stats(principal, ref)
    show_email = can_see_uploader_pii(principal, event)
    return EventStatsDetailResponse(
        public_event_id=event.public_event_id,
        stats=stats_response(stats),
        recent_photos=[moderator_photo_response(photo, storage, show_email=show_email) for photo in recent],
    )
