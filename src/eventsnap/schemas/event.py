from dataclasses import asdict
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field, StringConstraints, model_validator

from eventsnap import links
from eventsnap.models.event import Event, EventStats
from eventsnap.schemas.photo import ModeratorPhotoResponse

EventTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=100)]
EventDescription = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]


class ModerationSettingsPayload(BaseModel):
    allow_anonymous_upload: bool | None = None
    require_approval: bool | None = None
    max_photos_per_user: int | None = Field(None, ge=1, le=100)
    allowed_mime_types: list[str] | None = Field(None, min_length=1)
    max_file_size_bytes: int | None = Field(None, ge=1)


class EventCreateRequest(BaseModel):
    title: EventTitle
    description: EventDescription = ""
    scheduled_date: datetime = Field(..., description="When the event takes place")
    settings: ModerationSettingsPayload | None = None


class EventUpdateRequest(BaseModel):
    title: EventTitle | None = None
    description: EventDescription | None = None
    scheduled_date: datetime | None = None
    active: bool | None = None
    settings: ModerationSettingsPayload | None = None

    @model_validator(mode="after")
    def validate_payload(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


class HostedEventCreateRequest(BaseModel):
    title: EventTitle
    description: EventDescription = ""
    scheduled_date: datetime
    host_email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class ModerationSettingsResponse(BaseModel):
    allow_anonymous_upload: bool
    require_approval: bool
    max_photos_per_user: int
    allowed_mime_types: list[str]
    max_file_size_bytes: int


class EventStatsResponse(BaseModel):
    total_photos: int
    approved_photos: int
    pending_photos: int
    rejected_photos: int
    total_views: int


class EventResponse(BaseModel):
    id: str
    public_event_id: str
    title: str
    description: str
    scheduled_date: datetime
    owner_id: str | None = Field(None, description="Null for host-created events")
    active: bool
    settings: ModerationSettingsResponse
    stats: EventStatsResponse
    upload_url: str
    gallery_url: str
    qr_code_image: str | None = None
    created_at: datetime
    updated_at: datetime


class EventCreatedResponse(BaseModel):
    event: EventResponse
    qr_pending: bool = Field(False, description="QR rendering failed; regenerate it later")


class HostedEventCreatedResponse(BaseModel):
    event: EventResponse
    qr_pending: bool = False
    email_sent: bool


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    size: int


class EventStatsDetailResponse(BaseModel):
    public_event_id: str
    stats: EventStatsResponse
    recent_photos: list[ModeratorPhotoResponse]


class QRCodeResponse(BaseModel):
    public_event_id: str
    format: Literal["base64", "svg"]
    qr_code: str
    upload_url: str


def settings_response(event: Event) -> ModerationSettingsResponse:
    settings = event.settings
    return ModerationSettingsResponse(
        allow_anonymous_upload=settings.allow_anonymous_upload,
        require_approval=settings.require_approval,
        max_photos_per_user=settings.max_photos_per_user,
        allowed_mime_types=sorted(settings.allowed_mime_types),
        max_file_size_bytes=settings.max_file_size_bytes,
    )


def stats_response(stats: EventStats) -> EventStatsResponse:
    return EventStatsResponse(**asdict(stats))


def event_response(event: Event, base_url: str) -> EventResponse:
    return EventResponse(
        id=str(event.id),
        public_event_id=event.public_event_id,
        title=event.title,
        description=event.description or "",
        scheduled_date=event.scheduled_date,
        owner_id=str(event.owner_id) if event.owner_id else None,
        active=event.active,
        settings=settings_response(event),
        stats=stats_response(event.stats),
        upload_url=links.upload_url(base_url, event.public_event_id),
        gallery_url=links.gallery_url(base_url, event.public_event_id),
        qr_code_image=event.qr_code_image,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )
