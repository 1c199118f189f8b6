from datetime import datetime

from pydantic import BaseModel

from eventsnap import links
from eventsnap.models.event import Event


class PublicEventResponse(BaseModel):
    """What guests see about an event: no owner, no stats breakdown, no uploader data."""

    public_event_id: str
    title: str
    description: str
    scheduled_date: datetime
    allow_anonymous_upload: bool
    max_photos_per_user: int
    allowed_mime_types: list[str]
    max_file_size_bytes: int
    approved_photos: int
    upload_url: str
    gallery_url: str


def public_event_response(event: Event, base_url: str) -> PublicEventResponse:
    settings = event.settings
    return PublicEventResponse(
        public_event_id=event.public_event_id,
        title=event.title,
        description=event.description or "",
        scheduled_date=event.scheduled_date,
        allow_anonymous_upload=settings.allow_anonymous_upload,
        max_photos_per_user=settings.max_photos_per_user,
        allowed_mime_types=sorted(settings.allowed_mime_types),
        max_file_size_bytes=settings.max_file_size_bytes,
        approved_photos=event.approved_photos,
        upload_url=links.upload_url(base_url, event.public_event_id),
        gallery_url=links.gallery_url(base_url, event.public_event_id),
    )
