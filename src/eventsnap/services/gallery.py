import logging
import uuid

from eventsnap.errors import EventNotFound, PhotoNotFound
from eventsnap.models.event import Event
from eventsnap.models.photo import Photo, PhotoStatus
from eventsnap.repositories.event_repository import EventRepository
from eventsnap.repositories.photo_repository import PhotoRepository
from eventsnap.services.access import is_publicly_visible
from eventsnap.services.moderation import ModerationEngine

logger = logging.getLogger(__name__)


class PublicGallery:
    """Guest-facing reads: approved photos of active events only."""

    def __init__(self, events: EventRepository, photos: PhotoRepository, moderation: ModerationEngine):
        self.events = events
        self.photos = photos
        self.moderation = moderation

    def page(self, public_event_id: str, *, sort_by: str = "uploaded_at", order: str = "desc", page: int = 1, size: int = 50) -> tuple[Event, list[Photo], int]:
        event = self.events.get_active_by_public_id(public_event_id)
        if event is None:
            raise EventNotFound(public_event_id)
        photos, total = self.photos.list_photos(event.id, status=PhotoStatus.APPROVED, sort_by=sort_by, order=order, page=page, size=size)
        return event, photos, total

    def _visible(self, photo_id: uuid.UUID) -> tuple[Photo, Event]:
        found = self.photos.get_photo_with_event(photo_id)
        if found is None or not is_publicly_visible(*found):
            raise PhotoNotFound(str(photo_id))
        return found

    def view(self, photo_id: uuid.UUID) -> Photo:
        photo, event = self._visible(photo_id)
        self.photos.increment_views(photo.id)
        self.moderation.safe_recompute([event.id])
        return self.photos.get_photo(photo.id)

    def download(self, photo_id: uuid.UUID) -> Photo:
        photo, _ = self._visible(photo_id)
        self.photos.increment_downloads(photo.id)
        return self.photos.get_photo(photo.id)
