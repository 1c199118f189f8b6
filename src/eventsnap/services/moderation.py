"""Photo status workflow and per-event photo statistics.

Any of pending/approved/rejected may move to any other; there is no
terminal state. Every change ends with a full recount of the affected
events' photos. The recount is idempotent, so concurrent moderators
converge on the same numbers without locking, and a failed recount is
logged and repaired by the next one instead of undoing the status change.
"""

import asyncio
import logging
import uuid
from collections.abc import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError

from eventsnap.errors import InvalidStatus, PhotoNotFound, ValidationFailed
from eventsnap.logger import event_logger
from eventsnap.models.event import Event, EventStats
from eventsnap.models.photo import Photo, PhotoStatus
from eventsnap.repositories.event_repository import EventRepository
from eventsnap.repositories.host_repository import HostRepository
from eventsnap.repositories.photo_repository import PhotoRepository
from eventsnap.s3_service import MediaStorage
from eventsnap.services.access import Principal, ensure_can_delete_event, ensure_can_moderate

logger = logging.getLogger(__name__)


def parse_status(value: PhotoStatus | str) -> PhotoStatus:
    try:
        return PhotoStatus(value)
    except ValueError:
        raise InvalidStatus(str(value)) from None


def initial_status(event: Event) -> PhotoStatus:
    """Status of a freshly uploaded photo, decided by the event's policy at upload time."""
    return PhotoStatus.PENDING if event.require_approval else PhotoStatus.APPROVED


class ModerationEngine:
    def __init__(
        self,
        photos: PhotoRepository,
        events: EventRepository,
        storage: MediaStorage | None = None,
        hosts: HostRepository | None = None,
        storage_timeout: float = 30.0,
    ):
        self.photos = photos
        self.events = events
        self.storage = storage
        self.hosts = hosts
        self.storage_timeout = storage_timeout

    initial_status = staticmethod(initial_status)

    def recompute_stats(self, event: Event) -> EventStats:
        stats = self.photos.count_stats(event.id)
        self.events.apply_stats(event, stats)
        logger.debug("Recomputed stats for %s: %s", event.public_event_id, stats)
        return stats

    def safe_recompute(self, event_ids: Iterable[uuid.UUID]) -> None:
        """Recount once per distinct event; failures leave stats stale until the next recount."""
        for event_id in dict.fromkeys(event_ids):
            try:
                event = self.events.get_by_id(event_id)
                if event is not None:
                    self.recompute_stats(event)
            except SQLAlchemyError:
                logger.exception("Stats recomputation failed for event %s", event_id)
                self.events.db.rollback()

    def _load_for_moderation(self, principal: Principal, photo_ids: Sequence[uuid.UUID]) -> list[Photo]:
        if not photo_ids:
            raise ValidationFailed("Photo IDs array is required", field="photo_ids")
        photos = self.photos.get_photos_by_ids(photo_ids)
        if not photos:
            raise PhotoNotFound(",".join(str(photo_id) for photo_id in photo_ids))

        # All-or-nothing: one foreign photo rejects the whole request
        for event_id in dict.fromkeys(photo.event_id for photo in photos):
            event = self.events.get_by_id(event_id)
            if event is None:
                raise PhotoNotFound(str(event_id))
            ensure_can_moderate(principal, event)
        return photos

    def set_status(self, principal: Principal, photo_id: uuid.UUID, status: PhotoStatus | str) -> Photo:
        new_status = parse_status(status)
        photo = self.photos.get_photo(photo_id)
        if photo is None:
            raise PhotoNotFound(str(photo_id))
        event = self.events.get_by_id(photo.event_id)
        if event is None:
            raise PhotoNotFound(str(photo_id))
        ensure_can_moderate(principal, event)

        previous = photo.status
        self.photos.set_status([photo], new_status)
        event_logger.log_event(
            "photo_status_changed",
            photo_id=photo_id,
            event_id=event.public_event_id,
            previous=previous.value,
            status=new_status.value,
            actor=principal.kind.value,
        )
        self.safe_recompute([event.id])
        return photo

    def bulk_set_status(self, principal: Principal, photo_ids: Sequence[uuid.UUID], status: PhotoStatus | str) -> int:
        new_status = parse_status(status)
        photos = self._load_for_moderation(principal, photo_ids)
        event_ids = [photo.event_id for photo in photos]
        self.photos.set_status(photos, new_status)
        event_logger.log_event("photos_status_changed", count=len(photos), status=new_status.value, actor=principal.kind.value)
        self.safe_recompute(event_ids)
        return len(photos)

    async def _delete_ref(self, ref: str) -> None:
        if self.storage is None:
            return
        try:
            await asyncio.wait_for(self.storage.delete(ref), timeout=self.storage_timeout)
        except Exception as e:
            # Orphaned objects are acceptable; a missing photo row is what the user sees
            logger.warning("Failed to delete media %s: %s", ref, e)

    async def discard_refs(self, refs: Iterable[str | None]) -> None:
        """Best-effort delete of stored objects; duplicates and empty refs are skipped."""
        unique = list(dict.fromkeys(ref for ref in refs if ref))
        await asyncio.gather(*(self._delete_ref(ref) for ref in unique))

    async def purge_media(self, photos: Iterable[Photo]) -> None:
        await self.discard_refs(ref for photo in photos for ref in (photo.media_ref, photo.thumbnail_ref))

    async def delete_photo(self, principal: Principal, photo_id: uuid.UUID) -> None:
        photo = self.photos.get_photo(photo_id)
        if photo is None:
            raise PhotoNotFound(str(photo_id))
        await self.bulk_delete(principal, [photo_id])

    async def bulk_delete(self, principal: Principal, photo_ids: Sequence[uuid.UUID]) -> int:
        photos = self._load_for_moderation(principal, photo_ids)
        event_ids = [photo.event_id for photo in photos]
        await self.purge_media(photos)
        deleted = self.photos.delete_photos(photos)
        event_logger.log_event("photos_deleted", count=deleted, actor=principal.kind.value)
        self.safe_recompute(event_ids)
        return deleted

    async def delete_event(self, principal: Principal, event: Event) -> None:
        """Hard delete: media (best effort), photo rows, host credential, then the event itself."""
        ensure_can_delete_event(principal, event)
        public_event_id = event.public_event_id
        photos = self.photos.get_photos_by_event(event.id)
        await self.purge_media(photos)
        self.events.delete_event(event)
        if self.hosts is not None:
            self.hosts.delete_for_event(public_event_id)
        event_logger.log_event("event_deleted", event_id=public_event_id, photos=len(photos), actor=principal.kind.value)
