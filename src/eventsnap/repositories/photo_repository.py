import logging
import uuid
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, func, select, update

from eventsnap.models.event import Event, EventStats
from eventsnap.models.photo import Photo, PhotoStatus
from eventsnap.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

PHOTO_SORT_COLUMNS = {
    "uploaded_at": Photo.uploaded_at,
    "view_count": Photo.view_count,
    "download_count": Photo.download_count,
    "original_file_name": Photo.original_file_name,
    "status": Photo.status,
}


class PhotoRepository(BaseRepository):
    def create_photo(self, **fields: Any) -> Photo:
        photo = Photo(**fields)
        self.db.add(photo)
        return self.commit_and_refresh(photo)

    def get_photo(self, photo_id: uuid.UUID) -> Photo | None:
        stmt = select(Photo).where(Photo.id == photo_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_photos_by_ids(self, photo_ids: Iterable[uuid.UUID]) -> list[Photo]:
        ids = list(photo_ids)
        if not ids:
            return []
        stmt = select(Photo).where(Photo.id.in_(ids))
        return list(self.db.execute(stmt).scalars().all())

    def get_photos_by_event(self, event_id: uuid.UUID) -> list[Photo]:
        stmt = select(Photo).where(Photo.event_id == event_id)
        return list(self.db.execute(stmt).scalars().all())

    def list_photos(
        self,
        event_id: uuid.UUID,
        *,
        status: PhotoStatus | None = None,
        sort_by: str = "uploaded_at",
        order: str = "desc",
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[Photo], int]:
        conditions = [Photo.event_id == event_id]
        if status is not None:
            conditions.append(Photo.status == status)

        count_stmt = select(func.count()).select_from(Photo).where(*conditions)
        total = self.db.execute(count_stmt).scalar() or 0

        column = PHOTO_SORT_COLUMNS.get(sort_by, Photo.uploaded_at)
        ordering = column.asc() if order == "asc" else column.desc()
        stmt = select(Photo).where(*conditions).order_by(ordering, Photo.id).offset((page - 1) * size).limit(size)
        return list(self.db.execute(stmt).scalars().all()), total

    def recent_photos(self, event_id: uuid.UUID, limit: int = 5) -> list[Photo]:
        stmt = select(Photo).where(Photo.event_id == event_id).order_by(Photo.uploaded_at.desc(), Photo.id).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def count_stats(self, event_id: uuid.UUID) -> EventStats:
        """Full recount of an event's photos grouped by status."""
        stmt = select(Photo.status, func.count(), func.coalesce(func.sum(Photo.view_count), 0)).where(Photo.event_id == event_id).group_by(Photo.status)
        counts = {status: 0 for status in PhotoStatus}
        views = 0
        for status, count, status_views in self.db.execute(stmt).all():
            counts[PhotoStatus(status)] = count
            views += status_views or 0
        return EventStats(
            total_photos=sum(counts.values()),
            approved_photos=counts[PhotoStatus.APPROVED],
            pending_photos=counts[PhotoStatus.PENDING],
            rejected_photos=counts[PhotoStatus.REJECTED],
            total_views=views,
        )

    def set_status(self, photos: list[Photo], status: PhotoStatus) -> None:
        for photo in photos:
            photo.status = status
        self.db.commit()

    def delete_photos(self, photos: list[Photo]) -> int:
        ids = [photo.id for photo in photos]
        if not ids:
            return 0
        result = self.db.execute(delete(Photo).where(Photo.id.in_(ids)))
        self.db.commit()
        return result.rowcount or 0

    def increment_views(self, photo_id: uuid.UUID) -> None:
        stmt = update(Photo).where(Photo.id == photo_id).values(view_count=Photo.view_count + 1)
        self.db.execute(stmt)
        self.db.commit()

    def increment_downloads(self, photo_id: uuid.UUID) -> None:
        stmt = update(Photo).where(Photo.id == photo_id).values(download_count=Photo.download_count + 1)
        self.db.execute(stmt)
        self.db.commit()

    def get_photo_with_event(self, photo_id: uuid.UUID) -> tuple[Photo, Event] | None:
        stmt = select(Photo, Event).join(Event, Photo.event_id == Event.id).where(Photo.id == photo_id)
        row = self.db.execute(stmt).first()
        return (row[0], row[1]) if row else None
