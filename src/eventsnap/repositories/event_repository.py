import logging
import uuid
from typing import Any

from sqlalchemy import delete, func, or_, select

from eventsnap.models.event import Event, EventStats
from eventsnap.models.photo import Photo
from eventsnap.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

EVENT_SORT_COLUMNS = {
    "date": Event.scheduled_date,
    "title": Event.title,
    "photos": Event.total_photos,
    "created": Event.created_at,
}


def parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class EventRepository(BaseRepository):
    def create_event(self, **fields: Any) -> Event:
        event = Event(**fields)
        self.db.add(event)
        return self.commit_and_refresh(event)

    def public_id_exists(self, public_event_id: str) -> bool:
        stmt = select(Event.id).where(Event.public_event_id == public_event_id)
        return self.db.execute(stmt).first() is not None

    def get_by_id(self, event_id: uuid.UUID) -> Event | None:
        stmt = select(Event).where(Event.id == event_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_public_id(self, public_event_id: str) -> Event | None:
        stmt = select(Event).where(Event.public_event_id == public_event_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_active_by_public_id(self, public_event_id: str) -> Event | None:
        stmt = select(Event).where(Event.public_event_id == public_event_id, Event.active.is_(True))
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_ref(self, ref: str) -> Event | None:
        """Look an event up by internal UUID or by its public ``evt_...`` id."""
        event_uuid = parse_uuid(ref)
        if event_uuid is not None:
            return self.get_by_id(event_uuid)
        return self.get_by_public_id(ref)

    def list_events(
        self,
        *,
        owner_id: uuid.UUID | None = None,
        public_event_id: str | None = None,
        search: str | None = None,
        active: bool | None = None,
        sort_by: str = "date",
        order: str = "desc",
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[Event], int]:
        conditions = []
        if owner_id is not None:
            conditions.append(Event.owner_id == owner_id)
        if public_event_id is not None:
            conditions.append(Event.public_event_id == public_event_id)
        if active is not None:
            conditions.append(Event.active.is_(active))
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(Event.title).like(pattern),
                    func.lower(Event.description).like(pattern),
                    func.lower(Event.public_event_id).like(pattern),
                )
            )

        count_stmt = select(func.count()).select_from(Event).where(*conditions)
        total = self.db.execute(count_stmt).scalar() or 0

        column = EVENT_SORT_COLUMNS.get(sort_by, Event.scheduled_date)
        ordering = column.asc() if order == "asc" else column.desc()
        stmt = select(Event).where(*conditions).order_by(ordering, Event.id).offset((page - 1) * size).limit(size)
        events = self.db.execute(stmt).scalars().all()
        return list(events), total

    def save(self, event: Event) -> Event:
        self.db.add(event)
        return self.commit_and_refresh(event)

    def apply_stats(self, event: Event, stats: EventStats) -> Event:
        event.total_photos = stats.total_photos
        event.approved_photos = stats.approved_photos
        event.pending_photos = stats.pending_photos
        event.rejected_photos = stats.rejected_photos
        event.total_views = stats.total_views
        return self.save(event)

    def delete_event(self, event: Event) -> None:
        """Hard delete: the event row and every photo row that belongs to it."""
        self.db.execute(delete(Photo).where(Photo.event_id == event.id))
        self.db.delete(event)
        self.db.commit()
