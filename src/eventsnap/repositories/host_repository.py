from datetime import UTC, datetime

from sqlalchemy import delete, select

from eventsnap.models.event import EventHost
from eventsnap.repositories.base_repository import BaseRepository


class HostRepository(BaseRepository):
    def create_host(self, public_event_id: str, event_title: str, host_email: str, password_hash: str) -> EventHost:
        host = EventHost(
            public_event_id=public_event_id,
            event_title=event_title,
            host_email=host_email.strip().lower(),
            password_hash=password_hash,
        )
        self.db.add(host)
        return self.commit_and_refresh(host)

    def public_id_exists(self, public_event_id: str) -> bool:
        stmt = select(EventHost.id).where(EventHost.public_event_id == public_event_id)
        return self.db.execute(stmt).first() is not None

    def get_active_host(self, public_event_id: str) -> EventHost | None:
        stmt = select(EventHost).where(EventHost.public_event_id == public_event_id, EventHost.active.is_(True))
        return self.db.execute(stmt).scalar_one_or_none()

    def record_login(self, host: EventHost) -> EventHost:
        host.last_login = datetime.now(UTC)
        return self.commit_and_refresh(host)

    def delete_for_event(self, public_event_id: str) -> None:
        self.db.execute(delete(EventHost).where(EventHost.public_event_id == public_event_id))
        self.db.commit()
