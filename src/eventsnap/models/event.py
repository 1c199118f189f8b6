import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import mapped_column, relationship

from eventsnap.models.db import Base

DEFAULT_ALLOWED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
DEFAULT_MAX_PHOTOS_PER_USER = 10


@dataclass(frozen=True)
class ModerationSettings:
    allow_anonymous_upload: bool = True
    require_approval: bool = False
    max_photos_per_user: int = DEFAULT_MAX_PHOTOS_PER_USER
    allowed_mime_types: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_ALLOWED_MIME_TYPES))
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE


@dataclass(frozen=True)
class EventStats:
    total_photos: int = 0
    approved_photos: int = 0
    pending_photos: int = 0
    rejected_photos: int = 0
    total_views: int = 0


class Event(Base):
    __tablename__ = "events"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    # Assigned once at creation, never regenerated
    public_event_id = mapped_column(String(64), unique=True, nullable=False, index=True)
    title = mapped_column(String(100), nullable=False)
    description = mapped_column(String(500), nullable=False, default="")
    scheduled_date = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    # NULL for self-service events created through the host flow
    owner_id = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    active = mapped_column(Boolean, nullable=False, default=True)

    allow_anonymous_upload = mapped_column(Boolean, nullable=False, default=True)
    require_approval = mapped_column(Boolean, nullable=False, default=False)
    max_photos_per_user = mapped_column(Integer, nullable=False, default=DEFAULT_MAX_PHOTOS_PER_USER)
    allowed_mime_types = mapped_column(JSON, nullable=False, default=lambda: list(DEFAULT_ALLOWED_MIME_TYPES))
    max_file_size_bytes = mapped_column(Integer, nullable=False, default=DEFAULT_MAX_FILE_SIZE)

    # Denormalized, always recomputable from the photos table
    total_photos = mapped_column(Integer, nullable=False, default=0)
    approved_photos = mapped_column(Integer, nullable=False, default=0)
    pending_photos = mapped_column(Integer, nullable=False, default=0)
    rejected_photos = mapped_column(Integer, nullable=False, default=0)
    total_views = mapped_column(Integer, nullable=False, default=0)

    qr_code_image = mapped_column(Text, nullable=True)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, index=True)
    updated_at = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    owner = relationship("User", back_populates="events")
    photos = relationship("Photo", back_populates="event", passive_deletes=True)

    @property
    def settings(self) -> ModerationSettings:
        return ModerationSettings(
            allow_anonymous_upload=self.allow_anonymous_upload,
            require_approval=self.require_approval,
            max_photos_per_user=self.max_photos_per_user,
            allowed_mime_types=frozenset(self.allowed_mime_types or ()),
            max_file_size_bytes=self.max_file_size_bytes,
        )

    @property
    def stats(self) -> EventStats:
        return EventStats(
            total_photos=self.total_photos or 0,
            approved_photos=self.approved_photos or 0,
            pending_photos=self.pending_photos or 0,
            rejected_photos=self.rejected_photos or 0,
            total_views=self.total_views or 0,
        )


class EventHost(Base):
    """Event-scoped login for organizers without a platform account."""

    __tablename__ = "event_hosts"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    public_event_id = mapped_column(String(64), unique=True, nullable=False, index=True)
    event_title = mapped_column(String(100), nullable=False)
    host_email = mapped_column(String(255), nullable=False, index=True)
    password_hash = mapped_column(String(255), nullable=False)
    active = mapped_column(Boolean, nullable=False, default=True)
    last_login = mapped_column(DateTime(timezone=True), nullable=True)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
