import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import mapped_column, relationship

from eventsnap.models.db import Base

DEFAULT_UPLOADER_NAME = "Anonymous"
MAX_CAPTION_LENGTH = 200


class PhotoStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Photo(Base):
    __tablename__ = "photos"
    __table_args__ = (
        Index("ix_photos_event_id_status", "event_id", "status"),
        Index("ix_photos_uploaded_at", "uploaded_at"),
    )

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = mapped_column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    # Storage object keys (e.g. "evt_xxx/<uuid>.jpg" and "evt_xxx/thumbnails/<uuid>.jpg")
    media_ref = mapped_column(String, nullable=False)
    thumbnail_ref = mapped_column(String, nullable=True)
    original_file_name = mapped_column(String(255), nullable=False)
    mime_type = mapped_column(String(100), nullable=False)
    byte_size = mapped_column(Integer, nullable=False)
    width = mapped_column(Integer, nullable=True)
    height = mapped_column(Integer, nullable=True)
    uploader_display_name = mapped_column(String(100), nullable=False, default=DEFAULT_UPLOADER_NAME)
    uploader_email = mapped_column(String(255), nullable=True)
    caption = mapped_column(String(MAX_CAPTION_LENGTH), nullable=True)
    status = mapped_column(
        Enum(PhotoStatus, name="photo_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PhotoStatus.PENDING,
    )
    view_count = mapped_column(Integer, nullable=False, default=0)
    download_count = mapped_column(Integer, nullable=False, default=0)
    uploaded_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    event = relationship("Event", back_populates="photos")
