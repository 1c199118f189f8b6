import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import mapped_column, relationship

from eventsnap.models.db import Base


class User(Base):
    """Organizer account. ``is_admin`` widens the scope to every event."""

    __tablename__ = "users"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    email = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash = mapped_column(String(255), nullable=False)
    display_name = mapped_column(String(255), nullable=True)
    is_admin = mapped_column(Boolean, default=False, nullable=False)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    events = relationship("Event", back_populates="owner", passive_deletes=True)
