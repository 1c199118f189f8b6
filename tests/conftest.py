import os
import uuid
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session
from sqlalchemy.pool import StaticPool

os.environ.update({"JWT_SECRET_KEY": "supersecretkey", "EVENTSNAP_PUBLIC_BASE_URL": "https://snap.example.com"})

from tests.helpers import FakeStorage  # noqa: E402


@pytest.fixture(scope="function")
def engine() -> Generator[Engine]:
    """In-memory SQLite engine shared by every connection of a single test."""
    from eventsnap.models import Event, EventHost, Photo, User  # noqa: F401
    from eventsnap.models.db import Base

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine: Engine) -> Generator[Session]:
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def qr_renderer() -> MagicMock:
    renderer = MagicMock()
    renderer.render.return_value = "data:image/png;base64,UVI="
    return renderer


@pytest.fixture
def notifier() -> MagicMock:
    notifier = MagicMock()
    notifier.send_event_credentials = AsyncMock(return_value=True)
    return notifier


@pytest.fixture
def make_user(db_session: Session):
    from eventsnap.auth_utils import hash_password
    from eventsnap.repositories.user_repository import UserRepository

    password_hash = hash_password("password123")

    def _make_user(email: str | None = None, is_admin: bool = False):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        return UserRepository(db_session).create_user(email, password_hash, display_name="Test User", is_admin=is_admin)

    return _make_user


@pytest.fixture
def organizer(make_user):
    return make_user("organizer@example.com")


@pytest.fixture
def other_organizer(make_user):
    return make_user("other@example.com")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", is_admin=True)


@pytest.fixture
def make_event(db_session: Session):
    from eventsnap.ids import generate_event_id
    from eventsnap.repositories.event_repository import EventRepository

    def _make_event(owner=None, **fields):
        fields.setdefault("title", "Summer Party")
        fields.setdefault("scheduled_date", datetime.now(UTC) + timedelta(days=7))
        fields.setdefault("public_event_id", generate_event_id())
        return EventRepository(db_session).create_event(owner_id=owner.id if owner else None, **fields)

    return _make_event


@pytest.fixture
def make_photo(db_session: Session):
    from eventsnap.models.photo import PhotoStatus
    from eventsnap.repositories.photo_repository import PhotoRepository

    def _make_photo(event, status: PhotoStatus = PhotoStatus.PENDING, **fields):
        name = uuid.uuid4().hex
        fields.setdefault("media_ref", f"events/{event.public_event_id}/{name}.jpg")
        fields.setdefault("thumbnail_ref", f"events/{event.public_event_id}/thumbnails/{name}.jpg")
        fields.setdefault("original_file_name", f"{name}.jpg")
        fields.setdefault("mime_type", "image/jpeg")
        fields.setdefault("byte_size", 1024)
        fields.setdefault("uploader_email", "guest@example.com")
        return PhotoRepository(db_session).create_photo(event_id=event.id, status=status, **fields)

    return _make_photo


@pytest.fixture
def client(db_session: Session, storage: FakeStorage, qr_renderer: MagicMock, notifier: MagicMock) -> Generator[TestClient]:
    from eventsnap.dependencies import get_notifier, get_qr_renderer, get_storage
    from eventsnap.main import app
    from eventsnap.models.db import get_db

    def get_test_db():
        yield db_session

    async def get_test_storage():
        yield storage

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_storage] = get_test_storage
    app.dependency_overrides[get_qr_renderer] = lambda: qr_renderer
    app.dependency_overrides[get_notifier] = lambda: notifier

    # Not entered as a context manager: the lifespan would build a real S3 client
    yield TestClient(app)

    app.dependency_overrides.clear()
