"""
Dependency injection for external collaborators

The media storage client is initialized once during application startup and
shared across all requests. The QR renderer and e-mail notifier are cheap,
stateless wrappers built from settings on first use.
"""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from eventsnap.config import AppSettings, get_app_settings
from eventsnap.email_service import EmailNotifier
from eventsnap.models.db import get_db
from eventsnap.qr import QRRenderer
from eventsnap.repositories.event_repository import EventRepository
from eventsnap.repositories.host_repository import HostRepository
from eventsnap.repositories.photo_repository import PhotoRepository
from eventsnap.s3_service import AsyncS3Client, MediaStorage
from eventsnap.services.events import EventService
from eventsnap.services.gallery import PublicGallery
from eventsnap.services.moderation import ModerationEngine
from eventsnap.services.upload_intake import UploadIntake

logger = logging.getLogger(__name__)

# Global instance of the media storage client (initialized during app startup)
_storage_instance: MediaStorage | None = None


async def get_storage() -> AsyncGenerator[MediaStorage]:
    """FastAPI dependency yielding the shared media storage client.

    Raises:
        RuntimeError: If the application lifespan did not initialize the client
    """
    if _storage_instance is None:
        raise RuntimeError("Storage client not initialized. Make sure the application lifespan is properly configured.")
    yield _storage_instance


def set_storage_instance(client: MediaStorage | None) -> None:
    global _storage_instance
    _storage_instance = client
    if client is not None:
        logger.info("Storage client instance set globally")


def get_storage_instance() -> MediaStorage:
    if _storage_instance is None:
        raise RuntimeError("Storage client not initialized. Make sure the application lifespan is properly configured.")
    return _storage_instance


def create_storage() -> AsyncS3Client:
    return AsyncS3Client()


@lru_cache(maxsize=1)
def get_qr_renderer() -> QRRenderer:
    settings = get_app_settings()
    return QRRenderer(width=settings.qr_width, error_correction=settings.qr_error_correction)


@lru_cache(maxsize=1)
def get_notifier() -> EmailNotifier:
    return EmailNotifier()


def get_moderation_engine(
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
    settings: AppSettings = Depends(get_app_settings),
) -> ModerationEngine:
    return ModerationEngine(
        PhotoRepository(db),
        EventRepository(db),
        storage=storage,
        hosts=HostRepository(db),
        storage_timeout=settings.storage_timeout_seconds,
    )


def get_event_service(
    db: Session = Depends(get_db),
    moderation: ModerationEngine = Depends(get_moderation_engine),
    qr: QRRenderer = Depends(get_qr_renderer),
    notifier: EmailNotifier = Depends(get_notifier),
    settings: AppSettings = Depends(get_app_settings),
) -> EventService:
    return EventService(EventRepository(db), HostRepository(db), moderation, qr, notifier, base_url=settings.public_base_url)


def get_upload_intake(
    moderation: ModerationEngine = Depends(get_moderation_engine),
    storage: MediaStorage = Depends(get_storage),
    settings: AppSettings = Depends(get_app_settings),
) -> UploadIntake:
    return UploadIntake(
        moderation.events,
        moderation.photos,
        moderation,
        storage,
        timeout=settings.storage_timeout_seconds,
        concurrency=settings.upload_concurrency,
    )


def get_public_gallery(moderation: ModerationEngine = Depends(get_moderation_engine)) -> PublicGallery:
    return PublicGallery(moderation.events, moderation.photos, moderation)
