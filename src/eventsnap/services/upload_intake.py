import asyncio
import logging
from dataclasses import dataclass, field

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from eventsnap.errors import (
    EventNotFound,
    EventSnapError,
    FileTooLarge,
    InvalidEmail,
    NoFilesProvided,
    PhotoSaveFailed,
    StorageUnavailable,
    TooManyFiles,
    UnsupportedFileType,
    ValidationFailed,
)
from eventsnap.logger import event_logger
from eventsnap.models.event import Event
from eventsnap.models.photo import DEFAULT_UPLOADER_NAME, MAX_CAPTION_LENGTH, Photo
from eventsnap.repositories.event_repository import EventRepository
from eventsnap.repositories.photo_repository import PhotoRepository
from eventsnap.s3_service import MediaStorage, StoredMedia
from eventsnap.services.moderation import ModerationEngine

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class IncomingFile:
    filename: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploaderMeta:
    display_name: str | None = None
    email: str | None = None
    caption: str | None = None


@dataclass
class FileResult:
    filename: str
    photo: Photo | None = None
    error: EventSnapError | None = None

    @property
    def success(self) -> bool:
        return self.photo is not None


@dataclass
class UploadOutcome:
    event: Event
    results: list[FileResult] = field(default_factory=list)

    @property
    def uploaded(self) -> list[Photo]:
        return [result.photo for result in self.results if result.photo is not None]

    @property
    def failed(self) -> list[FileResult]:
        return [result for result in self.results if not result.success]


def normalize_meta(meta: UploaderMeta, allow_anonymous: bool) -> UploaderMeta:
    name = (meta.display_name or "").strip()
    email = (meta.email or "").strip() or None
    caption = (meta.caption or "").strip()

    if email is not None:
        try:
            email = str(_email_adapter.validate_python(email)).lower()
        except ValidationError:
            raise InvalidEmail() from None
    if len(caption) > MAX_CAPTION_LENGTH:
        raise ValidationFailed(f"Caption must be at most {MAX_CAPTION_LENGTH} characters", field="caption")
    if not allow_anonymous and not name and email is None:
        raise ValidationFailed("This event requires your name or email to upload photos", field="uploader_name")

    return UploaderMeta(display_name=name or DEFAULT_UPLOADER_NAME, email=email, caption=caption)


class UploadIntake:
    """Validates guest uploads against the event's policy and stores the accepted files."""

    def __init__(
        self,
        events: EventRepository,
        photos: PhotoRepository,
        moderation: ModerationEngine,
        storage: MediaStorage,
        timeout: float = 30.0,
        concurrency: int = 5,
    ):
        self.events = events
        self.photos = photos
        self.moderation = moderation
        self.storage = storage
        self.timeout = timeout
        self.concurrency = concurrency

    def _check_file(self, event: Event, incoming: IncomingFile) -> EventSnapError | None:
        settings = event.settings
        if incoming.content_type not in settings.allowed_mime_types:
            return UnsupportedFileType(incoming.filename, incoming.content_type)
        if incoming.size > settings.max_file_size_bytes:
            return FileTooLarge(incoming.filename, incoming.size, settings.max_file_size_bytes)
        return None

    async def _store(self, event: Event, incoming: IncomingFile) -> StoredMedia:
        try:
            return await asyncio.wait_for(
                self.storage.store(incoming.data, incoming.filename, incoming.content_type, prefix=f"events/{event.public_event_id}"),
                timeout=self.timeout,
            )
        except TimeoutError:
            raise StorageUnavailable(f"Storage timed out while saving {incoming.filename}", filename=incoming.filename) from None
        except Exception as e:
            logger.error(f"Failed to store {incoming.filename} for {event.public_event_id}: {e}")
            raise StorageUnavailable(f"Failed to save {incoming.filename}", filename=incoming.filename) from e

    async def _accept(self, event: Event, incoming: IncomingFile, meta: UploaderMeta, semaphore: asyncio.Semaphore) -> FileResult:
        async with semaphore:
            try:
                stored = await self._store(event, incoming)
            except StorageUnavailable as e:
                return FileResult(incoming.filename, error=e)

        try:
            photo = self.photos.create_photo(
                event_id=event.id,
                media_ref=stored.media_ref,
                thumbnail_ref=stored.thumbnail_ref,
                original_file_name=incoming.filename,
                mime_type=incoming.content_type,
                byte_size=incoming.size,
                width=stored.width,
                height=stored.height,
                uploader_display_name=meta.display_name,
                uploader_email=meta.email,
                caption=meta.caption,
                status=self.moderation.initial_status(event),
            )
        except SQLAlchemyError as e:
            self.photos.db.rollback()
            logger.error(f"Failed to record {incoming.filename} for {event.public_event_id}: {e}")
            await self.moderation.discard_refs([stored.media_ref, stored.thumbnail_ref])
            return FileResult(incoming.filename, error=PhotoSaveFailed(incoming.filename))
        event_logger.log_event(
            "photo_uploaded",
            photo_id=photo.id,
            event_id=event.public_event_id,
            status=photo.status.value,
            size=incoming.size,
        )
        return FileResult(incoming.filename, photo=photo)

    async def submit(self, public_event_id: str, files: list[IncomingFile], meta: UploaderMeta) -> UploadOutcome:
        event = self.events.get_active_by_public_id(public_event_id)
        if event is None:
            raise EventNotFound(public_event_id)
        if not files:
            raise NoFilesProvided()
        if len(files) > event.max_photos_per_user:
            raise TooManyFiles(event.max_photos_per_user, len(files))

        results: list[FileResult | None] = [None] * len(files)
        accepted: list[tuple[int, IncomingFile]] = []
        for index, incoming in enumerate(files):
            error = self._check_file(event, incoming)
            if error is not None:
                logger.info(f"Rejected {incoming.filename} for {public_event_id}: {error.code.value}")
                results[index] = FileResult(incoming.filename, error=error)
            else:
                accepted.append((index, incoming))
        meta = normalize_meta(meta, event.allow_anonymous_upload)

        event_id = event.id
        semaphore = asyncio.Semaphore(self.concurrency)
        try:
            stored = await asyncio.gather(*(self._accept(event, incoming, meta, semaphore) for _, incoming in accepted))
        finally:
            # Sibling files may have committed rows even when one of them raised
            if accepted:
                self.moderation.safe_recompute([event_id])
        for (index, _), result in zip(accepted, stored, strict=True):
            results[index] = result

        outcome = UploadOutcome(event=event, results=[result for result in results if result is not None])
        logger.info(f"Upload to {public_event_id}: {len(outcome.uploaded)} stored, {len(outcome.failed)} failed")
        return outcome
