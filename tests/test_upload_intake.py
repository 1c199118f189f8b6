import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from eventsnap.errors import (
    ErrorCode,
    EventNotFound,
    InvalidEmail,
    NoFilesProvided,
    TooManyFiles,
    ValidationFailed,
)
from eventsnap.models.photo import PhotoStatus
from eventsnap.repositories.event_repository import EventRepository
from eventsnap.repositories.photo_repository import PhotoRepository
from eventsnap.services.access import Principal
from eventsnap.services.gallery import PublicGallery
from eventsnap.services.moderation import ModerationEngine
from eventsnap.services.upload_intake import IncomingFile, UploaderMeta, UploadIntake

JPEG = b"\xff\xd8\xff\xe0" + b"0" * 128


def jpeg(name: str = "photo.jpg", size: int | None = None) -> IncomingFile:
    data = JPEG if size is None else b"0" * size
    return IncomingFile(filename=name, content_type="image/jpeg", data=data)


@pytest.fixture
def moderation(db_session, storage):
    return ModerationEngine(PhotoRepository(db_session), EventRepository(db_session), storage=storage)


@pytest.fixture
def intake(db_session, storage, moderation):
    return UploadIntake(EventRepository(db_session), PhotoRepository(db_session), moderation, storage, timeout=1, concurrency=2)


@pytest.fixture
def event(make_event, organizer):
    return make_event(organizer, max_photos_per_user=3)


class TestBatchChecks:
    @pytest.mark.asyncio
    async def test_unknown_event(self, intake):
        with pytest.raises(EventNotFound):
            await intake.submit("evt_missing_00000", [jpeg()], UploaderMeta())

    @pytest.mark.asyncio
    async def test_inactive_event(self, intake, make_event, storage):
        event = make_event(active=False)
        with pytest.raises(EventNotFound):
            await intake.submit(event.public_event_id, [jpeg()], UploaderMeta())
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_no_files(self, intake, event):
        with pytest.raises(NoFilesProvided):
            await intake.submit(event.public_event_id, [], UploaderMeta())

    @pytest.mark.asyncio
    async def test_exactly_max_files_accepted(self, intake, event):
        outcome = await intake.submit(event.public_event_id, [jpeg(f"{i}.jpg") for i in range(3)], UploaderMeta())
        assert len(outcome.uploaded) == 3

    @pytest.mark.asyncio
    async def test_one_over_max_rejected_before_storage(self, intake, event, storage):
        with pytest.raises(TooManyFiles) as exc_info:
            await intake.submit(event.public_event_id, [jpeg(f"{i}.jpg") for i in range(4)], UploaderMeta())
        assert "3" in exc_info.value.message
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_invalid_email(self, intake, event, storage):
        with pytest.raises(InvalidEmail):
            await intake.submit(event.public_event_id, [jpeg()], UploaderMeta(email="not-an-email"))
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_invalid_email_fails_batch_with_bad_files(self, intake, event, storage):
        files = [IncomingFile("a.txt", "text/plain", b"hi"), jpeg()]
        with pytest.raises(InvalidEmail):
            await intake.submit(event.public_event_id, files, UploaderMeta(email="not-an-email"))
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_caption_too_long(self, intake, event):
        with pytest.raises(ValidationFailed) as exc_info:
            await intake.submit(event.public_event_id, [jpeg()], UploaderMeta(caption="x" * 201))
        assert exc_info.value.field == "caption"

    @pytest.mark.asyncio
    async def test_identity_required_when_anonymous_disabled(self, intake, make_event):
        event = make_event(allow_anonymous_upload=False)
        with pytest.raises(ValidationFailed) as exc_info:
            await intake.submit(event.public_event_id, [jpeg()], UploaderMeta())
        assert exc_info.value.field == "uploader_name"

        outcome = await intake.submit(event.public_event_id, [jpeg()], UploaderMeta(display_name="Ana"))
        assert outcome.uploaded[0].uploader_display_name == "Ana"


class TestPerFileChecks:
    @pytest.mark.asyncio
    async def test_unsupported_type_is_partial_failure(self, intake, event, storage):
        files = [jpeg("a.jpg"), IncomingFile("b.gif", "image/gif", b"GIF89a"), jpeg("c.jpg")]
        outcome = await intake.submit(event.public_event_id, files, UploaderMeta())

        assert [r.filename for r in outcome.results] == ["a.jpg", "b.gif", "c.jpg"]
        assert [r.success for r in outcome.results] == [True, False, True]
        failed = outcome.failed[0]
        assert failed.error.code is ErrorCode.UNSUPPORTED_FILE_TYPE
        assert failed.error.filename == "b.gif"
        assert b"GIF89a" not in storage.objects.values()

    @pytest.mark.asyncio
    async def test_size_boundary(self, intake, make_event):
        event = make_event(max_file_size_bytes=1000)
        outcome = await intake.submit(event.public_event_id, [jpeg("ok.jpg", size=1000), jpeg("big.jpg", size=1001)], UploaderMeta())
        assert [r.success for r in outcome.results] == [True, False]
        assert outcome.failed[0].error.code is ErrorCode.FILE_TOO_LARGE
        assert outcome.failed[0].error.message.startswith("File too large")

    @pytest.mark.asyncio
    async def test_all_files_invalid_creates_nothing(self, intake, event, db_session):
        outcome = await intake.submit(event.public_event_id, [IncomingFile("a.txt", "text/plain", b"hi")], UploaderMeta())
        assert outcome.uploaded == []
        assert PhotoRepository(db_session).get_photos_by_event(event.id) == []

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported_per_file(self, intake, event, storage):
        storage.fail_store_for.add("broken.jpg")
        outcome = await intake.submit(event.public_event_id, [jpeg("broken.jpg"), jpeg("fine.jpg")], UploaderMeta())
        assert [r.success for r in outcome.results] == [False, True]
        assert outcome.failed[0].error.code is ErrorCode.STORAGE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_record_failure_is_reported_per_file(self, intake, event, storage, db_session):
        create_photo = intake.photos.create_photo
        calls = []

        def flaky_create_photo(**fields):
            calls.append(fields["original_file_name"])
            if len(calls) == 2:
                raise OperationalError("INSERT INTO photos", {}, Exception("database is locked"))
            return create_photo(**fields)

        files = [jpeg("a.jpg"), jpeg("b.jpg"), jpeg("c.jpg")]
        with patch.object(intake.photos, "create_photo", side_effect=flaky_create_photo):
            outcome = await intake.submit(event.public_event_id, files, UploaderMeta())

        assert len(outcome.uploaded) == 2
        failed = outcome.failed[0]
        assert failed.filename == calls[1]
        assert failed.error.code is ErrorCode.PHOTO_SAVE_FAILED
        assert len(storage.deleted) == 2
        assert len(storage.objects) == 4

        db_session.refresh(event)
        assert event.total_photos == 2
        assert len(PhotoRepository(db_session).get_photos_by_event(event.id)) == 2

    @pytest.mark.asyncio
    async def test_storage_timeout(self, db_session, moderation, event):
        class SlowStorage:
            async def store(self, data, filename, content_type=None, prefix=""):
                await asyncio.sleep(5)

        intake = UploadIntake(EventRepository(db_session), PhotoRepository(db_session), moderation, SlowStorage(), timeout=0.05)
        outcome = await intake.submit(event.public_event_id, [jpeg()], UploaderMeta())
        assert outcome.failed[0].error.code is ErrorCode.STORAGE_UNAVAILABLE


class TestStoredPhotos:
    @pytest.mark.asyncio
    async def test_metadata_and_defaults(self, intake, event):
        outcome = await intake.submit(event.public_event_id, [jpeg()], UploaderMeta(email="Guest@Example.com", caption="  cheers  "))
        photo = outcome.uploaded[0]
        assert photo.uploader_display_name == "Anonymous"
        assert photo.uploader_email == "guest@example.com"
        assert photo.caption == "cheers"
        assert photo.mime_type == "image/jpeg"
        assert photo.byte_size == len(JPEG)
        assert photo.width == 640
        assert photo.media_ref.startswith(f"events/{event.public_event_id}/")

    @pytest.mark.asyncio
    async def test_stats_recomputed_after_upload(self, intake, event, db_session):
        await intake.submit(event.public_event_id, [jpeg("a.jpg"), jpeg("b.jpg")], UploaderMeta())
        db_session.refresh(event)
        assert event.total_photos == 2
        assert event.approved_photos == 2

    @pytest.mark.asyncio
    async def test_initial_status_follows_require_approval(self, intake, make_event):
        moderated = make_event(require_approval=True)
        open_event = make_event(require_approval=False)
        pending = await intake.submit(moderated.public_event_id, [jpeg()], UploaderMeta())
        approved = await intake.submit(open_event.public_event_id, [jpeg()], UploaderMeta())
        assert pending.uploaded[0].status == PhotoStatus.PENDING
        assert approved.uploaded[0].status == PhotoStatus.APPROVED

    @pytest.mark.asyncio
    async def test_moderation_round_trip_through_gallery(self, intake, moderation, make_event, organizer, db_session):
        event = make_event(organizer, require_approval=True)
        gallery = PublicGallery(EventRepository(db_session), PhotoRepository(db_session), moderation)
        owner = Principal.organizer(organizer.id)

        photo = (await intake.submit(event.public_event_id, [jpeg()], UploaderMeta())).uploaded[0]
        assert gallery.page(event.public_event_id)[2] == 0

        moderation.set_status(owner, photo.id, PhotoStatus.APPROVED)
        _, photos, total = gallery.page(event.public_event_id)
        assert total == 1
        assert photos[0].id == photo.id

        moderation.set_status(owner, photo.id, PhotoStatus.REJECTED)
        assert gallery.page(event.public_event_id)[2] == 0
