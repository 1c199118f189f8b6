import uuid
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from eventsnap.schemas.auth import RegisterRequest
from eventsnap.schemas.event import EventCreateRequest, EventUpdateRequest, HostedEventCreateRequest
from eventsnap.schemas.photo import BulkPhotoRequest

WHEN = datetime(2026, 12, 24, 18, 0, tzinfo=UTC)


def test_event_title_is_stripped():
    assert EventCreateRequest(title="  Office Party ", scheduled_date=WHEN).title == "Office Party"


@pytest.mark.parametrize("title", ["ab", "   ab   ", "x" * 101])
def test_event_title_length(title):
    with pytest.raises(ValidationError):
        EventCreateRequest(title=title, scheduled_date=WHEN)


def test_event_description_limit():
    with pytest.raises(ValidationError):
        EventCreateRequest(title="Office Party", scheduled_date=WHEN, description="d" * 501)


def test_settings_bounds():
    with pytest.raises(ValidationError):
        EventCreateRequest(title="Office Party", scheduled_date=WHEN, settings={"max_photos_per_user": 0})


def test_update_requires_a_field():
    with pytest.raises(ValidationError):
        EventUpdateRequest()


def test_update_keeps_explicit_false():
    request = EventUpdateRequest(active=False)
    assert request.model_fields_set == {"active"}
    assert request.active is False


def test_hosted_event_validation():
    with pytest.raises(ValidationError):
        HostedEventCreateRequest(title="Party", scheduled_date=WHEN, host_email="not-an-email", password="secret1")
    with pytest.raises(ValidationError):
        HostedEventCreateRequest(title="Party", scheduled_date=WHEN, host_email="host@example.com", password="short")


def test_bulk_request():
    ids = [uuid.uuid4()]
    assert BulkPhotoRequest(photo_ids=ids, operation="delete").status is None
    with pytest.raises(ValidationError):
        BulkPhotoRequest(photo_ids=ids, operation="update_status")
    with pytest.raises(ValidationError):
        BulkPhotoRequest(photo_ids=[], operation="delete")
    with pytest.raises(ValidationError):
        BulkPhotoRequest(photo_ids=ids, operation="archive")


def test_register_request_email():
    with pytest.raises(ValidationError):
        RegisterRequest(email="bad", password="password123")
