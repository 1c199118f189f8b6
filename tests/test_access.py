import uuid

import pytest

from eventsnap.errors import AccessDenied
from eventsnap.models.event import Event
from eventsnap.models.photo import Photo, PhotoStatus
from eventsnap.services.access import (
    Principal,
    can_delete_event,
    can_manage,
    can_moderate,
    can_see_uploader_pii,
    ensure_can_delete_event,
    ensure_can_manage,
    ensure_can_moderate,
    ensure_event_scope,
    is_publicly_visible,
)

OWNER_ID = uuid.uuid4()


@pytest.fixture
def event():
    return Event(id=uuid.uuid4(), public_event_id="evt_abc_00001", owner_id=OWNER_ID, active=True)


class TestCanModerate:
    def test_owner(self, event):
        assert can_moderate(Principal.organizer(OWNER_ID), event)

    def test_other_organizer(self, event):
        assert not can_moderate(Principal.organizer(uuid.uuid4()), event)

    def test_admin_moderates_any_event(self, event):
        assert can_moderate(Principal.admin(uuid.uuid4()), event)

    def test_host_of_event(self, event):
        assert can_moderate(Principal.host("evt_abc_00001"), event)

    def test_host_of_other_event(self, event):
        assert not can_moderate(Principal.host("evt_abc_00002"), event)

    def test_anonymous(self, event):
        assert not can_moderate(Principal.anonymous(), event)


class TestManageAndPii:
    def test_admin_cannot_manage_foreign_event(self, event):
        admin = Principal.admin(uuid.uuid4())
        assert not can_manage(admin, event)
        assert not can_see_uploader_pii(admin, event)
        with pytest.raises(AccessDenied):
            ensure_can_manage(admin, event)

    def test_admin_manages_own_event(self, event):
        assert can_manage(Principal.admin(OWNER_ID), event)

    def test_only_owning_account_deletes_event(self, event):
        assert can_delete_event(Principal.organizer(OWNER_ID), event)
        assert not can_delete_event(Principal.organizer(uuid.uuid4()), event)
        assert not can_delete_event(Principal.admin(uuid.uuid4()), event)
        with pytest.raises(AccessDenied):
            ensure_can_delete_event(Principal.host("evt_abc_00001"), event)

    def test_hosted_event_deleted_by_admin_only(self):
        hosted = Event(id=uuid.uuid4(), public_event_id="evt_abc_00003", owner_id=None, active=True)
        assert can_delete_event(Principal.admin(uuid.uuid4()), hosted)
        assert not can_delete_event(Principal.host("evt_abc_00003"), hosted)
        assert not can_delete_event(Principal.organizer(uuid.uuid4()), hosted)

    def test_owner_and_host_see_pii(self, event):
        assert can_see_uploader_pii(Principal.organizer(OWNER_ID), event)
        assert can_see_uploader_pii(Principal.host("evt_abc_00001"), event)


class TestEnsure:
    def test_host_scope_is_access_denied(self):
        with pytest.raises(AccessDenied):
            ensure_event_scope(Principal.host("evt_abc_00001"), "evt_zzz_99999")

    def test_scope_ignores_non_hosts(self):
        ensure_event_scope(Principal.organizer(OWNER_ID), "evt_zzz_99999")

    def test_ensure_can_moderate_raises(self, event):
        with pytest.raises(AccessDenied):
            ensure_can_moderate(Principal.organizer(uuid.uuid4()), event)


class TestPublicVisibility:
    @pytest.mark.parametrize(
        ("status", "active", "visible"),
        [
            (PhotoStatus.APPROVED, True, True),
            (PhotoStatus.APPROVED, False, False),
            (PhotoStatus.PENDING, True, False),
            (PhotoStatus.REJECTED, True, False),
        ],
    )
    def test_visibility(self, event, status, active, visible):
        event.active = active
        assert is_publicly_visible(Photo(status=status), event) is visible
