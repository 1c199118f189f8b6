"""Who may see and change which events and photos.

Every mutating service call re-checks these rules right before it writes,
with freshly loaded rows, rather than trusting a check made at routing time.
"""

import enum
import uuid
from dataclasses import dataclass

from eventsnap.errors import AccessDenied
from eventsnap.models.event import Event
from eventsnap.models.photo import Photo, PhotoStatus


class ActorKind(str, enum.Enum):
    ANONYMOUS = "anonymous"
    HOST = "host"
    ORGANIZER = "organizer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    kind: ActorKind
    user_id: uuid.UUID | None = None
    event_public_id: str | None = None

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(ActorKind.ANONYMOUS)

    @classmethod
    def organizer(cls, user_id: uuid.UUID) -> "Principal":
        return cls(ActorKind.ORGANIZER, user_id=user_id)

    @classmethod
    def admin(cls, user_id: uuid.UUID) -> "Principal":
        return cls(ActorKind.ADMIN, user_id=user_id)

    @classmethod
    def host(cls, event_public_id: str) -> "Principal":
        return cls(ActorKind.HOST, event_public_id=event_public_id)


def owns(principal: Principal, event: Event) -> bool:
    if principal.kind is ActorKind.HOST:
        return principal.event_public_id == event.public_event_id
    if principal.kind in (ActorKind.ORGANIZER, ActorKind.ADMIN):
        return principal.user_id is not None and event.owner_id == principal.user_id
    return False


def can_moderate(principal: Principal, event: Event) -> bool:
    if principal.kind is ActorKind.ADMIN:
        return True
    return owns(principal, event)


def can_manage(principal: Principal, event: Event) -> bool:
    """Edit, delete and regenerate QR. Admins only manage events they own."""
    return owns(principal, event)


def can_delete_event(principal: Principal, event: Event) -> bool:
    """Only the owning account deletes an event. Hosts never do; admins may remove ownerless hosted events."""
    if principal.kind is ActorKind.HOST:
        return False
    if event.owner_id is None:
        return principal.kind is ActorKind.ADMIN
    return owns(principal, event)


def can_read(principal: Principal, event: Event) -> bool:
    return can_moderate(principal, event)


def can_see_uploader_pii(principal: Principal, event: Event) -> bool:
    """Uploader e-mail addresses are visible to the event's own organizer or host only."""
    return owns(principal, event)


def can_view_public(event: Event) -> bool:
    return bool(event.active)


def is_publicly_visible(photo: Photo, event: Event) -> bool:
    return photo.status == PhotoStatus.APPROVED and can_view_public(event)


def ensure_event_scope(principal: Principal, public_event_id: str) -> None:
    """A host token only ever addresses its own event id."""
    if principal.kind is ActorKind.HOST and principal.event_public_id != public_event_id:
        raise AccessDenied("Access denied. You can only access your own event.")


def ensure_can_read(principal: Principal, event: Event) -> None:
    ensure_event_scope(principal, event.public_event_id)
    if not can_read(principal, event):
        raise AccessDenied()


def ensure_can_moderate(principal: Principal, event: Event) -> None:
    ensure_event_scope(principal, event.public_event_id)
    if not can_moderate(principal, event):
        raise AccessDenied("Access denied. You cannot moderate photos of this event.")


def ensure_can_manage(principal: Principal, event: Event) -> None:
    ensure_event_scope(principal, event.public_event_id)
    if not can_manage(principal, event):
        raise AccessDenied("Access denied. You cannot modify this event.")


def ensure_can_delete_event(principal: Principal, event: Event) -> None:
    ensure_event_scope(principal, event.public_event_id)
    if not can_delete_event(principal, event):
        raise AccessDenied("Access denied. You cannot delete this event.")
