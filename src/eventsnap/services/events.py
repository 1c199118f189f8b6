import logging
from dataclasses import dataclass
from typing import Any

from eventsnap import links
from eventsnap.auth_utils import hash_password
from eventsnap.email_service import EmailNotifier, EventCredentials
from eventsnap.errors import AccessDenied, EventNotFound, QRRenderFailed
from eventsnap.ids import allocate_event_id
from eventsnap.logger import event_logger
from eventsnap.models.event import Event, EventHost, EventStats
from eventsnap.models.photo import Photo
from eventsnap.qr import QRFormat, QRRenderer
from eventsnap.repositories.event_repository import EventRepository
from eventsnap.repositories.host_repository import HostRepository
from eventsnap.schemas.event import EventCreateRequest, EventUpdateRequest, HostedEventCreateRequest, ModerationSettingsPayload
from eventsnap.services.access import ActorKind, Principal, ensure_can_manage, ensure_can_read, ensure_event_scope
from eventsnap.services.moderation import ModerationEngine, parse_status

logger = logging.getLogger(__name__)

RECENT_PHOTOS_LIMIT = 5


@dataclass
class EventCreated:
    event: Event
    qr_pending: bool = False


@dataclass
class HostedEventCreated:
    event: Event
    host: EventHost
    qr_pending: bool
    email_sent: bool


def _settings_fields(payload: ModerationSettingsPayload | None) -> dict[str, Any]:
    if payload is None:
        return {}
    return payload.model_dump(exclude_none=True)


class EventService:
    def __init__(
        self,
        events: EventRepository,
        hosts: HostRepository,
        moderation: ModerationEngine,
        qr: QRRenderer,
        notifier: EmailNotifier,
        base_url: str,
    ):
        self.events = events
        self.hosts = hosts
        self.moderation = moderation
        self.qr = qr
        self.notifier = notifier
        self.base_url = base_url

    def upload_url(self, event: Event) -> str:
        return links.upload_url(self.base_url, event.public_event_id)

    def gallery_url(self, event: Event) -> str:
        return links.gallery_url(self.base_url, event.public_event_id)

    def _id_taken(self, candidate: str) -> bool:
        return self.events.public_id_exists(candidate) or self.hosts.public_id_exists(candidate)

    def _attach_qr(self, event: Event) -> bool:
        """Render and store the upload QR code. Returns False when rendering failed."""
        try:
            event.qr_code_image = self.qr.render(self.upload_url(event))
        except QRRenderFailed as e:
            event_logger.log_event("qr_render_failed", level=logging.WARNING, event_id=event.public_event_id, error=e.message)
            return False
        self.events.save(event)
        return True

    def _load(self, principal: Principal, ref: str) -> Event:
        # Hosts addressing anything but their own event are denied, whether or not it exists
        event = self.events.get_by_ref(ref)
        if principal.kind is ActorKind.HOST:
            ensure_event_scope(principal, event.public_event_id if event is not None else ref)
        if event is None:
            raise EventNotFound(ref)
        return event

    def create_event(self, principal: Principal, payload: EventCreateRequest) -> EventCreated:
        if principal.kind not in (ActorKind.ORGANIZER, ActorKind.ADMIN):
            raise AccessDenied("Only organizers can create events")

        public_event_id = allocate_event_id(self._id_taken)
        event = self.events.create_event(
            public_event_id=public_event_id,
            title=payload.title,
            description=payload.description,
            scheduled_date=payload.scheduled_date,
            owner_id=principal.user_id,
            **_settings_fields(payload.settings),
        )
        qr_ready = self._attach_qr(event)
        event_logger.log_event("event_created", event_id=public_event_id, owner_id=principal.user_id, qr_pending=not qr_ready)
        return EventCreated(event=event, qr_pending=not qr_ready)

    async def create_hosted_event(self, payload: HostedEventCreateRequest) -> HostedEventCreated:
        """Self-service event: no platform account, the host logs in with event id and password."""
        public_event_id = allocate_event_id(self._id_taken)
        event = self.events.create_event(
            public_event_id=public_event_id,
            title=payload.title,
            description=payload.description,
            scheduled_date=payload.scheduled_date,
            owner_id=None,
            require_approval=True,
        )
        host = self.hosts.create_host(public_event_id, event.title, payload.host_email, hash_password(payload.password))
        qr_ready = self._attach_qr(event)

        credentials = EventCredentials(
            title=event.title,
            public_event_id=public_event_id,
            password=payload.password,
            scheduled_date=event.scheduled_date,
            upload_url=self.upload_url(event),
            description=event.description,
        )
        email_sent = await self.notifier.send_event_credentials(host.host_email, credentials)
        if not email_sent:
            event_logger.log_event("credentials_email_failed", level=logging.WARNING, event_id=public_event_id)
        event_logger.log_event("hosted_event_created", event_id=public_event_id, qr_pending=not qr_ready, email_sent=email_sent)
        return HostedEventCreated(event=event, host=host, qr_pending=not qr_ready, email_sent=email_sent)

    def get_event(self, principal: Principal, ref: str) -> Event:
        event = self._load(principal, ref)
        ensure_can_read(principal, event)
        return event

    def list_events(
        self,
        principal: Principal,
        *,
        search: str | None = None,
        active: bool | None = None,
        sort_by: str = "date",
        order: str = "desc",
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[Event], int]:
        scope: dict[str, Any] = {}
        if principal.kind is ActorKind.ORGANIZER:
            scope["owner_id"] = principal.user_id
        elif principal.kind is ActorKind.HOST:
            scope["public_event_id"] = principal.event_public_id
        elif principal.kind is not ActorKind.ADMIN:
            raise AccessDenied()
        return self.events.list_events(search=search, active=active, sort_by=sort_by, order=order, page=page, size=size, **scope)

    def update_event(self, principal: Principal, ref: str, payload: EventUpdateRequest) -> Event:
        event = self._load(principal, ref)
        ensure_can_manage(principal, event)

        changes = payload.model_dump(include=payload.model_fields_set - {"settings"}, exclude_none=True)
        changes.update(_settings_fields(payload.settings))
        for name, value in changes.items():
            setattr(event, name, value)
        event = self.events.save(event)
        if "title" in changes:
            host = self.hosts.get_active_host(event.public_event_id)
            if host is not None:
                host.event_title = event.title
                self.hosts.commit_and_refresh(host)

        event_logger.log_event("event_updated", event_id=event.public_event_id, fields=sorted(changes))
        return event

    async def delete_event(self, principal: Principal, ref: str) -> None:
        event = self._load(principal, ref)
        await self.moderation.delete_event(principal, event)

    def regenerate_qr(self, principal: Principal, ref: str, *, fmt: QRFormat = "base64", width: int | None = None, error_correction: str | None = None) -> tuple[Event, str]:
        """Re-render the upload QR code. PNG renders replace the stored image; SVG is returned only.

        Raises:
            QRRenderFailed: rendering failed; the stored image is left as it was.
        """
        event = self._load(principal, ref)
        ensure_can_manage(principal, event)
        image = self.qr.render(self.upload_url(event), width=width, error_correction=error_correction, fmt=fmt)
        if fmt == "base64":
            event.qr_code_image = image
            event = self.events.save(event)
        event_logger.log_event("qr_regenerated", event_id=event.public_event_id, format=fmt)
        return event, image

    def get_public_event(self, public_event_id: str) -> Event:
        event = self.events.get_active_by_public_id(public_event_id)
        if event is None:
            raise EventNotFound(public_event_id)
        return event

    def event_stats(self, principal: Principal, ref: str) -> tuple[Event, EventStats, list[Photo]]:
        event = self._load(principal, ref)
        ensure_can_read(principal, event)
        stats = self.moderation.recompute_stats(event)
        recent = self.moderation.photos.recent_photos(event.id, RECENT_PHOTOS_LIMIT)
        return event, stats, recent

    def list_event_photos(
        self,
        principal: Principal,
        ref: str,
        *,
        status: str | None = None,
        sort_by: str = "uploaded_at",
        order: str = "desc",
        page: int = 1,
        size: int = 20,
    ) -> tuple[Event, list[Photo], int]:
        event = self._load(principal, ref)
        ensure_can_read(principal, event)
        status_filter = parse_status(status) if status else None
        photos, total = self.moderation.photos.list_photos(event.id, status=status_filter, sort_by=sort_by, order=order, page=page, size=size)
        return event, photos, total
