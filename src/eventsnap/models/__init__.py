from eventsnap.models.event import Event, EventHost
from eventsnap.models.photo import Photo, PhotoStatus
from eventsnap.models.user import User

__all__ = ["Event", "EventHost", "Photo", "PhotoStatus", "User"]
