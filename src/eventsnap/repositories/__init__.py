# Repositories package

from .base_repository import BaseRepository
from .event_repository import EventRepository
from .host_repository import HostRepository
from .photo_repository import PhotoRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
    "HostRepository",
    "PhotoRepository",
    "UserRepository",
]
