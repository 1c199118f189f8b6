import uuid

from eventsnap.auth_utils import create_access_token, create_host_token
from eventsnap.s3_service import StoredMedia

BASE_URL = "https://snap.example.com"


class FakeStorage:
    """In-memory media storage with switchable failures."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_store_for: set[str] = set()
        self.fail_delete = False

    async def store(self, data: bytes, filename: str, content_type: str | None = None, prefix: str = "") -> StoredMedia:
        if filename in self.fail_store_for:
            raise RuntimeError("storage is down")
        name = uuid.uuid4().hex
        media_ref = f"{prefix}/{name}.jpg"
        thumbnail_ref = f"{prefix}/thumbnails/{name}.jpg"
        self.objects[media_ref] = data
        self.objects[thumbnail_ref] = b"thumb"
        return StoredMedia(media_ref=media_ref, thumbnail_ref=thumbnail_ref, width=640, height=480)

    async def delete(self, media_ref: str) -> None:
        self.deleted.append(media_ref)
        if self.fail_delete:
            raise RuntimeError("storage is down")
        self.objects.pop(media_ref, None)

    def generate_presigned_url(self, key: str, expires_in: int = 3600) -> str:
        return f"https://storage.test/{key}?expires={expires_in}"

    async def close(self) -> None:
        pass


def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


def host_headers(public_event_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_host_token(public_event_id)}"}
