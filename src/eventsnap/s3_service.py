"""
Asynchronous media storage

Stores uploaded photos (and their thumbnails) in an S3-compatible bucket
using aioboto3. The client is an application singleton created in the
FastAPI lifespan and injected through ``eventsnap.dependencies``.
"""

import asyncio
import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Protocol, cast

import aioboto3
from botocore.config import Config
from PIL import Image, ImageOps
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

THUMBNAIL_MAX_SIZE = (800, 800)
EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png", "image/webp": ".webp", "image/gif": ".gif", "image/heic": ".heic"}


class S3Settings(BaseSettings):
    """Configuration for the S3/MinIO bucket holding event photos"""

    endpoint: str = "localhost:9000"
    access_key: str = Field(alias="MINIO_ROOT_USER", default="minioadmin")
    secret_key: str = Field(alias="MINIO_ROOT_PASSWORD", default="minioadmin")
    bucket: str = "eventsnap"
    region: str = "us-east-1"
    use_ssl: bool = False
    signature_version: str = "s3v4"

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        extra="ignore",
    )


@dataclass(frozen=True)
class StoredMedia:
    media_ref: str
    thumbnail_ref: str | None = None
    width: int | None = None
    height: int | None = None


class MediaStorage(Protocol):
    async def store(self, data: bytes, filename: str, content_type: str | None = None, prefix: str = "") -> StoredMedia: ...

    async def delete(self, media_ref: str) -> None: ...

    def generate_presigned_url(self, key: str, expires_in: int = 3600) -> str: ...


def create_thumbnail(image_bytes: bytes, max_size: tuple[int, int] = THUMBNAIL_MAX_SIZE, quality: int = 85) -> tuple[bytes, int, int, int, int]:
    """Create a JPEG thumbnail (CPU-bound, run it in a worker thread).

    Returns:
        Tuple of (thumbnail_bytes, original_width, original_height, thumb_width, thumb_height)
    """
    image = cast(Image.Image, Image.open(io.BytesIO(image_bytes)))
    # Apply EXIF orientation so phone pictures are not sideways
    image = ImageOps.exif_transpose(image) or image
    original_width, original_height = image.size
    image = image.convert("RGB")
    image.thumbnail(max_size, Image.Resampling.LANCZOS)

    thumbnail_io = io.BytesIO()
    image.save(thumbnail_io, format="JPEG", quality=quality, optimize=True)
    image.close()
    return thumbnail_io.getvalue(), original_width, original_height, image.width, image.height


def build_object_key(prefix: str, filename: str, content_type: str | None) -> str:
    """Unique key under ``prefix``; the uploader's filename never becomes part of the key."""
    suffix = PurePosixPath(filename).suffix.lower() or EXTENSIONS.get(content_type or "", "")
    key = f"{uuid.uuid4().hex}{suffix}"
    return f"{prefix.strip('/')}/{key}" if prefix else key


def thumbnail_key_for(object_key: str) -> str:
    """'evt_x/abc.png' -> 'evt_x/thumbnails/abc.jpg'"""
    path = PurePosixPath(object_key)
    parent = "" if str(path.parent) == "." else f"{path.parent}/"
    return f"{parent}thumbnails/{path.stem}.jpg"


class AsyncS3Client:
    """Asynchronous S3 client.

    A single aioboto3.Session is shared for the application lifetime; an S3
    client is opened per operation with ``async with`` so connections are
    released deterministically.
    """

    def __init__(self, settings: S3Settings | None = None):
        self.settings = settings or S3Settings()
        self._session: aioboto3.Session | None = None
        self._endpoint_url = self._get_endpoint_url()
        self._config = Config(
            signature_version=self.settings.signature_version,
            max_pool_connections=50,
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=10,
            read_timeout=30,
            s3={"addressing_style": "path"},
        )
        self._presign_client = None
        logger.info(f"AsyncS3Client initialized: endpoint={self._endpoint_url}, bucket={self.settings.bucket}")

    def _get_endpoint_url(self) -> str:
        endpoint = self.settings.endpoint
        if not endpoint.startswith(("http://", "https://")):
            protocol = "https" if self.settings.use_ssl else "http"
            return f"{protocol}://{endpoint}"
        return endpoint

    @property
    def session(self) -> aioboto3.Session:
        if self._session is None:
            self._session = aioboto3.Session(
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
            )
        return self._session

    def _get_s3_client(self) -> "S3Client":
        """Usage: ``async with self._get_s3_client() as s3:``"""
        return self.session.client("s3", endpoint_url=self._endpoint_url, config=self._config)

    def _get_presign_client(self):
        import boto3

        if self._presign_client is None:
            self._presign_client = boto3.client(
                "s3",
                endpoint_url=self._endpoint_url,
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
                config=self._config,
            )
        return self._presign_client

    async def upload_fileobj(self, data: bytes, key: str, content_type: str | None = None) -> str:
        extra_args: dict[str, str] = {}
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            async with self._get_s3_client() as s3:
                s3: "S3Client"
                await s3.upload_fileobj(io.BytesIO(data), self.settings.bucket, key, ExtraArgs=extra_args or None)
            logger.info(f"Successfully uploaded object: {key}")
            return key
        except Exception as e:
            logger.error(f"Failed to upload object {key}: {e}")
            raise

    async def store(self, data: bytes, filename: str, content_type: str | None = None, prefix: str = "") -> StoredMedia:
        """Upload the original and, when the bytes decode as an image, a JPEG thumbnail."""
        object_key = build_object_key(prefix, filename, content_type)
        await self.upload_fileobj(data, object_key, content_type=content_type)

        try:
            thumb_bytes, width, height, _, _ = await asyncio.to_thread(create_thumbnail, data)
        except Exception as e:
            logger.warning(f"Could not create thumbnail for {filename}: {e}")
            return StoredMedia(media_ref=object_key)

        thumbnail_key = thumbnail_key_for(object_key)
        try:
            await self.upload_fileobj(thumb_bytes, thumbnail_key, content_type="image/jpeg")
        except Exception as e:
            # The original is stored; the gallery falls back to it
            logger.warning(f"Thumbnail upload failed for {object_key}: {e}")
            return StoredMedia(media_ref=object_key, width=width, height=height)
        return StoredMedia(media_ref=object_key, thumbnail_ref=thumbnail_key, width=width, height=height)

    async def delete(self, media_ref: str) -> None:
        try:
            async with self._get_s3_client() as s3:
                s3: "S3Client"
                await s3.delete_object(Bucket=self.settings.bucket, Key=media_ref)
            logger.info(f"Successfully deleted object: {media_ref}")
        except Exception as e:
            logger.error(f"Failed to delete object {media_ref}: {e}")
            raise

    async def close(self) -> None:
        if self._session is not None:
            logger.info("Closing AsyncS3Client session")
            self._session = None

    def generate_presigned_url(self, key: str, expires_in: int = 3600) -> str:
        try:
            s3_client = self._get_presign_client()
            url = s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.settings.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
            return str(url)
        except Exception as e:
            logger.error(f"Failed to generate presigned URL for {key}: {e}")
            raise
