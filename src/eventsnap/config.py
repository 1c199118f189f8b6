from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings, loaded from ``EVENTSNAP_*`` environment variables."""

    # Frontend origin that serves /upload/<id> and /gallery/<id>; baked into QR codes
    public_base_url: str = "http://localhost:3000"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"])
    storage_timeout_seconds: float = 30.0
    upload_concurrency: int = 5
    qr_width: int = 300
    qr_error_correction: str = "M"
    default_page_size: int = 20
    gallery_page_size: int = 50
    max_page_size: int = 100
    log_level: str = "INFO"
    log_colors: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="EVENTSNAP_", extra="ignore")


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    return AppSettings()
