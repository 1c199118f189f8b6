import logging
import time
from collections.abc import Generator
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""

    __abstract__ = True  # Prevents this class from being created as a table


class DatabaseSettings(BaseSettings):
    """Settings for database connection, loaded from environment variables."""

    db: str
    user: str
    password: str
    host: str
    port: int = 5432

    @property
    def database_url(self) -> str:  # pragma: no cover
        return f"postgresql+psycopg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="POSTGRES_", extra="ignore")


@lru_cache(maxsize=1)
def get_database_url() -> str:  # pragma: no cover
    settings = DatabaseSettings()
    return settings.database_url


@lru_cache(maxsize=5)
def _get_engine_and_sessionmaker() -> tuple[Engine, sessionmaker[Session]]:  # pragma: no cover
    """Create and cache the SQLAlchemy engine and sessionmaker lazily."""
    database_url = get_database_url()
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}

    # Event traffic is bursty (everyone scans the QR code at once) but each
    # request only touches a handful of rows.
    pool_config = {
        "pool_size": 20,
        "max_overflow": 20,
        "pool_timeout": 20,
        "pool_recycle": 1800,  # Recycle connections every 30 minutes
        "pool_pre_ping": True,
    }
    if database_url.startswith("sqlite"):
        pool_config = {}

    eng = create_engine(database_url, future=True, connect_args=connect_args, **pool_config)
    sess = sessionmaker(bind=eng, future=True)

    return eng, sess


def get_engine():  # pragma: no cover - simple accessor
    return _get_engine_and_sessionmaker()[0]


def get_session_maker():  # pragma: no cover - simple accessor
    return _get_engine_and_sessionmaker()[1]


def get_db() -> Generator[Session]:  # pragma: no cover
    """Dependency injection for database sessions."""
    session_maker = get_session_maker()
    session = session_maker()
    session_start = time.time()

    try:
        yield session
    except Exception as e:
        logger.warning("Session error after %.3fs: %s", time.time() - session_start, e)
        session.rollback()
        raise
    finally:
        duration = time.time() - session_start
        if duration > 1.0:  # Log sessions longer than 1 second
            logger.warning("Long-lived session: %.3fs", duration)
        session.close()
