import uuid
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.orm import Session

from eventsnap.models.db import get_db
from eventsnap.repositories.host_repository import HostRepository
from eventsnap.repositories.user_repository import UserRepository
from eventsnap.services.access import Principal


class AuthSettings(BaseSettings):
    """Settings for authentication, loaded from environment variables."""

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    refresh_token_expire_minutes: int = 7200

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


authsettings = AuthSettings()

security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a random salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def _encode(payload: dict, minutes: int) -> str:
    payload = {**payload, "exp": datetime.now(UTC) + timedelta(minutes=minutes)}
    return jwt.encode(payload, authsettings.jwt_secret_key, algorithm=authsettings.jwt_algorithm)


def create_access_token(user_id: str) -> str:
    return _encode({"sub": user_id, "type": "access"}, authsettings.access_token_expire_minutes)


def create_refresh_token(user_id: str) -> str:
    return _encode({"sub": user_id, "type": "refresh"}, authsettings.refresh_token_expire_minutes)


def create_host_token(public_event_id: str) -> str:
    """Token for an event host; it carries the event id and nothing else."""
    return _encode({"sub": public_event_id, "event_id": public_event_id, "type": "host"}, authsettings.access_token_expire_minutes)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, authsettings.jwt_secret_key, algorithms=[authsettings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None


def resolve_principal(payload: dict, db: Session) -> Principal:
    token_type = payload.get("type")

    if token_type == "host":
        public_event_id = payload.get("event_id")
        if not public_event_id:
            raise HTTPException(status_code=401, detail="Invalid token")
        if HostRepository(db).get_active_host(public_event_id) is None:
            raise HTTPException(status_code=401, detail="Host access revoked")
        return Principal.host(public_event_id)

    if token_type != "access":
        raise HTTPException(status_code=401, detail="Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="User not found") from None

    user = UserRepository(db).get_user_by_id(user_uuid)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return Principal.admin(user.id) if user.is_admin else Principal.organizer(user.id)


def get_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    # Handle missing authentication header with consistent 401 status
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return resolve_principal(decode_token(credentials.credentials), db)
