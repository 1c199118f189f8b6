import logging
import uuid

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventsnap.auth_utils import authsettings, create_access_token, create_host_token, create_refresh_token, hash_password, verify_password
from eventsnap.models.db import get_db
from eventsnap.repositories.host_repository import HostRepository
from eventsnap.repositories.user_repository import UserRepository
from eventsnap.schemas.auth import HostLoginRequest, HostLoginResponse, LoginRequest, LoginResponse, RefreshRequest, RegisterRequest, RegisterResponse, TokenPair

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_host_repository(db: Session = Depends(get_db)) -> HostRepository:
    return HostRepository(db)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(request: RegisterRequest, repo: UserRepository = Depends(get_user_repository)):
    try:
        user = repo.create_user(request.email, hash_password(request.password), display_name=request.display_name)
    except IntegrityError as err:
        raise HTTPException(status_code=400, detail="Email already registered") from err
    return RegisterResponse(id=str(user.id), email=user.email)


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login_user(request: LoginRequest, repo: UserRepository = Depends(get_user_repository)):
    user = repo.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    tokens = TokenPair(access_token=create_access_token(str(user.id)), refresh_token=create_refresh_token(str(user.id)))
    return LoginResponse(id=str(user.id), email=user.email, is_admin=user.is_admin, tokens=tokens)


@router.post("/refresh", response_model=TokenPair, status_code=status.HTTP_200_OK)
def refresh_token(request: RefreshRequest, repo: UserRepository = Depends(get_user_repository)):
    try:
        payload = jwt.decode(request.refresh_token, authsettings.jwt_secret_key, algorithms=[authsettings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Refresh token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid refresh token") from None

    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        user = repo.get_user_by_id(uuid.UUID(user_id))
    except ValueError:
        user = None
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    return TokenPair(access_token=create_access_token(str(user.id)), refresh_token=create_refresh_token(str(user.id)))


@router.post("/host/login", response_model=HostLoginResponse, status_code=status.HTTP_200_OK)
def login_host(request: HostLoginRequest, repo: HostRepository = Depends(get_host_repository)):
    """Event-scoped login with the credentials issued when the event was created."""
    event_id = request.event_id.strip()
    host = repo.get_active_host(event_id)
    if not host or not verify_password(request.password, host.password_hash):
        logger.info(f"Failed host login for {event_id}")
        raise HTTPException(status_code=401, detail="Invalid event ID or password")
    repo.record_login(host)
    return HostLoginResponse(access_token=create_host_token(host.public_event_id), public_event_id=host.public_event_id, event_title=host.event_title)
