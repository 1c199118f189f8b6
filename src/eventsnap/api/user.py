from fastapi import APIRouter, Depends, HTTPException

from eventsnap.api.auth import get_user_repository
from eventsnap.auth_utils import get_principal
from eventsnap.repositories.user_repository import UserRepository
from eventsnap.schemas.auth import MeResponse
from eventsnap.services.access import ActorKind, Principal

router = APIRouter(tags=["user"])


@router.get("/me", response_model=MeResponse)
def get_me(principal: Principal = Depends(get_principal), repo: UserRepository = Depends(get_user_repository)):
    if principal.kind is ActorKind.HOST:
        return MeResponse(role=principal.kind.value, event_id=principal.event_public_id)

    user = repo.get_user_by_id(principal.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return MeResponse(id=str(user.id), email=user.email, display_name=user.display_name, role=principal.kind.value)
