"""The signed-in user's own profile."""

from fastapi import APIRouter, Depends

from adjusterhub.dependencies import get_current_user, get_user_service
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.user import ProfileUpdate, UserProfile
from adjusterhub.services.user_service import UserService

logger = get_logger(__name__)
router = APIRouter()


@router.get("/me", response_model=UserProfile)
def get_profile(user: UserModel = Depends(get_current_user)) -> UserProfile:
    return UserProfile.model_validate(user)


@router.patch("/me", response_model=UserProfile)
def update_profile(
    payload: ProfileUpdate,
    user: UserModel = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserProfile:
    updated = service.update_profile(user, payload)
    logger.info("profile_updated", fields=sorted(payload.model_dump(exclude_unset=True)))
    return UserProfile.model_validate(updated)
