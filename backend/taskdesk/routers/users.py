from fastapi import APIRouter, Depends

from ..dependencies import get_current_actor, get_current_user, get_user_port
from ..domain.permissions import permissions_for
from ..domain.roles import Actor
from ..models.user import User
from ..schemas.profile import (
    EffectivePermissionsRead,
    ProfileUpdate,
    ProfileUpdateResponse,
)
from ..schemas.user import AdminPermissionsRead, UserRead
from ..use_cases.users.profile import update_profile

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=UserRead, response_model_exclude_none=True)
async def read_profile(user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)


@router.put(
    "/profile", response_model=ProfileUpdateResponse, response_model_exclude_none=True
)
async def edit_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    user_port=Depends(get_user_port),
) -> ProfileUpdateResponse:
    updated = await update_profile(
        user_port,
        user.id,
        name=payload.name,
        email=payload.email,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return ProfileUpdateResponse(
        message="Profile updated successfully", user=UserRead.model_validate(updated)
    )


@router.get(
    "/me/permissions",
    response_model=EffectivePermissionsRead,
    response_model_exclude_none=True,
)
async def read_my_permissions(
    actor: Actor = Depends(get_current_actor),
) -> EffectivePermissionsRead:
    flags = actor.admin_permissions
    return EffectivePermissionsRead(
        role=actor.role.value,
        admin_permissions=AdminPermissionsRead(**flags.to_dict()) if flags else None,
        permissions=permissions_for(actor.role, flags),
    )
