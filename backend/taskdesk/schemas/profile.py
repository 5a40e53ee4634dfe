from pydantic import BaseModel, EmailStr, Field

from .user import AdminPermissionsRead, UserRead


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=60)
    email: EmailStr | None = None
    current_password: str | None = None
    new_password: str | None = None


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserRead


class EffectivePermissionsRead(BaseModel):
    role: str
    admin_permissions: AdminPermissionsRead | None = None
    permissions: list[str]
