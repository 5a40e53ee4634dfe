import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AdminPermissionsRead(BaseModel):
    can_update_user_info: bool
    can_delete_users: bool
    can_promote_to_admin: bool
    can_demote_admins: bool


class AdminPermissionsPatch(BaseModel):
    """Partial flag set; omitted flags keep their stored value."""

    model_config = ConfigDict(extra="forbid")

    can_update_user_info: bool | None = None
    can_delete_users: bool | None = None
    can_promote_to_admin: bool | None = None
    can_demote_admins: bool | None = None

    def as_patch(self) -> dict[str, bool]:
        return self.model_dump(exclude_none=True)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    image: str | None = None
    role: str
    admin_permissions: AdminPermissionsRead | None = None
    created_at: datetime
    updated_at: datetime


class AdminUserUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=60)
    email: EmailStr | None = None
    # Checked by Role.parse, so an unknown role is a 400 rather than a 422.
    role: str | None = None
    admin_permissions: AdminPermissionsPatch | None = None


class AdminUserUpsert(BaseModel):
    name: str | None = Field(None, max_length=60)
    email: EmailStr
    password: str | None = None
    role: str | None = None
    admin_permissions: AdminPermissionsPatch | None = None


class AdminUserList(BaseModel):
    users: list[UserRead]
    total: int


class BulkDeleteRequest(BaseModel):
    user_ids: list[uuid.UUID] = Field(..., min_length=1)


class DeleteResponse(BaseModel):
    deleted_count: int
