"""
Role hierarchy and admin capability flags.

Three fixed tiers: ``user`` < ``admin`` < ``super-admin``. Only the ``admin``
tier carries an :class:`AdminPermissions` value; for the other two tiers the
value is absent. :class:`Actor` refuses to be built in any other shape.
"""
from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any

from ..errors import ValidationError


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        """Convert a raw role string, rejecting anything outside the hierarchy."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(role.value for role in cls)
            raise ValidationError(
                f"Invalid role '{value}'. Must be one of: {allowed}",
                details={"field": "role"},
            ) from None

    @property
    def is_admin_tier(self) -> bool:
        return self in (Role.ADMIN, Role.SUPER_ADMIN)


@dataclass(frozen=True)
class AdminPermissions:
    can_update_user_info: bool = True
    can_delete_users: bool = False
    can_promote_to_admin: bool = False
    can_demote_admins: bool = False

    @classmethod
    def defaults(cls) -> AdminPermissions:
        """Grants assigned on promotion: edit user info, nothing destructive."""
        return cls()

    @classmethod
    def flag_names(cls) -> tuple[str, ...]:
        return tuple(field.name for field in fields(cls))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AdminPermissions:
        if data is None:
            return cls.defaults()
        return cls.defaults().merged(data)

    def merged(self, patch: Mapping[str, Any] | None) -> AdminPermissions:
        """Return a copy where each flag present in ``patch`` replaces ours.

        Flags missing from ``patch`` (or given as ``None``) keep their
        current value. Unknown keys are rejected.
        """
        if not patch:
            return self
        unknown = set(patch) - set(self.flag_names())
        if unknown:
            raise ValidationError(
                "Unknown admin permission flags",
                details={"flags": sorted(unknown)},
            )
        changes: dict[str, bool] = {}
        for name, value in patch.items():
            if value is None:
                continue
            if not isinstance(value, bool):
                raise ValidationError(
                    f"Admin permission '{name}' must be a boolean",
                    details={"flag": name},
                )
            changes[name] = value
        return replace(self, **changes)

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


@dataclass(frozen=True)
class Actor:
    """The authenticated principal a decision is made for."""

    id: uuid.UUID
    role: Role
    admin_permissions: AdminPermissions | None = None

    def __post_init__(self) -> None:
        if self.role is Role.ADMIN and self.admin_permissions is None:
            raise ValueError("admin actors must carry admin permissions")
        if self.role is not Role.ADMIN and self.admin_permissions is not None:
            raise ValueError(f"'{self.role.value}' actors cannot carry admin permissions")

    @classmethod
    def from_record(cls, record: Any) -> Actor:
        """Build an actor from a stored user row (or anything shaped like one)."""
        role = Role.parse(record.role)
        raw_permissions = record.admin_permissions
        permissions = (
            AdminPermissions.from_dict(raw_permissions) if role is Role.ADMIN else None
        )
        return cls(id=record.id, role=role, admin_permissions=permissions)

    @property
    def is_super_admin(self) -> bool:
        return self.role is Role.SUPER_ADMIN

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
