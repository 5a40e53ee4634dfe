"""
Authorization guard for account mutations.

Each ``authorize_*`` function takes the actor and a snapshot of the target
as read inside the caller's transaction, and either returns what may be
written or raises a typed :mod:`taskdesk.errors` exception. Checks run in a
fixed order and the first failing one decides the error. Nothing here
touches the store.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..errors import (
    AuthError,
    ForbiddenReason,
    NotFoundError,
    PermissionError,
    ValidationError,
    admin_required,
)
from . import permissions
from .roles import Actor, AdminPermissions, Role

logger = logging.getLogger(__name__)


class TargetRecord(Protocol):
    id: uuid.UUID
    role: str
    admin_permissions: dict[str, Any] | None


@dataclass(frozen=True)
class TargetState:
    id: uuid.UUID
    role: Role
    admin_permissions: AdminPermissions | None = None

    @classmethod
    def from_record(cls, record: TargetRecord) -> TargetState:
        actor = Actor.from_record(record)
        return cls(id=actor.id, role=actor.role, admin_permissions=actor.admin_permissions)


@dataclass(frozen=True)
class UserChanges:
    """Requested edits to another account; ``None`` means "not requested"."""

    name: str | None = None
    email: str | None = None
    role: str | None = None
    admin_permissions: Mapping[str, bool | None] | None = None

    @property
    def touches_info(self) -> bool:
        return self.name is not None or self.email is not None

    @property
    def is_empty(self) -> bool:
        return (
            not self.touches_info
            and self.role is None
            and self.admin_permissions is None
        )


@dataclass(frozen=True)
class UpdatePlan:
    """The single write an allowed update turns into."""

    role: Role
    admin_permissions: AdminPermissions | None
    values: dict[str, Any] = field(default_factory=dict)


def _deny(
    reason: ForbiddenReason,
    actor: Actor,
    target_id: uuid.UUID | None = None,
    message: str | None = None,
) -> PermissionError:
    logger.warning(
        "authorization_denied reason=%s actor_id=%s actor_role=%s target_id=%s",
        reason.value,
        actor.id,
        actor.role.value,
        target_id,
    )
    return PermissionError(reason, message)


def require_admin_actor(actor: Actor | None) -> Actor:
    if actor is None:
        raise AuthError("Not authenticated")
    if not permissions.can_view_users(actor.role, actor.admin_permissions):
        logger.warning(
            "authorization_denied reason=%s actor_id=%s actor_role=%s",
            ForbiddenReason.ADMIN_REQUIRED.value,
            actor.id,
            actor.role.value,
        )
        raise admin_required()
    return actor


def authorize_user_update(
    actor: Actor | None,
    target: TargetState | None,
    changes: UserChanges,
) -> UpdatePlan:
    actor = require_admin_actor(actor)
    if changes.is_empty:
        raise ValidationError("No changes requested")

    requested_role = Role.parse(changes.role) if changes.role is not None else None

    if target is None:
        raise NotFoundError("User not found")

    role_change = requested_role is not None and requested_role is not target.role
    is_demotion = requested_role is Role.USER and target.role is Role.ADMIN
    permissions_only = (
        changes.admin_permissions is not None
        and not role_change
        and not changes.touches_info
    )

    if actor.is_admin:
        flags = actor.admin_permissions

        if changes.touches_info and not permissions.can_update_user_info(actor.role, flags):
            raise _deny(ForbiddenReason.UPDATE_INFO, actor, target.id)

        if requested_role is Role.SUPER_ADMIN:
            raise _deny(
                ForbiddenReason.SUPER_ADMIN_ONLY,
                actor,
                target.id,
                "Only a super-admin can assign the super-admin role",
            )
        if is_demotion and not permissions.can_demote_admins(actor.role, flags):
            raise _deny(ForbiddenReason.DEMOTE, actor, target.id)
        # A plain user -> admin flip is not gated by can_promote_to_admin;
        # only an explicit permission payload is (see DESIGN.md).

        if changes.admin_permissions is not None:
            if role_change:
                allowed = permissions.can_promote_to_admin(actor.role, flags)
            else:
                allowed = target.role is Role.ADMIN and permissions.can_promote_to_admin(
                    actor.role, flags
                )
            if not allowed:
                raise _deny(ForbiddenReason.PERMISSIONS_UPDATE, actor, target.id)

        if target.role is not Role.USER:
            in_scope = (is_demotion and not changes.touches_info) or (
                permissions_only and target.role is Role.ADMIN
            )
            if not in_scope:
                raise _deny(
                    ForbiddenReason.SCOPE,
                    actor,
                    target.id,
                    "Admins may only edit user-role accounts",
                )

    return _plan_update(target, changes, requested_role)


def _plan_update(
    target: TargetState,
    changes: UserChanges,
    requested_role: Role | None,
) -> UpdatePlan:
    new_role = requested_role or target.role
    values: dict[str, Any] = {}

    if changes.name is not None:
        name = changes.name.strip()
        if not name:
            raise ValidationError("Name cannot be empty", details={"field": "name"})
        values["name"] = name
    if changes.email is not None:
        values["email"] = changes.email

    if new_role is Role.ADMIN:
        if requested_role is not None:
            # Setting the admin role (again) starts from the promotion defaults.
            new_permissions = AdminPermissions.defaults().merged(changes.admin_permissions)
        else:
            current = target.admin_permissions or AdminPermissions.defaults()
            new_permissions = current.merged(changes.admin_permissions)
    else:
        new_permissions = None

    if requested_role is not None:
        values["role"] = new_role.value
    if requested_role is not None or changes.admin_permissions is not None:
        values["admin_permissions"] = (
            new_permissions.to_dict() if new_permissions is not None else None
        )

    return UpdatePlan(role=new_role, admin_permissions=new_permissions, values=values)


def _check_delete_rules(actor: Actor, targets: Sequence[TargetState]) -> None:
    target_ids = [target.id for target in targets]
    first_id = target_ids[0] if len(target_ids) == 1 else None

    if actor.id in target_ids:
        raise _deny(
            ForbiddenReason.SELF_DELETE,
            actor,
            actor.id,
            "You cannot delete your own account",
        )

    if any(target.role is Role.SUPER_ADMIN for target in targets) and not actor.is_super_admin:
        raise _deny(
            ForbiddenReason.TIER,
            actor,
            first_id,
            "Only a super-admin can delete super-admin accounts",
        )

    if actor.is_admin:
        if not permissions.can_delete_users(actor.role, actor.admin_permissions):
            raise _deny(ForbiddenReason.PERMISSION, actor, first_id)
        if any(target.role is not Role.USER for target in targets):
            raise _deny(
                ForbiddenReason.SCOPE,
                actor,
                first_id,
                "Admins may only delete user-role accounts",
            )


def authorize_delete(actor: Actor | None, target: TargetState | None) -> None:
    actor = require_admin_actor(actor)
    if target is None:
        raise NotFoundError("User not found")
    _check_delete_rules(actor, [target])


def authorize_bulk_delete(
    actor: Actor | None,
    requested_ids: Sequence[uuid.UUID],
    targets: Sequence[TargetState],
) -> None:
    """All-or-nothing: any missing or out-of-reach target rejects the batch."""
    actor = require_admin_actor(actor)
    if not requested_ids:
        raise ValidationError("At least one user id is required")

    found = {target.id for target in targets}
    missing = [str(user_id) for user_id in requested_ids if user_id not in found]
    if missing:
        raise NotFoundError("One or more users were not found", details={"missing": missing})

    _check_delete_rules(actor, targets)


def authorize_role_assignment(
    actor: Actor | None,
    role: Role,
    *,
    with_admin_permissions: bool = False,
    creating: bool = True,
) -> None:
    """Role checks for the admin create-or-update-by-email operation.

    A new ``admin`` needs ``can_promote_to_admin``; ``super-admin`` can only
    ever be handed out by a super-admin, on either path.
    """
    actor = require_admin_actor(actor)
    if actor.is_super_admin:
        return
    if role is Role.SUPER_ADMIN:
        raise _deny(
            ForbiddenReason.SUPER_ADMIN_ONLY,
            actor,
            message="Only a super-admin can assign the super-admin role",
        )
    if creating and role is Role.ADMIN and not permissions.can_promote_to_admin(
        actor.role, actor.admin_permissions
    ):
        raise _deny(ForbiddenReason.PROMOTE, actor)
    if with_admin_permissions and not permissions.can_promote_to_admin(
        actor.role, actor.admin_permissions
    ):
        raise _deny(ForbiddenReason.PERMISSIONS_UPDATE, actor)
