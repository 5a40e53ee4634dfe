import logging
import uuid
from collections.abc import Mapping
from typing import Any

from ...domain.guard import authorize_role_assignment, require_admin_actor
from ...domain.ports.user import UserData, UserPort
from ...domain.roles import AdminPermissions, Role
from ...errors import ValidationError
from ...utils.security import hash_password
from ..transaction import transaction
from .common import actor_from, lock_users

logger = logging.getLogger(__name__)


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"'{field}' is required", details={"field": field})
    return value


async def create_or_update_user(
    user_port: UserPort,
    actor_id: uuid.UUID,
    *,
    email: str,
    name: str | None = None,
    password: str | None = None,
    role: str | None = None,
    admin_permissions: Mapping[str, bool | None] | None = None,
) -> tuple[UserData, bool]:
    """Create an account, or update the one already holding ``email``.

    Returns the stored record and whether it was newly created. The update
    path is a plain merge: it does not replay the per-field rules of
    :func:`taskdesk.domain.guard.authorize_user_update`, but it still never
    lets an admin hand out the super-admin tier or grant flags it cannot
    grant itself. An account that ends up as an admin gets the default
    flags with ``admin_permissions`` laid over them.
    """
    email = _require(email, "email")

    async with transaction(user_port, "create_or_update_user"):
        existing = await user_port.get_by_email(email)
        lock_ids = [actor_id] if existing is None else [actor_id, existing.id]
        rows = await lock_users(user_port, lock_ids)
        actor = require_admin_actor(actor_from(rows, actor_id))
        if existing is not None:
            # Re-resolve under the lock; the account may have gone in between.
            existing = rows.get(existing.id)

        requested_role = Role.parse(role) if role is not None else None

        if existing is not None:
            current_role = Role.parse(existing.role)
            new_role = requested_role or current_role
            authorize_role_assignment(
                actor,
                new_role,
                with_admin_permissions=admin_permissions is not None,
                creating=False,
            )
            values: dict[str, Any] = {"role": new_role.value}
            if name is not None and name.strip():
                values["name"] = name.strip()
            if password:
                values["password_hash"] = hash_password(password)
            if new_role is Role.ADMIN:
                values["admin_permissions"] = (
                    AdminPermissions.defaults().merged(admin_permissions).to_dict()
                )
            else:
                values["admin_permissions"] = None

            user = await user_port.update(existing, values)
            created = False
        else:
            new_role = requested_role or Role.USER
            name = _require(name, "name").strip()
            password_hash = hash_password(_require(password, "password"))
            authorize_role_assignment(
                actor,
                new_role,
                with_admin_permissions=admin_permissions is not None,
                creating=True,
            )
            permissions = (
                AdminPermissions.defaults().merged(admin_permissions).to_dict()
                if new_role is Role.ADMIN
                else None
            )
            user = await user_port.create(
                name=name,
                email=email,
                password_hash=password_hash,
                role=new_role.value,
                admin_permissions=permissions,
            )
            created = True

    logger.info(
        "user_%s actor_id=%s user_id=%s role=%s",
        "created" if created else "upserted",
        actor_id,
        user.id,
        user.role,
    )
    return user, created
