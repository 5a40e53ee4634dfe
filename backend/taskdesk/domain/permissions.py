"""
Permission model: pure predicates over ``(role, admin_permissions)``.

Every predicate goes through :func:`_super_admin_bypass`, so a super-admin
evaluates to ``True`` everywhere without each rule repeating the check.
No I/O happens here; the same inputs always give the same answer.
"""
from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Final

from .roles import AdminPermissions, Role

Predicate = Callable[[Role, AdminPermissions | None], bool]


def _super_admin_bypass(rule: Predicate) -> Predicate:
    @wraps(rule)
    def predicate(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
        if role is Role.SUPER_ADMIN:
            return True
        return rule(role, admin_permissions)

    return predicate


def _admin_flag(role: Role, admin_permissions: AdminPermissions | None, flag: str) -> bool:
    if role is not Role.ADMIN or admin_permissions is None:
        return False
    return getattr(admin_permissions, flag)


@_super_admin_bypass
def can_view_users(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
    return role is Role.ADMIN


@_super_admin_bypass
def can_update_user_info(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
    return _admin_flag(role, admin_permissions, "can_update_user_info")


@_super_admin_bypass
def can_delete_users(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
    """Deleting ``user``-role accounts."""
    return _admin_flag(role, admin_permissions, "can_delete_users")


@_super_admin_bypass
def can_delete_admin_users(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
    return False


@_super_admin_bypass
def can_promote_to_admin(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
    return _admin_flag(role, admin_permissions, "can_promote_to_admin")


@_super_admin_bypass
def can_promote_to_super_admin(
    role: Role, admin_permissions: AdminPermissions | None = None
) -> bool:
    return False


@_super_admin_bypass
def can_demote_admins(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
    return _admin_flag(role, admin_permissions, "can_demote_admins")


@_super_admin_bypass
def can_manage_all_todos(role: Role, admin_permissions: AdminPermissions | None = None) -> bool:
    return False


# Flattened capability names, used to describe a principal to clients.
TODO_PERMISSIONS: Final[frozenset[str]] = frozenset({
    "todos:view",
    "todos:create",
    "todos:update",
    "todos:delete",
})

BASE_ROLE_PERMISSIONS: Final[dict[Role, frozenset[str]]] = {
    Role.USER: TODO_PERMISSIONS | {"dashboard:view"},
    Role.ADMIN: TODO_PERMISSIONS | {"dashboard:view", "admin:access", "users:view"},
    Role.SUPER_ADMIN: TODO_PERMISSIONS | {
        "dashboard:view",
        "admin:access",
        "super-admin:access",
        "users:view",
        "users:create",
        "users:update",
        "users:delete",
        "users:promote",
        "users:demote",
        "roles:manage",
        "todos:view-all",
        "todos:manage-all",
    },
}

ADMIN_FLAG_PERMISSIONS: Final[dict[str, str]] = {
    "can_update_user_info": "users:update",
    "can_delete_users": "users:delete",
    "can_promote_to_admin": "users:promote",
    "can_demote_admins": "users:demote",
}


def permissions_for(role: Role, admin_permissions: AdminPermissions | None = None) -> list[str]:
    """Every capability string the principal holds, sorted."""
    granted = set(BASE_ROLE_PERMISSIONS[role])
    if role is Role.ADMIN and admin_permissions is not None:
        for flag, permission in ADMIN_FLAG_PERMISSIONS.items():
            if getattr(admin_permissions, flag):
                granted.add(permission)
    return sorted(granted)
