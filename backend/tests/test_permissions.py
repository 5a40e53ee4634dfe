import pytest

from taskdesk.domain import permissions
from taskdesk.domain.roles import AdminPermissions, Role

PREDICATES = [
    permissions.can_view_users,
    permissions.can_update_user_info,
    permissions.can_delete_users,
    permissions.can_delete_admin_users,
    permissions.can_promote_to_admin,
    permissions.can_promote_to_super_admin,
    permissions.can_demote_admins,
    permissions.can_manage_all_todos,
]

ALL_FLAGS = AdminPermissions(
    can_update_user_info=True,
    can_delete_users=True,
    can_promote_to_admin=True,
    can_demote_admins=True,
)
NO_FLAGS = AdminPermissions(can_update_user_info=False)


@pytest.mark.parametrize("predicate", PREDICATES, ids=lambda p: p.__name__)
def test_super_admin_is_granted_every_capability(predicate) -> None:
    assert predicate(Role.SUPER_ADMIN) is True
    assert predicate(Role.SUPER_ADMIN, NO_FLAGS) is True


@pytest.mark.parametrize("predicate", PREDICATES, ids=lambda p: p.__name__)
def test_plain_user_has_no_admin_capability(predicate) -> None:
    assert predicate(Role.USER) is False
    assert predicate(Role.USER, ALL_FLAGS) is False


def test_admin_capabilities_follow_flags() -> None:
    assert permissions.can_view_users(Role.ADMIN, NO_FLAGS) is True
    assert permissions.can_update_user_info(Role.ADMIN, NO_FLAGS) is False
    assert permissions.can_update_user_info(Role.ADMIN, AdminPermissions.defaults()) is True

    assert permissions.can_delete_users(Role.ADMIN, ALL_FLAGS) is True
    assert permissions.can_promote_to_admin(Role.ADMIN, ALL_FLAGS) is True
    assert permissions.can_demote_admins(Role.ADMIN, ALL_FLAGS) is True
    assert permissions.can_delete_users(Role.ADMIN, AdminPermissions.defaults()) is False


def test_admin_never_reaches_super_admin_tier() -> None:
    assert permissions.can_delete_admin_users(Role.ADMIN, ALL_FLAGS) is False
    assert permissions.can_promote_to_super_admin(Role.ADMIN, ALL_FLAGS) is False
    assert permissions.can_manage_all_todos(Role.ADMIN, ALL_FLAGS) is False


def test_admin_without_flag_object_is_denied_flagged_capabilities() -> None:
    assert permissions.can_update_user_info(Role.ADMIN, None) is False
    assert permissions.can_delete_users(Role.ADMIN) is False


def test_predicates_are_repeatable() -> None:
    first = [predicate(Role.ADMIN, ALL_FLAGS) for predicate in PREDICATES]
    second = [predicate(Role.ADMIN, ALL_FLAGS) for predicate in PREDICATES]
    assert first == second


def test_permissions_for_user() -> None:
    granted = permissions.permissions_for(Role.USER)
    assert "todos:create" in granted
    assert "admin:access" not in granted
    assert granted == sorted(granted)


def test_permissions_for_admin_reflects_flags() -> None:
    defaults = permissions.permissions_for(Role.ADMIN, AdminPermissions.defaults())
    assert "users:view" in defaults
    assert "users:update" in defaults
    assert "users:delete" not in defaults

    everything = permissions.permissions_for(Role.ADMIN, ALL_FLAGS)
    assert {"users:delete", "users:promote", "users:demote"} <= set(everything)
    assert "super-admin:access" not in everything


def test_permissions_for_super_admin() -> None:
    granted = set(permissions.permissions_for(Role.SUPER_ADMIN))
    assert {"super-admin:access", "todos:manage-all", "users:delete"} <= granted
