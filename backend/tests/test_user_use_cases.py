import uuid

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskdesk.crud.user import UserRepository
from taskdesk.domain.guard import UserChanges
from taskdesk.domain.roles import AdminPermissions
from taskdesk.errors import (
    AuthError,
    ConflictError,
    ForbiddenReason,
    NotFoundError,
    PermissionError,
    ValidationError,
)
from taskdesk.models import Todo, User
from taskdesk.use_cases.users import (
    bulk_delete_users,
    create_or_update_user,
    delete_user,
    ensure_super_admin,
    update_user,
)
from taskdesk.utils.security import verify_password

ADMIN_DEFAULTS = AdminPermissions.defaults().to_dict()


async def reload(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    session.expire_all()
    return await session.get(User, user_id)


async def count_users(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(User))
    return result.scalar_one()


@pytest.mark.anyio
async def test_promotion_without_flags_stores_exact_defaults(session, make_user) -> None:
    actor = await make_user("super-admin")
    member = await make_user("user")

    await update_user(UserRepository(session), actor.id, member.id, UserChanges(role="admin"))

    stored = await reload(session, member.id)
    assert stored.role == "admin"
    assert stored.admin_permissions == ADMIN_DEFAULTS


@pytest.mark.anyio
async def test_demotion_removes_admin_permissions(session, make_user) -> None:
    actor = await make_user("super-admin")
    demoted = await make_user("admin", can_delete_users=True)

    await update_user(UserRepository(session), actor.id, demoted.id, UserChanges(role="user"))

    stored = await reload(session, demoted.id)
    assert stored.role == "user"
    assert stored.admin_permissions is None


@pytest.mark.anyio
async def test_admin_with_demote_flag_demotes_admin(session, make_user) -> None:
    actor = await make_user("admin", can_demote_admins=True)
    demoted = await make_user("admin")

    await update_user(UserRepository(session), actor.id, demoted.id, UserChanges(role="user"))

    stored = await reload(session, demoted.id)
    assert stored.role == "user"
    assert stored.admin_permissions is None


@pytest.mark.anyio
async def test_rejected_update_leaves_store_unchanged(session, make_user) -> None:
    actor = await make_user("admin", can_update_user_info=False)
    member = await make_user("user", name="Original")

    with pytest.raises(PermissionError) as exc_info:
        await update_user(
            UserRepository(session), actor.id, member.id, UserChanges(name="Changed")
        )

    assert exc_info.value.reason is ForbiddenReason.UPDATE_INFO
    stored = await reload(session, member.id)
    assert stored.name == "Original"


@pytest.mark.anyio
async def test_partial_permission_update_merges_stored_flags(session, make_user) -> None:
    actor = await make_user("super-admin")
    target = await make_user("admin", can_delete_users=True)

    await update_user(
        UserRepository(session),
        actor.id,
        target.id,
        UserChanges(admin_permissions={"can_demote_admins": True}),
    )

    stored = await reload(session, target.id)
    assert stored.admin_permissions == {
        "can_update_user_info": True,
        "can_delete_users": True,
        "can_promote_to_admin": False,
        "can_demote_admins": True,
    }


@pytest.mark.anyio
async def test_actor_privileges_are_read_from_store(session, make_user) -> None:
    actor = await make_user("admin", can_update_user_info=True)
    member = await make_user("user")

    # Demoted after their token was issued.
    await session.execute(
        update(User).where(User.id == actor.id).values(role="user", admin_permissions=None)
    )
    await session.commit()

    with pytest.raises(AuthError) as exc_info:
        await update_user(
            UserRepository(session), actor.id, member.id, UserChanges(name="x")
        )
    assert exc_info.value.status_code == 403


@pytest.mark.anyio
async def test_update_to_taken_email_conflicts(session, make_user) -> None:
    actor = await make_user("super-admin")
    await make_user("user", email="taken@example.com")
    member = await make_user("user")

    with pytest.raises(ConflictError):
        await update_user(
            UserRepository(session),
            actor.id,
            member.id,
            UserChanges(email="Taken@Example.com"),
        )


@pytest.mark.anyio
async def test_update_missing_target_is_not_found(session, make_user) -> None:
    actor = await make_user("super-admin")
    with pytest.raises(NotFoundError):
        await update_user(
            UserRepository(session), actor.id, uuid.uuid4(), UserChanges(name="x")
        )


@pytest.mark.anyio
async def test_delete_user_removes_their_todos(session, make_user, make_todo) -> None:
    actor = await make_user("admin", can_delete_users=True)
    member = await make_user("user")
    await make_todo(member)

    deleted = await delete_user(UserRepository(session), actor.id, member.id)

    assert deleted == 1
    assert await reload(session, member.id) is None
    remaining = await session.execute(select(func.count()).select_from(Todo))
    assert remaining.scalar_one() == 0


@pytest.mark.anyio
async def test_self_delete_is_rejected_for_super_admin(session, make_user) -> None:
    actor = await make_user("super-admin")
    with pytest.raises(PermissionError) as exc_info:
        await delete_user(UserRepository(session), actor.id, actor.id)
    assert exc_info.value.reason is ForbiddenReason.SELF_DELETE
    assert await reload(session, actor.id) is not None


@pytest.mark.anyio
async def test_admin_without_delete_flag_deletes_nothing(session, make_user) -> None:
    actor = await make_user("admin", can_delete_users=False)
    member = await make_user("user")

    with pytest.raises(PermissionError) as exc_info:
        await delete_user(UserRepository(session), actor.id, member.id)

    assert exc_info.value.reason is ForbiddenReason.PERMISSION
    assert await reload(session, member.id) is not None


@pytest.mark.anyio
async def test_bulk_delete_is_all_or_nothing(session, make_user) -> None:
    actor = await make_user("admin", can_delete_users=True)
    member = await make_user("user")
    other_admin = await make_user("admin")
    before = await count_users(session)

    with pytest.raises(PermissionError) as exc_info:
        await bulk_delete_users(
            UserRepository(session), actor.id, [member.id, other_admin.id]
        )

    assert exc_info.value.reason is ForbiddenReason.SCOPE
    assert await count_users(session) == before


@pytest.mark.anyio
async def test_bulk_delete_reports_deleted_count(session, make_user) -> None:
    actor = await make_user("super-admin")
    victims = [await make_user("user"), await make_user("admin"), await make_user("user")]

    deleted = await bulk_delete_users(
        UserRepository(session), actor.id, [victim.id for victim in victims] + [victims[0].id]
    )

    assert deleted == 3
    assert await count_users(session) == 1


@pytest.mark.anyio
async def test_bulk_delete_with_unknown_id_deletes_nothing(session, make_user) -> None:
    actor = await make_user("super-admin")
    member = await make_user("user")

    with pytest.raises(NotFoundError):
        await bulk_delete_users(UserRepository(session), actor.id, [member.id, uuid.uuid4()])

    assert await reload(session, member.id) is not None


@pytest.mark.anyio
async def test_upsert_updates_existing_account_in_place(session, make_user) -> None:
    actor = await make_user("admin")
    existing = await make_user("user", email="member@example.com")
    before = await count_users(session)

    user, created = await create_or_update_user(
        UserRepository(session),
        actor.id,
        email="member@example.com",
        name="Member",
        role="admin",
    )

    assert created is False
    assert user.id == existing.id
    assert await count_users(session) == before
    stored = await reload(session, existing.id)
    assert stored.role == "admin"
    assert stored.name == "Member"
    assert stored.admin_permissions == ADMIN_DEFAULTS


@pytest.mark.anyio
async def test_upsert_existing_admin_resets_flags_to_defaults(session, make_user) -> None:
    actor = await make_user("super-admin")
    existing = await make_user(
        "admin",
        email="lead@example.com",
        can_delete_users=True,
        can_demote_admins=True,
    )

    await create_or_update_user(
        UserRepository(session), actor.id, email="lead@example.com", name="Lead"
    )

    stored = await reload(session, existing.id)
    assert stored.role == "admin"
    assert stored.name == "Lead"
    assert stored.admin_permissions == ADMIN_DEFAULTS


@pytest.mark.anyio
async def test_upsert_existing_admin_lays_payload_over_defaults(session, make_user) -> None:
    actor = await make_user("super-admin")
    existing = await make_user("admin", email="lead@example.com", can_demote_admins=True)

    await create_or_update_user(
        UserRepository(session),
        actor.id,
        email="lead@example.com",
        admin_permissions={"can_delete_users": True},
    )

    stored = await reload(session, existing.id)
    assert stored.admin_permissions == {**ADMIN_DEFAULTS, "can_delete_users": True}


@pytest.mark.anyio
async def test_upsert_creates_account_with_hashed_password(session, make_user) -> None:
    actor = await make_user("super-admin")

    user, created = await create_or_update_user(
        UserRepository(session),
        actor.id,
        email="New@Example.com",
        name="Newcomer",
        password="correct horse",
        role="admin",
        admin_permissions={"can_delete_users": True},
    )

    assert created is True
    assert user.email == "new@example.com"
    assert verify_password("correct horse", user.password_hash)
    assert user.admin_permissions == {**ADMIN_DEFAULTS, "can_delete_users": True}


@pytest.mark.anyio
async def test_upsert_create_requires_password(session, make_user) -> None:
    actor = await make_user("super-admin")
    with pytest.raises(ValidationError) as exc_info:
        await create_or_update_user(
            UserRepository(session), actor.id, email="x@example.com", name="X"
        )
    assert exc_info.value.details == {"field": "password"}


@pytest.mark.anyio
async def test_upsert_admin_cannot_create_admin_without_promote_flag(
    session, make_user
) -> None:
    actor = await make_user("admin")
    with pytest.raises(PermissionError) as exc_info:
        await create_or_update_user(
            UserRepository(session),
            actor.id,
            email="x@example.com",
            name="X",
            password="long enough",
            role="admin",
        )
    assert exc_info.value.reason is ForbiddenReason.PROMOTE
    assert await count_users(session) == 1


@pytest.mark.anyio
async def test_upsert_admin_never_produces_super_admin(session, make_user) -> None:
    actor = await make_user(
        "admin",
        can_promote_to_admin=True,
        can_demote_admins=True,
        can_delete_users=True,
    )
    existing = await make_user("user")

    with pytest.raises(PermissionError) as exc_info:
        await create_or_update_user(
            UserRepository(session), actor.id, email=existing.email, role="super-admin"
        )

    assert exc_info.value.reason is ForbiddenReason.SUPER_ADMIN_ONLY
    stored = await reload(session, existing.id)
    assert stored.role == "user"


@pytest.mark.anyio
async def test_ensure_super_admin_is_idempotent(session, make_user) -> None:
    port = UserRepository(session)

    first, created = await ensure_super_admin(
        port, email="owner@example.com", password="owner-password"
    )
    again, created_again = await ensure_super_admin(
        port, email="owner@example.com", password="owner-password"
    )

    assert created is True
    assert created_again is False
    assert first.id == again.id
    assert again.role == "super-admin"
    assert again.admin_permissions is None


@pytest.mark.anyio
async def test_ensure_super_admin_raises_existing_admin(session, make_user) -> None:
    admin = await make_user("admin", email="boss@example.com")

    user, created = await ensure_super_admin(
        UserRepository(session), email="boss@example.com", password="irrelevant"
    )

    assert created is False
    stored = await reload(session, admin.id)
    assert stored.role == "super-admin"
    assert stored.admin_permissions is None
