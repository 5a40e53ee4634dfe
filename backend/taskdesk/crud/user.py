import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.ports.user import UserData, UserPort
from ..models.todo import Todo
from ..models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_id(
    session: AsyncSession, user_id: uuid.UUID, *, for_update: bool = False
) -> User | None:
    stmt = select(User).where(User.id == user_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)

    result = await session.execute(stmt)
    return result.scalars().first()


async def get_user_by_email(
    session: AsyncSession, email: str, *, for_update: bool = False
) -> User | None:
    stmt = select(User).where(User.email == normalize_email(email))
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)

    result = await session.execute(stmt)
    return result.scalars().first()


async def get_users_by_ids(
    session: AsyncSession, user_ids: Sequence[uuid.UUID], *, for_update: bool = False
) -> list[User]:
    if not user_ids:
        return []
    # Ordered by id so concurrent lockers always acquire rows in the same order.
    stmt = select(User).where(User.id.in_(set(user_ids))).order_by(User.id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)

    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_user(
    session: AsyncSession,
    *,
    name: str,
    email: str,
    password_hash: str | None,
    role: str = "user",
    admin_permissions: dict[str, Any] | None = None,
) -> User:
    user = User(
        name=name,
        email=normalize_email(email),
        password_hash=password_hash,
        role=role,
        admin_permissions=admin_permissions,
    )
    session.add(user)
    await session.flush()
    return user


async def update_user(session: AsyncSession, user: User, values: dict[str, Any]) -> User:
    """Apply every column change to ``user`` and flush them as one UPDATE."""
    for column, value in values.items():
        if column == "email":
            value = normalize_email(value)
        setattr(user, column, value)
    await session.flush()
    return user


async def delete_users(session: AsyncSession, user_ids: Sequence[uuid.UUID]) -> int:
    if not user_ids:
        return 0
    ids = list(set(user_ids))
    # Owned tasks go in the same transaction; not every backend enforces the FK cascade.
    await session.execute(delete(Todo).where(Todo.user_id.in_(ids)))
    result = await session.execute(delete(User).where(User.id.in_(ids)))
    return result.rowcount or 0


class UserRepository(UserPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(
        self, user_id: uuid.UUID, *, for_update: bool = False
    ) -> UserData | None:
        return await get_user_by_id(self._session, user_id, for_update=for_update)

    async def get_by_email(
        self, email: str, *, for_update: bool = False
    ) -> UserData | None:
        return await get_user_by_email(self._session, email, for_update=for_update)

    async def get_many(
        self, user_ids: Sequence[uuid.UUID], *, for_update: bool = False
    ) -> list[UserData]:
        return await get_users_by_ids(self._session, user_ids, for_update=for_update)

    async def list_all(self) -> list[UserData]:
        result = await self._session.execute(
            select(User).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(User))
        return int(result.scalar_one())

    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str | None,
        role: str = "user",
        admin_permissions: dict[str, Any] | None = None,
    ) -> UserData:
        return await create_user(
            self._session,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            admin_permissions=admin_permissions,
        )

    async def update(self, user: UserData, values: dict[str, Any]) -> UserData:
        return await update_user(self._session, user, values)  # type: ignore[arg-type]

    async def delete_many(self, user_ids: Sequence[uuid.UUID]) -> int:
        return await delete_users(self._session, user_ids)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
