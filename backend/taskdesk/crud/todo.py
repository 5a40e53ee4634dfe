import uuid
from typing import Any

from sqlalchemy import Select, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.ports.todo import TodoData, TodoOwner, TodoPort
from ..models.todo import Todo
from ..models.user import User


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _title_filter(stmt: Select, search: str | None) -> Select:
    if search:
        pattern = f"%{_escape_like(search.strip().lower())}%"
        stmt = stmt.where(func.lower(Todo.title).like(pattern, escape="\\"))
    return stmt


class TodoRepository(TodoPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(self, user_id: uuid.UUID) -> list[TodoData]:
        result = await self._session.execute(
            select(Todo)
            .where(Todo.user_id == user_id)
            .order_by(Todo.created_at.desc())
        )
        return list(result.scalars().all())

    async def get(
        self, todo_id: uuid.UUID, *, user_id: uuid.UUID | None = None
    ) -> TodoData | None:
        stmt = select(Todo).where(Todo.id == todo_id)
        if user_id is not None:
            stmt = stmt.where(Todo.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def create(self, user_id: uuid.UUID, title: str, completed: bool = False) -> TodoData:
        todo = Todo(user_id=user_id, title=title, completed=completed)
        self._session.add(todo)
        await self._session.flush()
        return todo

    async def update(self, todo: TodoData, values: dict[str, Any]) -> TodoData:
        for column, value in values.items():
            setattr(todo, column, value)
        await self._session.flush()
        return todo

    async def delete(self, todo: TodoData) -> None:
        await self._session.delete(todo)
        await self._session.flush()

    async def search(
        self, *, search: str | None, limit: int, offset: int
    ) -> list[tuple[TodoData, TodoOwner | None]]:
        stmt = (
            select(Todo, User)
            .outerjoin(User, User.id == Todo.user_id)
            .order_by(Todo.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(_title_filter(stmt, search))
        return [(todo, owner) for todo, owner in result.all()]

    async def count(self, *, search: str | None = None) -> int:
        stmt = _title_filter(select(func.count()).select_from(Todo), search)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def get_with_owner(
        self, todo_id: uuid.UUID
    ) -> tuple[TodoData, TodoOwner | None] | None:
        result = await self._session.execute(
            select(Todo, User)
            .outerjoin(User, User.id == Todo.user_id)
            .where(Todo.id == todo_id)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def completion_counts(self, user_id: uuid.UUID) -> tuple[int, int]:
        result = await self._session.execute(
            select(
                func.count(Todo.id),
                func.coalesce(func.sum(case((Todo.completed, 1), else_=0)), 0),
            ).where(Todo.user_id == user_id)
        )
        total, completed = result.one()
        return int(total), int(completed)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
