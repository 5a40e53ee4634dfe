from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Protocol


class TodoData(Protocol):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    completed: bool
    created_at: datetime
    updated_at: datetime


class TodoOwner(Protocol):
    id: uuid.UUID
    name: str
    email: str


class TodoPort(Protocol):
    async def list_for_user(self, user_id: uuid.UUID) -> list[TodoData]:
        ...

    async def get(
        self, todo_id: uuid.UUID, *, user_id: uuid.UUID | None = None
    ) -> TodoData | None:
        ...

    async def create(self, user_id: uuid.UUID, title: str, completed: bool = False) -> TodoData:
        ...

    async def update(self, todo: TodoData, values: dict[str, Any]) -> TodoData:
        ...

    async def delete(self, todo: TodoData) -> None:
        ...

    async def search(
        self, *, search: str | None, limit: int, offset: int
    ) -> list[tuple[TodoData, TodoOwner | None]]:
        ...

    async def count(self, *, search: str | None = None) -> int:
        ...

    async def completion_counts(self, user_id: uuid.UUID) -> tuple[int, int]:
        """Return ``(total, completed)`` for one owner."""
        ...

    async def get_with_owner(
        self, todo_id: uuid.UUID
    ) -> tuple[TodoData, TodoOwner | None] | None:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...
