from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol


class UserData(Protocol):
    id: uuid.UUID
    name: str
    email: str
    password_hash: str | None
    image: str | None
    role: str
    admin_permissions: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime


class UserPort(Protocol):
    async def get_by_id(
        self, user_id: uuid.UUID, *, for_update: bool = False
    ) -> UserData | None:
        ...

    async def get_by_email(
        self, email: str, *, for_update: bool = False
    ) -> UserData | None:
        ...

    async def get_many(
        self, user_ids: Sequence[uuid.UUID], *, for_update: bool = False
    ) -> list[UserData]:
        ...

    async def list_all(self) -> list[UserData]:
        ...

    async def count(self) -> int:
        ...

    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str | None,
        role: str = "user",
        admin_permissions: dict[str, Any] | None = None,
    ) -> UserData:
        ...

    async def update(self, user: UserData, values: dict[str, Any]) -> UserData:
        ...

    async def delete_many(self, user_ids: Sequence[uuid.UUID]) -> int:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...
