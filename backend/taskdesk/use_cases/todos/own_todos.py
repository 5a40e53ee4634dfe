import logging
import uuid
from typing import Any

from ...domain.ports.todo import TodoData, TodoPort
from ...errors import NotFoundError, ValidationError
from ..transaction import transaction

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100


def clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationError("Title is required", details={"field": "title"})
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Title cannot be more than {MAX_TITLE_LENGTH} characters",
            details={"field": "title"},
        )
    return title


def todo_changes(title: str | None, completed: bool | None) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if title is not None:
        values["title"] = clean_title(title)
    if completed is not None:
        values["completed"] = completed
    if not values:
        raise ValidationError("No changes requested")
    return values


async def list_todos(todo_port: TodoPort, user_id: uuid.UUID) -> list[TodoData]:
    return await todo_port.list_for_user(user_id)


async def get_todo(todo_port: TodoPort, user_id: uuid.UUID, todo_id: uuid.UUID) -> TodoData:
    todo = await todo_port.get(todo_id, user_id=user_id)
    if todo is None:
        raise NotFoundError("Todo not found")
    return todo


async def create_todo(
    todo_port: TodoPort,
    user_id: uuid.UUID,
    *,
    title: str,
    completed: bool = False,
) -> TodoData:
    title = clean_title(title)
    async with transaction(todo_port, "create_todo"):
        todo = await todo_port.create(user_id, title, completed)
    logger.info("todo_created user_id=%s todo_id=%s", user_id, todo.id)
    return todo


async def update_todo(
    todo_port: TodoPort,
    user_id: uuid.UUID,
    todo_id: uuid.UUID,
    *,
    title: str | None = None,
    completed: bool | None = None,
) -> TodoData:
    values = todo_changes(title, completed)
    async with transaction(todo_port, "update_todo"):
        todo = await get_todo(todo_port, user_id, todo_id)
        todo = await todo_port.update(todo, values)
    return todo


async def delete_todo(todo_port: TodoPort, user_id: uuid.UUID, todo_id: uuid.UUID) -> None:
    async with transaction(todo_port, "delete_todo"):
        todo = await get_todo(todo_port, user_id, todo_id)
        await todo_port.delete(todo)
    logger.info("todo_deleted user_id=%s todo_id=%s", user_id, todo_id)
