"""Cross-user task administration, reserved for super-admins."""
import logging
import math
import uuid
from dataclasses import dataclass

from ...domain import permissions
from ...domain.guard import require_admin_actor
from ...domain.ports.todo import TodoData, TodoOwner, TodoPort
from ...domain.roles import Actor
from ...errors import ForbiddenReason, NotFoundError, PermissionError, ValidationError
from ..transaction import transaction
from .own_todos import todo_changes

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class TodoPage:
    items: list[tuple[TodoData, TodoOwner | None]]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def _require_todo_admin(actor: Actor | None) -> Actor:
    actor = require_admin_actor(actor)
    if not permissions.can_manage_all_todos(actor.role, actor.admin_permissions):
        logger.warning(
            "authorization_denied reason=%s actor_id=%s actor_role=%s",
            ForbiddenReason.TODOS_ADMIN.value,
            actor.id,
            actor.role.value,
        )
        raise PermissionError(
            ForbiddenReason.TODOS_ADMIN,
            "Only a super-admin can manage other users' tasks",
        )
    return actor


async def list_all_todos(
    todo_port: TodoPort,
    actor: Actor | None,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: str | None = None,
) -> TodoPage:
    _require_todo_admin(actor)
    if page < 1:
        raise ValidationError("Page must be at least 1", details={"field": "page"})
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError(
            f"Limit must be between 1 and {MAX_PAGE_SIZE}", details={"field": "limit"}
        )
    search = search.strip() if search else None

    total = await todo_port.count(search=search)
    items = await todo_port.search(search=search, limit=limit, offset=(page - 1) * limit)
    return TodoPage(items=items, total=total, page=page, limit=limit)


async def admin_get_todo(
    todo_port: TodoPort, actor: Actor | None, todo_id: uuid.UUID
) -> tuple[TodoData, TodoOwner | None]:
    _require_todo_admin(actor)
    found = await todo_port.get_with_owner(todo_id)
    if found is None:
        raise NotFoundError("Todo not found")
    return found


async def admin_update_todo(
    todo_port: TodoPort,
    actor: Actor | None,
    todo_id: uuid.UUID,
    *,
    title: str | None = None,
    completed: bool | None = None,
) -> tuple[TodoData, TodoOwner | None]:
    actor = _require_todo_admin(actor)
    values = todo_changes(title, completed)
    async with transaction(todo_port, "admin_update_todo"):
        found = await todo_port.get_with_owner(todo_id)
        if found is None:
            raise NotFoundError("Todo not found")
        todo, owner = found
        todo = await todo_port.update(todo, values)
    logger.info("todo_admin_updated actor_id=%s todo_id=%s", actor.id, todo_id)
    return todo, owner


async def admin_delete_todo(
    todo_port: TodoPort, actor: Actor | None, todo_id: uuid.UUID
) -> None:
    actor = _require_todo_admin(actor)
    async with transaction(todo_port, "admin_delete_todo"):
        todo = await todo_port.get(todo_id)
        if todo is None:
            raise NotFoundError("Todo not found")
        await todo_port.delete(todo)
    logger.info("todo_admin_deleted actor_id=%s todo_id=%s", actor.id, todo_id)
