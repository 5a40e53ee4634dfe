"""
Admin API: account management and cross-user task administration.

Every route resolves the caller from the bearer token. Mutations re-read
the caller's row under lock inside the use case, so a role or flag change
committed after the token was issued is honored immediately.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_current_actor, get_todo_port, get_user_port
from ..domain.guard import UserChanges
from ..domain.roles import Actor
from ..schemas.todo import (
    AdminTodoList,
    AdminTodoRead,
    Pagination,
    TodoOwnerRead,
    TodoUpdate,
)
from ..schemas.user import (
    AdminUserList,
    AdminUserUpdate,
    AdminUserUpsert,
    BulkDeleteRequest,
    DeleteResponse,
    UserRead,
)
from ..use_cases.todos import admin_todos
from ..use_cases.users import (
    bulk_delete_users,
    create_or_update_user,
    delete_user,
    get_user,
    list_users,
    update_user,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


def _admin_todo(todo, owner) -> AdminTodoRead:
    return AdminTodoRead(
        id=todo.id,
        title=todo.title,
        completed=todo.completed,
        created_at=todo.created_at,
        updated_at=todo.updated_at,
        user=TodoOwnerRead.model_validate(owner) if owner is not None else None,
    )


@router.get("/users", response_model=AdminUserList, response_model_exclude_none=True)
async def admin_list_users(
    actor: Actor = Depends(get_current_actor),
    user_port=Depends(get_user_port),
) -> AdminUserList:
    users = await list_users(user_port, actor)
    return AdminUserList(
        users=[UserRead.model_validate(user) for user in users],
        total=len(users),
    )


@router.post("/users", response_model=UserRead, response_model_exclude_none=True)
async def admin_create_or_update_user(
    payload: AdminUserUpsert,
    response: Response,
    actor: Actor = Depends(get_current_actor),
    user_port=Depends(get_user_port),
) -> UserRead:
    user, created = await create_or_update_user(
        user_port,
        actor.id,
        email=payload.email,
        name=payload.name,
        password=payload.password,
        role=payload.role,
        admin_permissions=(
            payload.admin_permissions.as_patch()
            if payload.admin_permissions is not None
            else None
        ),
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return UserRead.model_validate(user)


@router.post("/users/bulk-delete", response_model=DeleteResponse)
async def admin_bulk_delete_users(
    payload: BulkDeleteRequest,
    actor: Actor = Depends(get_current_actor),
    user_port=Depends(get_user_port),
) -> DeleteResponse:
    deleted = await bulk_delete_users(user_port, actor.id, payload.user_ids)
    return DeleteResponse(deleted_count=deleted)


@router.get(
    "/users/{user_id}", response_model=UserRead, response_model_exclude_none=True
)
async def admin_get_user(
    user_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    user_port=Depends(get_user_port),
) -> UserRead:
    return UserRead.model_validate(await get_user(user_port, actor, user_id))


@router.patch(
    "/users/{user_id}", response_model=UserRead, response_model_exclude_none=True
)
async def admin_update_user(
    user_id: uuid.UUID,
    payload: AdminUserUpdate,
    actor: Actor = Depends(get_current_actor),
    user_port=Depends(get_user_port),
) -> UserRead:
    changes = UserChanges(
        name=payload.name,
        email=payload.email,
        role=payload.role,
        admin_permissions=(
            payload.admin_permissions.as_patch()
            if payload.admin_permissions is not None
            else None
        ),
    )
    user = await update_user(user_port, actor.id, user_id, changes)
    return UserRead.model_validate(user)


@router.delete("/users/{user_id}", response_model=DeleteResponse)
async def admin_delete_user(
    user_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    user_port=Depends(get_user_port),
) -> DeleteResponse:
    deleted = await delete_user(user_port, actor.id, user_id)
    return DeleteResponse(deleted_count=deleted)


@router.get("/todos", response_model=AdminTodoList)
async def admin_list_todos(
    page: int = Query(1, ge=1),
    limit: int = Query(admin_todos.DEFAULT_PAGE_SIZE, ge=1, le=admin_todos.MAX_PAGE_SIZE),
    search: str | None = Query(None, max_length=100),
    actor: Actor = Depends(get_current_actor),
    todo_port=Depends(get_todo_port),
) -> AdminTodoList:
    result = await admin_todos.list_all_todos(
        todo_port, actor, page=page, limit=limit, search=search
    )
    return AdminTodoList(
        todos=[_admin_todo(todo, owner) for todo, owner in result.items],
        pagination=Pagination(
            total=result.total,
            page=result.page,
            limit=result.limit,
            pages=result.pages,
        ),
    )


@router.get("/todos/{todo_id}", response_model=AdminTodoRead)
async def admin_read_todo(
    todo_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    todo_port=Depends(get_todo_port),
) -> AdminTodoRead:
    todo, owner = await admin_todos.admin_get_todo(todo_port, actor, todo_id)
    return _admin_todo(todo, owner)


@router.patch("/todos/{todo_id}", response_model=AdminTodoRead)
async def admin_edit_todo(
    todo_id: uuid.UUID,
    payload: TodoUpdate,
    actor: Actor = Depends(get_current_actor),
    todo_port=Depends(get_todo_port),
) -> AdminTodoRead:
    todo, owner = await admin_todos.admin_update_todo(
        todo_port,
        actor,
        todo_id,
        title=payload.title,
        completed=payload.completed,
    )
    return _admin_todo(todo, owner)


@router.delete("/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_remove_todo(
    todo_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    todo_port=Depends(get_todo_port),
) -> None:
    await admin_todos.admin_delete_todo(todo_port, actor, todo_id)
