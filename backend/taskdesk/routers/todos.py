import uuid

from fastapi import APIRouter, Depends, status

from ..dependencies import get_current_user, get_todo_port
from ..models.user import User
from ..schemas.todo import TodoCreate, TodoRead, TodoUpdate
from ..use_cases.todos import own_todos

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get("", response_model=list[TodoRead])
async def list_my_todos(
    user: User = Depends(get_current_user),
    todo_port=Depends(get_todo_port),
) -> list[TodoRead]:
    todos = await own_todos.list_todos(todo_port, user.id)
    return [TodoRead.model_validate(todo) for todo in todos]


@router.post("", response_model=TodoRead, status_code=status.HTTP_201_CREATED)
async def create_my_todo(
    payload: TodoCreate,
    user: User = Depends(get_current_user),
    todo_port=Depends(get_todo_port),
) -> TodoRead:
    todo = await own_todos.create_todo(
        todo_port, user.id, title=payload.title, completed=payload.completed
    )
    return TodoRead.model_validate(todo)


@router.get("/{todo_id}", response_model=TodoRead)
async def read_my_todo(
    todo_id: uuid.UUID,
    user: User = Depends(get_current_user),
    todo_port=Depends(get_todo_port),
) -> TodoRead:
    return TodoRead.model_validate(await own_todos.get_todo(todo_port, user.id, todo_id))


@router.put("/{todo_id}", response_model=TodoRead)
async def update_my_todo(
    todo_id: uuid.UUID,
    payload: TodoUpdate,
    user: User = Depends(get_current_user),
    todo_port=Depends(get_todo_port),
) -> TodoRead:
    todo = await own_todos.update_todo(
        todo_port,
        user.id,
        todo_id,
        title=payload.title,
        completed=payload.completed,
    )
    return TodoRead.model_validate(todo)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_todo(
    todo_id: uuid.UUID,
    user: User = Depends(get_current_user),
    todo_port=Depends(get_todo_port),
) -> None:
    await own_todos.delete_todo(todo_port, user.id, todo_id)
