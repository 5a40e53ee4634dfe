import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TodoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    completed: bool = False


class TodoUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    completed: bool | None = None


class TodoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    completed: bool
    created_at: datetime
    updated_at: datetime


class TodoOwnerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str


class AdminTodoRead(TodoRead):
    user: TodoOwnerRead | None = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class AdminTodoList(BaseModel):
    todos: list[AdminTodoRead]
    pagination: Pagination
