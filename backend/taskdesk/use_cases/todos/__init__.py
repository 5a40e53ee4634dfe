from .admin_todos import (
    TodoPage,
    admin_delete_todo,
    admin_get_todo,
    admin_update_todo,
    list_all_todos,
)
from .own_todos import create_todo, delete_todo, get_todo, list_todos, update_todo
from .stats import SystemTotals, UserTotals, get_stats

__all__ = [
    "SystemTotals",
    "TodoPage",
    "UserTotals",
    "admin_delete_todo",
    "admin_get_todo",
    "admin_update_todo",
    "create_todo",
    "delete_todo",
    "get_stats",
    "get_todo",
    "list_all_todos",
    "list_todos",
    "update_todo",
]
