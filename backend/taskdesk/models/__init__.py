from .base import Base
from .todo import Todo
from .user import User

__all__ = [
    "Base",
    "User",
    "Todo",
]
