from dataclasses import dataclass

from ...domain.ports.todo import TodoPort
from ...domain.ports.user import UserPort
from ...domain.roles import Actor


@dataclass(frozen=True)
class UserTotals:
    total: int
    completed: int

    @property
    def active(self) -> int:
        return self.total - self.completed

    @property
    def pending(self) -> int:
        return self.active


@dataclass(frozen=True)
class SystemTotals:
    total_users: int
    total_tasks: int
    system_status: str = "Active"


async def get_stats(
    todo_port: TodoPort,
    user_port: UserPort,
    actor: Actor,
) -> tuple[UserTotals, SystemTotals | None]:
    total, completed = await todo_port.completion_counts(actor.id)
    own = UserTotals(total=total, completed=completed)
    if not actor.role.is_admin_tier:
        return own, None
    system = SystemTotals(
        total_users=await user_port.count(),
        total_tasks=await todo_port.count(),
    )
    return own, system
