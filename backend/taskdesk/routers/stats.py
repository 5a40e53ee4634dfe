from fastapi import APIRouter, Depends

from ..dependencies import get_current_actor, get_todo_port, get_user_port
from ..domain.roles import Actor
from ..schemas.stats import AdminStats, StatsResponse, UserStats
from ..use_cases.todos.stats import get_stats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def read_stats(
    actor: Actor = Depends(get_current_actor),
    todo_port=Depends(get_todo_port),
    user_port=Depends(get_user_port),
) -> StatsResponse:
    own, system = await get_stats(todo_port, user_port, actor)
    return StatsResponse(
        user_stats=UserStats(
            total=own.total,
            active=own.active,
            completed=own.completed,
            pending=own.pending,
        ),
        admin_stats=(
            AdminStats(
                total_users=system.total_users,
                total_tasks=system.total_tasks,
                system_status=system.system_status,
            )
            if system is not None
            else None
        ),
    )
