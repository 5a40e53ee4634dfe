from pydantic import BaseModel


class UserStats(BaseModel):
    total: int
    active: int
    completed: int
    pending: int


class AdminStats(BaseModel):
    total_users: int
    total_tasks: int
    system_status: str


class StatsResponse(BaseModel):
    user_stats: UserStats
    admin_stats: AdminStats | None = None
