import uuid

from ...domain.guard import require_admin_actor
from ...domain.ports.user import UserData, UserPort
from ...domain.roles import Actor
from ...errors import NotFoundError


async def list_users(user_port: UserPort, actor: Actor | None) -> list[UserData]:
    require_admin_actor(actor)
    return await user_port.list_all()


async def get_user(
    user_port: UserPort, actor: Actor | None, user_id: uuid.UUID
) -> UserData:
    require_admin_actor(actor)
    user = await user_port.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
