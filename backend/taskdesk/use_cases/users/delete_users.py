import logging
import uuid
from collections.abc import Sequence

from ...domain.guard import authorize_bulk_delete, authorize_delete
from ...domain.ports.user import UserPort
from ..transaction import transaction
from .common import actor_from, lock_users, target_from

logger = logging.getLogger(__name__)


async def delete_user(
    user_port: UserPort,
    actor_id: uuid.UUID,
    target_id: uuid.UUID,
) -> int:
    async with transaction(user_port, "delete_user"):
        rows = await lock_users(user_port, [actor_id, target_id])
        authorize_delete(actor_from(rows, actor_id), target_from(rows, target_id))
        deleted = await user_port.delete_many([target_id])

    logger.info("user_deleted actor_id=%s target_id=%s", actor_id, target_id)
    return deleted


async def bulk_delete_users(
    user_port: UserPort,
    actor_id: uuid.UUID,
    user_ids: Sequence[uuid.UUID],
) -> int:
    """Delete every listed account, or none of them."""
    requested = list(dict.fromkeys(user_ids))
    async with transaction(user_port, "bulk_delete_users"):
        rows = await lock_users(user_port, [actor_id, *requested])
        targets = [
            target
            for target in (target_from(rows, user_id) for user_id in requested)
            if target is not None
        ]
        authorize_bulk_delete(actor_from(rows, actor_id), requested, targets)
        deleted = await user_port.delete_many(requested)

    logger.info(
        "users_bulk_deleted actor_id=%s requested=%d deleted=%d",
        actor_id,
        len(requested),
        deleted,
    )
    return deleted
