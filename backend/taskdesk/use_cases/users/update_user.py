import logging
import uuid

from ...domain.guard import UserChanges, authorize_user_update
from ...domain.ports.user import UserData, UserPort
from ...errors import ConflictError
from ..transaction import transaction
from .common import actor_from, lock_users, target_from

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email is already in use"


async def update_user(
    user_port: UserPort,
    actor_id: uuid.UUID,
    target_id: uuid.UUID,
    changes: UserChanges,
) -> UserData:
    """Apply an admin edit to another account in one locked transaction.

    The actor's role and flags come from the row locked here, never from
    the caller's token, so a concurrent demotion cannot be bypassed.
    """
    async with transaction(user_port, "update_user", conflict_message=EMAIL_IN_USE):
        rows = await lock_users(user_port, [actor_id, target_id])
        plan = authorize_user_update(
            actor_from(rows, actor_id),
            target_from(rows, target_id),
            changes,
        )

        email = plan.values.get("email")
        if email is not None:
            holder = await user_port.get_by_email(email)
            if holder is not None and holder.id != target_id:
                raise ConflictError(EMAIL_IN_USE)

        user = await user_port.update(rows[target_id], plan.values)

    logger.info(
        "user_updated actor_id=%s target_id=%s fields=%s",
        actor_id,
        target_id,
        ",".join(sorted(plan.values)),
    )
    return user
