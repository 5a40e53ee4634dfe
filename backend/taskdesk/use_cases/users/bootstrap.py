import logging

from ...domain.ports.user import UserData, UserPort
from ...domain.roles import Role
from ...utils.security import hash_password
from ..transaction import transaction

logger = logging.getLogger(__name__)


async def ensure_super_admin(
    user_port: UserPort,
    *,
    email: str,
    password: str,
    name: str = "Super Admin",
) -> tuple[UserData, bool]:
    """Make sure ``email`` belongs to a super-admin, creating it if needed.

    Running it again for an existing super-admin changes nothing.
    """
    async with transaction(user_port, "ensure_super_admin"):
        user = await user_port.get_by_email(email, for_update=True)
        if user is None:
            user = await user_port.create(
                name=name,
                email=email,
                password_hash=hash_password(password),
                role=Role.SUPER_ADMIN.value,
            )
            created = True
        else:
            created = False
            if user.role != Role.SUPER_ADMIN.value:
                user = await user_port.update(
                    user,
                    {"role": Role.SUPER_ADMIN.value, "admin_permissions": None},
                )

    logger.info("super_admin_ensured user_id=%s created=%s", user.id, created)
    return user, created
