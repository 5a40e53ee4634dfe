import logging

from ...domain.ports.user import UserData, UserPort
from ...errors import ConflictError, ValidationError
from ...utils.security import hash_password
from ..transaction import transaction

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"


async def register_user(
    user_port: UserPort,
    *,
    name: str,
    email: str,
    password: str,
) -> UserData:
    name = name.strip()
    if not name:
        raise ValidationError("Name is required", details={"field": "name"})
    password_hash = hash_password(password)

    async with transaction(user_port, "register_user", conflict_message=EMAIL_TAKEN):
        if await user_port.get_by_email(email) is not None:
            raise ConflictError(EMAIL_TAKEN)
        user = await user_port.create(
            name=name,
            email=email,
            password_hash=password_hash,
        )

    logger.info("user_registered user_id=%s", user.id)
    return user
