import logging
import uuid
from typing import Any

from ...domain.ports.user import UserData, UserPort
from ...errors import ConflictError, NotFoundError, ValidationError
from ...utils.security import hash_password, verify_password
from ..transaction import transaction

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email is already in use"


async def get_profile(user_port: UserPort, user_id: uuid.UUID) -> UserData:
    user = await user_port.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def update_profile(
    user_port: UserPort,
    user_id: uuid.UUID,
    *,
    name: str | None = None,
    email: str | None = None,
    current_password: str | None = None,
    new_password: str | None = None,
) -> UserData:
    if name is None and email is None and not new_password:
        raise ValidationError("No changes requested")

    async with transaction(user_port, "update_profile", conflict_message=EMAIL_IN_USE):
        user = await user_port.get_by_id(user_id, for_update=True)
        if user is None:
            raise NotFoundError("User not found")

        values: dict[str, Any] = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Name cannot be empty", details={"field": "name"})
            values["name"] = name

        if email is not None and email.strip().lower() != user.email:
            holder = await user_port.get_by_email(email)
            if holder is not None and holder.id != user.id:
                raise ConflictError(EMAIL_IN_USE)
            values["email"] = email

        if new_password:
            if not current_password:
                raise ValidationError(
                    "Current password is required to set a new password",
                    details={"field": "current_password"},
                )
            if not verify_password(current_password, user.password_hash):
                raise ValidationError(
                    "Current password is incorrect",
                    details={"field": "current_password"},
                )
            values["password_hash"] = hash_password(new_password)

        if values:
            user = await user_port.update(user, values)

    logger.info("profile_updated user_id=%s fields=%s", user_id, ",".join(sorted(values)))
    return user
