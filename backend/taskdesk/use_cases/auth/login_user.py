from ...domain.ports.user import UserData, UserPort
from ...domain.roles import Actor
from ...errors import AuthError
from ...utils.security import create_access_token, verify_password


async def login_user(
    user_port: UserPort,
    *,
    email: str,
    password: str,
) -> tuple[str, UserData]:
    user = await user_port.get_by_email(email)
    # Accounts created through an external provider have no password to check.
    if user is None or not verify_password(password, user.password_hash):
        raise AuthError("Invalid email or password")

    actor = Actor.from_record(user)
    claims: dict[str, object] = {"role": actor.role.value}
    if actor.admin_permissions is not None:
        claims["admin_permissions"] = actor.admin_permissions.to_dict()

    access_token = create_access_token(str(user.id), claims)
    return access_token, user
