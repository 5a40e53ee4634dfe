from .login_user import login_user
from .register_user import register_user

__all__ = ["login_user", "register_user"]
