from .bootstrap import ensure_super_admin
from .delete_users import bulk_delete_users, delete_user
from .profile import get_profile, update_profile
from .read_users import get_user, list_users
from .update_user import update_user
from .upsert_user import create_or_update_user

__all__ = [
    "bulk_delete_users",
    "create_or_update_user",
    "delete_user",
    "ensure_super_admin",
    "get_profile",
    "get_user",
    "list_users",
    "update_profile",
    "update_user",
]
