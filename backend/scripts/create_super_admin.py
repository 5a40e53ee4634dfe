"""
Bootstrap the first super-admin account.

The super-admin tier can only be granted by another super-admin, so a fresh
install needs one account created out of band. Running the script again for
the same email is a no-op; an existing lower-tier account is raised to
super-admin.

Usage:
    SUPER_ADMIN_EMAIL=owner@example.com SUPER_ADMIN_PASSWORD=... \
        python -m scripts.create_super_admin
"""
import asyncio
import logging
import os
import sys

from taskdesk.crud.user import UserRepository
from taskdesk.database import AsyncSessionLocal
from taskdesk.errors import AppError
from taskdesk.use_cases.users.bootstrap import ensure_super_admin

logger = logging.getLogger("taskdesk.scripts.create_super_admin")


async def create_super_admin(email: str, password: str, name: str) -> None:
    async with AsyncSessionLocal() as session:
        user, created = await ensure_super_admin(
            UserRepository(session), email=email, password=password, name=name
        )
    action = "Created" if created else "Verified"
    logger.info("%s super-admin %s (%s)", action, user.email, user.id)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    email = os.getenv("SUPER_ADMIN_EMAIL", "").strip()
    password = os.getenv("SUPER_ADMIN_PASSWORD", "")
    name = os.getenv("SUPER_ADMIN_NAME", "Super Admin").strip() or "Super Admin"
    if not email or not password:
        logger.error("SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD must be set")
        return 1

    try:
        asyncio.run(create_super_admin(email, password, name))
    except AppError as exc:
        logger.error("Could not create super-admin: %s", exc.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
