#!/usr/bin/env python3
"""Create (or promote) the admin account named by ADMIN_EMAIL / ADMIN_PASSWORD."""

from __future__ import annotations

import asyncio
import logging
import sys

from fastapi_users.exceptions import UserNotExists

from scribe.auth import get_user_db, get_user_manager
from scribe.config import settings
from scribe.database import AsyncSessionLocal, init_database
from scribe.models.user import UserRole
from scribe.observability import configure_logging
from scribe.schemas.user import UserCreate

logger = logging.getLogger("scribe.tools.create_admin_user")


async def create_admin_user() -> None:
    if not settings.admin_email or not settings.admin_password:
        logger.error("ADMIN_EMAIL and ADMIN_PASSWORD must both be set")
        sys.exit(1)

    async with AsyncSessionLocal() as session:
        async for user_db in get_user_db(session):
            async for user_manager in get_user_manager(user_db):
                try:
                    user = await user_manager.get_by_email(settings.admin_email)
                except UserNotExists:
                    user = await user_manager.create(
                        UserCreate(
                            email=settings.admin_email,
                            password=settings.admin_password,
                            name="Administrator",
                            is_verified=True,
                        )
                    )
                    logger.info("Created admin user %s", user.email)

                if user.role != UserRole.ADMIN.value:
                    await user_db.update(user, {"role": UserRole.ADMIN.value})
                    logger.info("Granted admin role to %s", user.email)


if __name__ == "__main__":
    configure_logging(settings.log_level.upper(), json_output=False)
    init_database()
    asyncio.run(create_admin_user())
