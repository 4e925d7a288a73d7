"""
School API Backend — Startup Seeding
======================================

What:  Makes sure the built-in roles exist, and optionally an administrator.
How:   Idempotent: existing rows are left alone. Runs once in the application
       lifespan inside its own session and transaction.

    Roles:  Admin, User   (registration puts new accounts in "User")
    Admin:  created only when ADMIN_EMAIL and ADMIN_PASSWORD are configured
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.config import settings
from school_api.models import Role, User
from school_api.models.identity import normalize
from school_api.repositories.identity import RoleRepository
from school_api.security import ADMIN_ROLE, USER_ROLE
from school_api.services.identity_service import IdentityService

logger = logging.getLogger(__name__)

DEFAULT_ROLES = (ADMIN_ROLE, USER_ROLE)


async def seed_roles(session: AsyncSession, names: Iterable[str] = DEFAULT_ROLES) -> int:
    """Insert missing roles. Returns how many were created."""
    roles = RoleRepository(session)
    created = 0
    for name in names:
        if await roles.find_by_name(name) is None:
            await roles.add(Role(name=name, normalized_name=normalize(name)))
            created += 1
    if created:
        logger.info("Seeded %d role(s)", created)
    return created


async def seed_admin(session: AsyncSession) -> bool:
    """Create the configured administrator if absent. Returns True if created."""
    if not settings.admin_email or not settings.admin_password:
        return False

    identity = IdentityService(session)
    if await identity.find_by_name(settings.admin_user_name) is not None:
        return False

    admin = User(user_name=settings.admin_user_name, email=settings.admin_email, full_name="Administrator")
    result = await identity.create(admin, settings.admin_password)
    if not result.succeeded:
        logger.error("Administrator account not created: %s", "; ".join(result.errors))
        return False
    for role in DEFAULT_ROLES:
        await identity.add_to_role(admin, role)
    logger.info("Administrator account '%s' created", admin.user_name)
    return True


async def seed(session: AsyncSession) -> None:
    await seed_roles(session)
    await seed_admin(session)
