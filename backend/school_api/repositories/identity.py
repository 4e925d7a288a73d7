"""
School API Backend — User and Role Repositories
=================================================

What:  Persistence for the identity tables. Name and email lookups go through
       the normalized columns, so they are case-insensitive.
Who:   IdentityService and the role handlers.
"""

from typing import List, Optional

from sqlalchemy import select

from school_api.models import Role, User, UserRole
from school_api.models.identity import normalize
from school_api.repositories.base import Repository


class UserRepository(Repository[User]):
    model = User

    async def find_by_user_name(self, user_name: str) -> Optional[User]:
        statement = select(User).where(User.normalized_user_name == normalize(user_name))
        return (await self.session.execute(statement)).scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.normalized_email == normalize(email))
        return (await self.session.execute(statement)).scalar_one_or_none()

    async def user_name_taken(self, user_name: str, exclude_id: Optional[int] = None) -> bool:
        criteria = [User.normalized_user_name == normalize(user_name)]
        if exclude_id is not None:
            criteria.append(User.id != exclude_id)
        return await self.exists(*criteria)

    async def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        criteria = [User.normalized_email == normalize(email)]
        if exclude_id is not None:
            criteria.append(User.id != exclude_id)
        return await self.exists(*criteria)

    async def role_names(self, user_id: int) -> List[str]:
        statement = (
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        return list((await self.session.scalars(statement)).all())


class RoleRepository(Repository[Role]):
    model = Role

    async def find_by_name(self, name: str) -> Optional[Role]:
        statement = select(Role).where(Role.normalized_name == normalize(name))
        return (await self.session.execute(statement)).scalar_one_or_none()

    async def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        criteria = [Role.normalized_name == normalize(name)]
        if exclude_id is not None:
            criteria.append(Role.id != exclude_id)
        return await self.exists(*criteria)

    async def is_assigned(self, role_id: int) -> bool:
        """True while at least one user holds the role."""
        return await self.exists(UserRole.role_id == role_id)

    async def has_member(self, role_id: int, user_id: int) -> bool:
        return await self.exists(UserRole.role_id == role_id, UserRole.user_id == user_id)

    async def add_member(self, role_id: int, user_id: int) -> UserRole:
        return await self.add(UserRole(role_id=role_id, user_id=user_id))
