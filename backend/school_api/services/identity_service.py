"""
School API Backend — Identity Service (User Accounts and Roles)
=================================================================

What:  User account management: create, update, delete, password checks and
       role membership.
How:   Passwords are hashed with passlib's `pbkdf2_sha256`; rows go through
       UserRepository / RoleRepository on the request's session. Mutating
       calls return an `IdentityResult` instead of raising, so handlers can
       turn the first error into a BadRequest envelope.
Who:   User, authentication and role handlers; the startup seeder.

Rules applied on create / update / change_password:
    user name   letters, digits and - . _ @ +   unique (case-insensitive)
    email       unique (case-insensitive)
    password    at least 6 characters, one digit, one lowercase,
                one uppercase, one non-alphanumeric character
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.exceptions import PersistenceError
from school_api.localization import MessageKeys, resolve
from school_api.models import Role, User
from school_api.models.identity import normalize
from school_api.repositories.identity import RoleRepository, UserRepository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

PASSWORD_MIN_LENGTH = 6
_USER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\-._@+]+$")


@dataclass(frozen=True)
class IdentityResult:
    succeeded: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: str) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    @property
    def first_error(self) -> Optional[str]:
        return self.errors[0] if self.errors else None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def password_errors(password: str) -> List[str]:
    """Every password policy rule `password` violates, in a fixed order."""
    errors: List[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(resolve(MessageKeys.PASSWORD_TOO_SHORT, min=PASSWORD_MIN_LENGTH))
    if not any(ch.isdigit() for ch in password):
        errors.append(resolve(MessageKeys.PASSWORD_REQUIRES_DIGIT))
    if not any(ch.islower() for ch in password):
        errors.append(resolve(MessageKeys.PASSWORD_REQUIRES_LOWER))
    if not any(ch.isupper() for ch in password):
        errors.append(resolve(MessageKeys.PASSWORD_REQUIRES_UPPER))
    if all(ch.isalnum() for ch in password):
        errors.append(resolve(MessageKeys.PASSWORD_REQUIRES_NON_ALPHANUMERIC))
    return errors


class IdentityService:
    """Account operations bound to one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)

    # ── Lookups ───────────────────────────────────────────────────────────

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.users.find_by_id(user_id)

    async def find_by_name(self, user_name: str) -> Optional[User]:
        return await self.users.find_by_user_name(user_name)

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.users.find_by_email(email)

    async def find_by_login(self, login: str) -> Optional[User]:
        """Sign-in accepts either the user name or the email address."""
        user = await self.find_by_name(login)
        if user is None:
            user = await self.find_by_email(login)
        return user

    async def get_roles(self, user: User) -> List[str]:
        return await self.users.role_names(user.id)

    def check_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.password_hash)

    # ── Mutations ─────────────────────────────────────────────────────────

    def _user_name_error(self, user_name: str) -> Optional[str]:
        if not _USER_NAME_PATTERN.match(user_name):
            return resolve(MessageKeys.INVALID_USER_NAME, user_name=user_name)
        return None

    async def create(self, user: User, password: str) -> IdentityResult:
        """Hash `password`, normalize the unique columns and insert `user`."""
        error = self._user_name_error(user.user_name)
        if error:
            return IdentityResult.failed(error)
        if await self.users.user_name_taken(user.user_name):
            return IdentityResult.failed(resolve(MessageKeys.NAME_IS_EXIST))
        if await self.users.email_taken(user.email):
            return IdentityResult.failed(resolve(MessageKeys.EMAIL_IS_EXIST))
        errors = password_errors(password)
        if errors:
            return IdentityResult.failed(*errors)

        user.normalized_user_name = normalize(user.user_name)
        user.normalized_email = normalize(user.email)
        user.password_hash = hash_password(password)
        try:
            await self.users.add(user)
        except PersistenceError:
            return IdentityResult.failed(resolve(MessageKeys.CREATE_FAILED))
        logger.info("User created: id=%s user_name=%s", user.id, user.user_name)
        return IdentityResult.success()

    async def update(self, user: User) -> IdentityResult:
        """Persist changes already applied to a loaded `user`."""
        error = self._user_name_error(user.user_name)
        if error:
            return IdentityResult.failed(error)
        if await self.users.user_name_taken(user.user_name, exclude_id=user.id):
            return IdentityResult.failed(resolve(MessageKeys.NAME_IS_EXIST))
        if await self.users.email_taken(user.email, exclude_id=user.id):
            return IdentityResult.failed(resolve(MessageKeys.EMAIL_IS_EXIST))

        user.normalized_user_name = normalize(user.user_name)
        user.normalized_email = normalize(user.email)
        try:
            await self.users.update(user)
        except PersistenceError:
            return IdentityResult.failed(resolve(MessageKeys.UPDATE_FAILED))
        return IdentityResult.success()

    async def delete(self, user: User) -> IdentityResult:
        try:
            await self.users.delete(user.id)
        except PersistenceError:
            return IdentityResult.failed(resolve(MessageKeys.DELETED_FAILED))
        logger.info("User deleted: id=%s", user.id)
        return IdentityResult.success()

    async def change_password(self, user: User, current_password: str, new_password: str) -> IdentityResult:
        if not self.check_password(user, current_password):
            return IdentityResult.failed(resolve(MessageKeys.INCORRECT_PASSWORD))
        errors = password_errors(new_password)
        if errors:
            return IdentityResult.failed(*errors)
        user.password_hash = hash_password(new_password)
        try:
            await self.users.update(user)
        except PersistenceError:
            return IdentityResult.failed(resolve(MessageKeys.UPDATE_FAILED))
        logger.info("Password changed for user %s", user.id)
        return IdentityResult.success()

    async def add_to_role(self, user: User, role_name: str) -> IdentityResult:
        role: Optional[Role] = await self.roles.find_by_name(role_name)
        if role is None:
            return IdentityResult.failed(resolve(MessageKeys.ROLE_NOT_FOUND, role=role_name))
        if await self.roles.has_member(role.id, user.id):
            return IdentityResult.failed(resolve(MessageKeys.USER_ALREADY_IN_ROLE, role=role.name))
        try:
            await self.roles.add_member(role.id, user.id)
        except PersistenceError:
            return IdentityResult.failed(resolve(MessageKeys.UPDATE_FAILED))
        logger.info("User %s added to role %s", user.id, role.name)
        return IdentityResult.success()
