"""
School API Backend — Authentication Dependencies
==================================================

What:  FastAPI dependencies that read the bearer token and enforce roles.
How:   `HTTPBearer(auto_error=False)` extracts the Authorization header;
       TokenService verifies it. Failures raise AuthenticationError (401) or
       AuthorizationError (403), rendered as failure envelopes by the global
       exception handlers.

Usage:
    @router.post("", dependencies=[Depends(require_roles(ADMIN_ROLE))])
    async def add_role(...): ...

    async def edit_user(caller: CurrentUser = Depends(get_current_user)): ...

Role checks run as route dependencies, before the request body is parsed.
"""

from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from school_api.exceptions import AuthenticationError, AuthorizationError
from school_api.localization import MessageKeys, resolve
from school_api.services.token_service import CurrentUser, token_service

ADMIN_ROLE = "Admin"
USER_ROLE = "User"

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """The caller identified by a valid bearer token; 401 otherwise."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message=resolve(MessageKeys.UNAUTHORIZED))
    return token_service.decode(credentials.credentials)


def require_roles(*roles: str) -> Callable:
    """Dependency factory: the caller must hold at least one of `roles`."""

    async def _require(caller: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not caller.has_role(*roles):
            raise AuthorizationError(
                message=resolve(MessageKeys.FORBIDDEN),
                required_roles=roles,
                context={"user_id": caller.id},
            )
        return caller

    return _require


def ensure_self_or_admin(caller: CurrentUser, user_id: Optional[int]) -> None:
    """Users may manage their own account; admins may manage any."""
    if caller.has_role(ADMIN_ROLE) or (user_id is not None and caller.id == user_id):
        return
    raise AuthorizationError(
        message=resolve(MessageKeys.FORBIDDEN),
        required_roles=[ADMIN_ROLE],
        context={"user_id": caller.id, "target_user_id": user_id},
    )
