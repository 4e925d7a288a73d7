"""
School API Backend — JWT Token Service
========================================

What:  Issues and verifies the HS256 bearer tokens returned by sign-in and
       registration.
How:   PyJWT. Every token carries `sub` (user id), `name`, `email`, `roles`,
       `jti` and the registered claims `iss`, `aud`, `iat`, `exp`; all four
       registered claims are required when decoding.
Who:   Authentication/user handlers (issue), security dependencies (decode).

Token claims example:
    {
        "sub": "7", "name": "mona", "email": "mona@school.test",
        "roles": ["User"], "jti": "3f0c...",
        "iss": "school-api", "aud": "school-api-clients",
        "iat": 1767225600, "exp": 1767229200
    }
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Sequence

import jwt

from school_api.config import settings
from school_api.exceptions import AuthenticationError
from school_api.localization import MessageKeys, resolve
from school_api.models import User
from school_api.schemas.identity import JwtAuthResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, as read from a verified token."""

    id: int
    user_name: str
    email: str = ""
    roles: List[str] = field(default_factory=list)

    def has_role(self, *names: str) -> bool:
        held = {role.lower() for role in self.roles}
        return any(name.lower() in held for name in names)


class TokenService:
    """Stateless JWT issuer/verifier. One module-level instance is shared."""

    def issue_token(self, user: User, roles: Sequence[str]) -> JwtAuthResult:
        """Sign a token for `user` holding `roles`."""
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(minutes=settings.access_token_expire_minutes)
        claims: Dict[str, Any] = {
            "sub": str(user.id),
            "name": user.user_name,
            "email": user.email,
            "roles": list(roles),
            "jti": uuid.uuid4().hex,
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        logger.info("Issued access token for user %s (expires %s)", user.id, expires_at.isoformat())
        return JwtAuthResult(
            access_token=token,
            token_type="Bearer",
            expires_at=expires_at,
            user_name=user.user_name,
            roles=list(roles),
        )

    def decode(self, token: str) -> CurrentUser:
        """
        Verify `token` and return the caller it identifies.

        Raises:
            AuthenticationError: Expired, malformed, wrongly signed, or
                issued for another issuer/audience.
        """
        try:
            claims = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
                audience=settings.jwt_audience,
                issuer=settings.jwt_issuer,
                options={"require": ["exp", "iat", "aud", "iss", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError(message=resolve(MessageKeys.TOKEN_EXPIRED)) from None
        except jwt.InvalidTokenError as e:
            logger.info("Rejected access token: %s", e)
            raise AuthenticationError(message=resolve(MessageKeys.INVALID_TOKEN)) from None

        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError(message=resolve(MessageKeys.INVALID_TOKEN)) from None

        roles = claims.get("roles") or []
        if not isinstance(roles, list):
            roles = [str(roles)]
        return CurrentUser(
            id=user_id,
            user_name=str(claims.get("name", "")),
            email=str(claims.get("email", "")),
            roles=[str(role) for role in roles],
        )


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService()
