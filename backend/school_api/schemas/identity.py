"""
School API Backend — Identity Response Schemas
================================================

What:  Read models for users, roles and issued tokens.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from school_api.schemas.common import CamelModel


class JwtAuthResult(CamelModel):
    """Returned by sign-in and registration."""

    access_token: str
    token_type: str = Field(default="Bearer")
    expires_at: datetime
    user_name: str
    roles: List[str] = Field(default_factory=list)


class UserResponse(CamelModel):
    id: int
    user_name: str
    email: str
    full_name: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None


class RoleResponse(CamelModel):
    id: int
    name: str
