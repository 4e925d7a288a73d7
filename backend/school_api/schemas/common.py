"""
School API Backend — Shared Transport Schemas
===============================================

What:  Base model, pagination wrapper and health payload shared by every resource.
How:   Pydantic models with camelCase aliases on the wire; Python code keeps
       snake_case attribute names (`populate_by_name=True` accepts both).
"""

import math
from typing import Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for every request/response contract of the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(CamelModel, Generic[T]):
    """
    One page of an ordered collection plus the numbers a pager needs.

    Pages are 1-based. A page past the end is empty but still reports the
    real total count.
    """

    items: List[T] = Field(default_factory=list)
    current_page: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def build(
        cls,
        items: Sequence[T],
        page_number: int,
        page_size: int,
        total_count: int,
    ) -> "Page[T]":
        total_pages = math.ceil(total_count / page_size) if page_size else 0
        return cls(
            items=list(items),
            current_page=page_number,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            has_previous_page=page_number > 1,
            has_next_page=page_number < total_pages,
        )


class NamedItem(CamelModel):
    """`{id, name}` reference used inside detail views."""

    id: int
    name: Optional[str] = None


class HealthResponse(CamelModel):
    """Returned by GET /health for monitoring and load balancer health checks."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
