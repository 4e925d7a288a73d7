"""
School API Backend — Generic Persistence Gateway
==================================================

What:  Typed CRUD and pagination over one SQLAlchemy model.
How:   Thin wrapper around the request's AsyncSession. Writes are flushed
       (not committed) so the surrounding request transaction decides; the
       session dependency commits once the handler has returned.
Who:   Handlers, through the entity repositories in this package.

Failure translation:
    Any SQLAlchemyError raised by a write (unique index race, foreign key
    RESTRICT, lost connection) rolls the session back and is re-raised as
    PersistenceError. The driver's message is logged, never returned.

Deletes:
    `delete(id)` issues a SQL DELETE instead of `session.delete(obj)`. The
    ORM would otherwise null or cascade children itself; going through the
    store lets the declared referential actions (SET NULL, RESTRICT,
    CASCADE) decide, exactly as they would for any other client.
"""

import logging
from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, delete, exists, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import Base
from school_api.exceptions import PersistenceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Persistence operations shared by every entity with an integer `id`."""

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find_by_id(self, entity_id: int, *options: Any) -> Optional[ModelT]:
        """
        Load one entity, or None.

        `options` are loader options (selectinload, ...). The row is always
        re-read from the store so columns changed by referential actions
        (e.g. a nulled department) are current.
        """
        statement = (
            select(self.model)
            .where(self.model.id == entity_id)
            .options(*options)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def find_all(self, *options: Any, order_by: Any = None) -> List[ModelT]:
        statement = (
            select(self.model)
            .options(*options)
            .order_by(order_by if order_by is not None else self.model.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.scalars(statement)
        return list(result.all())

    async def find_page(
        self,
        page_number: int,
        page_size: int,
        statement: Optional[Select] = None,
        options: Sequence[Any] = (),
    ) -> Tuple[List[Any], int]:
        """
        Return `(items, total_count)` for a 1-based page of `statement`.

        `statement` defaults to every row ordered by id. The total is counted
        over the unpaged statement, so it is the same for every page.
        """
        if statement is None:
            statement = select(self.model).order_by(self.model.id)

        count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
        total_count = (await self.session.execute(count_statement)).scalar_one()

        paged = (
            statement.options(*options)
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .execution_options(populate_existing=True)
        )
        result = await self.session.scalars(paged)
        return list(result.all()), total_count

    async def exists(self, *criteria: Any) -> bool:
        """True if any row matches all of `criteria`."""
        statement = select(exists().where(*criteria))
        return bool((await self.session.execute(statement)).scalar())

    # ── Writes ────────────────────────────────────────────────────────────

    async def add(self, entity: Any) -> Any:
        """Insert `entity` and flush so its generated id is available."""
        self.session.add(entity)
        await self._flush("add", entity)
        return entity

    async def update(self, entity: Any) -> Any:
        """Flush pending changes made to an already loaded `entity`."""
        await self._flush("update", entity)
        return entity

    async def delete(self, entity_id: int) -> bool:
        """Delete by id. Returns False if no row had that id."""
        try:
            result = await self.session.execute(
                delete(self.model).where(self.model.id == entity_id)
            )
        except SQLAlchemyError as e:
            raise await self._failure("delete", e, entity_id) from e
        return result.rowcount > 0

    async def _flush(self, operation: str, entity: Any) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise await self._failure(operation, e, getattr(entity, "id", None)) from e

    async def _failure(self, operation: str, error: SQLAlchemyError, entity_id: Any) -> PersistenceError:
        """Roll back, log the driver error and build the exception to raise."""
        await self.session.rollback()
        logger.error(
            "%s %s failed for id=%s: %s",
            self.model.__name__,
            operation,
            entity_id,
            error,
        )
        return PersistenceError(
            context={
                "model": self.model.__name__,
                "operation": operation,
                "entity_id": entity_id,
                "error_type": type(error).__name__,
            }
        )
