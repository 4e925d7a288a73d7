"""Lookups shared by entities that carry an Arabic and an English name."""

from typing import Any, Optional

from sqlalchemy import or_, select

from school_api.localization import current_locale
from school_api.repositories.base import ModelT, Repository


class NamedRepository(Repository[ModelT]):
    """Repository for models with `name_ar` / `name_en` columns."""

    async def find_by_name(self, name: str) -> Optional[ModelT]:
        """First entity whose Arabic or English name equals `name`."""
        statement = (
            select(self.model)
            .where(or_(self.model.name_ar == name, self.model.name_en == name))
            .order_by(self.model.id)
            .limit(1)
        )
        return (await self.session.execute(statement)).scalar_one_or_none()

    async def name_taken(
        self,
        name_ar: Optional[str],
        name_en: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> bool:
        """True if another entity already uses either name."""
        matches = []
        if name_ar is not None:
            matches.append(self.model.name_ar == name_ar)
        if name_en is not None:
            matches.append(self.model.name_en == name_en)
        if not matches:
            return False
        criteria = [or_(*matches)]
        if exclude_id is not None:
            criteria.append(self.model.id != exclude_id)
        return await self.exists(*criteria)

    @staticmethod
    def prefers_arabic() -> bool:
        return current_locale().lower().startswith("ar")

    def localized_name_column(self) -> Any:
        """Name column matching the request culture, for ordering."""
        return self.model.name_ar if self.prefers_arabic() else self.model.name_en
