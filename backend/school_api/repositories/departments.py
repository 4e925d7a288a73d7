"""Department persistence and department_subjects records."""

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from school_api.models import Department, DepartmentSubject
from school_api.repositories.named import NamedRepository


class DepartmentRepository(NamedRepository[Department]):
    model = Department

    async def find_detail(self, department_id: int) -> Optional[Department]:
        """Department with manager, subjects and instructors loaded."""
        return await self.find_by_id(
            department_id,
            selectinload(Department.manager),
            selectinload(Department.subjects),
            selectinload(Department.instructors),
        )

    async def paginate(self, page_number: int, page_size: int) -> Tuple[List[Department], int]:
        statement = select(Department).order_by(Department.id)
        return await self.find_page(
            page_number,
            page_size,
            statement,
            options=(selectinload(Department.manager),),
        )

    async def has_subject(self, department_id: int, subject_id: int) -> bool:
        return await self.exists(
            DepartmentSubject.department_id == department_id,
            DepartmentSubject.subject_id == subject_id,
        )

    async def add_subject(self, department_id: int, subject_id: int) -> DepartmentSubject:
        return await self.add(DepartmentSubject(department_id=department_id, subject_id=subject_id))
