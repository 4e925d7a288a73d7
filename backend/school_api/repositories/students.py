"""
School API Backend — Student Repository
=========================================

What:  Student persistence plus enrollment (student_subjects) records.
How:   Paginated listing supports ordering by id, name, address or
       department name (outer join, so students without a department are
       kept) and an optional search over both names and the address.
"""

from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from school_api.models import Department, Student, StudentSubject
from school_api.repositories.named import NamedRepository


class StudentOrdering(str, Enum):
    ID = "id"
    NAME = "name"
    ADDRESS = "address"
    DEPARTMENT_NAME = "departmentName"


class StudentRepository(NamedRepository[Student]):
    model = Student

    async def find_detail(self, student_id: int) -> Optional[Student]:
        """Student with department and enrolled subjects loaded."""
        return await self.find_by_id(
            student_id,
            selectinload(Student.department),
            selectinload(Student.subject_links).selectinload(StudentSubject.subject),
        )

    async def list_with_departments(self) -> List[Student]:
        return await self.find_all(selectinload(Student.department))

    async def paginate(
        self,
        page_number: int,
        page_size: int,
        order_by: StudentOrdering = StudentOrdering.ID,
        search: Optional[str] = None,
    ) -> Tuple[List[Student], int]:
        statement = select(Student).outerjoin(Department, Student.department_id == Department.id)

        if search:
            # "%" and "_" in the search text match themselves
            term = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{term}%"
            statement = statement.where(
                or_(
                    Student.name_ar.like(pattern, escape="\\"),
                    Student.name_en.like(pattern, escape="\\"),
                    Student.address.like(pattern, escape="\\"),
                )
            )

        if order_by is StudentOrdering.NAME:
            statement = statement.order_by(self.localized_name_column(), Student.id)
        elif order_by is StudentOrdering.ADDRESS:
            statement = statement.order_by(Student.address, Student.id)
        elif order_by is StudentOrdering.DEPARTMENT_NAME:
            department_name = Department.name_ar if self.prefers_arabic() else Department.name_en
            statement = statement.order_by(department_name, Student.id)
        else:
            statement = statement.order_by(Student.id)

        return await self.find_page(
            page_number,
            page_size,
            statement,
            options=(selectinload(Student.department),),
        )

    async def in_department(
        self, department_id: int, page_number: int, page_size: int
    ) -> Tuple[List[Student], int]:
        statement = (
            select(Student)
            .where(Student.department_id == department_id)
            .order_by(Student.id)
        )
        return await self.find_page(page_number, page_size, statement)

    # ── Enrollment ────────────────────────────────────────────────────────

    async def enrollment(self, student_id: int, subject_id: int) -> Optional[StudentSubject]:
        statement = (
            select(StudentSubject)
            .where(
                StudentSubject.student_id == student_id,
                StudentSubject.subject_id == subject_id,
            )
            .execution_options(populate_existing=True)
        )
        return (await self.session.execute(statement)).scalar_one_or_none()

    async def enroll(self, student_id: int, subject_id: int, grade: Optional[int] = None) -> StudentSubject:
        link = StudentSubject(student_id=student_id, subject_id=subject_id, grade=grade)
        return await self.add(link)
