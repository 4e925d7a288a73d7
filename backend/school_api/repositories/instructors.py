"""Instructor persistence and instructor_subjects records."""

from typing import List, Optional

from sqlalchemy.orm import selectinload

from school_api.models import Instructor, InstructorSubject
from school_api.repositories.named import NamedRepository


class InstructorRepository(NamedRepository[Instructor]):
    model = Instructor

    async def find_detail(self, instructor_id: int) -> Optional[Instructor]:
        return await self.find_by_id(
            instructor_id,
            selectinload(Instructor.department),
            selectinload(Instructor.supervisor),
            selectinload(Instructor.subjects),
        )

    async def list_with_references(self) -> List[Instructor]:
        return await self.find_all(
            selectinload(Instructor.department),
            selectinload(Instructor.supervisor),
        )

    async def teaches(self, instructor_id: int, subject_id: int) -> bool:
        return await self.exists(
            InstructorSubject.instructor_id == instructor_id,
            InstructorSubject.subject_id == subject_id,
        )

    async def add_subject(self, instructor_id: int, subject_id: int) -> InstructorSubject:
        return await self.add(InstructorSubject(instructor_id=instructor_id, subject_id=subject_id))
