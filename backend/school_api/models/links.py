"""
School API Backend — Join Record Models
=========================================

What:  Many-to-many join tables between the school entities.
How:   Composite primary keys make each pair unique; both foreign keys are
       ON DELETE RESTRICT, so an entity that still has links cannot be deleted.

    department_subjects (department_id, subject_id)
    instructor_subjects (instructor_id, subject_id)
    student_subjects    (student_id, subject_id, grade)
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.database import Base

if TYPE_CHECKING:
    from school_api.models.subject import Subject


class DepartmentSubject(Base):
    __tablename__ = "department_subjects"

    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id", ondelete="RESTRICT"), primary_key=True
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"), primary_key=True
    )


class InstructorSubject(Base):
    __tablename__ = "instructor_subjects"

    instructor_id: Mapped[int] = mapped_column(
        ForeignKey("instructors.id", ondelete="RESTRICT"), primary_key=True
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"), primary_key=True
    )


class StudentSubject(Base):
    """Enrollment of a student in a subject, with the grade once it is known."""

    __tablename__ = "student_subjects"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="RESTRICT"), primary_key=True
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"), primary_key=True
    )
    grade: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    subject: Mapped["Subject"] = relationship(viewonly=True)
