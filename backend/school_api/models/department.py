"""
School API Backend — Department SQLAlchemy Model
==================================================

What:  ORM model for the `departments` table.
Who:   Department repository and handlers; Alembic for schema management.

Referential rules (enforced by the store, not the ORM):
    manager_id  → instructors.id   NOT NULL, ON DELETE RESTRICT
    students.department_id          ON DELETE SET NULL   (see Student)
    instructors.department_id       ON DELETE RESTRICT   (see Instructor)
    department_subjects.department_id ON DELETE RESTRICT (see links)

    departments ⇄ instructors reference each other, so the manager foreign
    key is created after both tables exist (`use_alter=True`).

All relationships are view-only: writes always go through foreign key
columns, and deletes are plain SQL DELETEs so the rules above apply.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.database import Base

if TYPE_CHECKING:
    from school_api.models.instructor import Instructor
    from school_api.models.student import Student
    from school_api.models.subject import Subject


class Department(Base):
    """A department, managed by exactly one instructor."""

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_ar: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    name_en: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)

    manager_id: Mapped[int] = mapped_column(
        ForeignKey(
            "instructors.id",
            ondelete="RESTRICT",
            use_alter=True,
            name="fk_departments_manager_id",
        ),
        nullable=False,
        index=True,
    )

    manager: Mapped["Instructor"] = relationship(
        foreign_keys=[manager_id],
        viewonly=True,
    )
    students: Mapped[List["Student"]] = relationship(viewonly=True)
    instructors: Mapped[List["Instructor"]] = relationship(
        primaryjoin="Department.id == foreign(Instructor.department_id)",
        viewonly=True,
    )
    subjects: Mapped[List["Subject"]] = relationship(
        secondary="department_subjects",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name_en='{self.name_en}')>"
