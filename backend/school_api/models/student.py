"""
School API Backend — Student SQLAlchemy Model
===============================================

What:  ORM model for the `students` table.

    department_id → departments.id   nullable, ON DELETE SET NULL

    Deleting a department leaves its students in place with no department.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.database import Base

if TYPE_CHECKING:
    from school_api.models.department import Department
    from school_api.models.links import StudentSubject


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_ar: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    name_en: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    department: Mapped[Optional["Department"]] = relationship(viewonly=True)
    subject_links: Mapped[List["StudentSubject"]] = relationship(viewonly=True)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name_en='{self.name_en}', department_id={self.department_id})>"
