"""
School API Backend — Instructor SQLAlchemy Model
==================================================

What:  ORM model for the `instructors` table.

    department_id → departments.id   nullable, ON DELETE RESTRICT
    supervisor_id → instructors.id   nullable, ON DELETE SET NULL
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.database import Base

if TYPE_CHECKING:
    from school_api.models.department import Department
    from school_api.models.subject import Subject


class Instructor(Base):
    __tablename__ = "instructors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_ar: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    position: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    salary: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)

    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    supervisor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("instructors.id", ondelete="SET NULL"),
        nullable=True,
    )

    department: Mapped[Optional["Department"]] = relationship(
        foreign_keys=[department_id],
        viewonly=True,
    )
    supervisor: Mapped[Optional["Instructor"]] = relationship(
        remote_side=[id],
        foreign_keys=[supervisor_id],
        viewonly=True,
    )
    subjects: Mapped[List["Subject"]] = relationship(
        secondary="instructor_subjects",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Instructor(id={self.id}, name_en='{self.name_en}')>"
