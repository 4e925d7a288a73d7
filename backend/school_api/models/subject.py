"""
School API Backend — Subject SQLAlchemy Model
===============================================

What:  ORM model for the `subjects` table. `period` is the course length in weeks.
"""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from school_api.database import Base


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name_en: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    period: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name_en='{self.name_en}')>"
