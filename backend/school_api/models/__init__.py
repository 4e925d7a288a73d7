# Models package init
"""
School API Backend — ORM Models
=================================

Importing this package registers every table on `Base.metadata`, which
Alembic autogenerate and `create_schema()` rely on.
"""

from school_api.models.department import Department
from school_api.models.identity import Role, User, UserRole
from school_api.models.instructor import Instructor
from school_api.models.links import DepartmentSubject, InstructorSubject, StudentSubject
from school_api.models.student import Student
from school_api.models.subject import Subject

__all__ = [
    "Department",
    "DepartmentSubject",
    "Instructor",
    "InstructorSubject",
    "Role",
    "Student",
    "StudentSubject",
    "Subject",
    "User",
    "UserRole",
]
