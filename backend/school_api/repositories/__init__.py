# Repositories package init
from school_api.repositories.base import Repository
from school_api.repositories.departments import DepartmentRepository
from school_api.repositories.identity import RoleRepository, UserRepository
from school_api.repositories.instructors import InstructorRepository
from school_api.repositories.students import StudentOrdering, StudentRepository
from school_api.repositories.subjects import SubjectRepository

__all__ = [
    "DepartmentRepository",
    "InstructorRepository",
    "Repository",
    "RoleRepository",
    "StudentOrdering",
    "StudentRepository",
    "SubjectRepository",
    "UserRepository",
]
