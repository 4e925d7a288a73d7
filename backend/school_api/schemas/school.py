"""
School API Backend — School Read Models
=========================================

What:  Response shapes for students, departments, instructors and subjects.
How:   Each `from_entity` reads an ORM object whose relationships were
       eager-loaded by the repository and collapses the Arabic/English name
       pair to a single `name` for the request culture. Missing references
       (a student without a department, an instructor without a supervisor)
       map to null fields.

Wire shapes (camelCase):
    StudentResponse     {id, name, address, phone, departmentId, departmentName}
    StudentDetail       StudentResponse + subjects: [{subjectId, name, grade}]
    DepartmentResponse  {id, name, managerId, managerName}
    DepartmentDetail    DepartmentResponse + subjects, instructors: [{id, name}],
                        students: Page[{id, name}]
    InstructorResponse  {id, name, address, position, salary, departmentId,
                         departmentName, supervisorId, supervisorName}
    InstructorDetail    InstructorResponse + subjects: [{id, name}]
    SubjectResponse     {id, name, period}
"""

from typing import Any, List, Optional

from pydantic import Field

from school_api.localization import localize
from school_api.schemas.common import CamelModel, NamedItem, Page


def _name_of(entity: Any) -> Optional[str]:
    if entity is None:
        return None
    return localize(entity.name_ar, entity.name_en)


def named_items(entities: Any) -> List[NamedItem]:
    return [NamedItem(id=entity.id, name=_name_of(entity)) for entity in entities]


# ── Subjects ──────────────────────────────────────────────────────────────

class SubjectResponse(CamelModel):
    id: int
    name: Optional[str] = None
    period: Optional[int] = None

    @classmethod
    def from_entity(cls, subject: Any) -> "SubjectResponse":
        return cls(id=subject.id, name=_name_of(subject), period=subject.period)


# ── Students ──────────────────────────────────────────────────────────────

class StudentResponse(CamelModel):
    id: int
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None

    @classmethod
    def from_entity(cls, student: Any) -> "StudentResponse":
        return cls(
            id=student.id,
            name=_name_of(student),
            address=student.address,
            phone=student.phone,
            department_id=student.department_id,
            department_name=_name_of(student.department),
        )


class EnrollmentItem(CamelModel):
    subject_id: int
    name: Optional[str] = None
    grade: Optional[int] = None


class StudentDetail(StudentResponse):
    subjects: List[EnrollmentItem] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, student: Any) -> "StudentDetail":
        base = StudentResponse.from_entity(student)
        return cls(
            **base.model_dump(),
            subjects=[
                EnrollmentItem(
                    subject_id=link.subject_id,
                    name=_name_of(link.subject),
                    grade=link.grade,
                )
                for link in sorted(student.subject_links, key=lambda link: link.subject_id)
            ],
        )


# ── Instructors ───────────────────────────────────────────────────────────

class InstructorResponse(CamelModel):
    id: int
    name: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[float] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    supervisor_id: Optional[int] = None
    supervisor_name: Optional[str] = None

    @classmethod
    def from_entity(cls, instructor: Any) -> "InstructorResponse":
        return cls(
            id=instructor.id,
            name=_name_of(instructor),
            address=instructor.address,
            position=instructor.position,
            salary=instructor.salary,
            department_id=instructor.department_id,
            department_name=_name_of(instructor.department),
            supervisor_id=instructor.supervisor_id,
            supervisor_name=_name_of(instructor.supervisor),
        )


class InstructorDetail(InstructorResponse):
    subjects: List[NamedItem] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, instructor: Any) -> "InstructorDetail":
        base = InstructorResponse.from_entity(instructor)
        return cls(**base.model_dump(), subjects=named_items(instructor.subjects))


# ── Departments ───────────────────────────────────────────────────────────

class DepartmentResponse(CamelModel):
    id: int
    name: Optional[str] = None
    manager_id: int
    manager_name: Optional[str] = None

    @classmethod
    def from_entity(cls, department: Any) -> "DepartmentResponse":
        return cls(
            id=department.id,
            name=_name_of(department),
            manager_id=department.manager_id,
            manager_name=_name_of(department.manager),
        )


class DepartmentDetail(DepartmentResponse):
    subjects: List[NamedItem] = Field(default_factory=list)
    instructors: List[NamedItem] = Field(default_factory=list)
    students: Page[NamedItem]

    @classmethod
    def from_entity(cls, department: Any, students: Page[NamedItem]) -> "DepartmentDetail":
        base = DepartmentResponse.from_entity(department)
        return cls(
            **base.model_dump(),
            subjects=named_items(department.subjects),
            instructors=named_items(department.instructors),
            students=students,
        )
