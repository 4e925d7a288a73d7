"""
School API Backend — Students Feature
=======================================

What:  Commands, queries, validators and handlers for students and their
       subject enrollments.

Operations:
    AddStudentCommand             → Created   StudentDetail
    EditStudentCommand            → Updated   StudentDetail
    DeleteStudentCommand          → Deleted
    GetStudentByIdQuery           → Success   StudentDetail
    GetStudentListQuery           → Success   [StudentResponse]
    GetStudentPaginatedListQuery  → Success   Page[StudentResponse]
    EnrollStudentCommand          → Created   StudentDetail
    SetStudentGradeCommand        → Updated   StudentDetail

A `departmentId` that does not match a department is not an error: the
student is stored without a department and a warning is logged.
"""

import logging
from typing import Optional

from school_api.exceptions import PersistenceError
from school_api.features.common import PagedQuery, PagedQueryValidator, clean
from school_api.localization import MessageKeys, resolve
from school_api.mediator import Command, Query, RequestHandler
from school_api.models import Department, Student, Subject
from school_api.repositories import DepartmentRepository, StudentOrdering, StudentRepository, SubjectRepository
from school_api.responses import (
    Envelope,
    bad_request,
    created,
    deleted,
    not_found,
    success,
    updated,
)
from school_api.schemas.common import Page
from school_api.schemas.school import StudentDetail, StudentResponse
from school_api.validation import CommandValidator, Rules

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 200
ADDRESS_MAX_LENGTH = 500
PHONE_MAX_LENGTH = 500
GRADE_MIN, GRADE_MAX = 0, 100


# ══════════════════════════════════════════════════════════════════════════
# Commands and queries
# ══════════════════════════════════════════════════════════════════════════

class AddStudentCommand(Command):
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    department_id: Optional[int] = None


class EditStudentCommand(Command):
    id: Optional[int] = None
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    department_id: Optional[int] = None


class DeleteStudentCommand(Command):
    id: int


class GetStudentByIdQuery(Query):
    id: int


class GetStudentListQuery(Query):
    pass


class GetStudentPaginatedListQuery(PagedQuery):
    order_by: StudentOrdering = StudentOrdering.ID
    search: Optional[str] = None


class EnrollStudentCommand(Command):
    student_id: Optional[int] = None
    subject_id: Optional[int] = None
    grade: Optional[int] = None


class SetStudentGradeCommand(Command):
    student_id: Optional[int] = None
    subject_id: Optional[int] = None
    grade: Optional[int] = None


# ══════════════════════════════════════════════════════════════════════════
# Validators
# ══════════════════════════════════════════════════════════════════════════

def _student_fields(command, rules: Rules) -> None:
    rules.required("nameAr", command.name_ar).max_length("nameAr", command.name_ar, NAME_MAX_LENGTH)
    rules.required("nameEn", command.name_en).max_length("nameEn", command.name_en, NAME_MAX_LENGTH)
    rules.max_length("address", command.address, ADDRESS_MAX_LENGTH)
    rules.max_length("phone", command.phone, PHONE_MAX_LENGTH)
    rules.positive("departmentId", command.department_id)


class AddStudentValidator(CommandValidator[AddStudentCommand]):
    def rules(self, command, rules):
        _student_fields(command, rules)


class EditStudentValidator(CommandValidator[EditStudentCommand]):
    def rules(self, command, rules):
        rules.required("id", command.id).positive("id", command.id)
        _student_fields(command, rules)


class GetStudentPaginatedListValidator(PagedQueryValidator):
    pass


class EnrollStudentValidator(CommandValidator[EnrollStudentCommand]):
    def rules(self, command, rules):
        rules.required("studentId", command.student_id).positive("studentId", command.student_id)
        rules.required("subjectId", command.subject_id).positive("subjectId", command.subject_id)
        rules.in_range("grade", command.grade, GRADE_MIN, GRADE_MAX)


class SetStudentGradeValidator(CommandValidator[SetStudentGradeCommand]):
    def rules(self, command, rules):
        rules.required("studentId", command.student_id).positive("studentId", command.student_id)
        rules.required("subjectId", command.subject_id).positive("subjectId", command.subject_id)
        rules.required("grade", command.grade).in_range("grade", command.grade, GRADE_MIN, GRADE_MAX)


# ══════════════════════════════════════════════════════════════════════════
# Handlers
# ══════════════════════════════════════════════════════════════════════════

class _StudentHandler(RequestHandler):
    def __init__(self, session):
        super().__init__(session)
        self.students = StudentRepository(session)

    async def _existing_department(self, department_id: Optional[int], student_name: str) -> Optional[int]:
        """`department_id` if that department exists, otherwise None (logged)."""
        if department_id is None:
            return None
        if await DepartmentRepository(self.session).exists(Department.id == department_id):
            return department_id
        logger.warning(
            "Department %s not found; student '%s' stored without a department",
            department_id,
            student_name,
        )
        return None

    async def _detail(self, student_id: int) -> StudentDetail:
        return StudentDetail.from_entity(await self.students.find_detail(student_id))


class AddStudentHandler(_StudentHandler):
    async def handle(self, command: AddStudentCommand) -> Envelope:
        name_ar, name_en = clean(command.name_ar), clean(command.name_en)
        if await self.students.name_taken(name_ar, name_en):
            logger.warning("Student name already exists: %s / %s", name_ar, name_en)
            return bad_request(resolve(MessageKeys.IS_EXIST, field="name"))

        student = Student(
            name_ar=name_ar,
            name_en=name_en,
            address=clean(command.address),
            phone=clean(command.phone),
            department_id=await self._existing_department(command.department_id, name_en),
        )
        try:
            await self.students.add(student)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Student created: id=%s", student.id)
        return created(await self._detail(student.id))


class EditStudentHandler(_StudentHandler):
    async def handle(self, command: EditStudentCommand) -> Envelope:
        student = await self.students.find_by_id(command.id)
        if student is None:
            return not_found(resolve(MessageKeys.STUDENT_NOT_FOUND))

        name_ar, name_en = clean(command.name_ar), clean(command.name_en)
        if await self.students.name_taken(name_ar, name_en, exclude_id=student.id):
            logger.warning("Student name already exists: %s / %s", name_ar, name_en)
            return bad_request(resolve(MessageKeys.IS_EXIST, field="name"))

        # Queries autoflush; every lookup happens before the first assignment.
        department_id = await self._existing_department(command.department_id, name_en)
        student.name_ar = name_ar
        student.name_en = name_en
        student.address = clean(command.address)
        student.phone = clean(command.phone)
        student.department_id = department_id
        try:
            await self.students.update(student)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.UPDATE_FAILED))

        logger.info("Student updated: id=%s", command.id)
        return updated(await self._detail(command.id))


class DeleteStudentHandler(_StudentHandler):
    async def handle(self, command: DeleteStudentCommand) -> Envelope:
        if not await self.students.exists(Student.id == command.id):
            return not_found(resolve(MessageKeys.STUDENT_NOT_FOUND))
        try:
            removed = await self.students.delete(command.id)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.DELETED_FAILED))
        if not removed:
            return not_found(resolve(MessageKeys.STUDENT_NOT_FOUND))
        logger.info("Student deleted: id=%s", command.id)
        return deleted()


class GetStudentByIdHandler(_StudentHandler):
    async def handle(self, query: GetStudentByIdQuery) -> Envelope:
        student = await self.students.find_detail(query.id)
        if student is None:
            return not_found(resolve(MessageKeys.STUDENT_NOT_FOUND))
        return success(StudentDetail.from_entity(student))


class GetStudentListHandler(_StudentHandler):
    async def handle(self, query: GetStudentListQuery) -> Envelope:
        students = await self.students.list_with_departments()
        items = [StudentResponse.from_entity(student) for student in students]
        return success(items, meta={"count": len(items)})


class GetStudentPaginatedListHandler(_StudentHandler):
    async def handle(self, query: GetStudentPaginatedListQuery) -> Envelope:
        students, total_count = await self.students.paginate(
            query.page_number,
            query.page_size,
            order_by=query.order_by,
            search=query.search,
        )
        page = Page[StudentResponse].build(
            [StudentResponse.from_entity(student) for student in students],
            query.page_number,
            query.page_size,
            total_count,
        )
        return success(page)


class EnrollStudentHandler(_StudentHandler):
    async def handle(self, command: EnrollStudentCommand) -> Envelope:
        if not await self.students.exists(Student.id == command.student_id):
            return not_found(resolve(MessageKeys.STUDENT_NOT_FOUND))
        if not await SubjectRepository(self.session).exists(Subject.id == command.subject_id):
            return not_found(resolve(MessageKeys.SUBJECT_NOT_FOUND))
        if await self.students.enrollment(command.student_id, command.subject_id) is not None:
            return bad_request(resolve(MessageKeys.IS_EXIST, field="subject"))

        try:
            await self.students.enroll(command.student_id, command.subject_id, command.grade)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Student %s enrolled in subject %s", command.student_id, command.subject_id)
        return created(await self._detail(command.student_id))


class SetStudentGradeHandler(_StudentHandler):
    async def handle(self, command: SetStudentGradeCommand) -> Envelope:
        enrollment = await self.students.enrollment(command.student_id, command.subject_id)
        if enrollment is None:
            return not_found(resolve(MessageKeys.NOT_ENROLLED))

        enrollment.grade = command.grade
        try:
            await self.students.update(enrollment)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.UPDATE_FAILED))

        logger.info(
            "Grade set for student %s in subject %s: %s",
            command.student_id,
            command.subject_id,
            command.grade,
        )
        return updated(await self._detail(command.student_id))


HANDLERS = [
    (AddStudentCommand, AddStudentHandler),
    (EditStudentCommand, EditStudentHandler),
    (DeleteStudentCommand, DeleteStudentHandler),
    (GetStudentByIdQuery, GetStudentByIdHandler),
    (GetStudentListQuery, GetStudentListHandler),
    (GetStudentPaginatedListQuery, GetStudentPaginatedListHandler),
    (EnrollStudentCommand, EnrollStudentHandler),
    (SetStudentGradeCommand, SetStudentGradeHandler),
]
