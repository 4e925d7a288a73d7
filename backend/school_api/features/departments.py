"""
School API Backend — Departments Feature
==========================================

What:  Commands, queries, validators and handlers for departments.

Operations:
    AddDepartmentCommand              → Created   DepartmentResponse
    EditDepartmentCommand             → Updated   DepartmentResponse
    DeleteDepartmentCommand           → Deleted
    GetDepartmentByIdQuery            → Success   DepartmentDetail (with a page of students)
    GetDepartmentListQuery            → Success   Page[DepartmentResponse]
    AssignSubjectToDepartmentCommand  → Created   NamedItem (the subject)

Deleting a department detaches its students (their department becomes null).
It fails with BadRequest while subjects or instructors still reference it.
"""

import logging
from typing import Optional

from pydantic import Field

from school_api.config import settings
from school_api.exceptions import PersistenceError
from school_api.features.common import MAX_PAGE_NUMBER, PagedQuery, PagedQueryValidator, clean
from school_api.localization import MessageKeys, localize, resolve
from school_api.mediator import Command, Query, RequestHandler
from school_api.models import Department, Instructor
from school_api.repositories import (
    DepartmentRepository,
    InstructorRepository,
    StudentRepository,
    SubjectRepository,
)
from school_api.responses import Envelope, bad_request, created, deleted, not_found, success, updated
from school_api.schemas.common import NamedItem, Page
from school_api.schemas.school import DepartmentDetail, DepartmentResponse, named_items
from school_api.validation import CommandValidator, Rules

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 500


class AddDepartmentCommand(Command):
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    manager_id: Optional[int] = None


class EditDepartmentCommand(Command):
    id: Optional[int] = None
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    manager_id: Optional[int] = None


class DeleteDepartmentCommand(Command):
    id: int


class GetDepartmentByIdQuery(Query):
    id: int
    student_page_number: int = Field(default=1)
    student_page_size: int = Field(default_factory=lambda: settings.default_page_size)


class GetDepartmentListQuery(PagedQuery):
    pass


class AssignSubjectToDepartmentCommand(Command):
    department_id: int
    subject_id: int


def _department_fields(command, rules: Rules) -> None:
    rules.required("nameAr", command.name_ar).max_length("nameAr", command.name_ar, NAME_MAX_LENGTH)
    rules.required("nameEn", command.name_en).max_length("nameEn", command.name_en, NAME_MAX_LENGTH)
    rules.required("managerId", command.manager_id).positive("managerId", command.manager_id)


class AddDepartmentValidator(CommandValidator[AddDepartmentCommand]):
    def rules(self, command, rules):
        _department_fields(command, rules)


class EditDepartmentValidator(CommandValidator[EditDepartmentCommand]):
    def rules(self, command, rules):
        rules.required("id", command.id).positive("id", command.id)
        _department_fields(command, rules)


class GetDepartmentByIdValidator(CommandValidator[GetDepartmentByIdQuery]):
    def rules(self, query, rules):
        rules.in_range("studentPageNumber", query.student_page_number, 1, MAX_PAGE_NUMBER)
        rules.in_range("studentPageSize", query.student_page_size, 1, settings.max_page_size)


class GetDepartmentListValidator(PagedQueryValidator):
    pass


class _DepartmentHandler(RequestHandler):
    def __init__(self, session):
        super().__init__(session)
        self.departments = DepartmentRepository(session)

    async def _manager_missing(self, manager_id: Optional[int]) -> bool:
        return not await InstructorRepository(self.session).exists(Instructor.id == manager_id)

    async def _response(self, department_id: int) -> DepartmentResponse:
        return DepartmentResponse.from_entity(await self.departments.find_detail(department_id))


class AddDepartmentHandler(_DepartmentHandler):
    async def handle(self, command: AddDepartmentCommand) -> Envelope:
        name_ar, name_en = clean(command.name_ar), clean(command.name_en)
        if await self.departments.name_taken(name_ar, name_en):
            logger.warning("Department name already exists: %s / %s", name_ar, name_en)
            return bad_request(resolve(MessageKeys.IS_EXIST, field="name"))
        if await self._manager_missing(command.manager_id):
            return bad_request(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))

        department = Department(name_ar=name_ar, name_en=name_en, manager_id=command.manager_id)
        try:
            await self.departments.add(department)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Department created: id=%s manager=%s", department.id, department.manager_id)
        return created(await self._response(department.id))


class EditDepartmentHandler(_DepartmentHandler):
    async def handle(self, command: EditDepartmentCommand) -> Envelope:
        department = await self.departments.find_by_id(command.id)
        if department is None:
            return not_found(resolve(MessageKeys.DEPARTMENT_NOT_FOUND))

        name_ar, name_en = clean(command.name_ar), clean(command.name_en)
        if await self.departments.name_taken(name_ar, name_en, exclude_id=department.id):
            logger.warning("Department name already exists: %s / %s", name_ar, name_en)
            return bad_request(resolve(MessageKeys.IS_EXIST, field="name"))
        if await self._manager_missing(command.manager_id):
            return bad_request(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))

        department.name_ar = name_ar
        department.name_en = name_en
        department.manager_id = command.manager_id
        try:
            await self.departments.update(department)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.UPDATE_FAILED))

        logger.info("Department updated: id=%s", command.id)
        return updated(await self._response(command.id))


class DeleteDepartmentHandler(_DepartmentHandler):
    async def handle(self, command: DeleteDepartmentCommand) -> Envelope:
        if not await self.departments.exists(Department.id == command.id):
            return not_found(resolve(MessageKeys.DEPARTMENT_NOT_FOUND))
        try:
            removed = await self.departments.delete(command.id)
        except PersistenceError:
            logger.warning("Department %s is still referenced and was not deleted", command.id)
            return bad_request(resolve(MessageKeys.DELETED_FAILED))
        if not removed:
            return not_found(resolve(MessageKeys.DEPARTMENT_NOT_FOUND))
        logger.info("Department deleted: id=%s", command.id)
        return deleted()


class GetDepartmentByIdHandler(_DepartmentHandler):
    async def handle(self, query: GetDepartmentByIdQuery) -> Envelope:
        department = await self.departments.find_detail(query.id)
        if department is None:
            return not_found(resolve(MessageKeys.DEPARTMENT_NOT_FOUND))

        students, total_count = await StudentRepository(self.session).in_department(
            department.id, query.student_page_number, query.student_page_size
        )
        student_page = Page[NamedItem].build(
            named_items(students),
            query.student_page_number,
            query.student_page_size,
            total_count,
        )
        return success(DepartmentDetail.from_entity(department, student_page))


class GetDepartmentListHandler(_DepartmentHandler):
    async def handle(self, query: GetDepartmentListQuery) -> Envelope:
        departments, total_count = await self.departments.paginate(query.page_number, query.page_size)
        page = Page[DepartmentResponse].build(
            [DepartmentResponse.from_entity(department) for department in departments],
            query.page_number,
            query.page_size,
            total_count,
        )
        return success(page)


class AssignSubjectToDepartmentHandler(_DepartmentHandler):
    async def handle(self, command: AssignSubjectToDepartmentCommand) -> Envelope:
        if not await self.departments.exists(Department.id == command.department_id):
            return not_found(resolve(MessageKeys.DEPARTMENT_NOT_FOUND))
        subject = await SubjectRepository(self.session).find_by_id(command.subject_id)
        if subject is None:
            return not_found(resolve(MessageKeys.SUBJECT_NOT_FOUND))
        if await self.departments.has_subject(command.department_id, command.subject_id):
            return bad_request(resolve(MessageKeys.IS_EXIST, field="subject"))

        try:
            await self.departments.add_subject(command.department_id, command.subject_id)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Subject %s assigned to department %s", command.subject_id, command.department_id)
        return created(NamedItem(id=subject.id, name=localize(subject.name_ar, subject.name_en)))


HANDLERS = [
    (AddDepartmentCommand, AddDepartmentHandler),
    (EditDepartmentCommand, EditDepartmentHandler),
    (DeleteDepartmentCommand, DeleteDepartmentHandler),
    (GetDepartmentByIdQuery, GetDepartmentByIdHandler),
    (GetDepartmentListQuery, GetDepartmentListHandler),
    (AssignSubjectToDepartmentCommand, AssignSubjectToDepartmentHandler),
]
