"""
School API Backend — Instructors Feature
==========================================

What:  Commands, queries, validators and handlers for instructors.

Operations:
    AddInstructorCommand              → Created   InstructorDetail
    EditInstructorCommand             → Updated   InstructorDetail
    DeleteInstructorCommand           → Deleted
    GetInstructorByIdQuery            → Success   InstructorDetail
    GetInstructorListQuery            → Success   [InstructorResponse]
    AssignSubjectToInstructorCommand  → Created   NamedItem (the subject)

Department and supervisor references must exist. Deleting an instructor
clears `supervisorId` on the instructors they supervised; it fails while
they manage a department or still teach a subject.
"""

import logging
from typing import Optional

from school_api.exceptions import PersistenceError
from school_api.features.common import clean
from school_api.localization import MessageKeys, localize, resolve
from school_api.mediator import Command, Query, RequestHandler
from school_api.models import Department, Instructor
from school_api.repositories import DepartmentRepository, InstructorRepository, SubjectRepository
from school_api.responses import Envelope, bad_request, created, deleted, not_found, success, updated
from school_api.schemas.common import NamedItem
from school_api.schemas.school import InstructorDetail, InstructorResponse
from school_api.validation import CommandValidator, Rules

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 200
ADDRESS_MAX_LENGTH = 500
POSITION_MAX_LENGTH = 100
SALARY_MAX = 10_000_000


class AddInstructorCommand(Command):
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[float] = None
    department_id: Optional[int] = None
    supervisor_id: Optional[int] = None


class EditInstructorCommand(AddInstructorCommand):
    id: Optional[int] = None


class DeleteInstructorCommand(Command):
    id: int


class GetInstructorByIdQuery(Query):
    id: int


class GetInstructorListQuery(Query):
    pass


class AssignSubjectToInstructorCommand(Command):
    instructor_id: int
    subject_id: int


def _instructor_fields(command, rules: Rules) -> None:
    rules.required("nameAr", command.name_ar).max_length("nameAr", command.name_ar, NAME_MAX_LENGTH)
    rules.required("nameEn", command.name_en).max_length("nameEn", command.name_en, NAME_MAX_LENGTH)
    rules.max_length("address", command.address, ADDRESS_MAX_LENGTH)
    rules.max_length("position", command.position, POSITION_MAX_LENGTH)
    rules.in_range("salary", command.salary, 0, SALARY_MAX)
    rules.positive("departmentId", command.department_id)
    rules.positive("supervisorId", command.supervisor_id)


class AddInstructorValidator(CommandValidator[AddInstructorCommand]):
    def rules(self, command, rules):
        _instructor_fields(command, rules)


class EditInstructorValidator(CommandValidator[EditInstructorCommand]):
    def rules(self, command, rules):
        rules.required("id", command.id).positive("id", command.id)
        _instructor_fields(command, rules)


class _InstructorHandler(RequestHandler):
    def __init__(self, session):
        super().__init__(session)
        self.instructors = InstructorRepository(session)

    async def _reference_error(self, command: AddInstructorCommand) -> Optional[Envelope]:
        """BadRequest if the department or supervisor does not exist."""
        if command.department_id is not None and not await DepartmentRepository(self.session).exists(
            Department.id == command.department_id
        ):
            return bad_request(resolve(MessageKeys.DEPARTMENT_NOT_FOUND))
        if command.supervisor_id is not None and not await self.instructors.exists(
            Instructor.id == command.supervisor_id
        ):
            return bad_request(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))
        return None

    @staticmethod
    def _apply(instructor: Instructor, command: AddInstructorCommand) -> None:
        instructor.name_ar = clean(command.name_ar)
        instructor.name_en = clean(command.name_en)
        instructor.address = clean(command.address)
        instructor.position = clean(command.position)
        instructor.salary = command.salary
        instructor.department_id = command.department_id
        instructor.supervisor_id = command.supervisor_id

    async def _detail(self, instructor_id: int) -> InstructorDetail:
        return InstructorDetail.from_entity(await self.instructors.find_detail(instructor_id))


class AddInstructorHandler(_InstructorHandler):
    async def handle(self, command: AddInstructorCommand) -> Envelope:
        error = await self._reference_error(command)
        if error is not None:
            return error

        instructor = Instructor()
        self._apply(instructor, command)
        try:
            await self.instructors.add(instructor)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Instructor created: id=%s", instructor.id)
        return created(await self._detail(instructor.id))


class EditInstructorHandler(_InstructorHandler):
    async def handle(self, command: EditInstructorCommand) -> Envelope:
        instructor = await self.instructors.find_by_id(command.id)
        if instructor is None:
            return not_found(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))
        if command.supervisor_id is not None and command.supervisor_id == command.id:
            return bad_request(resolve(MessageKeys.SELF_SUPERVISION))
        error = await self._reference_error(command)
        if error is not None:
            return error

        self._apply(instructor, command)
        try:
            await self.instructors.update(instructor)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.UPDATE_FAILED))

        logger.info("Instructor updated: id=%s", command.id)
        return updated(await self._detail(command.id))


class DeleteInstructorHandler(_InstructorHandler):
    async def handle(self, command: DeleteInstructorCommand) -> Envelope:
        if not await self.instructors.exists(Instructor.id == command.id):
            return not_found(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))
        try:
            removed = await self.instructors.delete(command.id)
        except PersistenceError:
            logger.warning("Instructor %s is still referenced and was not deleted", command.id)
            return bad_request(resolve(MessageKeys.DELETED_FAILED))
        if not removed:
            return not_found(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))
        logger.info("Instructor deleted: id=%s", command.id)
        return deleted()


class GetInstructorByIdHandler(_InstructorHandler):
    async def handle(self, query: GetInstructorByIdQuery) -> Envelope:
        instructor = await self.instructors.find_detail(query.id)
        if instructor is None:
            return not_found(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))
        return success(InstructorDetail.from_entity(instructor))


class GetInstructorListHandler(_InstructorHandler):
    async def handle(self, query: GetInstructorListQuery) -> Envelope:
        instructors = await self.instructors.list_with_references()
        items = [InstructorResponse.from_entity(instructor) for instructor in instructors]
        return success(items, meta={"count": len(items)})


class AssignSubjectToInstructorHandler(_InstructorHandler):
    async def handle(self, command: AssignSubjectToInstructorCommand) -> Envelope:
        if not await self.instructors.exists(Instructor.id == command.instructor_id):
            return not_found(resolve(MessageKeys.INSTRUCTOR_NOT_FOUND))
        subject = await SubjectRepository(self.session).find_by_id(command.subject_id)
        if subject is None:
            return not_found(resolve(MessageKeys.SUBJECT_NOT_FOUND))
        if await self.instructors.teaches(command.instructor_id, command.subject_id):
            return bad_request(resolve(MessageKeys.IS_EXIST, field="subject"))

        try:
            await self.instructors.add_subject(command.instructor_id, command.subject_id)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Subject %s assigned to instructor %s", command.subject_id, command.instructor_id)
        return created(NamedItem(id=subject.id, name=localize(subject.name_ar, subject.name_en)))


HANDLERS = [
    (AddInstructorCommand, AddInstructorHandler),
    (EditInstructorCommand, EditInstructorHandler),
    (DeleteInstructorCommand, DeleteInstructorHandler),
    (GetInstructorByIdQuery, GetInstructorByIdHandler),
    (GetInstructorListQuery, GetInstructorListHandler),
    (AssignSubjectToInstructorCommand, AssignSubjectToInstructorHandler),
]
