"""
School API Backend — Subjects Feature
=======================================

    AddSubjectCommand      → Created   SubjectResponse
    EditSubjectCommand     → Updated   SubjectResponse
    DeleteSubjectCommand   → Deleted   (BadRequest while assigned or enrolled)
    GetSubjectByIdQuery    → Success   SubjectResponse
    GetSubjectListQuery    → Success   [SubjectResponse]
"""

import logging
from typing import Optional

from school_api.exceptions import PersistenceError
from school_api.features.common import clean
from school_api.localization import MessageKeys, resolve
from school_api.mediator import Command, Query, RequestHandler
from school_api.models import Subject
from school_api.repositories import SubjectRepository
from school_api.responses import Envelope, bad_request, created, deleted, not_found, success, updated
from school_api.schemas.school import SubjectResponse
from school_api.validation import CommandValidator, Rules

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
PERIOD_MIN, PERIOD_MAX = 1, 52


class AddSubjectCommand(Command):
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    period: Optional[int] = None


class EditSubjectCommand(AddSubjectCommand):
    id: Optional[int] = None


class DeleteSubjectCommand(Command):
    id: int


class GetSubjectByIdQuery(Query):
    id: int


class GetSubjectListQuery(Query):
    pass


def _subject_fields(command, rules: Rules) -> None:
    rules.required("nameAr", command.name_ar).max_length("nameAr", command.name_ar, NAME_MAX_LENGTH)
    rules.required("nameEn", command.name_en).max_length("nameEn", command.name_en, NAME_MAX_LENGTH)
    rules.in_range("period", command.period, PERIOD_MIN, PERIOD_MAX)


class AddSubjectValidator(CommandValidator[AddSubjectCommand]):
    def rules(self, command, rules):
        _subject_fields(command, rules)


class EditSubjectValidator(CommandValidator[EditSubjectCommand]):
    def rules(self, command, rules):
        rules.required("id", command.id).positive("id", command.id)
        _subject_fields(command, rules)


class _SubjectHandler(RequestHandler):
    def __init__(self, session):
        super().__init__(session)
        self.subjects = SubjectRepository(session)


class AddSubjectHandler(_SubjectHandler):
    async def handle(self, command: AddSubjectCommand) -> Envelope:
        name_ar, name_en = clean(command.name_ar), clean(command.name_en)
        if await self.subjects.name_taken(name_ar, name_en):
            logger.warning("Subject name already exists: %s / %s", name_ar, name_en)
            return bad_request(resolve(MessageKeys.IS_EXIST, field="name"))

        subject = Subject(name_ar=name_ar, name_en=name_en, period=command.period)
        try:
            await self.subjects.add(subject)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Subject created: id=%s", subject.id)
        return created(SubjectResponse.from_entity(subject))


class EditSubjectHandler(_SubjectHandler):
    async def handle(self, command: EditSubjectCommand) -> Envelope:
        subject = await self.subjects.find_by_id(command.id)
        if subject is None:
            return not_found(resolve(MessageKeys.SUBJECT_NOT_FOUND))

        name_ar, name_en = clean(command.name_ar), clean(command.name_en)
        if await self.subjects.name_taken(name_ar, name_en, exclude_id=subject.id):
            logger.warning("Subject name already exists: %s / %s", name_ar, name_en)
            return bad_request(resolve(MessageKeys.IS_EXIST, field="name"))

        subject.name_ar = name_ar
        subject.name_en = name_en
        subject.period = command.period
        try:
            await self.subjects.update(subject)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.UPDATE_FAILED))

        logger.info("Subject updated: id=%s", subject.id)
        return updated(SubjectResponse.from_entity(subject))


class DeleteSubjectHandler(_SubjectHandler):
    async def handle(self, command: DeleteSubjectCommand) -> Envelope:
        if not await self.subjects.exists(Subject.id == command.id):
            return not_found(resolve(MessageKeys.SUBJECT_NOT_FOUND))
        try:
            removed = await self.subjects.delete(command.id)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.DELETED_FAILED))
        if not removed:
            return not_found(resolve(MessageKeys.SUBJECT_NOT_FOUND))
        logger.info("Subject deleted: id=%s", command.id)
        return deleted()


class GetSubjectByIdHandler(_SubjectHandler):
    async def handle(self, query: GetSubjectByIdQuery) -> Envelope:
        subject = await self.subjects.find_by_id(query.id)
        if subject is None:
            return not_found(resolve(MessageKeys.SUBJECT_NOT_FOUND))
        return success(SubjectResponse.from_entity(subject))


class GetSubjectListHandler(_SubjectHandler):
    async def handle(self, query: GetSubjectListQuery) -> Envelope:
        subjects = await self.subjects.find_all(order_by=self.subjects.localized_name_column())
        items = [SubjectResponse.from_entity(subject) for subject in subjects]
        return success(items, meta={"count": len(items)})


HANDLERS = [
    (AddSubjectCommand, AddSubjectHandler),
    (EditSubjectCommand, EditSubjectHandler),
    (DeleteSubjectCommand, DeleteSubjectHandler),
    (GetSubjectByIdQuery, GetSubjectByIdHandler),
    (GetSubjectListQuery, GetSubjectListHandler),
]
