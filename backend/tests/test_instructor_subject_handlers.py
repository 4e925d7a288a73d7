"""
School API Backend — Instructor and Subject Handler Tests
===========================================================

What we test:
    ✅ Instructor references (department, supervisor) are checked
    ✅ An instructor cannot supervise themselves
    ✅ Deleting a supervisor clears supervisorId; a manager cannot be deleted
    ✅ Subject create / edit / delete / list, ordered by localized name
"""

import pytest

from school_api.features import mediator
from school_api.features.instructors import (
    AddInstructorCommand,
    AssignSubjectToInstructorCommand,
    DeleteInstructorCommand,
    EditInstructorCommand,
    GetInstructorByIdQuery,
    GetInstructorListQuery,
)
from school_api.features.subjects import (
    AddSubjectCommand,
    DeleteSubjectCommand,
    EditSubjectCommand,
    GetSubjectByIdQuery,
    GetSubjectListQuery,
)
from school_api.localization import locale_var
from school_api.models import Instructor
from school_api.repositories import InstructorRepository


class TestInstructors:

    @pytest.mark.asyncio
    async def test_create_with_references(self, db_session, school):
        department = await school.department(name_en="Chemistry")
        supervisor = await school.instructor(name_en="Dr. Adel")

        envelope = await mediator.send(
            AddInstructorCommand(
                name_ar="سلمى",
                name_en="Salma",
                position="Lecturer",
                salary=12500.5,
                department_id=department.id,
                supervisor_id=supervisor.id,
            ),
            db_session,
        )

        assert envelope.status_code == 201
        assert envelope.data.department_name == "Chemistry"
        assert envelope.data.supervisor_name == "Dr. Adel"
        assert envelope.data.salary == 12500.5

    @pytest.mark.asyncio
    async def test_unknown_department_is_rejected(self, db_session):
        envelope = await mediator.send(
            AddInstructorCommand(name_ar="سلمى", name_en="Salma", department_id=31), db_session
        )
        assert envelope.status_code == 400
        assert envelope.message == "Department not found"

    @pytest.mark.asyncio
    async def test_self_supervision_is_rejected(self, db_session, school):
        instructor = await school.instructor()
        envelope = await mediator.send(
            EditInstructorCommand(
                id=instructor.id, name_ar="س", name_en="S", supervisor_id=instructor.id
            ),
            db_session,
        )
        assert envelope.status_code == 400
        assert envelope.message == "An instructor cannot supervise themselves"

    @pytest.mark.asyncio
    async def test_deleting_supervisor_clears_reference(self, db_session, school):
        supervisor = await school.instructor()
        junior = await school.instructor(supervisor_id=supervisor.id)

        envelope = await mediator.send(DeleteInstructorCommand(id=supervisor.id), db_session)

        assert envelope.status_code == 200
        fetched = await mediator.send(GetInstructorByIdQuery(id=junior.id), db_session)
        assert fetched.data.supervisor_id is None
        assert fetched.data.supervisor_name is None

    @pytest.mark.asyncio
    async def test_manager_cannot_be_deleted(self, db_session, school):
        department = await school.department()
        manager_id = department.manager_id
        await db_session.commit()

        envelope = await mediator.send(DeleteInstructorCommand(id=manager_id), db_session)

        assert envelope.status_code == 400
        assert await InstructorRepository(db_session).exists(Instructor.id == manager_id)

    @pytest.mark.asyncio
    async def test_list_and_subjects(self, db_session, school):
        instructor = await school.instructor()
        await school.instructor()
        subject = await school.subject(name_en="Optics")

        assigned = await mediator.send(
            AssignSubjectToInstructorCommand(instructor_id=instructor.id, subject_id=subject.id), db_session
        )
        listed = await mediator.send(GetInstructorListQuery(), db_session)
        detail = await mediator.send(GetInstructorByIdQuery(id=instructor.id), db_session)

        assert assigned.status_code == 201
        assert listed.meta == {"count": 2}
        assert [item.name for item in detail.data.subjects] == ["Optics"]


class TestSubjects:

    @pytest.mark.asyncio
    async def test_create_edit_delete(self, db_session):
        created = await mediator.send(AddSubjectCommand(name_ar="تاريخ", name_en="History", period=10), db_session)
        subject_id = created.data.id

        edited = await mediator.send(
            EditSubjectCommand(id=subject_id, name_ar="تاريخ", name_en="World History", period=12), db_session
        )
        deleted = await mediator.send(DeleteSubjectCommand(id=subject_id), db_session)
        missing = await mediator.send(GetSubjectByIdQuery(id=subject_id), db_session)

        assert created.status_code == 201
        assert edited.data.name == "World History" and edited.data.period == 12
        assert deleted.status_code == 200
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_duplicate_is_rejected(self, db_session, school):
        await school.subject(name_en="Geography", name_ar="جغرافيا")
        envelope = await mediator.send(AddSubjectCommand(name_ar="جغرافيا", name_en="Geo"), db_session)
        assert envelope.status_code == 400

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_localized_name(self, db_session, school):
        await school.subject(name_en="Zoology", name_ar="أ علم الحيوان")
        await school.subject(name_en="Art", name_ar="ي فنون")

        english = await mediator.send(GetSubjectListQuery(), db_session)
        token = locale_var.set("ar-EG")
        try:
            arabic = await mediator.send(GetSubjectListQuery(), db_session)
        finally:
            locale_var.reset(token)

        assert [item.name for item in english.data] == ["Art", "Zoology"]
        assert [item.name for item in arabic.data] == ["أ علم الحيوان", "ي فنون"]
