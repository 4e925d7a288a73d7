"""
School API Backend — Student Handler Tests
============================================

What:  Student commands and queries dispatched through the mediator against
       a real SQLite session.

What we test:
    ✅ Create → retrievable by its new id; duplicate names → BadRequest
    ✅ Unknown department is stored as "no department", reads never fail
    ✅ Edit of a missing student → NotFound without changes
    ✅ Delete twice → Deleted then NotFound
    ✅ Pagination, enrollment and grading
"""

import pytest

from school_api.features import mediator
from school_api.features.students import (
    AddStudentCommand,
    DeleteStudentCommand,
    EditStudentCommand,
    EnrollStudentCommand,
    GetStudentByIdQuery,
    GetStudentListQuery,
    GetStudentPaginatedListQuery,
    SetStudentGradeCommand,
)
from school_api.localization import locale_var
from school_api.models import Student
from school_api.repositories import StudentRepository


class TestAddStudent:

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, db_session, school):
        department = await school.department(name_en="Science", name_ar="علوم")
        command = AddStudentCommand(
            name_ar="أحمد", name_en="Ahmed", address="Cairo", phone="0100", department_id=department.id
        )

        envelope = await mediator.send(command, db_session)

        assert envelope.status_code == 201
        student_id = envelope.data.id
        fetched = await mediator.send(GetStudentByIdQuery(id=student_id), db_session)
        assert fetched.succeeded
        assert fetched.data.name == "Ahmed"
        assert fetched.data.department_name == "Science"
        assert fetched.data.subjects == []

    @pytest.mark.asyncio
    async def test_duplicate_name_is_rejected(self, db_session, school):
        await school.student(name_en="Ahmed", name_ar="أحمد")

        envelope = await mediator.send(AddStudentCommand(name_ar="أحمد جديد", name_en="Ahmed"), db_session)

        assert envelope.status_code == 400
        assert envelope.message == "name already exists"

    @pytest.mark.asyncio
    async def test_missing_department_stores_student_without_one(self, db_session):
        envelope = await mediator.send(
            AddStudentCommand(name_ar="منى", name_en="Mona", department_id=3), db_session
        )

        assert envelope.status_code == 201
        assert envelope.data.department_id is None

        fetched = await mediator.send(GetStudentByIdQuery(id=envelope.data.id), db_session)
        assert fetched.status_code == 200
        assert fetched.data.department_id is None
        assert fetched.data.department_name is None

    @pytest.mark.asyncio
    async def test_names_follow_request_culture(self, db_session, school):
        student = await school.student(name_en="Omar", name_ar="عمر")
        token = locale_var.set("ar-EG")
        try:
            envelope = await mediator.send(GetStudentByIdQuery(id=student.id), db_session)
        finally:
            locale_var.reset(token)
        assert envelope.data.name == "عمر"


class TestEditAndDeleteStudent:

    @pytest.mark.asyncio
    async def test_edit_missing_student_is_not_found(self, db_session):
        envelope = await mediator.send(
            EditStudentCommand(id=42, name_ar="س", name_en="S"), db_session
        )
        assert envelope.status_code == 404
        assert not await StudentRepository(db_session).exists(Student.id == 42)

    @pytest.mark.asyncio
    async def test_edit_updates_fields(self, db_session, school):
        student = await school.student(name_en="Hany")
        department = await school.department(name_en="Arts")

        envelope = await mediator.send(
            EditStudentCommand(
                id=student.id, name_ar="هاني", name_en="Hany Adel", address="Tanta", department_id=department.id
            ),
            db_session,
        )

        assert envelope.status_code == 200
        assert envelope.message == "Updated successfully"
        assert envelope.data.name == "Hany Adel"
        assert envelope.data.department_name == "Arts"

    @pytest.mark.asyncio
    async def test_edit_to_a_taken_name_is_rejected(self, db_session, school):
        await school.student(name_en="Taken")
        student = await school.student(name_en="Free")

        envelope = await mediator.send(
            EditStudentCommand(id=student.id, name_ar="حر", name_en="Taken"), db_session
        )
        assert envelope.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_name_committed_concurrently_is_rejected(self, db_session, school, monkeypatch):
        department = await school.department()
        await school.student(name_en="Taken")
        student = await school.student(name_en="Free")
        student_id, department_id = student.id, department.id
        await db_session.commit()

        # Another request inserted "Taken" after the uniqueness check ran
        async def never_taken(self, *args, **kwargs):
            return False

        monkeypatch.setattr(StudentRepository, "name_taken", never_taken)

        envelope = await mediator.send(
            EditStudentCommand(id=student_id, name_ar="حر", name_en="Taken", department_id=department_id),
            db_session,
        )

        assert envelope.status_code == 400
        assert envelope.message == "Update failed"
        reloaded = await StudentRepository(db_session).find_by_id(student_id)
        assert reloaded.name_en == "Free"

    @pytest.mark.asyncio
    async def test_delete_twice(self, db_session, school):
        student = await school.student()

        first = await mediator.send(DeleteStudentCommand(id=student.id), db_session)
        second = await mediator.send(DeleteStudentCommand(id=student.id), db_session)

        assert first.status_code == 200 and first.message == "Deleted successfully"
        assert second.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_enrolled_student_fails(self, db_session, school):
        student = await school.student()
        subject = await school.subject()
        await StudentRepository(db_session).enroll(student.id, subject.id)
        student_id = student.id
        await db_session.commit()

        envelope = await mediator.send(DeleteStudentCommand(id=student_id), db_session)

        assert envelope.status_code == 400
        assert envelope.message == "Delete failed"
        assert await StudentRepository(db_session).exists(Student.id == student_id)


class TestStudentLists:

    @pytest.mark.asyncio
    async def test_list_counts_all(self, db_session, school):
        for _ in range(3):
            await school.student()
        envelope = await mediator.send(GetStudentListQuery(), db_session)
        assert len(envelope.data) == 3
        assert envelope.meta == {"count": 3}

    @pytest.mark.asyncio
    async def test_paginated_list(self, db_session, school):
        for _ in range(25):
            await school.student()

        envelope = await mediator.send(
            GetStudentPaginatedListQuery(page_number=3, page_size=10), db_session
        )

        page = envelope.data
        assert len(page.items) == 5
        assert page.total_count == 25
        assert page.total_pages == 3
        assert page.has_previous_page and not page.has_next_page


class TestEnrollment:

    @pytest.mark.asyncio
    async def test_enroll_and_grade(self, db_session, school):
        student = await school.student()
        subject = await school.subject(name_en="Algebra")

        enrolled = await mediator.send(
            EnrollStudentCommand(student_id=student.id, subject_id=subject.id), db_session
        )
        assert enrolled.status_code == 201
        assert [item.name for item in enrolled.data.subjects] == ["Algebra"]
        assert enrolled.data.subjects[0].grade is None

        graded = await mediator.send(
            SetStudentGradeCommand(student_id=student.id, subject_id=subject.id, grade=91), db_session
        )
        assert graded.status_code == 200
        assert graded.data.subjects[0].grade == 91

    @pytest.mark.asyncio
    async def test_duplicate_enrollment_is_rejected(self, db_session, school):
        student = await school.student()
        subject = await school.subject()
        command = EnrollStudentCommand(student_id=student.id, subject_id=subject.id)

        await mediator.send(command, db_session)
        envelope = await mediator.send(command, db_session)

        assert envelope.status_code == 400
        assert envelope.message == "subject already exists"

    @pytest.mark.asyncio
    async def test_unknown_subject_is_not_found(self, db_session, school):
        student = await school.student()
        envelope = await mediator.send(EnrollStudentCommand(student_id=student.id, subject_id=999), db_session)
        assert envelope.status_code == 404
        assert envelope.message == "Subject not found"

    @pytest.mark.asyncio
    async def test_grade_without_enrollment_is_not_found(self, db_session, school):
        student = await school.student()
        subject = await school.subject()
        envelope = await mediator.send(
            SetStudentGradeCommand(student_id=student.id, subject_id=subject.id, grade=70), db_session
        )
        assert envelope.status_code == 404
        assert envelope.message == "The student is not enrolled in this subject"
