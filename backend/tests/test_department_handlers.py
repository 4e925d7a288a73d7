"""
School API Backend — Department Handler Tests
===============================================

What we test:
    ✅ Create requires an existing manager; names must be unique
    ✅ GetById includes manager, subjects, instructors and a page of students
    ✅ Delete detaches students; restricted while subjects are assigned
    ✅ Subject assignment and its duplicate check
"""

import pytest

from school_api.features import mediator
from school_api.features.departments import (
    AddDepartmentCommand,
    AssignSubjectToDepartmentCommand,
    DeleteDepartmentCommand,
    EditDepartmentCommand,
    GetDepartmentByIdQuery,
    GetDepartmentListQuery,
)
from school_api.models import Department
from school_api.repositories import DepartmentRepository, StudentRepository


class TestAddDepartment:

    @pytest.mark.asyncio
    async def test_create_with_manager(self, db_session, school):
        manager = await school.instructor(name_en="Dr. Samy", name_ar="د. سامي")

        envelope = await mediator.send(
            AddDepartmentCommand(name_ar="رياضيات", name_en="Mathematics", manager_id=manager.id),
            db_session,
        )

        assert envelope.status_code == 201
        assert envelope.data.name == "Mathematics"
        assert envelope.data.manager_id == manager.id
        assert envelope.data.manager_name == "Dr. Samy"

    @pytest.mark.asyncio
    async def test_unknown_manager_is_rejected(self, db_session):
        envelope = await mediator.send(
            AddDepartmentCommand(name_ar="رياضيات", name_en="Mathematics", manager_id=77), db_session
        )
        assert envelope.status_code == 400
        assert envelope.message == "Instructor not found"

    @pytest.mark.asyncio
    async def test_duplicate_name_is_rejected(self, db_session, school):
        department = await school.department(name_en="Physics")
        envelope = await mediator.send(
            AddDepartmentCommand(name_ar="فيزياء", name_en="Physics", manager_id=department.manager_id),
            db_session,
        )
        assert envelope.status_code == 400
        assert envelope.errors == ["name already exists"]


class TestEditDepartment:

    @pytest.mark.asyncio
    async def test_change_manager(self, db_session, school):
        department = await school.department()
        new_manager = await school.instructor(name_en="Dr. Hoda")

        envelope = await mediator.send(
            EditDepartmentCommand(
                id=department.id, name_ar=department.name_ar, name_en="Renamed", manager_id=new_manager.id
            ),
            db_session,
        )

        assert envelope.status_code == 200
        assert envelope.data.name == "Renamed"
        assert envelope.data.manager_name == "Dr. Hoda"

    @pytest.mark.asyncio
    async def test_missing_department_is_not_found(self, db_session, school):
        manager = await school.instructor()
        envelope = await mediator.send(
            EditDepartmentCommand(id=55, name_ar="س", name_en="S", manager_id=manager.id), db_session
        )
        assert envelope.status_code == 404
        assert envelope.message == "Department not found"


class TestGetDepartment:

    @pytest.mark.asyncio
    async def test_detail_with_student_page(self, db_session, school):
        manager = await school.instructor(name_en="Dr. Nour")
        department = await school.department(manager=manager, name_en="Biology")
        teacher = await school.instructor(name_en="Mr. Karim", department_id=department.id)
        subject = await school.subject(name_en="Genetics")
        await DepartmentRepository(db_session).add_subject(department.id, subject.id)
        for _ in range(12):
            await school.student(department_id=department.id)

        envelope = await mediator.send(
            GetDepartmentByIdQuery(id=department.id, student_page_number=2, student_page_size=5),
            db_session,
        )

        detail = envelope.data
        assert envelope.status_code == 200
        assert detail.manager_name == "Dr. Nour"
        assert [item.name for item in detail.subjects] == ["Genetics"]
        assert [item.id for item in detail.instructors] == [teacher.id]
        assert len(detail.students.items) == 5
        assert detail.students.total_count == 12
        assert detail.students.current_page == 2

    @pytest.mark.asyncio
    async def test_missing_department_is_not_found(self, db_session):
        envelope = await mediator.send(GetDepartmentByIdQuery(id=9), db_session)
        assert envelope.status_code == 404

    @pytest.mark.asyncio
    async def test_paginated_list(self, db_session, school):
        for _ in range(3):
            await school.department()
        envelope = await mediator.send(GetDepartmentListQuery(page_number=1, page_size=2), db_session)
        assert len(envelope.data.items) == 2
        assert envelope.data.total_count == 3
        assert envelope.data.has_next_page


class TestDeleteDepartment:

    @pytest.mark.asyncio
    async def test_delete_nulls_students(self, db_session, school):
        department = await school.department()
        student = await school.student(department_id=department.id)

        envelope = await mediator.send(DeleteDepartmentCommand(id=department.id), db_session)

        assert envelope.status_code == 200
        reloaded = await StudentRepository(db_session).find_by_id(student.id)
        assert reloaded.department_id is None

    @pytest.mark.asyncio
    async def test_delete_with_subjects_fails(self, db_session, school):
        department = await school.department()
        subject = await school.subject()
        await DepartmentRepository(db_session).add_subject(department.id, subject.id)
        department_id = department.id
        await db_session.commit()

        envelope = await mediator.send(DeleteDepartmentCommand(id=department_id), db_session)

        assert envelope.status_code == 400
        assert envelope.message == "Delete failed"
        assert await DepartmentRepository(db_session).exists(Department.id == department_id)

    @pytest.mark.asyncio
    async def test_delete_twice(self, db_session, school):
        department = await school.department()
        first = await mediator.send(DeleteDepartmentCommand(id=department.id), db_session)
        second = await mediator.send(DeleteDepartmentCommand(id=department.id), db_session)
        assert (first.status_code, second.status_code) == (200, 404)


class TestAssignSubject:

    @pytest.mark.asyncio
    async def test_assign_then_duplicate(self, db_session, school):
        department = await school.department()
        subject = await school.subject(name_en="Statistics")
        command = AssignSubjectToDepartmentCommand(department_id=department.id, subject_id=subject.id)

        first = await mediator.send(command, db_session)
        second = await mediator.send(command, db_session)

        assert first.status_code == 201
        assert first.data.name == "Statistics"
        assert second.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_department(self, db_session, school):
        subject = await school.subject()
        envelope = await mediator.send(
            AssignSubjectToDepartmentCommand(department_id=404, subject_id=subject.id), db_session
        )
        assert envelope.status_code == 404
