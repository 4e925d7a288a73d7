"""
School API Backend — Student Routes
=====================================

    GET    /api/students                                list all students
    GET    /api/students/paginated                      one page, ordered and searchable
    GET    /api/students/{id}                           detail with enrollments
    POST   /api/students                                create
    PUT    /api/students                                edit (id in body)
    DELETE /api/students/{id}                           delete
    POST   /api/students/{id}/subjects                  enroll in a subject
    PUT    /api/students/{id}/subjects/{subject_id}     set the grade
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.features.students import (
    AddStudentCommand,
    AddStudentValidator,
    DeleteStudentCommand,
    EditStudentCommand,
    EditStudentValidator,
    EnrollStudentCommand,
    EnrollStudentValidator,
    GetStudentByIdQuery,
    GetStudentListQuery,
    GetStudentPaginatedListQuery,
    GetStudentPaginatedListValidator,
    SetStudentGradeCommand,
    SetStudentGradeValidator,
)
from school_api.repositories import StudentOrdering
from school_api.routes.common import build_request, dispatch, read_payload

router = APIRouter(prefix="/api/students", tags=["Students"])


@router.get("", summary="List all students")
async def list_students(db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetStudentListQuery(), db)


@router.get("/paginated", summary="List students one page at a time")
async def list_students_paginated(
    page_number: int = Query(default=1, alias="pageNumber"),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    order_by: StudentOrdering = Query(default=StudentOrdering.ID, alias="orderBy"),
    search: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    values = {"page_number": page_number, "order_by": order_by, "search": search}
    if page_size is not None:
        values["page_size"] = page_size
    query = GetStudentPaginatedListQuery(**values)
    return await dispatch(query, db, GetStudentPaginatedListValidator())


@router.get("/{student_id}", summary="Get one student")
async def get_student(student_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetStudentByIdQuery(id=student_id), db)


@router.post("", summary="Create a student")
async def create_student(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(AddStudentCommand, await read_payload(request))
    return await dispatch(command, db, AddStudentValidator())


@router.put("", summary="Edit a student")
async def edit_student(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(EditStudentCommand, await read_payload(request))
    return await dispatch(command, db, EditStudentValidator())


@router.delete("/{student_id}", summary="Delete a student")
async def delete_student(student_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(DeleteStudentCommand(id=student_id), db)


@router.post("/{student_id}/subjects", summary="Enroll a student in a subject")
async def enroll_student(student_id: int, request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(EnrollStudentCommand, await read_payload(request), student_id=student_id)
    return await dispatch(command, db, EnrollStudentValidator())


@router.put("/{student_id}/subjects/{subject_id}", summary="Set a student's grade in a subject")
async def set_student_grade(
    student_id: int,
    subject_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
):
    command = build_request(
        SetStudentGradeCommand,
        await read_payload(request),
        student_id=student_id,
        subject_id=subject_id,
    )
    return await dispatch(command, db, SetStudentGradeValidator())
