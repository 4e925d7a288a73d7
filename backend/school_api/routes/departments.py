"""
School API Backend — Department Routes
========================================

    GET    /api/departments                                   one page of departments
    GET    /api/departments/{id}?studentPageNumber=&studentPageSize=
    POST   /api/departments
    PUT    /api/departments
    DELETE /api/departments/{id}
    POST   /api/departments/{id}/subjects/{subject_id}
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.features.departments import (
    AddDepartmentCommand,
    AddDepartmentValidator,
    AssignSubjectToDepartmentCommand,
    DeleteDepartmentCommand,
    EditDepartmentCommand,
    EditDepartmentValidator,
    GetDepartmentByIdQuery,
    GetDepartmentByIdValidator,
    GetDepartmentListQuery,
    GetDepartmentListValidator,
)
from school_api.routes.common import build_request, dispatch, read_payload

router = APIRouter(prefix="/api/departments", tags=["Departments"])


@router.get("", summary="List departments one page at a time")
async def list_departments(
    page_number: int = Query(default=1, alias="pageNumber"),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    db: AsyncSession = Depends(get_db_session),
):
    values = {"page_number": page_number}
    if page_size is not None:
        values["page_size"] = page_size
    return await dispatch(GetDepartmentListQuery(**values), db, GetDepartmentListValidator())


@router.get("/{department_id}", summary="Get one department with a page of its students")
async def get_department(
    department_id: int,
    student_page_number: int = Query(default=1, alias="studentPageNumber"),
    student_page_size: Optional[int] = Query(default=None, alias="studentPageSize"),
    db: AsyncSession = Depends(get_db_session),
):
    values = {"id": department_id, "student_page_number": student_page_number}
    if student_page_size is not None:
        values["student_page_size"] = student_page_size
    return await dispatch(GetDepartmentByIdQuery(**values), db, GetDepartmentByIdValidator())


@router.post("", summary="Create a department")
async def create_department(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(AddDepartmentCommand, await read_payload(request))
    return await dispatch(command, db, AddDepartmentValidator())


@router.put("", summary="Edit a department")
async def edit_department(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(EditDepartmentCommand, await read_payload(request))
    return await dispatch(command, db, EditDepartmentValidator())


@router.delete("/{department_id}", summary="Delete a department")
async def delete_department(department_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(DeleteDepartmentCommand(id=department_id), db)


@router.post("/{department_id}/subjects/{subject_id}", summary="Assign a subject to a department")
async def assign_subject(department_id: int, subject_id: int, db: AsyncSession = Depends(get_db_session)):
    command = AssignSubjectToDepartmentCommand(department_id=department_id, subject_id=subject_id)
    return await dispatch(command, db)
