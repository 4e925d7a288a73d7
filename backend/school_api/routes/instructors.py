"""
School API Backend — Instructor Routes
========================================

    GET    /api/instructors
    GET    /api/instructors/{id}
    POST   /api/instructors
    PUT    /api/instructors
    DELETE /api/instructors/{id}
    POST   /api/instructors/{id}/subjects/{subject_id}
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.features.instructors import (
    AddInstructorCommand,
    AddInstructorValidator,
    AssignSubjectToInstructorCommand,
    DeleteInstructorCommand,
    EditInstructorCommand,
    EditInstructorValidator,
    GetInstructorByIdQuery,
    GetInstructorListQuery,
)
from school_api.routes.common import build_request, dispatch, read_payload

router = APIRouter(prefix="/api/instructors", tags=["Instructors"])


@router.get("", summary="List all instructors")
async def list_instructors(db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetInstructorListQuery(), db)


@router.get("/{instructor_id}", summary="Get one instructor")
async def get_instructor(instructor_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetInstructorByIdQuery(id=instructor_id), db)


@router.post("", summary="Create an instructor")
async def create_instructor(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(AddInstructorCommand, await read_payload(request))
    return await dispatch(command, db, AddInstructorValidator())


@router.put("", summary="Edit an instructor")
async def edit_instructor(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(EditInstructorCommand, await read_payload(request))
    return await dispatch(command, db, EditInstructorValidator())


@router.delete("/{instructor_id}", summary="Delete an instructor")
async def delete_instructor(instructor_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(DeleteInstructorCommand(id=instructor_id), db)


@router.post("/{instructor_id}/subjects/{subject_id}", summary="Assign a subject to an instructor")
async def assign_subject(instructor_id: int, subject_id: int, db: AsyncSession = Depends(get_db_session)):
    command = AssignSubjectToInstructorCommand(instructor_id=instructor_id, subject_id=subject_id)
    return await dispatch(command, db)
