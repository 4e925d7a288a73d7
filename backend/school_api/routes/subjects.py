"""School API Backend — Subject Routes (`/api/subjects`)."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.features.subjects import (
    AddSubjectCommand,
    AddSubjectValidator,
    DeleteSubjectCommand,
    EditSubjectCommand,
    EditSubjectValidator,
    GetSubjectByIdQuery,
    GetSubjectListQuery,
)
from school_api.routes.common import build_request, dispatch, read_payload

router = APIRouter(prefix="/api/subjects", tags=["Subjects"])


@router.get("", summary="List all subjects")
async def list_subjects(db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetSubjectListQuery(), db)


@router.get("/{subject_id}", summary="Get one subject")
async def get_subject(subject_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetSubjectByIdQuery(id=subject_id), db)


@router.post("", summary="Create a subject")
async def create_subject(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(AddSubjectCommand, await read_payload(request))
    return await dispatch(command, db, AddSubjectValidator())


@router.put("", summary="Edit a subject")
async def edit_subject(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(EditSubjectCommand, await read_payload(request))
    return await dispatch(command, db, EditSubjectValidator())


@router.delete("/{subject_id}", summary="Delete a subject")
async def delete_subject(subject_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(DeleteSubjectCommand(id=subject_id), db)
