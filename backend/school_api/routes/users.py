"""
School API Backend — User Account Routes
==========================================

    POST   /api/users                   register (anonymous)      → token bundle
    GET    /api/users                   one page of users         (authenticated)
    GET    /api/users/{id}              one user                  (authenticated)
    PUT    /api/users                   edit profile              (self or Admin)
    PUT    /api/users/change-password   change password           (self or Admin)
    DELETE /api/users/{id}              delete account            (Admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.features.users import (
    ChangeUserPasswordCommand,
    ChangeUserPasswordValidator,
    DeleteUserCommand,
    EditUserCommand,
    EditUserValidator,
    GetUserByIdQuery,
    GetUserPaginatedListQuery,
    GetUserPaginatedListValidator,
    RegisterUserCommand,
    RegisterUserValidator,
)
from school_api.routes.common import build_request, dispatch, read_payload
from school_api.security import (
    ADMIN_ROLE,
    ensure_self_or_admin,
    get_current_user,
    require_roles,
)
from school_api.services.token_service import CurrentUser

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("", summary="Register a new account")
async def register_user(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(RegisterUserCommand, await read_payload(request))
    return await dispatch(command, db, RegisterUserValidator())


@router.get("", summary="List users one page at a time", dependencies=[Depends(get_current_user)])
async def list_users(
    page_number: int = Query(default=1, alias="pageNumber"),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    db: AsyncSession = Depends(get_db_session),
):
    values = {"page_number": page_number}
    if page_size is not None:
        values["page_size"] = page_size
    return await dispatch(GetUserPaginatedListQuery(**values), db, GetUserPaginatedListValidator())


@router.get("/{user_id}", summary="Get one user", dependencies=[Depends(get_current_user)])
async def get_user(user_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetUserByIdQuery(id=user_id), db)


@router.put("", summary="Edit a user profile")
async def edit_user(
    request: Request,
    caller: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    command = build_request(EditUserCommand, await read_payload(request))
    ensure_self_or_admin(caller, command.id)
    return await dispatch(command, db, EditUserValidator())


@router.put("/change-password", summary="Change a user's password")
async def change_password(
    request: Request,
    caller: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    command = build_request(ChangeUserPasswordCommand, await read_payload(request))
    ensure_self_or_admin(caller, command.id)
    return await dispatch(command, db, ChangeUserPasswordValidator())


@router.delete(
    "/{user_id}",
    summary="Delete a user",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(DeleteUserCommand(id=user_id), db)
