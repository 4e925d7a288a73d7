"""
School API Backend — Role Management Routes
=============================================

Every route requires a bearer token with the Admin role. The check is a
router-level dependency, so it runs before the body is read:
    no / invalid / expired token → 401
    token without Admin          → 403

    POST   /api/authorization                        add role
    PUT    /api/authorization                        edit role
    GET    /api/authorization                        list roles
    GET    /api/authorization/{id}                   get role
    DELETE /api/authorization/{id}                   delete role
    POST   /api/authorization/users/{user_id}/roles  assign role to user
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.features.roles import (
    AddRoleCommand,
    AddRoleValidator,
    AssignRoleToUserCommand,
    AssignRoleToUserValidator,
    DeleteRoleCommand,
    EditRoleCommand,
    EditRoleValidator,
    GetRoleByIdQuery,
    GetRolesListQuery,
)
from school_api.routes.common import build_request, dispatch, read_payload
from school_api.security import ADMIN_ROLE, require_roles

router = APIRouter(
    prefix="/api/authorization",
    tags=["Authorization"],
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)


@router.post("", summary="Add a role")
async def add_role(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(AddRoleCommand, await read_payload(request))
    return await dispatch(command, db, AddRoleValidator())


@router.put("", summary="Rename a role")
async def edit_role(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(EditRoleCommand, await read_payload(request))
    return await dispatch(command, db, EditRoleValidator())


@router.get("", summary="List roles")
async def list_roles(db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetRolesListQuery(), db)


@router.get("/{role_id}", summary="Get one role")
async def get_role(role_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(GetRoleByIdQuery(id=role_id), db)


@router.delete("/{role_id}", summary="Delete a role")
async def delete_role(role_id: int, db: AsyncSession = Depends(get_db_session)):
    return await dispatch(DeleteRoleCommand(id=role_id), db)


@router.post("/users/{user_id}/roles", summary="Assign a role to a user")
async def assign_role(user_id: int, request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(AssignRoleToUserCommand, await read_payload(request), user_id=user_id)
    return await dispatch(command, db, AssignRoleToUserValidator())
