"""
School API Backend — Authorization (Role Management) Feature
==============================================================

What:  Role administration. Every route of this feature requires the Admin role.

Operations:
    AddRoleCommand            → Created   RoleResponse
    EditRoleCommand           → Updated   RoleResponse   (NotFound before any change)
    DeleteRoleCommand         → Deleted   (BadRequest RoleIsUsed while assigned)
    GetRolesListQuery         → Success   [RoleResponse]
    GetRoleByIdQuery          → Success   RoleResponse
    AssignRoleToUserCommand   → Success   {userName, roles}
"""

import logging
from typing import Optional

from school_api.exceptions import PersistenceError
from school_api.features.common import clean
from school_api.localization import MessageKeys, resolve
from school_api.mediator import Command, Query, RequestHandler
from school_api.models import Role
from school_api.models.identity import normalize
from school_api.repositories import RoleRepository
from school_api.responses import Envelope, bad_request, created, deleted, not_found, success, updated
from school_api.schemas.identity import RoleResponse
from school_api.services.identity_service import IdentityService
from school_api.validation import CommandValidator

logger = logging.getLogger(__name__)

ROLE_NAME_MAX_LENGTH = 256


class AddRoleCommand(Command):
    role_name: Optional[str] = None


class EditRoleCommand(Command):
    id: Optional[int] = None
    name: Optional[str] = None


class DeleteRoleCommand(Command):
    id: int


class GetRolesListQuery(Query):
    pass


class GetRoleByIdQuery(Query):
    id: int


class AssignRoleToUserCommand(Command):
    user_id: int
    role_name: Optional[str] = None


class AddRoleValidator(CommandValidator[AddRoleCommand]):
    def rules(self, command, rules):
        rules.required("roleName", command.role_name)
        rules.max_length("roleName", command.role_name, ROLE_NAME_MAX_LENGTH)


class EditRoleValidator(CommandValidator[EditRoleCommand]):
    def rules(self, command, rules):
        rules.required("id", command.id).positive("id", command.id)
        rules.required("name", command.name).max_length("name", command.name, ROLE_NAME_MAX_LENGTH)


class AssignRoleToUserValidator(CommandValidator[AssignRoleToUserCommand]):
    def rules(self, command, rules):
        rules.positive("userId", command.user_id)
        rules.required("roleName", command.role_name)


class _RoleHandler(RequestHandler):
    def __init__(self, session):
        super().__init__(session)
        self.roles = RoleRepository(session)


class AddRoleHandler(_RoleHandler):
    async def handle(self, command: AddRoleCommand) -> Envelope:
        name = clean(command.role_name)
        if await self.roles.name_taken(name):
            return bad_request(resolve(MessageKeys.IS_EXIST, field="role"))

        role = Role(name=name, normalized_name=normalize(name))
        try:
            await self.roles.add(role)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.CREATE_FAILED))

        logger.info("Role created: id=%s name=%s", role.id, role.name)
        return created(RoleResponse.model_validate(role))


class EditRoleHandler(_RoleHandler):
    async def handle(self, command: EditRoleCommand) -> Envelope:
        role = await self.roles.find_by_id(command.id)
        if role is None:
            return not_found(resolve(MessageKeys.ROLE_NOT_FOUND, role=command.id))

        name = clean(command.name)
        if await self.roles.name_taken(name, exclude_id=role.id):
            return bad_request(resolve(MessageKeys.IS_EXIST, field="role"))

        role.name = name
        role.normalized_name = normalize(name)
        try:
            await self.roles.update(role)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.UPDATE_FAILED))

        logger.info("Role updated: id=%s name=%s", role.id, role.name)
        return updated(RoleResponse.model_validate(role))


class DeleteRoleHandler(_RoleHandler):
    async def handle(self, command: DeleteRoleCommand) -> Envelope:
        if not await self.roles.exists(Role.id == command.id):
            return not_found(resolve(MessageKeys.ROLE_NOT_FOUND, role=command.id))
        if await self.roles.is_assigned(command.id):
            return bad_request(resolve(MessageKeys.ROLE_IS_USED))
        try:
            await self.roles.delete(command.id)
        except PersistenceError:
            return bad_request(resolve(MessageKeys.DELETED_FAILED))
        logger.info("Role deleted: id=%s", command.id)
        return deleted()


class GetRolesListHandler(_RoleHandler):
    async def handle(self, query: GetRolesListQuery) -> Envelope:
        roles = await self.roles.find_all(order_by=Role.name)
        return success([RoleResponse.model_validate(role) for role in roles])


class GetRoleByIdHandler(_RoleHandler):
    async def handle(self, query: GetRoleByIdQuery) -> Envelope:
        role = await self.roles.find_by_id(query.id)
        if role is None:
            return not_found(resolve(MessageKeys.ROLE_NOT_FOUND, role=query.id))
        return success(RoleResponse.model_validate(role))


class AssignRoleToUserHandler(RequestHandler):
    async def handle(self, command: AssignRoleToUserCommand) -> Envelope:
        identity = IdentityService(self.session)
        user = await identity.find_by_id(command.user_id)
        if user is None:
            return not_found()

        result = await identity.add_to_role(user, clean(command.role_name))
        if not result.succeeded:
            return bad_request(result.first_error, errors=result.errors)
        return success({"userName": user.user_name, "roles": await identity.get_roles(user)})


HANDLERS = [
    (AddRoleCommand, AddRoleHandler),
    (EditRoleCommand, EditRoleHandler),
    (DeleteRoleCommand, DeleteRoleHandler),
    (GetRolesListQuery, GetRolesListHandler),
    (GetRoleByIdQuery, GetRoleByIdHandler),
    (AssignRoleToUserCommand, AssignRoleToUserHandler),
]
