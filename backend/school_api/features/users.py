"""
School API Backend — Users Feature
====================================

What:  Account registration and management.

Operations:
    RegisterUserCommand          → Created   JwtAuthResult (new account joins the "User" role)
    EditUserCommand              → Updated   UserResponse
    DeleteUserCommand            → Deleted
    ChangeUserPasswordCommand    → Updated
    GetUserByIdQuery             → Success   UserResponse
    GetUserPaginatedListQuery    → Success   Page[UserResponse]

Identity rule failures (taken name, weak password, ...) answer BadRequest
with the first failure as the message and all of them as `errors`.
"""

import logging
from typing import Optional

from school_api.features.common import PagedQuery, PagedQueryValidator, clean
from school_api.localization import MessageKeys, resolve
from school_api.mediator import Command, Query, RequestHandler
from school_api.models import User
from school_api.responses import Envelope, bad_request, created, deleted, not_found, success, updated
from school_api.schemas.common import Page
from school_api.schemas.identity import UserResponse
from school_api.security import USER_ROLE
from school_api.services.identity_service import IdentityService
from school_api.services.token_service import token_service
from school_api.validation import CommandValidator, Rules

logger = logging.getLogger(__name__)

USER_NAME_MAX_LENGTH = 256
EMAIL_MAX_LENGTH = 256
PROFILE_MAX_LENGTH = 256


class RegisterUserCommand(Command):
    user_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    full_name: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    phone_number: Optional[str] = None


class EditUserCommand(Command):
    id: Optional[int] = None
    user_name: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    phone_number: Optional[str] = None


class DeleteUserCommand(Command):
    id: int


class ChangeUserPasswordCommand(Command):
    id: Optional[int] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None


class GetUserByIdQuery(Query):
    id: int


class GetUserPaginatedListQuery(PagedQuery):
    pass


def _profile_fields(command, rules: Rules) -> None:
    rules.required("userName", command.user_name)
    rules.max_length("userName", command.user_name, USER_NAME_MAX_LENGTH)
    rules.required("email", command.email).email("email", command.email)
    rules.max_length("email", command.email, EMAIL_MAX_LENGTH)
    rules.max_length("fullName", command.full_name, PROFILE_MAX_LENGTH)
    rules.max_length("address", command.address, 500)
    rules.max_length("country", command.country, 100)
    rules.max_length("phoneNumber", command.phone_number, 50)


class RegisterUserValidator(CommandValidator[RegisterUserCommand]):
    def rules(self, command, rules):
        _profile_fields(command, rules)
        rules.required("password", command.password)
        rules.required("confirmPassword", command.confirm_password)
        rules.equal("confirmPassword", command.confirm_password, "password", command.password)


class EditUserValidator(CommandValidator[EditUserCommand]):
    def rules(self, command, rules):
        rules.required("id", command.id).positive("id", command.id)
        _profile_fields(command, rules)


class ChangeUserPasswordValidator(CommandValidator[ChangeUserPasswordCommand]):
    def rules(self, command, rules):
        rules.required("id", command.id).positive("id", command.id)
        rules.required("currentPassword", command.current_password)
        rules.required("newPassword", command.new_password)
        rules.required("confirmPassword", command.confirm_password)
        rules.equal("confirmPassword", command.confirm_password, "newPassword", command.new_password)


class GetUserPaginatedListValidator(PagedQueryValidator):
    pass


class _UserHandler(RequestHandler):
    def __init__(self, session):
        super().__init__(session)
        self.identity = IdentityService(session)


class RegisterUserHandler(_UserHandler):
    async def handle(self, command: RegisterUserCommand) -> Envelope:
        if await self.identity.find_by_email(command.email) is not None:
            return bad_request(resolve(MessageKeys.EMAIL_IS_EXIST))
        if await self.identity.find_by_name(command.user_name) is not None:
            return bad_request(resolve(MessageKeys.NAME_IS_EXIST))

        user = User(
            user_name=clean(command.user_name),
            email=clean(command.email),
            full_name=clean(command.full_name),
            address=clean(command.address),
            country=clean(command.country),
            phone_number=clean(command.phone_number),
        )
        result = await self.identity.create(user, command.password)
        if not result.succeeded:
            return bad_request(result.first_error, errors=result.errors)

        result = await self.identity.add_to_role(user, USER_ROLE)
        if not result.succeeded:
            # No half-registered accounts.
            await self.session.rollback()
            logger.error("Registration of %s rolled back: %s", command.user_name, result.errors)
            return bad_request(result.first_error, errors=result.errors)

        roles = await self.identity.get_roles(user)
        return created(token_service.issue_token(user, roles))


class EditUserHandler(_UserHandler):
    async def handle(self, command: EditUserCommand) -> Envelope:
        user = await self.identity.find_by_id(command.id)
        if user is None:
            return not_found()

        user.user_name = clean(command.user_name)
        user.email = clean(command.email)
        user.full_name = clean(command.full_name)
        user.address = clean(command.address)
        user.country = clean(command.country)
        user.phone_number = clean(command.phone_number)
        result = await self.identity.update(user)
        if not result.succeeded:
            await self.session.rollback()
            return bad_request(result.first_error, errors=result.errors)

        logger.info("User updated: id=%s", command.id)
        return updated(UserResponse.model_validate(user))


class DeleteUserHandler(_UserHandler):
    async def handle(self, command: DeleteUserCommand) -> Envelope:
        user = await self.identity.find_by_id(command.id)
        if user is None:
            return not_found()
        result = await self.identity.delete(user)
        if not result.succeeded:
            return bad_request(result.first_error, errors=result.errors)
        return deleted()


class ChangeUserPasswordHandler(_UserHandler):
    async def handle(self, command: ChangeUserPasswordCommand) -> Envelope:
        user = await self.identity.find_by_id(command.id)
        if user is None:
            return not_found()
        result = await self.identity.change_password(user, command.current_password, command.new_password)
        if not result.succeeded:
            return bad_request(result.first_error, errors=result.errors)
        return updated()


class GetUserByIdHandler(_UserHandler):
    async def handle(self, query: GetUserByIdQuery) -> Envelope:
        user = await self.identity.find_by_id(query.id)
        if user is None:
            return not_found()
        return success(UserResponse.model_validate(user))


class GetUserPaginatedListHandler(_UserHandler):
    async def handle(self, query: GetUserPaginatedListQuery) -> Envelope:
        users, total_count = await self.identity.users.find_page(query.page_number, query.page_size)
        page = Page[UserResponse].build(
            [UserResponse.model_validate(user) for user in users],
            query.page_number,
            query.page_size,
            total_count,
        )
        return success(page)


HANDLERS = [
    (RegisterUserCommand, RegisterUserHandler),
    (EditUserCommand, EditUserHandler),
    (DeleteUserCommand, DeleteUserHandler),
    (ChangeUserPasswordCommand, ChangeUserPasswordHandler),
    (GetUserByIdQuery, GetUserByIdHandler),
    (GetUserPaginatedListQuery, GetUserPaginatedListHandler),
]
