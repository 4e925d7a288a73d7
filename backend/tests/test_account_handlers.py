"""
School API Backend — Role, User and Sign-in Handler Tests
===========================================================

What we test:
    ✅ Role add / edit / delete, including NotFound before any change
    ✅ A role held by a user cannot be deleted
    ✅ Registration returns a token and puts the account in "User"
    ✅ Sign-in by user name or email; one message for every failure
"""

import pytest

from school_api.features import mediator
from school_api.features.authentication import SignInCommand
from school_api.features.roles import (
    AddRoleCommand,
    AssignRoleToUserCommand,
    DeleteRoleCommand,
    EditRoleCommand,
    GetRoleByIdQuery,
    GetRolesListQuery,
)
from school_api.features.users import (
    ChangeUserPasswordCommand,
    DeleteUserCommand,
    EditUserCommand,
    GetUserByIdQuery,
    GetUserPaginatedListQuery,
    RegisterUserCommand,
)
from school_api.repositories import RoleRepository
from school_api.services.token_service import token_service


def _registration(user_name="mona", email="mona@school.test", password="Secret1!"):
    return RegisterUserCommand(
        user_name=user_name,
        email=email,
        password=password,
        confirm_password=password,
        full_name="Mona Adel",
        country="Egypt",
    )


class TestRoles:

    @pytest.mark.asyncio
    async def test_edit_missing_role_changes_nothing(self, db_session):
        envelope = await mediator.send(EditRoleCommand(id=99, name="Admin"), db_session)

        assert envelope.status_code == 404
        listed = await mediator.send(GetRolesListQuery(), db_session)
        assert [role.name for role in listed.data] == ["Admin", "User"]

    @pytest.mark.asyncio
    async def test_add_rename_delete(self, db_session):
        added = await mediator.send(AddRoleCommand(role_name="Teacher"), db_session)
        role_id = added.data.id

        renamed = await mediator.send(EditRoleCommand(id=role_id, name="Lecturer"), db_session)
        fetched = await mediator.send(GetRoleByIdQuery(id=role_id), db_session)
        removed = await mediator.send(DeleteRoleCommand(id=role_id), db_session)
        again = await mediator.send(DeleteRoleCommand(id=role_id), db_session)

        assert added.status_code == 201
        assert renamed.data.name == "Lecturer"
        assert fetched.data.name == "Lecturer"
        assert removed.status_code == 200
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_duplicate_role_is_rejected(self, db_session):
        envelope = await mediator.send(AddRoleCommand(role_name="admin"), db_session)
        assert envelope.status_code == 400

    @pytest.mark.asyncio
    async def test_assigned_role_cannot_be_deleted(self, db_session):
        registered = await mediator.send(_registration(), db_session)
        user_id = token_service.decode(registered.data.access_token).id
        role = await RoleRepository(db_session).find_by_name("User")

        envelope = await mediator.send(DeleteRoleCommand(id=role.id), db_session)
        assigned = await mediator.send(AssignRoleToUserCommand(user_id=user_id, role_name="Admin"), db_session)

        assert envelope.status_code == 400
        assert envelope.message == "The role is assigned to users and cannot be deleted"
        assert assigned.status_code == 200
        assert assigned.data == {"userName": "mona", "roles": ["Admin", "User"]}


class TestUsers:

    @pytest.mark.asyncio
    async def test_register_returns_token(self, db_session):
        envelope = await mediator.send(_registration(), db_session)

        assert envelope.status_code == 201
        assert envelope.data.user_name == "mona"
        assert envelope.data.roles == ["User"]
        caller = token_service.decode(envelope.data.access_token)
        fetched = await mediator.send(GetUserByIdQuery(id=caller.id), db_session)
        assert fetched.data.email == "mona@school.test"
        assert fetched.data.country == "Egypt"

    @pytest.mark.asyncio
    async def test_register_duplicates(self, db_session):
        await mediator.send(_registration(), db_session)

        same_email = await mediator.send(_registration(user_name="other"), db_session)
        same_name = await mediator.send(_registration(email="other@school.test"), db_session)

        assert same_email.message == "Email already exists"
        assert same_name.message == "User name already exists"

    @pytest.mark.asyncio
    async def test_weak_password_lists_every_rule(self, db_session):
        envelope = await mediator.send(_registration(password="abc"), db_session)
        assert envelope.status_code == 400
        assert len(envelope.errors) == 4
        assert envelope.message == envelope.errors[0]

    @pytest.mark.asyncio
    async def test_edit_change_password_delete(self, db_session):
        registered = await mediator.send(_registration(), db_session)
        user_id = token_service.decode(registered.data.access_token).id

        edited = await mediator.send(
            EditUserCommand(id=user_id, user_name="mona.adel", email="mona.adel@school.test", country="Egypt"),
            db_session,
        )
        changed = await mediator.send(
            ChangeUserPasswordCommand(
                id=user_id, current_password="Secret1!", new_password="Better2@", confirm_password="Better2@"
            ),
            db_session,
        )
        signed_in = await mediator.send(SignInCommand(user_name="mona.adel", password="Better2@"), db_session)
        removed = await mediator.send(DeleteUserCommand(id=user_id), db_session)
        missing = await mediator.send(GetUserByIdQuery(id=user_id), db_session)

        assert edited.status_code == 200
        assert edited.data.user_name == "mona.adel"
        assert changed.status_code == 200
        assert signed_in.status_code == 200
        assert removed.status_code == 200
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_paginated_list(self, db_session):
        for n in range(3):
            await mediator.send(_registration(user_name=f"user{n}", email=f"user{n}@school.test"), db_session)

        envelope = await mediator.send(GetUserPaginatedListQuery(page_number=2, page_size=2), db_session)

        assert [user.user_name for user in envelope.data.items] == ["user2"]
        assert envelope.data.total_count == 3


class TestSignIn:

    @pytest.mark.asyncio
    async def test_sign_in_by_name_or_email(self, db_session):
        await mediator.send(_registration(), db_session)

        by_name = await mediator.send(SignInCommand(user_name="MONA", password="Secret1!"), db_session)
        by_email = await mediator.send(SignInCommand(user_name="mona@school.test", password="Secret1!"), db_session)

        assert by_name.status_code == 200
        assert by_email.status_code == 200
        assert by_name.data.roles == ["User"]

    @pytest.mark.asyncio
    async def test_failures_share_one_message(self, db_session):
        await mediator.send(_registration(), db_session)

        wrong_password = await mediator.send(SignInCommand(user_name="mona", password="Wrong1!"), db_session)
        unknown_user = await mediator.send(SignInCommand(user_name="ghost", password="Secret1!"), db_session)

        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.message == unknown_user.message == "User name or password is incorrect"
