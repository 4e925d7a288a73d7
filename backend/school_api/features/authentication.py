"""
School API Backend — Authentication Feature
=============================================

    SignInCommand → Success JwtAuthResult | Unauthorized

Wrong user name, wrong email and wrong password all produce the same
message, so callers cannot probe which accounts exist.
"""

import logging
from typing import Optional

from school_api.localization import MessageKeys, resolve
from school_api.mediator import Command, RequestHandler
from school_api.responses import Envelope, success, unauthorized
from school_api.services.identity_service import IdentityService
from school_api.services.token_service import token_service
from school_api.validation import CommandValidator

logger = logging.getLogger(__name__)


class SignInCommand(Command):
    user_name: Optional[str] = None
    password: Optional[str] = None


class SignInValidator(CommandValidator[SignInCommand]):
    def rules(self, command, rules):
        rules.required("userName", command.user_name)
        rules.required("password", command.password)


class SignInHandler(RequestHandler):
    async def handle(self, command: SignInCommand) -> Envelope:
        identity = IdentityService(self.session)
        user = await identity.find_by_login(command.user_name.strip())
        if user is None or not identity.check_password(user, command.password):
            logger.warning("Failed sign-in for '%s'", command.user_name)
            return unauthorized(resolve(MessageKeys.INVALID_CREDENTIALS))

        roles = await identity.get_roles(user)
        logger.info("User %s signed in", user.id)
        return success(token_service.issue_token(user, roles))


HANDLERS = [
    (SignInCommand, SignInHandler),
]
