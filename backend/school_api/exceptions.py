"""
School API Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for conditions a handler cannot turn
       into a response envelope itself.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       render failure envelopes with the matching HTTP status code.
Who:   Raised by the HTTP layer, security dependencies, repositories and the
       mediator; caught by global handlers (or by handlers, for
       PersistenceError).

Expected business outcomes (not found, duplicate name, invalid command) are
NOT exceptions: handlers return them as envelopes. The classes below cover
what is left.

Exception Hierarchy:
    SchoolError (base)
    ├── ValidationError            → 400 Bad Request (request body unusable)
    ├── AuthenticationError        → 401 Unauthorized (no/invalid/expired token)
    ├── AuthorizationError         → 403 Forbidden (missing role)
    ├── PersistenceError           → 400 Bad Request (generic message)
    └── DispatchError              → 500 Internal Server Error (programming error)
        ├── HandlerNotFoundError
        └── HandlerRegistrationError
"""

from typing import Any, Dict, Iterable, Optional


class SchoolError(Exception):
    """
    Base exception for all School API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SchoolError):
    """
    Raised when a request cannot be turned into a command at all.

    HTTP:    400 Bad Request

    Field-level rule violations of a well-formed command are reported by the
    validators as a ValidationResult instead; this exception is for bodies
    that are not JSON/form data, or that carry the wrong primitive types.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Iterable[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.errors = list(errors) if errors is not None else [message]


class AuthenticationError(SchoolError):
    """
    Raised when a protected route is called without a usable bearer token.

    HTTP:    401 Unauthorized (with `WWW-Authenticate: Bearer`)
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(SchoolError):
    """
    Raised when an authenticated caller lacks the role a route requires.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        required_roles: Optional[Iterable[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if required_roles:
            ctx["required_roles"] = list(required_roles)
        super().__init__(message=message, context=ctx)


class PersistenceError(SchoolError):
    """
    Raised by the persistence gateway when a write fails in the store.

    What:    Integrity violation (racing duplicate, foreign key RESTRICT),
             lost connection, deadlock.
    HTTP:    400 Bad Request, generic localized message.

    Handlers catch this on create/update/delete and answer BadRequest with
    the operation-specific message. If one escapes anyway, the global handler
    answers with the generic message. The driver's error text goes to the
    log only.
    """

    def __init__(
        self,
        message: str = "The operation could not be completed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DispatchError(SchoolError):
    """Mediator misconfiguration. Never caused by user input."""


class HandlerNotFoundError(DispatchError):
    """No handler is registered for a command/query type."""

    def __init__(self, request_type: type):
        super().__init__(
            message=f"No handler registered for {request_type.__name__}",
            context={"request_type": request_type.__name__},
        )
        self.request_type = request_type


class HandlerRegistrationError(DispatchError):
    """A second handler was registered for the same command/query type."""

    def __init__(self, request_type: type, existing: type, duplicate: type):
        super().__init__(
            message=(
                f"{request_type.__name__} is already handled by {existing.__name__}; "
                f"refusing to register {duplicate.__name__}"
            ),
            context={"request_type": request_type.__name__},
        )
        self.request_type = request_type
