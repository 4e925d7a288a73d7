"""
School API Backend — Response Envelope
========================================

What:  The one success/failure shape every handler returns and every endpoint renders.
How:   A tagged union of two pydantic models, discriminated by `succeeded`:

           Succeeded[T]  {statusCode, succeeded: true,  message, data: T, meta?}
           Failed        {statusCode, succeeded: false, message, data: null, errors}

       `Failed.data` is typed `None`, so a failure can never carry a payload.
       The status code is derived from the outcome kind, and the default
       message is the outcome's localized text.

Outcome table:
    SUCCESS / UPDATED / DELETED → 200      BAD_REQUEST   → 400
    CREATED                     → 201      UNAUTHORIZED  → 401
    NOT_FOUND                   → 404      FORBIDDEN     → 403
    METHOD_NOT_ALLOWED          → 405
    UNPROCESSABLE               → 422      SERVER_ERROR  → 500
"""

from enum import Enum, IntEnum
from typing import Any, Dict, Generic, Iterable, List, Literal, Optional, TypeVar, Union

from pydantic import Field

from school_api.localization import MessageKeys, resolve
from school_api.schemas.common import CamelModel

T = TypeVar("T")


class StatusCode(IntEnum):
    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500


class Outcome(str, Enum):
    SUCCESS = "success"
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    UNPROCESSABLE = "unprocessable"
    SERVER_ERROR = "server_error"


# outcome → (status code, default message key, is success)
_OUTCOMES: Dict[Outcome, tuple] = {
    Outcome.SUCCESS: (StatusCode.OK, MessageKeys.SUCCESS, True),
    Outcome.CREATED: (StatusCode.CREATED, MessageKeys.CREATED, True),
    Outcome.UPDATED: (StatusCode.OK, MessageKeys.UPDATED, True),
    Outcome.DELETED: (StatusCode.OK, MessageKeys.DELETED, True),
    Outcome.BAD_REQUEST: (StatusCode.BAD_REQUEST, MessageKeys.BAD_REQUEST, False),
    Outcome.NOT_FOUND: (StatusCode.NOT_FOUND, MessageKeys.NOT_FOUND, False),
    Outcome.UNAUTHORIZED: (StatusCode.UNAUTHORIZED, MessageKeys.UNAUTHORIZED, False),
    Outcome.FORBIDDEN: (StatusCode.FORBIDDEN, MessageKeys.FORBIDDEN, False),
    Outcome.METHOD_NOT_ALLOWED: (StatusCode.METHOD_NOT_ALLOWED, MessageKeys.METHOD_NOT_ALLOWED, False),
    Outcome.UNPROCESSABLE: (StatusCode.UNPROCESSABLE_ENTITY, MessageKeys.UNPROCESSABLE, False),
    Outcome.SERVER_ERROR: (StatusCode.INTERNAL_SERVER_ERROR, MessageKeys.INTERNAL_ERROR, False),
}


class Succeeded(CamelModel, Generic[T]):
    """Success variant: always carries `data` (which may itself be null, e.g. Deleted)."""

    succeeded: Literal[True] = True
    status_code: StatusCode
    message: str
    data: Optional[T] = None
    meta: Optional[Dict[str, Any]] = None


class Failed(CamelModel):
    """Failure variant: status, message and error list; never a payload."""

    succeeded: Literal[False] = False
    status_code: StatusCode
    message: str
    data: None = None
    errors: List[str] = Field(default_factory=list)


Envelope = Union[Succeeded[Any], Failed]


def build(
    outcome: Outcome,
    data: Any = None,
    message: Optional[str] = None,
    errors: Optional[Iterable[str]] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Envelope:
    """
    Build the envelope for `outcome`.

    Args:
        outcome: Kind of result; fixes the status code and the variant.
        data:    Payload, success kinds only.
        message: Overrides the localized default message.
        errors:  Error messages, failure kinds only. Defaults to `[message]`.
        meta:    Extra success metadata (e.g. counts).
    """
    status_code, message_key, is_success = _OUTCOMES[outcome]
    text = message if message is not None else resolve(message_key)
    if is_success:
        return Succeeded[Any](status_code=status_code, message=text, data=data, meta=meta)
    error_list = list(errors) if errors is not None else [text]
    return Failed(status_code=status_code, message=text, errors=error_list)


# ── Shorthands used by handlers ───────────────────────────────────────────

def success(data: Any = None, message: Optional[str] = None, meta: Optional[Dict[str, Any]] = None) -> Envelope:
    return build(Outcome.SUCCESS, data=data, message=message, meta=meta)


def created(data: Any = None, message: Optional[str] = None, meta: Optional[Dict[str, Any]] = None) -> Envelope:
    return build(Outcome.CREATED, data=data, message=message, meta=meta)


def updated(data: Any = None, message: Optional[str] = None) -> Envelope:
    return build(Outcome.UPDATED, data=data, message=message)


def deleted(data: Any = None, message: Optional[str] = None) -> Envelope:
    return build(Outcome.DELETED, data=data, message=message)


def bad_request(message: Optional[str] = None, errors: Optional[Iterable[str]] = None) -> Envelope:
    return build(Outcome.BAD_REQUEST, message=message, errors=errors)


def not_found(message: Optional[str] = None) -> Envelope:
    return build(Outcome.NOT_FOUND, message=message)


def unauthorized(message: Optional[str] = None) -> Envelope:
    return build(Outcome.UNAUTHORIZED, message=message)


def forbidden(message: Optional[str] = None) -> Envelope:
    return build(Outcome.FORBIDDEN, message=message)


def unprocessable(message: Optional[str] = None, errors: Optional[Iterable[str]] = None) -> Envelope:
    return build(Outcome.UNPROCESSABLE, message=message, errors=errors)


def server_error(message: Optional[str] = None) -> Envelope:
    return build(Outcome.SERVER_ERROR, message=message)


def validation_failed(errors: Iterable[str]) -> Envelope:
    """BadRequest listing every violated rule."""
    return build(Outcome.BAD_REQUEST, errors=list(errors))


def to_content(envelope: Envelope) -> Dict[str, Any]:
    """JSON-ready dict in the wire shape (camelCase keys)."""
    return envelope.model_dump(mode="json", by_alias=True, exclude_none=False)
