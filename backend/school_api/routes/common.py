"""
School API Backend — HTTP Entry Layer Helpers
===============================================

What:  The steps every route shares: read the body, build the command,
       validate, dispatch, render the envelope.
How:
    1. read_payload()   JSON or form body → dict (unreadable JSON → ValidationError, 400)
    2. build_request()  dict + path values → frozen command/query
                        (wrong primitive types → RequestValidationError, 400)
    3. dispatch()       validator (if any) → 400 envelope listing every message,
                        otherwise mediator.send() → handler envelope
    4. render()         envelope.statusCode becomes the HTTP status; the
                        envelope itself is the JSON body

Example:
    @router.post("")
    async def create_subject(request: Request, db: AsyncSession = Depends(get_db_session)):
        command = build_request(AddSubjectCommand, await read_payload(request))
        return await dispatch(command, db, AddSubjectValidator())
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.exceptions import ValidationError
from school_api.features import mediator
from school_api.localization import MessageKeys, resolve
from school_api.responses import Envelope, to_content, validation_failed
from school_api.schemas.common import CamelModel
from school_api.validation import CommandValidator

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=CamelModel)

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Read a JSON object or form body. An empty body reads as `{}` so that the
    validator, not the parser, reports the missing fields.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError(message=resolve(MessageKeys.INVALID_BODY)) from None
    if not isinstance(payload, dict):
        raise ValidationError(message=resolve(MessageKeys.INVALID_BODY))
    return payload


def build_request(request_type: Type[RequestT], payload: Dict[str, Any], **path_values: Any) -> RequestT:
    """
    Construct `request_type` from wire data. Path values override body
    fields of the same name.
    """
    data = dict(payload)
    for name, value in path_values.items():
        data.pop(name, None)
        data[to_camel(name)] = value
    try:
        return request_type.model_validate(data)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from None


def render(envelope: Envelope) -> JSONResponse:
    return JSONResponse(status_code=int(envelope.status_code), content=to_content(envelope))


async def dispatch(
    request_obj: CamelModel,
    session: AsyncSession,
    validator: Optional[CommandValidator] = None,
) -> JSONResponse:
    """Validate (when a validator is given), dispatch, and render."""
    if validator is not None:
        result = validator.validate(request_obj)
        if not result.is_valid:
            logger.info(
                "%s rejected by validation: %d error(s)",
                type(request_obj).__name__,
                len(result.errors),
            )
            return render(validation_failed(result.errors))
    envelope = await mediator.send(request_obj, session)
    return render(envelope)
