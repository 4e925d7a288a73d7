"""
School API Backend — Command/Query Dispatcher
===============================================

What:  Routes a command or query object to the one handler registered for its type.
How:   An explicit `request type → handler class` table filled at startup.
       `send()` instantiates the handler with the request's database session
       and awaits it in the caller's task, so cancellation and timeouts
       applied by the caller reach the handler's database calls unchanged.
Who:   The HTTP entry layer (routes) calls `mediator.send(...)`; the table is
       assembled in `school_api.features`.

Registration errors are programming errors, detected at startup:
    - registering a second handler for a type → HandlerRegistrationError
    - a command/query type without a handler → HandlerNotFoundError (verify/send)
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, Iterable, Type, TypeVar

from pydantic import ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.exceptions import HandlerNotFoundError, HandlerRegistrationError
from school_api.responses import Envelope
from school_api.schemas.common import CamelModel

logger = logging.getLogger(__name__)


class Command(CamelModel):
    """Immutable intent to change state. Consumed once by its handler."""

    model_config = ConfigDict(frozen=True)


class Query(CamelModel):
    """Immutable, side-effect-free intent to read."""

    model_config = ConfigDict(frozen=True)


RequestT = TypeVar("RequestT", bound=CamelModel)


class RequestHandler(ABC, Generic[RequestT]):
    """
    Executes exactly one command or query type.

    A new instance is created for every dispatch, bound to the request's
    session; handlers keep no state between requests.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @abstractmethod
    async def handle(self, request: RequestT) -> Envelope:
        ...


class Mediator:
    """Explicit registry of handlers keyed by exact request type."""

    def __init__(self) -> None:
        self._handlers: Dict[type, Type[RequestHandler]] = {}

    def register(self, request_type: type, handler_type: Type[RequestHandler]) -> None:
        existing = self._handlers.get(request_type)
        if existing is not None:
            raise HandlerRegistrationError(request_type, existing, handler_type)
        self._handlers[request_type] = handler_type

    def handler_for(self, request_type: type) -> Type[RequestHandler]:
        try:
            return self._handlers[request_type]
        except KeyError:
            raise HandlerNotFoundError(request_type) from None

    def verify(self, request_types: Iterable[type]) -> None:
        """Fail fast if any of `request_types` has no handler."""
        for request_type in request_types:
            self.handler_for(request_type)

    @property
    def registered_types(self) -> frozenset:
        return frozenset(self._handlers)

    async def send(self, request: CamelModel, session: AsyncSession) -> Envelope:
        """Dispatch `request` to its handler and return the handler's envelope."""
        handler_type = self.handler_for(type(request))
        logger.debug("Dispatching %s to %s", type(request).__name__, handler_type.__name__)
        return await handler_type(session).handle(request)
