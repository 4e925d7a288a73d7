# Features package init
"""
School API Backend — Feature Registry
=======================================

What:  Assembles the mediator's handler table from every feature module.
How:   Each feature module exposes `HANDLERS`, an explicit list of
       (command/query type, handler class) pairs. `build_mediator()`
       registers all of them (a duplicate raises HandlerRegistrationError)
       and then checks that every Command/Query class declared in a feature
       module has a handler, so a forgotten registration fails at startup
       instead of on the first request.

Feature inventory:
    students, departments, instructors, subjects   school records
    roles                                          role administration (Admin)
    users, authentication                          accounts and sign-in
"""

import inspect
from typing import List

from school_api.features import (
    authentication,
    departments,
    instructors,
    roles,
    students,
    subjects,
    users,
)
from school_api.mediator import Command, Mediator, Query

FEATURE_MODULES = (students, departments, instructors, subjects, roles, users, authentication)

HANDLER_REGISTRY = [pair for module in FEATURE_MODULES for pair in module.HANDLERS]


def declared_request_types() -> List[type]:
    """Command and query classes defined in the feature modules."""
    found = []
    for module in FEATURE_MODULES:
        for _, member in inspect.getmembers(module, inspect.isclass):
            if member.__module__ == module.__name__ and issubclass(member, (Command, Query)):
                found.append(member)
    return found


def build_mediator() -> Mediator:
    mediator = Mediator()
    for request_type, handler_type in HANDLER_REGISTRY:
        mediator.register(request_type, handler_type)
    mediator.verify(declared_request_types())
    return mediator


# ── Singleton Instance ────────────────────────────────────────────────────
mediator = build_mediator()
