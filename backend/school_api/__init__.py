"""
School API Backend — Application Package Initializer
=====================================================

What: Marks the `school_api` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    Every endpoint runs through the same request pipeline:

    ┌─────────────────────────────────────┐
    │        Routes (HTTP Entry Layer)    │  ← parse request, validate, render envelope
    ├─────────────────────────────────────┤
    │     Mediator (Command Dispatcher)   │  ← one handler per command/query type
    ├─────────────────────────────────────┤
    │        Features (Handlers)          │  ← business checks, mapping, envelopes
    ├─────────────────────────────────────┤
    │   Repositories (Persistence Gateway)│  ← async SQLAlchemy CRUD + pagination
    └─────────────────────────────────────┘

    Identity (users, passwords, JWT) and localization sit beside the pipeline
    as collaborators the handlers call into.
"""

__version__ = "1.0.0"
