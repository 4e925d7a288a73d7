"""
School API Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (aiosqlite) with the full schema
       and foreign keys switched on, so referential actions (SET NULL,
       RESTRICT, CASCADE) behave as they do in production.

Fixture Hierarchy (all function-scoped):
    ├── engine:           async engine over a fresh SQLite file, tables created
    ├── session_factory:  async_sessionmaker bound to that engine
    ├── db_session:       one AsyncSession with the default roles seeded
    ├── school:           SchoolFactory that inserts instructors, departments, ...
    ├── test_client:      HTTPX AsyncClient, get_db_session routed to the test engine
    └── admin_headers / user_headers: bearer headers for role checks
"""

import os
from itertools import count
from typing import AsyncGenerator, Dict, Iterable

# Override settings for testing BEFORE any school_api import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-for-the-school-api-suite-0123456789abcdef"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CREATE_SCHEMA_ON_STARTUP"] = "false"
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

import school_api.models  # noqa: E402,F401
from school_api.database import Base, enable_sqlite_foreign_keys, get_db_session  # noqa: E402
from school_api.models import (  # noqa: E402
    Department,
    Instructor,
    Student,
    Subject,
    User,
)
from school_api.repositories import (  # noqa: E402
    DepartmentRepository,
    InstructorRepository,
    StudentRepository,
    SubjectRepository,
)
from school_api.seed import seed_roles  # noqa: E402
from school_api.services.token_service import token_service  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'school_test.db'}")
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    A session with the Admin and User roles committed.

    Handlers flush but never commit, so tests that provoke a failed write
    (which rolls the session back) commit their setup first.
    """
    async with session_factory() as session:
        await seed_roles(session)
        await session.commit()
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Entity Factory
# ══════════════════════════════════════════════════════════════════════════

class SchoolFactory:
    """Inserts school rows with unique names through the repositories."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._sequence = count(1)

    def _names(self, prefix: str, name_en=None, name_ar=None):
        n = next(self._sequence)
        return name_ar or f"{prefix}-ar-{n}", name_en or f"{prefix} {n}"

    async def instructor(self, name_en=None, name_ar=None, **fields) -> Instructor:
        name_ar, name_en = self._names("مدرس", name_en, name_ar)
        return await InstructorRepository(self.session).add(
            Instructor(name_ar=name_ar, name_en=name_en, **fields)
        )

    async def department(self, manager: Instructor = None, name_en=None, name_ar=None) -> Department:
        manager = manager or await self.instructor()
        name_ar, name_en = self._names("قسم", name_en, name_ar)
        return await DepartmentRepository(self.session).add(
            Department(name_ar=name_ar, name_en=name_en, manager_id=manager.id)
        )

    async def subject(self, name_en=None, name_ar=None, period=None) -> Subject:
        name_ar, name_en = self._names("مادة", name_en, name_ar)
        return await SubjectRepository(self.session).add(
            Subject(name_ar=name_ar, name_en=name_en, period=period)
        )

    async def student(self, name_en=None, name_ar=None, **fields) -> Student:
        name_ar, name_en = self._names("طالب", name_en, name_ar)
        return await StudentRepository(self.session).add(
            Student(name_ar=name_ar, name_en=name_en, **fields)
        )


@pytest.fixture
def school(db_session) -> SchoolFactory:
    return SchoolFactory(db_session)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

def bearer(user_id: int, roles: Iterable[str], user_name: str = "tester") -> Dict[str, str]:
    """Authorization header for a token issued to a (not persisted) user."""
    user = User(id=user_id, user_name=user_name, email=f"{user_name}@school.test")
    token = token_service.issue_token(user, list(roles)).access_token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return bearer(1000, ["Admin", "User"], user_name="root")


@pytest.fixture
def user_headers() -> Dict[str, str]:
    return bearer(1001, ["User"], user_name="plain")


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Each request gets its own session from the test engine, committed on
    success like the production dependency. The lifespan is not run; the
    default roles are seeded here instead.
    """
    from school_api.main import app

    async with session_factory() as session:
        await seed_roles(session)
        await session.commit()

    async def _test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
