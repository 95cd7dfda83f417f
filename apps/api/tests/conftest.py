"""
Shared fixtures for the festival registration API tests.

Two kinds of database fixtures are provided:
- ``mock_db``: an AsyncMock session for service unit tests
- ``session_maker``: a real async session factory over in-memory SQLite
  with every table created, for workflow and router tests
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import fest_api.models  # noqa: F401 - registers every table
from fest_api.core import rate_limit
from fest_api.core.auth import CollegeUser
from fest_api.core.database import Base
from fest_api.modules.accompanists.models import Accompanist, AccompanistType
from fest_api.modules.applications.models import (
    ApplicationDocument,
    ApplicationStatus,
    Student,
    StudentApplication,
)
from fest_api.modules.colleges.models import College
from fest_api.modules.events.models import (
    PER_EVENT_TABLES,
    AccompanistEventParticipation,
    Event,
    EventType,
    PersonType,
    StudentEventParticipation,
)
from fest_api.modules.users.models import User, UserRole


class _Transaction:
    """Stand-in for ``AsyncSession.begin()``; never swallows exceptions."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


@pytest.fixture(autouse=True)
def clear_rate_limits():
    """Start every test with an empty in-memory rate limit store."""
    rate_limit._memory_store.clear()
    yield
    rate_limit._memory_store.clear()


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.begin = MagicMock(side_effect=lambda: _Transaction())
    return db


@pytest.fixture
def principal():
    """An authenticated principal of college 1."""
    return CollegeUser(user_id=10, college_id=1, role=UserRole.PRINCIPAL)


@pytest.fixture
def manager():
    """An authenticated team manager of college 1."""
    return CollegeUser(user_id=11, college_id=1, role=UserRole.MANAGER)


# ============================================
# SQLite
# ============================================


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session factory configured like the application's."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


class Seeder:
    """Inserts committed rows for workflow tests."""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker
        self._usn = 0

    async def _save(self, *rows):
        async with self.session_maker() as db:
            db.add_all(rows)
            await db.commit()
        return rows[0] if len(rows) == 1 else rows

    async def college(self, code: str = "COL001", **kwargs) -> College:
        return await self._save(
            College(college_code=code, college_name=f"College {code}", place="Mysuru", **kwargs)
        )

    async def user(self, college: College, role: UserRole, **kwargs) -> User:
        return await self._save(
            User(
                college_id=college.college_id,
                full_name=f"{role.value.title()} User",
                email=kwargs.pop("email", f"{role.value.lower()}{college.college_id}@example.com"),
                role=role,
                **kwargs,
            )
        )

    async def event(self, code: str, name: str, max_participants: int = 1) -> Event:
        return await self._save(
            Event(
                event_code=code,
                event_name=name,
                max_participants_per_college=max_participants,
                max_accompanists_per_college=1,
            )
        )

    async def student(
        self,
        college: College,
        status: ApplicationStatus = ApplicationStatus.SUBMITTED,
        full_name: str | None = None,
        documents: dict[str, str] | None = None,
    ) -> tuple[Student, StudentApplication]:
        self._usn += 1
        student = await self._save(
            Student(
                college_id=college.college_id,
                full_name=full_name or f"Student {self._usn:03d}",
                usn=f"4AB23CS{self._usn:03d}",
                email=f"student{self._usn}@example.com",
                phone=f"98765{self._usn:05d}",
                gender="F",
                passport_photo_url=f"https://cdn.example.com/photos/{self._usn}.jpg",
            )
        )
        application = await self._save(
            StudentApplication(
                student_id=student.student_id,
                department="CSE",
                year_of_study=2,
                semester=3,
                status=status,
                submitted_at=datetime.now(UTC),
            )
        )
        if documents:
            await self._save(
                *[
                    ApplicationDocument(
                        application_id=application.application_id,
                        document_type=document_type,
                        document_url=url,
                    )
                    for document_type, url in documents.items()
                ]
            )
        return student, application

    async def assignment(
        self,
        student: Student,
        event: Event,
        event_type: EventType = EventType.PARTICIPATING,
    ) -> StudentEventParticipation:
        return await self._save(
            StudentEventParticipation(
                student_id=student.student_id,
                event_id=event.event_id,
                college_id=student.college_id,
                event_type=event_type,
            )
        )

    async def accompanist(
        self, college: College, events=(), **kwargs
    ) -> Accompanist:
        accompanist = await self._save(
            Accompanist(
                college_id=college.college_id,
                full_name=kwargs.pop("full_name", "Faculty Accompanist"),
                phone="9000000000",
                accompanist_type=kwargs.pop("accompanist_type", AccompanistType.FACULTY),
                id_proof_url="https://cdn.example.com/id/acc.jpg",
                **kwargs,
            )
        )
        for event in events:
            await self._save(
                AccompanistEventParticipation(
                    accompanist_id=accompanist.accompanist_id,
                    event_id=event.event_id,
                    college_id=college.college_id,
                )
            )
        return accompanist

    async def per_event_row(
        self, event_code: str, college: College, person_id: int, person_type: PersonType
    ) -> None:
        async with self.session_maker() as db:
            await db.execute(
                insert(PER_EVENT_TABLES[event_code]).values(
                    college_id=college.college_id,
                    person_id=person_id,
                    person_type=person_type.value,
                )
            )
            await db.commit()


@pytest.fixture
def seed(session_maker):
    """Row factory bound to the SQLite session factory."""
    return Seeder(session_maker)


def college_user(college: College, role: UserRole = UserRole.PRINCIPAL, user_id: int = 1):
    """Build the authenticated user for a seeded college."""
    return CollegeUser(user_id=user_id, college_id=college.college_id, role=role)


@pytest.fixture
def as_user():
    return college_user
