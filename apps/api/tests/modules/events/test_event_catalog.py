"""
Tests for the event catalog against a real (SQLite) schema.
"""

import pytest

from fest_api.modules.applications.models import ApplicationStatus
from fest_api.modules.events.catalog import (
    AssignmentTableSource,
    EventCatalog,
    PerEventTableSource,
    build_default_catalog,
    event_catalog,
)
from fest_api.modules.events.models import (
    FESTIVAL_EVENT_CODES,
    PER_EVENT_TABLES,
    EventType,
    PersonType,
)


class TestDefaultCatalog:
    """Tests for the registered sources."""

    def test_every_event_table_is_registered(self):
        per_event = [s for s in event_catalog.sources if isinstance(s, PerEventTableSource)]
        assert {s.event_code for s in per_event} == set(FESTIVAL_EVENT_CODES)

    def test_student_sources(self):
        sources = build_default_catalog().sources_for(PersonType.STUDENT)
        assignment = [s for s in sources if isinstance(s, AssignmentTableSource)]
        assert [s.table.name for s in assignment] == ["student_event_participation"]
        assert len(sources) == len(FESTIVAL_EVENT_CODES) + 1

    def test_accompanist_sources(self):
        sources = build_default_catalog().sources_for(PersonType.ACCOMPANIST)
        assignment = [s for s in sources if isinstance(s, AssignmentTableSource)]
        assert [s.table.name for s in assignment] == ["accompanist_event_participation"]

    def test_register_extends_catalog(self):
        catalog = EventCatalog()
        catalog.register(PerEventTableSource(PER_EVENT_TABLES["mime"], "mime"))
        assert len(catalog.sources) == 1


class TestCatalogQueries:
    """Participation lookups across assignment and per-event tables."""

    @pytest.mark.asyncio
    async def test_participation_from_any_source(self, seed, session_maker):
        college = await seed.college()
        mime = await seed.event("mime", "Mime", 6)
        assigned, _ = await seed.student(college, ApplicationStatus.APPROVED)
        debater, _ = await seed.student(college, ApplicationStatus.APPROVED)
        idle, _ = await seed.student(college, ApplicationStatus.APPROVED)
        await seed.assignment(assigned, mime)
        await seed.per_event_row("debate", college, debater.student_id, PersonType.STUDENT)

        async with session_maker() as db:
            assert await event_catalog.has_participation(db, assigned.student_id, college.college_id)
            assert await event_catalog.has_participation(db, debater.student_id, college.college_id)
            assert not await event_catalog.has_participation(db, idle.student_id, college.college_id)

    @pytest.mark.asyncio
    async def test_accompanying_assignment_is_not_participation(self, seed, session_maker):
        college = await seed.college()
        mime = await seed.event("mime", "Mime", 6)
        student, _ = await seed.student(college, ApplicationStatus.APPROVED)
        await seed.assignment(student, mime, EventType.ACCOMPANYING)

        async with session_maker() as db:
            assert not await event_catalog.has_participation(
                db, student.student_id, college.college_id
            )

    @pytest.mark.asyncio
    async def test_rows_of_other_colleges_are_ignored(self, seed, session_maker):
        college = await seed.college("COL001")
        other = await seed.college("COL002")
        student, _ = await seed.student(college, ApplicationStatus.APPROVED)
        await seed.per_event_row("quiz", other, student.student_id, PersonType.STUDENT)

        async with session_maker() as db:
            assert not await event_catalog.has_participation(
                db, student.student_id, college.college_id
            )
            assert await event_catalog.count_events(db, college.college_id) == 0

    @pytest.mark.asyncio
    async def test_event_codes_by_person(self, seed, session_maker):
        college = await seed.college()
        mime = await seed.event("mime", "Mime", 6)
        student, _ = await seed.student(college, ApplicationStatus.APPROVED)
        await seed.assignment(student, mime)
        await seed.per_event_row("mime", college, student.student_id, PersonType.STUDENT)
        await seed.per_event_row("rangoli", college, student.student_id, PersonType.STUDENT)
        accompanist = await seed.accompanist(college, events=[mime])
        await seed.per_event_row("skit", college, accompanist.accompanist_id, PersonType.ACCOMPANIST)

        async with session_maker() as db:
            students = await event_catalog.event_codes_by_person(
                db, college.college_id, PersonType.STUDENT
            )
            accompanists = await event_catalog.event_codes_by_person(
                db, college.college_id, PersonType.ACCOMPANIST
            )
            event_count = await event_catalog.count_events(db, college.college_id)
            one = await event_catalog.event_codes_for(
                db, college.college_id, person_id=student.student_id
            )

        assert students == {student.student_id: {"mime", "rangoli"}}
        assert accompanists == {accompanist.accompanist_id: {"mime", "skit"}}
        assert event_count == 2
        assert one == {"mime", "rangoli"}
