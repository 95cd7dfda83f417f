"""
Event Catalog

Participation is recorded in more than one place: the assignment tables
written by the review workflow and one participant table per festival
event. The catalog is the single list of those sources. Final approval,
the dashboard and eligibility checks iterate it instead of naming tables.

Adding a festival event means adding its code to ``FESTIVAL_EVENT_CODES``
(or registering another source); no call site changes.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import ColumnElement, Select, String, Table, exists, false, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.modules.events.models import (
    PER_EVENT_TABLES,
    AccompanistEventParticipation,
    Event,
    EventType,
    PersonType,
    StudentEventParticipation,
)

logger = logging.getLogger(__name__)


class ParticipationSource(ABC):
    """A table that records people taking part in festival events."""

    table: Table

    @abstractmethod
    def supports(self, person_type: PersonType) -> bool:
        """Whether this source holds rows for ``person_type``."""

    @abstractmethod
    def participation_clause(
        self,
        person_id: Any,
        college_id: int,
        person_type: PersonType,
    ) -> ColumnElement[bool]:
        """EXISTS clause for one person; ``person_id`` may be a column (correlated) or a value."""

    @abstractmethod
    def person_event_codes_query(self, college_id: int, person_type: PersonType) -> Select:
        """Rows of (person_id, event_code) for the college."""


class AssignmentTableSource(ParticipationSource):
    """
    An assignment table linking people to rows of ``events`` by ``event_id``.

    Args:
        table: The assignment table
        person_column: Column holding the person id
        person_type: Kind of person stored in the table
        conditions: Extra column equality filters (e.g. event_type)
    """

    def __init__(
        self,
        table: Table,
        person_column: str,
        person_type: PersonType,
        conditions: Mapping[str, Any] | None = None,
    ):
        self.table = table
        self.person_column = person_column
        self.person_type = person_type
        self.conditions = dict(conditions or {})

    def supports(self, person_type: PersonType) -> bool:
        return person_type == self.person_type

    def _filters(self, college_id: int) -> list[ColumnElement[bool]]:
        filters = [self.table.c.college_id == college_id]
        filters.extend(self.table.c[name] == value for name, value in self.conditions.items())
        return filters

    def participation_clause(self, person_id, college_id, person_type):
        return exists().where(
            self.table.c[self.person_column] == person_id,
            *self._filters(college_id),
        )

    def person_event_codes_query(self, college_id, person_type):
        return (
            select(self.table.c[self.person_column].label("person_id"), Event.event_code)
            .join(Event, Event.event_id == self.table.c.event_id)
            .where(*self._filters(college_id))
            .distinct()
        )

    def __repr__(self) -> str:
        return f"AssignmentTableSource({self.table.name})"


class PerEventTableSource(ParticipationSource):
    """A participant table dedicated to a single event (``event_<code>``)."""

    def __init__(self, table: Table, event_code: str):
        self.table = table
        self.event_code = event_code

    def supports(self, person_type: PersonType) -> bool:
        return True

    def participation_clause(self, person_id, college_id, person_type):
        return exists().where(
            self.table.c.person_id == person_id,
            self.table.c.college_id == college_id,
            self.table.c.person_type == person_type.value,
        )

    def person_event_codes_query(self, college_id, person_type):
        return (
            select(
                self.table.c.person_id.label("person_id"),
                literal(self.event_code, type_=String).label("event_code"),
            )
            .where(
                self.table.c.college_id == college_id,
                self.table.c.person_type == person_type.value,
            )
            .distinct()
        )

    def __repr__(self) -> str:
        return f"PerEventTableSource({self.table.name})"


class EventCatalog:
    """Registry of participation sources."""

    def __init__(self, sources: Iterable[ParticipationSource] = ()):
        self._sources: list[ParticipationSource] = list(sources)

    def register(self, source: ParticipationSource) -> None:
        self._sources.append(source)

    @property
    def sources(self) -> tuple[ParticipationSource, ...]:
        return tuple(self._sources)

    def sources_for(self, person_type: PersonType) -> list[ParticipationSource]:
        return [source for source in self._sources if source.supports(person_type)]

    def participation_clause(
        self,
        person_id: Any,
        college_id: int,
        person_type: PersonType = PersonType.STUDENT,
    ) -> ColumnElement[bool]:
        """
        True when the person has at least one participation row in any source.

        Pass a column (e.g. ``Student.student_id``) to filter a set query, or
        a literal id to test a single person.
        """
        clauses = [
            source.participation_clause(person_id, college_id, person_type)
            for source in self.sources_for(person_type)
        ]
        if not clauses:
            return false()
        return or_(*clauses)

    async def has_participation(
        self,
        db: AsyncSession,
        person_id: int,
        college_id: int,
        person_type: PersonType = PersonType.STUDENT,
    ) -> bool:
        """Whether one person takes part in any event."""
        clause = self.participation_clause(literal(person_id), college_id, person_type)
        result = await db.execute(select(clause))
        return bool(result.scalar())

    async def event_codes_by_person(
        self,
        db: AsyncSession,
        college_id: int,
        person_type: PersonType = PersonType.STUDENT,
    ) -> dict[int, set[str]]:
        """
        Map each person of the college to the codes of the events they take part in.

        One query per source.
        """
        codes: dict[int, set[str]] = defaultdict(set)
        for source in self.sources_for(person_type):
            result = await db.execute(source.person_event_codes_query(college_id, person_type))
            for person_id, event_code in result.all():
                codes[person_id].add(event_code)
        return dict(codes)

    async def event_codes_for(
        self,
        db: AsyncSession,
        college_id: int,
        person_type: PersonType = PersonType.STUDENT,
        person_id: int | None = None,
    ) -> set[str]:
        """Event codes used by the college, or by one person when ``person_id`` is given."""
        by_person = await self.event_codes_by_person(db, college_id, person_type)
        if person_id is not None:
            return set(by_person.get(person_id, set()))
        event_codes: set[str] = set()
        for person_codes in by_person.values():
            event_codes |= person_codes
        return event_codes

    async def count_events(self, db: AsyncSession, college_id: int) -> int:
        """Number of distinct events with at least one participating student of the college."""
        return len(await self.event_codes_for(db, college_id, PersonType.STUDENT))


def build_default_catalog() -> EventCatalog:
    """Catalog covering the assignment tables and every per-event table."""
    catalog = EventCatalog()
    catalog.register(
        AssignmentTableSource(
            StudentEventParticipation.__table__,
            person_column="student_id",
            person_type=PersonType.STUDENT,
            conditions={"event_type": EventType.PARTICIPATING},
        )
    )
    catalog.register(
        AssignmentTableSource(
            AccompanistEventParticipation.__table__,
            person_column="accompanist_id",
            person_type=PersonType.ACCOMPANIST,
        )
    )
    for event_code, table in PER_EVENT_TABLES.items():
        catalog.register(PerEventTableSource(table, event_code))
    return catalog


event_catalog = build_default_catalog()
