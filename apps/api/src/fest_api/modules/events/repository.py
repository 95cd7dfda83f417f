"""
Event Assignment Repository

Database operations for events and the student assignment table.
Functions only flush; the calling service owns the transaction.
"""

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Event, EventType, StudentEventParticipation


async def get_events_by_ids(db: AsyncSession, event_ids: Iterable[int]) -> dict[int, Event]:
    """Events keyed by id; unknown ids are simply missing from the result."""
    ids = set(event_ids)
    if not ids:
        return {}
    result = await db.execute(select(Event).where(Event.event_id.in_(ids)))
    return {event.event_id: event for event in result.scalars().all()}


async def get_event_names_by_codes(db: AsyncSession, event_codes: Iterable[str]) -> dict[str, str]:
    """Event display names keyed by event code."""
    codes = set(event_codes)
    if not codes:
        return {}
    result = await db.execute(
        select(Event.event_code, Event.event_name).where(Event.event_code.in_(codes))
    )
    return {code: name for code, name in result.all()}


async def count_participants(db: AsyncSession, event_id: int, college_id: int) -> int:
    """Number of the college's students currently participating in the event."""
    result = await db.execute(
        select(func.count())
        .select_from(StudentEventParticipation)
        .where(
            StudentEventParticipation.event_id == event_id,
            StudentEventParticipation.college_id == college_id,
            StudentEventParticipation.event_type == EventType.PARTICIPATING,
        )
    )
    return result.scalar() or 0


async def add_assignments(
    db: AsyncSession,
    student_id: int,
    college_id: int,
    participating_event_ids: Iterable[int],
    accompanying_event_ids: Iterable[int],
    assigned_by_user_id: int,
) -> list[StudentEventParticipation]:
    """Insert one assignment row per event id and event type."""
    rows = [
        StudentEventParticipation(
            student_id=student_id,
            event_id=event_id,
            college_id=college_id,
            assigned_by_user_id=assigned_by_user_id,
            event_type=event_type,
        )
        for event_type, event_ids in (
            (EventType.PARTICIPATING, participating_event_ids),
            (EventType.ACCOMPANYING, accompanying_event_ids),
        )
        for event_id in event_ids
    ]
    db.add_all(rows)
    await db.flush()
    return rows


async def delete_for_student(db: AsyncSession, student_id: int) -> int:
    """Delete every assignment of the student. Returns the number of rows removed."""
    result = await db.execute(
        delete(StudentEventParticipation).where(StudentEventParticipation.student_id == student_id)
    )
    return result.rowcount or 0


async def list_assignments_for_students(
    db: AsyncSession, student_ids: Iterable[int]
) -> list[tuple[int, int, str, EventType]]:
    """
    Assignments of the given students.

    Returns:
        Rows of (student_id, event_id, event_name, event_type) ordered by event name
    """
    ids = set(student_ids)
    if not ids:
        return []
    result = await db.execute(
        select(
            StudentEventParticipation.student_id,
            Event.event_id,
            Event.event_name,
            StudentEventParticipation.event_type,
        )
        .join(Event, Event.event_id == StudentEventParticipation.event_id)
        .where(StudentEventParticipation.student_id.in_(ids))
        .order_by(Event.event_name)
    )
    return [tuple(row) for row in result.all()]

