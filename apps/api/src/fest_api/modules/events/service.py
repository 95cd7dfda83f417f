"""
Event Assignment Service Layer

Business logic for assigning approved students to festival events.

This module implements:
1. Approved list:
   - Approved students with their participating and accompanying events

2. Assignment replacement:
   - Deletes every assignment of the student and inserts the new sets
   - Event existence and per-college capacity are checked after the delete,
     so a student keeping an event does not count against it twice

3. Move to rejected:
   - Rejects the student's open applications, clears assignments and
     bumps the reapply counter in one transaction

Every write runs inside ``async with db.begin()`` and starts by locking the
college row, so the lock flag and capacity counts cannot change underneath it.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.core.auth import CollegeUser
from fest_api.core.exceptions import FestServiceError
from fest_api.modules.applications import repository as applications_repository
from fest_api.modules.applications.models import ApplicationStatus
from fest_api.modules.colleges.service import lock_unlocked_college
from fest_api.modules.events import repository
from fest_api.modules.events.models import EventType

logger = logging.getLogger(__name__)


class EventNotFoundError(FestServiceError):
    """Raised when a requested event id does not exist."""

    def __init__(self, event_id: int):
        super().__init__(
            message=f"Event ID {event_id} not found",
            error_code="EVENT_NOT_FOUND",
            status_code=400,
        )


class EventFullError(FestServiceError):
    """Raised when the college already fills every participant slot of an event."""

    def __init__(self, event_name: str, current_count: int, max_participants: int):
        super().__init__(
            message=f'Event "{event_name}" is full ({current_count}/{max_participants})',
            error_code="EVENT_FULL",
            status_code=403,
        )


class StudentNotFoundError(FestServiceError):
    """Raised when a student does not exist in the caller's college."""

    def __init__(self, student_id: int | None = None):
        message = f"Student {student_id} not found" if student_id else "Student not found"
        super().__init__(
            message=message,
            error_code="STUDENT_NOT_FOUND",
            status_code=404,
        )


class StudentNotApprovedError(FestServiceError):
    """Raised when events are edited for a student without an APPROVED application."""

    def __init__(self, student_id: int):
        super().__init__(
            message=f"Student {student_id} has no approved application",
            error_code="STUDENT_NOT_APPROVED",
            status_code=409,
        )


class NoOpenApplicationError(FestServiceError):
    """Raised when a student has no application left to reject."""

    def __init__(self, student_id: int):
        super().__init__(
            message=f"Student {student_id} has no open application to reject",
            error_code="NO_OPEN_APPLICATION",
            status_code=409,
        )


def unique_ids(event_ids: Iterable[int]) -> list[int]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(event_ids))


async def validate_event_assignments(
    db: AsyncSession,
    college_id: int,
    participating_event_ids: list[int],
    accompanying_event_ids: list[int],
) -> None:
    """
    Check that every event exists and that participating slots are free.

    Must run in the caller's transaction after the college row is locked.

    Raises:
        EventNotFoundError: If an event id does not exist
        EventFullError: If a participating event is at its per-college limit
    """
    events = await repository.get_events_by_ids(
        db, [*participating_event_ids, *accompanying_event_ids]
    )

    for event_id in participating_event_ids:
        event = events.get(event_id)
        if event is None:
            logger.warning(f"Unknown participating event {event_id} for college {college_id}")
            raise EventNotFoundError(event_id)

        current_count = await repository.count_participants(db, event_id, college_id)
        if current_count >= event.max_participants_per_college:
            logger.warning(
                f"Event {event.event_code} full for college {college_id}: "
                f"{current_count}/{event.max_participants_per_college}"
            )
            raise EventFullError(event.event_name, current_count, event.max_participants_per_college)

    for event_id in accompanying_event_ids:
        if event_id not in events:
            logger.warning(f"Unknown accompanying event {event_id} for college {college_id}")
            raise EventNotFoundError(event_id)


async def list_approved(db: AsyncSession, college_id: int) -> list[dict]:
    """
    Approved students of the college with their event assignments.

    Returns:
        One dict per student, ordered by name, with ``participating_events``
        and ``accompanying_events`` as lists of ``{event_id, event_name}``
    """
    approved = await applications_repository.list_approved_students(db, college_id)
    assignments = await repository.list_assignments_for_students(
        db, [student.student_id for student, _ in approved]
    )

    events_by_student: dict[int, dict[EventType, list[dict]]] = {
        student.student_id: {EventType.PARTICIPATING: [], EventType.ACCOMPANYING: []}
        for student, _ in approved
    }
    for student_id, event_id, event_name, event_type in assignments:
        events_by_student[student_id][event_type].append(
            {"event_id": event_id, "event_name": event_name}
        )

    logger.info(f"Listing {len(approved)} approved students for college {college_id}")

    return [
        {
            "application_id": application_id,
            "student_id": student.student_id,
            "full_name": student.full_name,
            "usn": student.usn,
            "email": student.email,
            "phone": student.phone,
            "participating_events": events_by_student[student.student_id][EventType.PARTICIPATING],
            "accompanying_events": events_by_student[student.student_id][EventType.ACCOMPANYING],
        }
        for student, application_id in approved
    ]


async def replace_assignments(
    db: AsyncSession,
    user: CollegeUser,
    student_id: int,
    participating_event_ids: Iterable[int],
    accompanying_event_ids: Iterable[int],
) -> dict:
    """
    Replace every event assignment of a student.

    Args:
        db: Database session
        user: Authenticated principal or manager
        student_id: Student to reassign
        participating_event_ids: New participating events
        accompanying_event_ids: New accompanying events

    Returns:
        Dict with the student id and the stored event id lists

    Raises:
        CollegeLockedError: If the college is finally approved
        StudentNotFoundError: If the student is not in the caller's college
        StudentNotApprovedError: If the student has no APPROVED application
        EventNotFoundError: If an event does not exist
        EventFullError: If a participating event has no free slot
    """
    participating = unique_ids(participating_event_ids)
    accompanying = unique_ids(accompanying_event_ids)

    logger.info(f"User {user.user_id} replacing events of student {student_id}")

    async with db.begin():
        await lock_unlocked_college(db, user.college_id, "edit events")

        student = await applications_repository.get_student_for_college(
            db, student_id, user.college_id
        )
        if student is None:
            logger.warning(f"Student {student_id} not found in college {user.college_id}")
            raise StudentNotFoundError(student_id)

        if not await applications_repository.has_approved_application(db, student_id):
            logger.warning(f"Student {student_id} has no approved application")
            raise StudentNotApprovedError(student_id)

        removed = await repository.delete_for_student(db, student_id)
        await validate_event_assignments(db, user.college_id, participating, accompanying)
        await repository.add_assignments(
            db,
            student_id=student_id,
            college_id=user.college_id,
            participating_event_ids=participating,
            accompanying_event_ids=accompanying,
            assigned_by_user_id=user.user_id,
        )

    logger.info(
        f"Student {student_id} events replaced: removed={removed}, "
        f"participating={participating}, accompanying={accompanying}"
    )

    return {
        "student_id": student_id,
        "participating_events": participating,
        "accompanying_events": accompanying,
    }


async def move_to_rejected(
    db: AsyncSession,
    user: CollegeUser,
    student_id: int,
    rejection_reason: str,
) -> dict:
    """
    Move an approved student back to rejected.

    Raises:
        CollegeLockedError: If the college is finally approved
        StudentNotFoundError: If the student is not in the caller's college
        NoOpenApplicationError: If every application of the student is already rejected
    """
    logger.info(f"User {user.user_id} moving student {student_id} to rejected")

    async with db.begin():
        await lock_unlocked_college(db, user.college_id, "reject students")

        student = await applications_repository.get_student_for_college(
            db, student_id, user.college_id
        )
        if student is None:
            logger.warning(f"Student {student_id} not found in college {user.college_id}")
            raise StudentNotFoundError(student_id)

        applications = await applications_repository.list_open_for_student(db, student_id)
        if not applications:
            logger.warning(f"Student {student_id} has no open application to reject")
            raise NoOpenApplicationError(student_id)

        reviewed_at = datetime.now(UTC)
        for application in applications:
            await applications_repository.update_status(
                db,
                application,
                ApplicationStatus.REJECTED,
                rejected_reason=rejection_reason,
                reviewed_at=reviewed_at,
            )

        removed = await repository.delete_for_student(db, student_id)
        await applications_repository.increment_reapply_count(db, student)

    logger.info(
        f"Student {student_id} moved to rejected: applications={len(applications)}, "
        f"assignments removed={removed}"
    )

    return {
        "student_id": student_id,
        "rejected_applications": len(applications),
        "removed_assignments": removed,
    }
