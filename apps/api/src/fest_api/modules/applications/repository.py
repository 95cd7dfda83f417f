"""
Student Applications Repository

Database operations for students, their applications and uploaded documents.

Design Principles:
- Only database operations, no business rules beyond the status state machine
- Functions flush but never commit; services own the transaction
- Every lookup coming from a request is scoped to the caller's college
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from sqlalchemy import ColumnElement, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ApplicationDocument, ApplicationStatus, Student, StudentApplication

# Valid status transitions
# Rejection is terminal: a student who reapplies gets a new application row
VALID_STATUS_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.SUBMITTED: {
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.APPROVED: {
        ApplicationStatus.REJECTED,  # Moved to rejected from the approved list
    },
    ApplicationStatus.REJECTED: set(),
}


class InvalidStatusTransitionError(ValueError):
    """Raised when an invalid status transition is attempted."""

    def __init__(
        self,
        current_status: ApplicationStatus,
        new_status: ApplicationStatus,
    ):
        self.current_status = current_status
        self.new_status = new_status
        valid_transitions = VALID_STATUS_TRANSITIONS.get(current_status, set())
        super().__init__(
            f"Invalid status transition: {current_status.value} -> {new_status.value}. "
            f"Valid transitions: {sorted(s.value for s in valid_transitions)}"
        )


# ============================================
# Students
# ============================================


async def get_student_for_college(
    db: AsyncSession, student_id: int, college_id: int
) -> Student | None:
    """Get a student, only if they belong to the college."""
    result = await db.execute(
        select(Student).where(Student.student_id == student_id, Student.college_id == college_id)
    )
    return result.scalar_one_or_none()


async def increment_reapply_count(db: AsyncSession, student: Student) -> Student:
    """Record one more rejection for the student."""
    student.reapply_count = (student.reapply_count or 0) + 1
    await db.flush()
    return student


async def list_approved_students(db: AsyncSession, college_id: int) -> list[tuple[Student, int]]:
    """
    Students of the college with an APPROVED application, ordered by name.

    Returns:
        (student, latest approved application id) pairs
    """
    result = await db.execute(
        select(Student, func.max(StudentApplication.application_id))
        .join(StudentApplication, StudentApplication.student_id == Student.student_id)
        .where(
            Student.college_id == college_id,
            StudentApplication.status == ApplicationStatus.APPROVED,
        )
        .group_by(Student.student_id)
        .order_by(Student.full_name, Student.student_id)
    )
    return [(student, application_id) for student, application_id in result.all()]


async def list_eligible_students(
    db: AsyncSession,
    college_id: int,
    participation_clause: ColumnElement[bool],
) -> list[tuple[Student, StudentApplication]]:
    """
    Students with an APPROVED application that also satisfy ``participation_clause``.

    Returns one (student, application) pair per student, using the most recent
    approved application when there is more than one.
    """
    result = await db.execute(
        select(Student, StudentApplication)
        .join(StudentApplication, StudentApplication.student_id == Student.student_id)
        .where(
            Student.college_id == college_id,
            StudentApplication.status == ApplicationStatus.APPROVED,
            participation_clause,
        )
        .order_by(Student.student_id, StudentApplication.application_id.desc())
    )

    eligible: dict[int, tuple[Student, StudentApplication]] = {}
    for student, application in result.all():
        eligible.setdefault(student.student_id, (student, application))
    return list(eligible.values())


# ============================================
# Applications
# ============================================


async def get_for_college(
    db: AsyncSession, application_id: int, college_id: int
) -> tuple[StudentApplication, Student] | None:
    """Get an application and its student, only if the student belongs to the college."""
    result = await db.execute(
        select(StudentApplication, Student)
        .join(Student, Student.student_id == StudentApplication.student_id)
        .where(
            StudentApplication.application_id == application_id,
            Student.college_id == college_id,
        )
    )
    row = result.first()
    return (row[0], row[1]) if row else None


async def list_pending(db: AsyncSession, college_id: int) -> list[tuple[StudentApplication, Student]]:
    """SUBMITTED applications of the college, newest first."""
    result = await db.execute(
        select(StudentApplication, Student)
        .join(Student, Student.student_id == StudentApplication.student_id)
        .where(
            Student.college_id == college_id,
            StudentApplication.status == ApplicationStatus.SUBMITTED,
        )
        .order_by(StudentApplication.submitted_at.desc(), StudentApplication.application_id.desc())
    )
    return [(application, student) for application, student in result.all()]


async def list_open_for_student(db: AsyncSession, student_id: int) -> list[StudentApplication]:
    """Applications of the student that are not yet rejected."""
    result = await db.execute(
        select(StudentApplication).where(
            StudentApplication.student_id == student_id,
            StudentApplication.status != ApplicationStatus.REJECTED,
        )
    )
    return list(result.scalars().all())


async def has_approved_application(db: AsyncSession, student_id: int) -> bool:
    """Whether the student has at least one APPROVED application."""
    result = await db.execute(
        select(StudentApplication.application_id)
        .where(
            StudentApplication.student_id == student_id,
            StudentApplication.status == ApplicationStatus.APPROVED,
        )
        .limit(1)
    )
    return result.first() is not None


async def count_approved_students(db: AsyncSession, college_id: int) -> int:
    """Distinct students of the college with an APPROVED application."""
    result = await db.execute(
        select(func.count(distinct(Student.student_id)))
        .select_from(Student)
        .join(StudentApplication, StudentApplication.student_id == Student.student_id)
        .where(
            Student.college_id == college_id,
            StudentApplication.status == ApplicationStatus.APPROVED,
        )
    )
    return result.scalar() or 0


async def get_status_counts(db: AsyncSession, college_id: int) -> dict[str, int]:
    """
    Student counts for the dashboard.

    Returns:
        Dict with total_students, students_with_applications, approved and rejected
    """

    def _students_with_status(status: ApplicationStatus | None):
        query = (
            select(func.count(distinct(Student.student_id)))
            .select_from(Student)
            .join(StudentApplication, StudentApplication.student_id == Student.student_id)
            .where(Student.college_id == college_id)
        )
        if status is not None:
            query = query.where(StudentApplication.status == status)
        return query

    total = await db.execute(
        select(func.count()).select_from(Student).where(Student.college_id == college_id)
    )
    applied = await db.execute(_students_with_status(None))
    approved = await db.execute(_students_with_status(ApplicationStatus.APPROVED))
    rejected = await db.execute(_students_with_status(ApplicationStatus.REJECTED))

    return {
        "total_students": total.scalar() or 0,
        "students_with_applications": applied.scalar() or 0,
        "approved": approved.scalar() or 0,
        "rejected": rejected.scalar() or 0,
    }


async def update_status(
    db: AsyncSession,
    application: StudentApplication,
    status: ApplicationStatus,
    **kwargs: Any,
) -> StudentApplication:
    """
    Update application status and optional fields.

    Validates that the status transition is allowed by the state machine.

    Args:
        db: Database session
        application: Application to update
        status: New status to set
        **kwargs: Additional fields to update (e.g. reviewed_at, rejected_reason)

    Returns:
        Updated StudentApplication

    Raises:
        InvalidStatusTransitionError: If status transition is not allowed
    """
    current_status = application.status
    valid_transitions = VALID_STATUS_TRANSITIONS.get(current_status, set())

    if status != current_status and status not in valid_transitions:
        raise InvalidStatusTransitionError(current_status, status)

    application.status = status

    for key, value in kwargs.items():
        if hasattr(application, key):
            setattr(application, key, value)

    await db.flush()
    return application


# ============================================
# Documents
# ============================================


async def get_documents_for_applications(
    db: AsyncSession, application_ids: Iterable[int]
) -> dict[int, list[ApplicationDocument]]:
    """Documents grouped by application id, oldest upload first."""
    ids = set(application_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(ApplicationDocument)
        .where(ApplicationDocument.application_id.in_(ids))
        .order_by(ApplicationDocument.uploaded_at, ApplicationDocument.document_id)
    )
    grouped: dict[int, list[ApplicationDocument]] = defaultdict(list)
    for document in result.scalars().all():
        grouped[document.application_id].append(document)
    return dict(grouped)
