"""
Student Applications Service Layer

Business logic for reviewing student applications.

This module implements:
1. Pending list:
   - SUBMITTED applications of the caller's college with their documents

2. Approval:
   - Quota check (approved students + accompanists against the college cap)
   - Per-event capacity check for every participating event
   - Status change and event assignment rows, all in one transaction

3. Rejection:
   - Status change with reason, reapply counter bump

4. Detail edits:
   - Partial update of student and application fields

Concurrency:
- Every write opens ``async with db.begin()`` and locks the college row
  first (``SELECT ... FOR UPDATE``). Two reviewers approving at the same
  time are serialised, so neither can overshoot the quota or an event's
  capacity with a stale count.
- Any exception inside the block rolls the whole transaction back.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.core.auth import CollegeUser
from fest_api.core.config import settings
from fest_api.core.exceptions import FestServiceError
from fest_api.modules.accompanists import repository as accompanists_repository
from fest_api.modules.applications import repository
from fest_api.modules.applications.helpers import documents_by_type
from fest_api.modules.applications.models import ApplicationStatus, Student, StudentApplication
from fest_api.modules.applications.repository import VALID_STATUS_TRANSITIONS
from fest_api.modules.colleges.service import lock_unlocked_college
from fest_api.modules.events import repository as events_repository
from fest_api.modules.events.service import unique_ids, validate_event_assignments

logger = logging.getLogger(__name__)

# Fields a reviewer may correct, per table
STUDENT_EDITABLE_FIELDS = ("full_name", "email", "phone", "gender")
APPLICATION_EDITABLE_FIELDS = ("blood_group", "address", "department", "year_of_study", "semester")


class ApplicationNotFoundError(FestServiceError):
    """Raised when an application does not exist in the caller's college."""

    def __init__(self, application_id: int | None = None):
        super().__init__(
            message="Application not found",
            error_code="APPLICATION_NOT_FOUND",
            status_code=404,
        )
        self.application_id = application_id


class QuotaExceededError(FestServiceError):
    """Raised when the college has no participant slot left."""

    def __init__(self, quota_used: int, quota_cap: int):
        super().__init__(
            message=(
                f"College quota exceeded ({quota_used}/{quota_cap}). "
                "Remove existing participants before adding new ones."
            ),
            error_code="QUOTA_EXCEEDED",
            status_code=403,
        )


class CannotDecideApplicationError(FestServiceError):
    """Raised when the application's status does not allow the decision."""

    def __init__(self, current_status: str, action: str):
        super().__init__(
            message=f"Cannot {action} application in '{current_status}' status.",
            error_code="INVALID_STATUS_TRANSITION",
            status_code=409,
        )


async def _get_application(
    db: AsyncSession, application_id: int, college_id: int
) -> tuple[StudentApplication, Student]:
    found = await repository.get_for_college(db, application_id, college_id)
    if found is None:
        logger.warning(f"Application {application_id} not found in college {college_id}")
        raise ApplicationNotFoundError(application_id)
    return found


def _ensure_transition(
    application: StudentApplication, new_status: ApplicationStatus, action: str
) -> None:
    if new_status not in VALID_STATUS_TRANSITIONS.get(application.status, set()):
        logger.warning(
            f"Cannot {action} application {application.application_id}: "
            f"status={application.status.value}"
        )
        raise CannotDecideApplicationError(application.status.value, action)


async def get_quota_used(db: AsyncSession, college_id: int) -> int:
    """Approved students plus accompanists of the college."""
    approved = await repository.count_approved_students(db, college_id)
    accompanists = await accompanists_repository.count_for_college(db, college_id)
    return approved + accompanists


async def list_pending(db: AsyncSession, college_id: int) -> list[dict]:
    """
    SUBMITTED applications of the college, newest first.

    Each entry carries the student's details and a ``documents`` dict keyed
    by lower-cased document type.
    """
    pending = await repository.list_pending(db, college_id)
    documents = await repository.get_documents_for_applications(
        db, [application.application_id for application, _ in pending]
    )

    logger.info(f"Found {len(pending)} pending applications for college {college_id}")

    return [
        {
            "application_id": application.application_id,
            "student_id": student.student_id,
            "full_name": student.full_name,
            "usn": student.usn,
            "email": student.email,
            "phone": student.phone,
            "gender": student.gender,
            "blood_group": application.blood_group,
            "address": application.address,
            "department": application.department,
            "year_of_study": application.year_of_study,
            "semester": application.semester,
            "status": application.status.value,
            "submitted_at": application.submitted_at,
            "documents": documents_by_type(documents.get(application.application_id, [])),
        }
        for application, student in pending
    ]


async def approve(
    db: AsyncSession,
    user: CollegeUser,
    application_id: int,
    participating_event_ids: Iterable[int],
    accompanying_event_ids: Iterable[int] = (),
) -> dict:
    """
    Approve an application and assign the student to events.

    Args:
        db: Database session
        user: Authenticated principal or manager
        application_id: Application to approve
        participating_event_ids: Events the student competes in
        accompanying_event_ids: Events the student accompanies

    Returns:
        Dict with application id, student id and the assigned event ids

    Raises:
        CollegeLockedError: If the college is finally approved
        ApplicationNotFoundError: If the application is not in the caller's college
        CannotDecideApplicationError: If the application is not SUBMITTED
        QuotaExceededError: If the college quota is used up
        EventNotFoundError: If an event does not exist
        EventFullError: If a participating event has no free slot
    """
    participating = unique_ids(participating_event_ids)
    accompanying = unique_ids(accompanying_event_ids)

    logger.info(f"User {user.user_id} approving application {application_id}")

    async with db.begin():
        await lock_unlocked_college(db, user.college_id, "approve students")

        application, student = await _get_application(db, application_id, user.college_id)
        _ensure_transition(application, ApplicationStatus.APPROVED, "approve")

        quota_used = await get_quota_used(db, user.college_id)
        if quota_used >= settings.college_quota_cap:
            logger.warning(
                f"Quota exceeded for college {user.college_id}: "
                f"{quota_used}/{settings.college_quota_cap}"
            )
            raise QuotaExceededError(quota_used, settings.college_quota_cap)

        await validate_event_assignments(db, user.college_id, participating, accompanying)

        await repository.update_status(
            db,
            application,
            ApplicationStatus.APPROVED,
            reviewed_at=datetime.now(UTC),
        )
        await events_repository.add_assignments(
            db,
            student_id=student.student_id,
            college_id=user.college_id,
            participating_event_ids=participating,
            accompanying_event_ids=accompanying,
            assigned_by_user_id=user.user_id,
        )

    logger.info(
        f"Application {application_id} approved: student={student.student_id}, "
        f"participating={participating}, accompanying={accompanying}"
    )

    return {
        "application_id": application_id,
        "student_id": student.student_id,
        "participating_events": participating,
        "accompanying_events": accompanying,
    }


async def reject(
    db: AsyncSession,
    user: CollegeUser,
    application_id: int,
    rejection_reason: str,
) -> dict:
    """
    Reject an application.

    The student's reapply counter is incremented. Rejecting an application
    that was already approved also clears the student's event assignments.

    Raises:
        CollegeLockedError: If the college is finally approved
        ApplicationNotFoundError: If the application is not in the caller's college
        CannotDecideApplicationError: If the application is already rejected
    """
    logger.info(f"User {user.user_id} rejecting application {application_id}")

    async with db.begin():
        await lock_unlocked_college(db, user.college_id, "reject students")

        application, student = await _get_application(db, application_id, user.college_id)
        _ensure_transition(application, ApplicationStatus.REJECTED, "reject")
        was_approved = application.status == ApplicationStatus.APPROVED

        await repository.update_status(
            db,
            application,
            ApplicationStatus.REJECTED,
            rejected_reason=rejection_reason,
            reviewed_at=datetime.now(UTC),
        )
        if was_approved:
            await events_repository.delete_for_student(db, student.student_id)
        await repository.increment_reapply_count(db, student)

    logger.info(
        f"Application {application_id} rejected: student={student.student_id}, "
        f"reapply_count={student.reapply_count}"
    )

    return {
        "application_id": application_id,
        "student_id": student.student_id,
        "reapply_count": student.reapply_count,
    }


async def edit_details(
    db: AsyncSession,
    user: CollegeUser,
    application_id: int,
    fields: dict[str, Any],
) -> dict:
    """
    Update student and application details.

    Only keys present in ``fields`` are written; unknown keys are ignored.

    Raises:
        CollegeLockedError: If the college is finally approved
        ApplicationNotFoundError: If the application is not in the caller's college
    """
    student_updates = {k: v for k, v in fields.items() if k in STUDENT_EDITABLE_FIELDS}
    application_updates = {k: v for k, v in fields.items() if k in APPLICATION_EDITABLE_FIELDS}

    logger.info(
        f"User {user.user_id} editing application {application_id}: "
        f"fields={sorted([*student_updates, *application_updates])}"
    )

    async with db.begin():
        await lock_unlocked_college(db, user.college_id, "edit students")

        application, student = await _get_application(db, application_id, user.college_id)

        for key, value in student_updates.items():
            setattr(student, key, value)
        for key, value in application_updates.items():
            setattr(application, key, value)

        await db.flush()

    logger.info(f"Application {application_id} details updated")

    return {
        "application_id": application_id,
        "student_id": student.student_id,
        "updated_fields": sorted([*student_updates, *application_updates]),
    }
