"""
Final Approval Service Layer

The irreversible lock of a college's registrations.

Inside one transaction, with the college row locked:
1. Refuse if the college is already finally approved
2. Find eligible students: an APPROVED application and at least one
   participation row in any source of the event catalog
3. Refuse if nobody is eligible (nothing is written)
4. Write one STUDENT snapshot row per eligible student
5. Write one ACCOMPANIST snapshot row per accompanist of the college
6. Set the lock flag, timestamp and actor

Any exception before the block exits rolls back every row written in
steps 4-6, so the college stays unlocked with an empty snapshot.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.core.auth import CollegeUser
from fest_api.core.exceptions import CollegeNotFoundError, FestServiceError
from fest_api.modules.accompanists import repository as accompanists_repository
from fest_api.modules.applications import repository as applications_repository
from fest_api.modules.applications.helpers import snapshot_document_urls
from fest_api.modules.applications.models import Student
from fest_api.modules.colleges.repository import CollegeRepository
from fest_api.modules.events import repository as events_repository
from fest_api.modules.events.catalog import EventCatalog, event_catalog
from fest_api.modules.events.models import EventType, PersonType
from fest_api.modules.final_approval import repository
from fest_api.modules.final_approval.models import FinalMasterRecord

logger = logging.getLogger(__name__)

FINAL_APPROVAL_MESSAGE = "Final approval successful. All registrations are now locked."


class AlreadyFinalizedError(FestServiceError):
    """Raised when final approval was already submitted for the college."""

    def __init__(self):
        super().__init__(
            message="Final approval already submitted",
            error_code="ALREADY_FINALIZED",
            status_code=403,
        )


class NoEligibleStudentsError(FestServiceError):
    """Raised when no approved student is assigned to any event."""

    def __init__(self):
        super().__init__(
            message=(
                "No eligible students found. Approve students and assign them "
                "to events before final approval."
            ),
            error_code="NO_ELIGIBLE_STUDENTS",
            status_code=400,
        )


def _join_event_names(event_codes: Iterable[str], names_by_code: dict[str, str]) -> str | None:
    names = sorted(names_by_code.get(code, code) for code in event_codes)
    return ",".join(names) or None


async def run_final_approval(
    db: AsyncSession,
    user: CollegeUser,
    catalog: EventCatalog = event_catalog,
) -> dict:
    """
    Snapshot the college's participants and lock its registrations.

    Args:
        db: Database session
        user: Authenticated principal or manager
        catalog: Participation sources used for eligibility and event names

    Returns:
        Dict with success message, inserted_students, inserted_accompanists
        and total_records

    Raises:
        CollegeNotFoundError: If the college does not exist
        AlreadyFinalizedError: If the college is already locked
        NoEligibleStudentsError: If no approved student takes part in an event
    """
    college_id = user.college_id
    logger.info(f"User {user.user_id} submitting final approval for college {college_id}")

    async with db.begin():
        college = await CollegeRepository.get_for_update(db, college_id)
        if college is None:
            logger.warning(f"College not found: {college_id}")
            raise CollegeNotFoundError(college_id)

        if college.is_final_approved:
            logger.warning(f"Final approval already submitted for college {college_id}")
            raise AlreadyFinalizedError()

        eligible = await applications_repository.list_eligible_students(
            db,
            college_id,
            catalog.participation_clause(Student.student_id, college_id, PersonType.STUDENT),
        )
        if not eligible:
            logger.warning(f"No eligible students for final approval of college {college_id}")
            raise NoEligibleStudentsError()

        student_events = await catalog.event_codes_by_person(db, college_id, PersonType.STUDENT)
        accompanist_events = await catalog.event_codes_by_person(
            db, college_id, PersonType.ACCOMPANIST
        )
        all_codes = set().union(*student_events.values(), *accompanist_events.values())
        names_by_code = await events_repository.get_event_names_by_codes(db, all_codes)

        assignments = await events_repository.list_assignments_for_students(
            db, [student.student_id for student, _ in eligible]
        )
        accompanying_names: dict[int, list[str]] = {}
        for student_id, _, event_name, event_type in assignments:
            if event_type == EventType.ACCOMPANYING:
                accompanying_names.setdefault(student_id, []).append(event_name)

        documents = await applications_repository.get_documents_for_applications(
            db, [application.application_id for _, application in eligible]
        )

        inserted_students = 0
        for student, application in eligible:
            accompanying = accompanying_names.get(student.student_id, [])
            await repository.add_record(
                db,
                FinalMasterRecord(
                    college_id=college_id,
                    person_id=student.student_id,
                    person_type=PersonType.STUDENT,
                    full_name=student.full_name,
                    phone=student.phone,
                    email=student.email,
                    photo_url=student.passport_photo_url,
                    event_in_names=_join_event_names(
                        student_events.get(student.student_id, set()), names_by_code
                    ),
                    accompanist_in_names=",".join(accompanying) or None,
                    **snapshot_document_urls(documents.get(application.application_id, [])),
                ),
            )
            inserted_students += 1

        inserted_accompanists = 0
        for accompanist in await accompanists_repository.list_for_college(db, college_id):
            await repository.add_record(
                db,
                FinalMasterRecord(
                    college_id=college_id,
                    person_id=accompanist.accompanist_id,
                    person_type=PersonType.ACCOMPANIST,
                    full_name=accompanist.full_name,
                    phone=accompanist.phone,
                    email=accompanist.email,
                    photo_url=accompanist.passport_photo_url,
                    accompanist_in_names=_join_event_names(
                        accompanist_events.get(accompanist.accompanist_id, set()), names_by_code
                    ),
                    accompanist_type=accompanist.accompanist_type.value,
                    is_team_manager=bool(accompanist.is_team_manager),
                    accompanist_id_proof_url=accompanist.id_proof_url,
                ),
            )
            inserted_accompanists += 1

        await CollegeRepository.mark_final_approved(db, college, user.user_id)

    total_records = inserted_students + inserted_accompanists
    logger.info(
        f"Final approval committed for college {college_id}: "
        f"students={inserted_students}, accompanists={inserted_accompanists}"
    )

    return {
        "message": FINAL_APPROVAL_MESSAGE,
        "inserted_students": inserted_students,
        "inserted_accompanists": inserted_accompanists,
        "total_records": total_records,
    }
