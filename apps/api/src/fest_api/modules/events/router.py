"""
Approved Students Router

POST /approved-students - multi-action endpoint for principals and managers.

Actions (``action`` field of the JSON body):
- get_approved_students - approved students with their events
- edit_student_events - replace a student's event assignments
- move_to_rejected - reject an approved student and clear assignments
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.core.auth import CollegeUser, get_current_college_user
from fest_api.core.database import get_db
from fest_api.core.exceptions import FestServiceError
from fest_api.core.http import (
    internal_error_response,
    parse_json_body,
    preflight_response,
    require_action,
    service_error_response,
    success_response,
    validate_body,
)
from fest_api.core.rate_limit import enforce_action_rate_limit
from fest_api.modules.events import service
from fest_api.modules.events.schemas import (
    ApprovedStudentsAction,
    EditStudentEventsRequest,
    MoveToRejectedRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

APPROVED_STUDENTS_ACTIONS = frozenset(action.value for action in ApprovedStudentsAction)


@router.options("", include_in_schema=False)
async def approved_students_preflight() -> Response:
    return preflight_response()


@router.post(
    "",
    summary="Manage Approved Students",
    description="""
Manage students whose applications were approved:

- `get_approved_students`
- `edit_student_events` with `student_id`, `participating_events`, `accompanying_events`
- `move_to_rejected` with `student_id`, `rejection_reason`

Event capacity is re-checked when assignments are replaced.
""",
)
async def approved_students(
    request: Request,
    auth: CollegeUser = Depends(get_current_college_user),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    try:
        body = await parse_json_body(request)
        action = ApprovedStudentsAction(require_action(body, APPROVED_STUDENTS_ACTIONS))
    except FestServiceError as e:
        return service_error_response(e)

    await enforce_action_rate_limit(auth, action.value)

    try:
        if action is ApprovedStudentsAction.GET_APPROVED_STUDENTS:
            students = await service.list_approved(db, auth.college_id)
            return success_response({"students": students})

        if action is ApprovedStudentsAction.EDIT_STUDENT_EVENTS:
            events_data = validate_body(EditStudentEventsRequest, body, "student_id is required")
            result = await service.replace_assignments(
                db,
                auth,
                events_data.student_id,
                events_data.participating_events,
                events_data.accompanying_events,
            )
            return success_response({"message": "Events updated successfully", **result})

        reject_data = validate_body(
            MoveToRejectedRequest, body, "student_id and rejection_reason are required"
        )
        result = await service.move_to_rejected(
            db, auth, reject_data.student_id, reject_data.rejection_reason
        )
        return success_response({"message": "Student moved to rejected successfully", **result})

    except FestServiceError as e:
        return service_error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected error in approved-students action '{action.value}': {e}")
        return internal_error_response(e)
