"""
Review Applications Router

POST /review-applications - multi-action endpoint for principals and managers.

Actions (``action`` field of the JSON body):
- get_pending_applications - SUBMITTED applications with documents
- approve_student - approve and assign events (quota and capacity checked)
- reject_student - reject with a reason
- edit_student_details - correct student / application fields

Security:
- Bearer token with PRINCIPAL or MANAGER role required
- Every lookup is scoped to the college in the token
- Mutating actions are rate limited per user
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
from fest_api.modules.applications import service
from fest_api.modules.applications.schemas import (
    ApproveStudentRequest,
    EditStudentDetailsRequest,
    RejectStudentRequest,
    ReviewAction,
)

logger = logging.getLogger(__name__)

router = APIRouter()

REVIEW_ACTIONS = frozenset(action.value for action in ReviewAction)


@router.options("", include_in_schema=False)
async def review_applications_preflight() -> Response:
    return preflight_response()


@router.post(
    "",
    summary="Review Student Applications",
    description="""
Review the college's student applications. The body selects an action:

- `get_pending_applications`
- `approve_student` with `application_id`, `participating_events`, optional `accompanying_events`
- `reject_student` with `application_id`, `rejection_reason`
- `edit_student_details` with `application_id` and any of the editable fields

Mutations fail with 403 once the college has submitted final approval.
""",
)
async def review_applications(
    request: Request,
    auth: CollegeUser = Depends(get_current_college_user),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    try:
        body = await parse_json_body(request)
        action = ReviewAction(require_action(body, REVIEW_ACTIONS))
    except FestServiceError as e:
        return service_error_response(e)

    await enforce_action_rate_limit(auth, action.value)

    try:
        if action is ReviewAction.GET_PENDING_APPLICATIONS:
            applications = await service.list_pending(db, auth.college_id)
            return success_response({"applications": applications})

        if action is ReviewAction.APPROVE_STUDENT:
            approve_data = validate_body(
                ApproveStudentRequest,
                body,
                "application_id is required and participating_events must be an array",
            )
            result = await service.approve(
                db,
                auth,
                approve_data.application_id,
                approve_data.participating_events,
                approve_data.accompanying_events,
            )
            return success_response({"message": "Student approved successfully", **result})

        if action is ReviewAction.REJECT_STUDENT:
            reject_data = validate_body(
                RejectStudentRequest,
                body,
                "application_id and rejection_reason are required",
            )
            result = await service.reject(
                db, auth, reject_data.application_id, reject_data.rejection_reason
            )
            return success_response({"message": "Student rejected successfully", **result})

        edit_data = validate_body(EditStudentDetailsRequest, body, "application_id is required")
        result = await service.edit_details(db, auth, edit_data.application_id, edit_data.updates())
        return success_response({"message": "Student details updated successfully", **result})

    except FestServiceError as e:
        return service_error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected error in review-applications action '{action.value}': {e}")
        return internal_error_response(e)
