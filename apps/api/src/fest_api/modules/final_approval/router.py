"""
Final Approval Router

POST /final-approval - snapshot the college's participants and lock it.

The request body is ignored. The operation is irreversible: once it
succeeds, every review and assignment action of the college fails with 403.
"""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.core.auth import CollegeUser, get_current_college_user
from fest_api.core.database import get_db
from fest_api.core.exceptions import FestServiceError
from fest_api.core.http import (
    internal_error_response,
    preflight_response,
    service_error_response,
    success_response,
)
from fest_api.core.rate_limit import enforce_action_rate_limit
from fest_api.modules.final_approval import service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.options("", include_in_schema=False)
async def final_approval_preflight() -> Response:
    return preflight_response()


@router.post(
    "",
    summary="Submit Final Approval",
    description="""
Lock the college's registrations.

Every approved student assigned to at least one event and every accompanist
is copied into the final participant list, then the college is locked.
Fails with 400 when no approved student is assigned to an event and with
403 when final approval was already submitted.
""",
)
async def final_approval(
    auth: CollegeUser = Depends(get_current_college_user),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    await enforce_action_rate_limit(auth, "final_approval")

    try:
        result = await service.run_final_approval(db, auth)
        return success_response(result)
    except FestServiceError as e:
        return service_error_response(e)
    except Exception as e:
        logger.exception(f"Final approval failed for college {auth.college_id}: {e}")
        return internal_error_response(e)
