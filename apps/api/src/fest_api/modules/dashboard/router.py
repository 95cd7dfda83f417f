"""
Manager Dashboard Router

POST /manager-dashboard - registration overview for principals and managers.
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
from fest_api.modules.dashboard import service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.options("", include_in_schema=False)
async def manager_dashboard_preflight() -> Response:
    return preflight_response()


@router.post(
    "",
    summary="Manager Dashboard",
    description="College details, registration counts, quota, accommodation and payment status.",
)
async def manager_dashboard(
    auth: CollegeUser = Depends(get_current_college_user),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    try:
        data = await service.get_dashboard(db, auth)
        return success_response({"data": data.model_dump()})
    except FestServiceError as e:
        return service_error_response(e)
    except Exception as e:
        logger.exception(f"Dashboard failed for college {auth.college_id}: {e}")
        return internal_error_response(e)
