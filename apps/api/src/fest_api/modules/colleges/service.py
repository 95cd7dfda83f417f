"""
College Service

The lock guard shared by every mutating workflow.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.core.exceptions import CollegeLockedError, CollegeNotFoundError
from fest_api.modules.colleges.models import College
from fest_api.modules.colleges.repository import CollegeRepository

logger = logging.getLogger(__name__)


async def lock_unlocked_college(db: AsyncSession, college_id: int, action: str) -> College:
    """
    Lock the college row and make sure final approval has not happened.

    Must be called inside the caller's transaction, before any other read
    that a later write depends on.

    Args:
        db: Database session with an open transaction
        college_id: College being modified
        action: Human readable action for the error message (e.g. "approve students")

    Returns:
        The locked College row

    Raises:
        CollegeNotFoundError: If the college does not exist
        CollegeLockedError: If the college has been finally approved
    """
    college = await CollegeRepository.get_for_update(db, college_id)

    if college is None:
        logger.warning(f"College not found: {college_id}")
        raise CollegeNotFoundError(college_id)

    if college.is_final_approved:
        logger.warning(f"Rejected '{action}' on finalised college {college_id}")
        raise CollegeLockedError(action)

    return college
