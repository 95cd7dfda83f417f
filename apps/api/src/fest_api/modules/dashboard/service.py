"""
Manager Dashboard Service

Read-only aggregation of a college's registration state. No transaction
or lock is taken; counts may be a moment stale.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.core.auth import CollegeUser
from fest_api.core.exceptions import CollegeNotFoundError
from fest_api.modules.accompanists import repository as accompanists_repository
from fest_api.modules.applications import repository as applications_repository
from fest_api.modules.colleges.repository import CollegeRepository
from fest_api.modules.dashboard.schemas import (
    AccommodationInfo,
    CollegeInfo,
    DashboardData,
    DashboardStats,
    PaymentInfo,
)
from fest_api.modules.events.catalog import EventCatalog, event_catalog
from fest_api.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


async def get_dashboard(
    db: AsyncSession,
    user: CollegeUser,
    catalog: EventCatalog = event_catalog,
) -> DashboardData:
    """
    Build the dashboard for the user's college.

    Raises:
        CollegeNotFoundError: If the college does not exist
    """
    college_id = user.college_id
    logger.info(f"Getting dashboard for college {college_id} (user {user.user_id})")

    college = await CollegeRepository.get_by_id(db, college_id)
    if college is None:
        logger.warning(f"College not found: {college_id}")
        raise CollegeNotFoundError(college_id)

    counts = await applications_repository.get_status_counts(db, college_id)
    accompanists_count = await accompanists_repository.count_for_college(db, college_id)
    quota_used = counts["approved"] + accompanists_count

    accommodation = None
    request = await CollegeRepository.get_accommodation(db, college_id)
    if request is not None:
        accommodation = AccommodationInfo(
            total_boys=request.total_boys,
            total_girls=request.total_girls,
            status=request.status or "PENDING",
            applied_at=request.applied_at,
        )

    receipt = await CollegeRepository.get_payment_receipt(db, college_id)
    payment_status = PaymentInfo.model_validate(receipt) if receipt is not None else None

    has_team_manager = False
    if user.is_principal:
        has_team_manager = await UserRepository.has_active_manager(db, college_id)

    stats = DashboardStats(
        total_students=counts["total_students"],
        students_with_applications=counts["students_with_applications"],
        approved_students=counts["approved"],
        rejected_students=counts["rejected"],
        accompanists_count=accompanists_count,
        quota_used=quota_used,
        quota_remaining=college.max_quota - quota_used,
        events_with_participants=await catalog.count_events(db, college_id),
    )

    logger.info(f"Dashboard stats for college {college_id}: {stats}")

    return DashboardData(
        college=CollegeInfo.model_validate(college),
        stats=stats,
        accommodation=accommodation,
        payment_status=payment_status,
        is_final_approved=bool(college.is_final_approved),
        final_approved_at=college.final_approved_at,
        has_team_manager=has_team_manager,
    )
