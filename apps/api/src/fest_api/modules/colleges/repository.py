"""
College Repository

Database operations for colleges and their dashboard side tables.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.modules.colleges.models import AccommodationRequest, College, PaymentReceipt

logger = logging.getLogger(__name__)


class CollegeRepository:
    """Repository for college database operations."""

    @staticmethod
    async def get_by_id(db: AsyncSession, college_id: int) -> College | None:
        """Get a college by ID (no lock)."""
        result = await db.execute(select(College).where(College.college_id == college_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_update(db: AsyncSession, college_id: int) -> College | None:
        """
        Get a college and lock its row until the transaction ends.

        Every write path takes this lock first, so concurrent approvals for
        the same college run one after another and never read stale quota
        or capacity counts.
        """
        result = await db.execute(
            select(College)
            .where(College.college_id == college_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_final_approved(db: AsyncSession, college: College, user_id: int) -> College:
        """
        Set the final approval lock.

        Args:
            db: Database session (inside the caller's transaction)
            college: College row previously locked with ``get_for_update``
            user_id: User performing the final approval

        Returns:
            The updated college
        """
        college.is_final_approved = True
        college.final_approved_at = datetime.now(UTC)
        college.final_approved_by = user_id
        await db.flush()

        logger.info(f"College {college.college_id} locked by user {user_id}")
        return college

    @staticmethod
    async def get_accommodation(db: AsyncSession, college_id: int) -> AccommodationRequest | None:
        """Get the college's accommodation request, if any."""
        result = await db.execute(
            select(AccommodationRequest).where(AccommodationRequest.college_id == college_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_payment_receipt(db: AsyncSession, college_id: int) -> PaymentReceipt | None:
        """Get the college's payment receipt, if any."""
        result = await db.execute(
            select(PaymentReceipt).where(PaymentReceipt.college_id == college_id)
        )
        return result.scalar_one_or_none()
