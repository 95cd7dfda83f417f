"""
User Repository

Read-only queries over college staff accounts.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def count_active_by_role(db: AsyncSession, college_id: int, role: UserRole) -> int:
        """
        Count active users of a college holding ``role``.

        Args:
            db: Database session
            college_id: College to count within
            role: Role to match

        Returns:
            Number of active users
        """
        result = await db.execute(
            select(func.count())
            .select_from(User)
            .where(
                User.college_id == college_id,
                User.role == role,
                User.is_active.is_(True),
            )
        )
        return result.scalar() or 0

    @staticmethod
    async def has_active_manager(db: AsyncSession, college_id: int) -> bool:
        """Whether the college has at least one active team manager."""
        count = await UserRepository.count_active_by_role(db, college_id, UserRole.MANAGER)
        return count > 0
