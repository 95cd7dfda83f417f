"""
Accompanist Repository

Read queries over a college's accompanists.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_api.modules.accompanists.models import Accompanist


async def count_for_college(db: AsyncSession, college_id: int) -> int:
    """Number of accompanists registered by the college."""
    result = await db.execute(
        select(func.count()).select_from(Accompanist).where(Accompanist.college_id == college_id)
    )
    return result.scalar() or 0


async def list_for_college(db: AsyncSession, college_id: int) -> list[Accompanist]:
    """All accompanists of the college, in registration order."""
    result = await db.execute(
        select(Accompanist)
        .where(Accompanist.college_id == college_id)
        .order_by(Accompanist.accompanist_id)
    )
    return list(result.scalars().all())
