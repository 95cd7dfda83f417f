"""
Final Approval Repository

Inserts for the participant snapshot. Flush only; the final approval
service owns the transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from .models import FinalMasterRecord


async def add_record(db: AsyncSession, record: FinalMasterRecord) -> FinalMasterRecord:
    """Insert one snapshot row."""
    db.add(record)
    await db.flush()
    return record
