"""
Accompanist Models

Faculty or professional accompanists registered by a college. They count
towards the college quota and are always part of the final snapshot.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from fest_api.core.database import Base


class AccompanistType(str, enum.Enum):
    """Kind of accompanist."""

    FACULTY = "faculty"
    PROFESSIONAL = "professional"


class Accompanist(Base):
    """An accompanist travelling with a college team."""

    __tablename__ = "accompanists"

    accompanist_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    college_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colleges.college_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    passport_photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    id_proof_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    accompanist_type: Mapped[AccompanistType] = mapped_column(
        Enum(AccompanistType, name="accompanist_type"),
        nullable=False,
        default=AccompanistType.FACULTY,
    )
    is_team_manager: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
