"""
College Models

A college is the tenant of the registration portal. Its ``is_final_approved``
flag freezes every student, event and accompanist row that belongs to it.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from fest_api.core.database import Base

DEFAULT_MAX_QUOTA = 45


class College(Base):
    """A participating college."""

    __tablename__ = "colleges"

    college_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    college_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    college_name: Mapped[str] = mapped_column(String(255), nullable=False)
    place: Mapped[str | None] = mapped_column(String(100), nullable=True)
    max_quota: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_MAX_QUOTA)

    # Final approval lock
    is_final_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    final_approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # Note: plain integer, users may be deactivated after locking
    final_approved_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<College(id={self.college_id}, code={self.college_code}, locked={self.is_final_approved})>"


class AccommodationRequest(Base):
    """Accommodation request filed by a college (one per college)."""

    __tablename__ = "accommodation_requests"

    request_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    college_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colleges.college_id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    total_boys: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_girls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class PaymentReceipt(Base):
    """Registration fee receipt uploaded by a college (one per college)."""

    __tablename__ = "payment_receipts"

    receipt_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    college_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colleges.college_id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    receipt_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    admin_remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
